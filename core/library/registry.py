"""
內建歌曲登記

作用：
- 記錄哪些歌曲屬於內建歌曲
- 建立時從儲存載入，每次變更立即寫回
"""

import json
import logging
from datetime import datetime, timezone
from typing import Iterator, Set

import config
from core.exceptions import StorageError

from .store import KeyValueStore

logger = logging.getLogger(__name__)


class BuiltInRegistry:
    """內建歌曲 ID 集合（由資料庫實例持有）"""

    def __init__(self, store: KeyValueStore, key: str = config.BUILTIN_SONGS_KEY):
        self.store = store
        self.key = key
        # 內建歌曲 ID
        self._ids: Set[str] = set()
        # 是否已載入
        self.loaded = False

    def load(self):
        """從儲存載入，資料損壞時視為空集合"""
        self._ids = set()
        try:
            raw = self.store.get(self.key)
            if raw:
                parsed = json.loads(raw)
                ids = parsed.get('builtInSongs', []) if isinstance(parsed, dict) else parsed
                self._ids = {str(song_id) for song_id in ids}
        except (StorageError, ValueError, TypeError, AttributeError) as e:
            logger.warning(f"Built-in song list unreadable, starting empty: {e}")
        self.loaded = True
        logger.info(f"Built-in song list loaded: {len(self._ids)} song(s)")

    def save(self):
        settings = {
            'builtInSongs': sorted(self._ids),
            'lastSync': datetime.now(timezone.utc).isoformat(timespec='milliseconds'),
        }
        self.store.set(self.key, json.dumps(settings, ensure_ascii=False))

    def __contains__(self, song_id: str) -> bool:
        return song_id in self._ids

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._ids))

    def __len__(self) -> int:
        return len(self._ids)

    def add(self, song_id: str):
        """加入並寫回，寫入失敗時復原"""
        if song_id in self._ids:
            return
        self._ids.add(song_id)
        try:
            self.save()
        except StorageError:
            self._ids.discard(song_id)
            raise

    def discard(self, song_id: str):
        if song_id not in self._ids:
            return
        self._ids.discard(song_id)
        try:
            self.save()
        except StorageError:
            self._ids.add(song_id)
            raise

    def clear(self):
        previous = self._ids
        self._ids = set()
        try:
            self.save()
        except StorageError:
            self._ids = previous
            raise
