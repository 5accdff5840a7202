"""
歌詞資料庫

作用：
- 以鍵值儲存保存/載入/刪除時間軸
- 掃描所有歌曲建立摘要清單，提供搜尋與統計
- 整包匯出/匯入（單筆失敗不影響其他歌曲）
- 管理內建歌曲登記
"""

import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Set

import config
from core.exceptions import BundleFormatError, LibraryNotReadyError, StorageError
from core.lrc import LrcValidator, Timeline, ValidationIssue, generate_timeline_id

from .bundle import BUNDLE_FIELDS, ImportEntryError, ImportResult, decode_song, strip_duplicate_fields
from .registry import BuiltInRegistry
from .store import KeyValueStore

logger = logging.getLogger(__name__)

# 載入單筆資料時可能出現的資料錯誤
_PAYLOAD_ERRORS = (ValueError, TypeError, KeyError, AttributeError)


class LibraryState(str, Enum):
    """資料庫狀態"""

    UNINITIALIZED = 'uninitialized'
    READY = 'ready'


@dataclass
class LibraryEntry:
    """歌曲摘要（由儲存資料推導，非正式資料來源）"""

    key: str
    timeline_id: str
    title: str
    artist: str
    album: str
    duration_ms: int
    line_count: int
    has_audio: bool
    last_modified_at: str
    created_at: str = ''
    audio_ref: Optional[str] = None
    is_built_in: bool = False


class LyricsLibrary:
    """歌詞資料庫"""

    def __init__(
        self,
        store: KeyValueStore,
        registry: Optional[BuiltInRegistry] = None,
        prefix: str = config.LIBRARY_PREFIX,
        auto_initialize: bool = True,
    ):
        # 鍵值儲存
        self.store = store
        # 歌曲鍵前綴
        self.prefix = prefix
        # 內建歌曲登記
        self.registry = registry if registry is not None else BuiltInRegistry(store)
        # 驗證器
        self.validator = LrcValidator()
        # 本實例已發出的 ID（防止同一毫秒內重複）
        self._issued_ids: Set[str] = set()
        self._state = LibraryState.UNINITIALIZED
        if auto_initialize:
            self.initialize()

    @property
    def state(self) -> LibraryState:
        return self._state

    def initialize(self):
        """載入內建歌曲登記後進入 READY"""
        if not self.registry.loaded:
            self.registry.load()
        self._state = LibraryState.READY
        logger.info("Lyrics library ready")

    def _require_ready(self):
        if self._state is not LibraryState.READY:
            raise LibraryNotReadyError('Library is not initialized')

    # ------------------------------------------------------------------
    # ID 與鍵
    # ------------------------------------------------------------------

    def key_for(self, timeline_id: str) -> str:
        return f"{self.prefix}{timeline_id}"

    def generate_id(self, title: str, artist: str) -> str:
        """產生歌曲 ID，已存在時加上 _2、_3… 後綴"""
        base = generate_timeline_id(title, artist)
        candidate = base
        counter = 2
        while candidate in self._issued_ids or self.store.get(self.key_for(candidate)) is not None:
            candidate = f"{base}_{counter}"
            counter += 1
        self._issued_ids.add(candidate)
        return candidate

    def create_song(self, title: str, artist: str, album: str = '', duration_ms: int = 0) -> Timeline:
        """建立新歌曲（尚未儲存）"""
        self._require_ready()
        return Timeline.create(title, artist, album, duration_ms, timeline_id=self.generate_id(title, artist))

    # ------------------------------------------------------------------
    # 儲存 / 載入 / 刪除
    # ------------------------------------------------------------------

    def save(self, timeline: Timeline) -> str:
        """儲存時間軸，回傳儲存鍵；寫入失敗拋出 StorageError"""
        self._require_ready()
        key = self.key_for(timeline.timeline_id)
        payload = strip_duplicate_fields(timeline.to_dict())
        try:
            content = json.dumps(payload, ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to serialize {key}: {e}")
            raise StorageError(f'Cannot serialize {key}: {e}') from e

        try:
            self.store.set(key, content)
        except StorageError as e:
            logger.error(f"Failed to save song {key}: {e}")
            raise
        logger.info(f"Song saved: {timeline.metadata.title} ({key})")
        return key

    def _read_payload(self, key: str) -> Optional[Dict[str, Any]]:
        """讀取並解析 JSON，失敗回傳 None"""
        try:
            raw = self.store.get(key)
        except StorageError as e:
            logger.warning(f"Cannot read {key}: {e}")
            return None
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Corrupted entry {key}: {e}")
            return None
        return data if isinstance(data, dict) else None

    def load(self, key: str) -> Optional[Timeline]:
        """依儲存鍵載入，不存在或損壞回傳 None"""
        self._require_ready()
        data = self._read_payload(key)
        if data is None:
            return None
        try:
            timeline = decode_song(data).to_timeline()
        except _PAYLOAD_ERRORS as e:
            logger.error(f"Failed to load song {key}: {e}")
            return None
        logger.info(f"Song loaded: {key}")
        return timeline

    def load_by_id(self, timeline_id: str) -> Optional[Timeline]:
        return self.load(self.key_for(timeline_id))

    def exists(self, key: str) -> bool:
        try:
            return self.store.get(key) is not None
        except StorageError:
            return False

    def delete(self, key: str) -> bool:
        """刪除歌曲，不存在或失敗回傳 False"""
        self._require_ready()
        if not self.exists(key):
            logger.warning(f"Song not found: {key}")
            return False

        data = self._read_payload(key)
        try:
            self.store.remove(key)
        except StorageError as e:
            logger.error(f"Failed to delete song {key}: {e}")
            return False
        logger.info(f"Song deleted: {key}")

        # 歌曲已刪除，內建登記寫入失敗只記錄
        if data and data.get('songId'):
            try:
                self.registry.discard(str(data['songId']))
            except StorageError as e:
                logger.warning(f"Built-in song list not updated after deleting {key}: {e}")
        return True

    def delete_all(self) -> int:
        """刪除所有歌曲，回傳刪除數"""
        self._require_ready()
        deleted_count = 0
        for key in self.store.list_keys(self.prefix):
            if self.delete(key):
                deleted_count += 1
        self.registry.clear()
        return deleted_count

    # ------------------------------------------------------------------
    # 清單 / 搜尋
    # ------------------------------------------------------------------

    def _summarize(self, key: str, data: Dict[str, Any]) -> Optional[LibraryEntry]:
        metadata = data.get('metadata')
        if not isinstance(metadata, dict):
            return None
        lines = data.get('lines')
        song_id = str(data.get('songId') or '')
        try:
            duration_ms = int(metadata.get('duration') or 0)
        except _PAYLOAD_ERRORS:
            return None
        return LibraryEntry(
            key=key,
            timeline_id=song_id,
            title=str(metadata.get('title') or data.get('title') or ''),
            artist=str(metadata.get('artist') or data.get('artist') or ''),
            album=str(metadata.get('album') or data.get('album') or ''),
            duration_ms=duration_ms,
            line_count=len(lines) if isinstance(lines, list) else 0,
            has_audio=bool(metadata.get('audioPath')),
            last_modified_at=str(metadata.get('lastModified') or ''),
            created_at=str(metadata.get('created') or ''),
            audio_ref=metadata.get('audioPath') or None,
            is_built_in=song_id in self.registry,
        )

    def list_all(self) -> List[LibraryEntry]:
        """掃描所有歌曲摘要（最新修改在前），損壞的項目略過"""
        self._require_ready()
        entries = []
        for key in self.store.list_keys(self.prefix):
            data = self._read_payload(key)
            if data is None:
                continue
            entry = self._summarize(key, data)
            if entry is not None:
                entries.append(entry)
        entries.sort(key=lambda entry: entry.last_modified_at, reverse=True)
        return entries

    def search(self, term: str) -> List[LibraryEntry]:
        """依標題/藝人/專輯搜尋（不分大小寫）"""
        entries = self.list_all()
        if not term:
            return entries
        needle = term.lower()
        return [
            entry
            for entry in entries
            if needle in entry.title.lower()
            or needle in entry.artist.lower()
            or needle in entry.album.lower()
        ]

    def songs_by_artist(self, artist: str) -> List[LibraryEntry]:
        return [entry for entry in self.list_all() if entry.artist.lower() == artist.lower()]

    def songs_missing_audio(self) -> List[LibraryEntry]:
        return [entry for entry in self.list_all() if not entry.audio_ref or not entry.audio_ref.strip()]

    def unique_artists(self) -> List[str]:
        return sorted({entry.artist for entry in self.list_all()})

    def unique_albums(self) -> List[str]:
        return sorted({entry.album for entry in self.list_all() if entry.album.strip()})

    def get_stats(self) -> Dict[str, Any]:
        """資料庫統計"""
        entries = self.list_all()
        total_lines = sum(entry.line_count for entry in entries)
        built_in_count = sum(1 for entry in entries if entry.is_built_in)
        return {
            'total_songs': len(entries),
            'total_lines': total_lines,
            'total_duration_ms': sum(entry.duration_ms for entry in entries),
            'unique_artists': len({entry.artist for entry in entries}),
            'songs_with_audio': sum(1 for entry in entries if entry.has_audio),
            'built_in_songs': built_in_count,
            'user_songs': len(entries) - built_in_count,
            'average_lines_per_song': round(total_lines / len(entries)) if entries else 0,
            'newest_song': entries[0] if entries else None,
            'oldest_song': entries[-1] if entries else None,
        }

    # ------------------------------------------------------------------
    # 內建歌曲
    # ------------------------------------------------------------------

    def is_built_in(self, timeline_id: str) -> bool:
        return timeline_id in self.registry

    def mark_built_in(self, timeline_id: str):
        self._require_ready()
        self.registry.add(timeline_id)

    def unmark_built_in(self, timeline_id: str):
        self._require_ready()
        self.registry.discard(timeline_id)

    # ------------------------------------------------------------------
    # 整包匯出 / 匯入
    # ------------------------------------------------------------------

    def export_bundle(self, companions: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """匯出所有歌曲"""
        songs = []
        for entry in self.list_all():
            timeline = self.load(entry.key)
            if timeline is not None:
                songs.append(strip_duplicate_fields(timeline.to_dict()))

        bundle: Dict[str, Any] = dict(companions or {})
        bundle.update({
            'exportDate': datetime.now(timezone.utc).isoformat(timespec='milliseconds'),
            'version': config.BUNDLE_VERSION,
            'totalSongs': len(songs),
            'songs': songs,
        })
        logger.info(f"Library exported: {len(songs)} song(s)")
        return bundle

    def import_bundle(self, bundle: Any, overwrite: bool = False, mark_built_in: bool = False) -> ImportResult:
        """匯入整包歌曲，單筆錯誤記錄後繼續"""
        self._require_ready()
        if not isinstance(bundle, dict) or not isinstance(bundle.get('songs'), list):
            raise BundleFormatError('Invalid import data format')

        result = ImportResult(
            companions={key: value for key, value in bundle.items() if key not in BUNDLE_FIELDS},
        )
        for index, song_data in enumerate(bundle['songs']):
            try:
                timeline = decode_song(song_data).to_timeline()
                if self.exists(self.key_for(timeline.timeline_id)) and not overwrite:
                    result.skipped += 1
                    continue
                self.save(timeline)
                if mark_built_in:
                    self.registry.add(timeline.timeline_id)
                result.imported += 1
            except _PAYLOAD_ERRORS + (StorageError,) as e:
                error = ImportEntryError(index=index, message=str(e))
                logger.warning(f"Import error: {error}")
                result.errors.append(error)

        logger.info(
            f"Library import finished: {result.imported} imported, "
            f"{result.skipped} skipped, {result.error_count} error(s)"
        )
        return result

    # ------------------------------------------------------------------
    # 完整性檢查
    # ------------------------------------------------------------------

    def validate_library(self) -> List[ValidationIssue]:
        """檢查所有歌曲（只回報，不修改）"""
        self._require_ready()
        issues: List[ValidationIssue] = []
        for key in self.store.list_keys(self.prefix):
            data = self._read_payload(key)
            if data is None:
                issues.append(ValidationIssue(-1, 'UNREADABLE', f'Cannot load song ({key})', key))
                continue

            payload_issues = self.validator.validate_payload(data, key)
            issues.extend(payload_issues)
            if payload_issues:
                continue

            try:
                timeline = decode_song(data).to_timeline()
            except _PAYLOAD_ERRORS as e:
                issues.append(ValidationIssue(-1, 'CORRUPTED', f'Corruption in {key}: {e}', key))
                continue
            _, timeline_issues = self.validator.validate(timeline)
            for issue in timeline_issues:
                issue.key = key
            issues.extend(timeline_issues)
        return issues

    def cleanup(self) -> int:
        """移除無法解析或缺少基本欄位的項目，回傳移除數"""
        self._require_ready()
        cleaned_count = 0
        for key in self.store.list_keys(self.prefix):
            data = self._read_payload(key)
            if data is not None and data.get('songId') and data.get('metadata') and isinstance(data.get('lines'), list):
                continue
            try:
                self.store.remove(key)
            except StorageError as e:
                logger.error(f"Failed to remove corrupted entry {key}: {e}")
                continue
            logger.warning(f"Corrupted entry removed: {key}")
            cleaned_count += 1
        return cleaned_count
