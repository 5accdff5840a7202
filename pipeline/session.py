"""
Editing session state management
同一時間只有一首「目前」歌曲可編輯/錄製
"""

import logging
from typing import Optional

from core.library import LyricsLibrary
from core.lrc import Timeline
from core.record import PositionThrottle, RecordingSession

logger = logging.getLogger(__name__)


class EditingSession:
    """目前編輯中的歌曲"""

    def __init__(self, library: LyricsLibrary):
        # 歌詞資料庫
        self.library = library
        # 目前時間軸
        self.timeline: Optional[Timeline] = None
        # 目前儲存鍵（尚未儲存為 None）
        self.key: Optional[str] = None
        # 上次儲存/載入時的版本號
        self._saved_revision: Optional[int] = None

    def get_state(self) -> str:
        """取得目前編輯狀態"""
        if self.timeline is None:
            return 'EMPTY'
        if self._saved_revision is not None and self.timeline.revision == self._saved_revision:
            return 'CLEAN'
        return 'DIRTY'

    def _require_timeline(self) -> Timeline:
        if self.timeline is None:
            raise RuntimeError('No song is open')
        return self.timeline

    def new_song(self, title: str, artist: str, album: str = '', duration_ms: int = 0) -> Timeline:
        """建立新歌曲並設為目前歌曲"""
        self.timeline = self.library.create_song(title, artist, album, duration_ms)
        self.key = None
        self._saved_revision = None
        logger.info(f"New song: {title} / {artist}")
        return self.timeline

    def open(self, key: str) -> Optional[Timeline]:
        """載入歌曲為目前歌曲，失敗時維持原狀"""
        timeline = self.library.load(key)
        if timeline is None:
            return None
        self.timeline = timeline
        self.key = key
        self._saved_revision = timeline.revision
        return timeline

    def close(self):
        self.timeline = None
        self.key = None
        self._saved_revision = None

    def save(self) -> str:
        """儲存目前歌曲（StorageError 向上拋出）"""
        timeline = self._require_timeline()
        self.key = self.library.save(timeline)
        self._saved_revision = timeline.revision
        return self.key

    def edit_line_time(self, index: int, time_ms: int) -> int:
        """修改單行時間並連鎖修正，回傳修正數"""
        timeline = self._require_timeline()
        timeline.set_line_time(index, time_ms)
        return timeline.correct_from(index)

    def clear_line_timecode(self, index: int):
        self._require_timeline().clear_line_timecode(index)

    def clear_all_timecodes(self):
        self._require_timeline().clear_all_timecodes()

    def start_recording(self, throttle: Optional[PositionThrottle] = None) -> RecordingSession:
        """開始錄製目前歌曲"""
        return RecordingSession(self._require_timeline(), throttle=throttle)
