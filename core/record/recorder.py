"""
錄製模式

作用：
- 接收播放位置（可直接連接 QMediaPlayer.positionChanged）
- 節流位置更新（最多每秒 10 次），只在目前行變更時發出訊號
- 將目前播放位置標記到游標行，並連鎖修正後續時間
"""

import logging
import time
from typing import Callable, Optional

from PyQt5.QtCore import QObject, pyqtSignal, pyqtSlot

import config
from core.lrc import ActiveLineResolver, Timeline

logger = logging.getLogger(__name__)


class PositionThrottle:
    """位置更新節流器"""

    def __init__(
        self,
        min_interval_ms: int = config.RECORD_THROTTLE_MS,
        clock: Callable[[], float] = time.monotonic,
    ):
        # 最短更新間隔（毫秒）
        self.min_interval_ms = min_interval_ms
        # 單調時鐘（秒）
        self.clock = clock
        # 上次接受更新的時間（秒）
        self._last_accepted: Optional[float] = None

    def accept(self) -> bool:
        """距上次接受超過間隔才接受"""
        now = self.clock()
        if self._last_accepted is not None and (now - self._last_accepted) * 1000 < self.min_interval_ms:
            return False
        self._last_accepted = now
        return True

    def reset(self):
        self._last_accepted = None


class RecordingSession(QObject):
    """錄製時間碼的操作狀態"""

    # 目前行變更（時間軸索引，-1 表示無）
    active_line_changed = pyqtSignal(int)
    # 行被標記（索引, 最終時間毫秒, 修正數）
    line_recorded = pyqtSignal(int, int, int)

    def __init__(
        self,
        timeline: Timeline,
        throttle: Optional[PositionThrottle] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        # 時間軸
        self.timeline = timeline
        # 節流器
        self.throttle = throttle or PositionThrottle()
        # 目前行解析器
        self.resolver = ActiveLineResolver(timeline)
        # 最近一次接受的播放位置（毫秒）
        self.position_ms = 0
        # 目前高亮的行索引
        self.active_index = -1
        # 下一個要標記的行
        self.cursor = 0

    @pyqtSlot(int)
    def on_position_changed(self, position_ms: int):
        """播放位置更新（節流）"""
        if not self.throttle.accept():
            return
        self.position_ms = position_ms
        self._refresh_active_line()

    def _refresh_active_line(self):
        index = self.resolver.resolve_index(self.position_ms)
        if index != self.active_index:
            self.active_index = index
            self.active_line_changed.emit(index)

    def seek_cursor(self, index: int):
        """移動標記游標"""
        self.cursor = max(0, min(index, len(self.timeline)))

    def record_next(self) -> Optional[int]:
        """
        將目前位置標記到游標行並前進游標。

        回傳被標記的行索引；所有行都已標記時回傳 None。
        """
        if self.cursor >= len(self.timeline):
            logger.info("All lines recorded")
            return None

        index = self.cursor
        self.timeline.set_line_time(index, self.position_ms)
        corrections = self.timeline.correct_from(index)
        recorded = self.timeline.get_line(index)
        self.cursor = index + 1
        logger.debug(f"Line {index + 1} recorded at {recorded.time}ms ({corrections} correction(s))")
        self.line_recorded.emit(index, recorded.time, corrections)
        self._refresh_active_line()
        return index
