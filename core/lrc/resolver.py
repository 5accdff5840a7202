"""
播放位置對應歌詞行

作用：
- 依播放時間找出目前應高亮的歌詞行
- 提供以 revision 快取、二分搜尋的解析器（播放中高頻查詢用）
"""

from bisect import bisect_right
from typing import List, Optional, Sequence


def resolve_active_line(lines: Sequence, time_ms: int):
    """
    回傳 time_ms 時正在播放的行。

    - 只看已同步（time >= 0）的行
    - 早於第一行時回傳第一行
    - 沒有任何已同步的行時回傳 None
    """
    valid_lines = [line for line in lines if line.time >= 0]
    if not valid_lines:
        return None

    if time_ms < valid_lines[0].time:
        return valid_lines[0]

    active_line = valid_lines[0]
    for line in valid_lines:
        if line.time <= time_ms:
            active_line = line
        else:
            break
    return active_line


class ActiveLineResolver:
    """綁定單一時間軸的解析器，時間軸未變動時重用已建立的索引"""

    def __init__(self, timeline):
        self.timeline = timeline
        # 快取對應的 revision
        self._revision: Optional[int] = None
        # 已同步行與其時間
        self._valid_lines: List = []
        self._times: List[int] = []
        # 時間是否非遞減（可否使用二分搜尋）
        self._sorted = True

    def _refresh(self):
        if self._revision == self.timeline.revision:
            return
        self._valid_lines = [line for line in self.timeline.lines if line.time >= 0]
        self._times = [line.time for line in self._valid_lines]
        self._sorted = all(a <= b for a, b in zip(self._times, self._times[1:]))
        self._revision = self.timeline.revision

    def resolve(self, time_ms: int):
        """回傳目前行（與 resolve_active_line 結果一致）"""
        self._refresh()
        if not self._valid_lines:
            return None
        if not self._sorted:
            return resolve_active_line(self._valid_lines, time_ms)
        index = bisect_right(self._times, time_ms) - 1
        return self._valid_lines[max(index, 0)]

    def resolve_index(self, time_ms: int) -> int:
        """回傳目前行在時間軸中的索引，沒有同步行時回傳 -1"""
        line = self.resolve(time_ms)
        if line is None:
            return -1
        return self.timeline.index_of(line.id)
