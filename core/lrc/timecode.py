"""
LRC 時間碼工具

作用：
- 毫秒與 mm:ss.xx 互轉
- 提供解析用的正規表示式
"""

import re
from typing import Optional

# 時間碼：[mm:ss.xx]，容許三位小數（毫秒）與三位以上分鐘
TIMECODE_PATTERN = re.compile(r'\[(\d{2,}):(\d{2})\.(\d{2,3})\]')

# 未同步的時間值
UNSYNCED = -1


def format_timecode(time_ms: int) -> str:
    """將毫秒格式化為 mm:ss.xx（厘秒無條件捨去）"""
    time_ms = max(0, int(time_ms))
    minutes = time_ms // 60000
    seconds = (time_ms % 60000) // 1000
    centisecs = (time_ms % 1000) // 10
    return f"{minutes:02d}:{seconds:02d}.{centisecs:02d}"


def parse_timecode(value: str) -> Optional[int]:
    """將 mm:ss.xx 轉為毫秒，格式不符回傳 None"""
    match = re.fullmatch(r'(\d{2,}):(\d{2})\.(\d{2,3})', value.strip())
    if not match:
        return None
    return timecode_to_ms(*match.groups())


def timecode_to_ms(minutes_str: str, seconds_str: str, fraction_str: str) -> int:
    """時間碼欄位轉毫秒"""
    fraction = int(fraction_str)
    # 兩位為厘秒，三位為毫秒
    fraction_ms = fraction * 10 if len(fraction_str) == 2 else fraction
    return (int(minutes_str) * 60 + int(seconds_str)) * 1000 + fraction_ms
