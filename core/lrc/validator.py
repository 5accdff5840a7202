"""
歌詞時間軸驗證器

作用：
- 驗證元資訊是否齊全
- 驗證時間軸順序
- 驗證儲存資料結構與行 ID
- 只回報問題，不修改資料
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from .model import _RESIDUE_PATTERN, Timeline


@dataclass
class ValidationIssue:
    """驗證問題資訊"""

    line_index: int  # 行索引（-1 表示整首歌）
    error_type: str  # 問題類型代碼
    message: str  # 問題訊息
    key: Optional[str] = None  # 所屬儲存鍵（驗證整個資料庫時）


class LrcValidator:
    """時間軸驗證器"""

    def validate(self, timeline: Timeline) -> Tuple[bool, List[ValidationIssue]]:
        """驗證時間軸內容"""
        issues: List[ValidationIssue] = []
        metadata = timeline.metadata

        # 檢查元資訊
        if not metadata.title or not metadata.artist:
            issues.append(ValidationIssue(-1, 'MISSING_TITLE_ARTIST', 'Missing title/artist'))

        previous_time = None  # 前一個已同步行的時間
        seen_unsynced = False  # 是否已出現未同步的行
        for line_idx, line in enumerate(timeline.lines):
            # 檢查殘留時間碼
            if line.text and _RESIDUE_PATTERN.search(line.text):
                issues.append(ValidationIssue(line_idx, 'TEXT_RESIDUE', 'Text contains a leftover timecode'))

            if line.time < 0:
                seen_unsynced = True
                continue

            # 已同步的行必須排在未同步的行之前
            if seen_unsynced:
                issues.append(ValidationIssue(line_idx, 'TIME_GROUPING', 'Synchronized line after an unsynchronized one'))

            # 檢查時間順序（嚴格遞增）
            if previous_time is not None and line.time <= previous_time:
                issues.append(ValidationIssue(line_idx, 'TIME_ORDER', 'Timecode is not after the previous line'))
            previous_time = line.time

        return len(issues) == 0, issues

    def validate_payload(self, data: Any, key: Optional[str] = None) -> List[ValidationIssue]:
        """驗證儲存資料結構（載入前）"""
        if not isinstance(data, dict):
            return [ValidationIssue(-1, 'PAYLOAD', 'Payload is not an object', key)]

        issues: List[ValidationIssue] = []
        if not data.get('songId'):
            issues.append(ValidationIssue(-1, 'MISSING_ID', 'Missing song id', key))
        if not isinstance(data.get('metadata'), dict):
            issues.append(ValidationIssue(-1, 'METADATA', 'Missing metadata object', key))

        lines = data.get('lines')
        if not isinstance(lines, list):
            issues.append(ValidationIssue(-1, 'LINES', 'Invalid lines array', key))
            return issues

        seen_ids = set()
        for index, line in enumerate(lines):
            if (
                not isinstance(line, dict)
                or isinstance(line.get('time'), bool)
                or not isinstance(line.get('time'), (int, float))
                or not isinstance(line.get('text'), str)
            ):
                issues.append(ValidationIssue(index, 'LINE', f'Invalid line {index + 1}', key))
                continue

            # 重複的行 ID（缺少的 ID 載入時會補上）
            line_id = line.get('id')
            if not isinstance(line_id, str) or not line_id:
                continue
            if line_id in seen_ids:
                issues.append(ValidationIssue(index, 'LINE_ID', f'Duplicate line id {line_id}', key))
            seen_ids.add(line_id)
        return issues
