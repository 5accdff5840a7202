"""
時間碼順序修正

作用：
- 單行時間修改後，往後連鎖修正時間順序
- 匯入後對整份歌詞做一次不連鎖的修正
"""

import logging
from dataclasses import dataclass
from typing import List, MutableSequence

import config

logger = logging.getLogger(__name__)


@dataclass
class Correction:
    """單次修正紀錄"""

    line_index: int  # 被修正的行索引
    old_time: int  # 原時間（毫秒）
    new_time: int  # 新時間（毫秒）
    iteration: int  # 第幾輪修正


def _correct_pass(
    lines: MutableSequence,
    start_index: int,
    iteration: int,
    min_increment: int,
    log: List[Correction],
) -> int:
    """從 start_index 往後檢查一輪，回傳本輪修正數"""
    corrected = 0
    for i in range(max(0, start_index), len(lines) - 1):
        current_line = lines[i]
        next_line = lines[i + 1]

        # 未同步的行不參與比較
        if current_line.time < 0 or next_line.time < 0:
            continue

        if next_line.time <= current_line.time:
            new_time = current_line.time + min_increment
            log.append(
                Correction(
                    line_index=i + 1,
                    old_time=next_line.time,
                    new_time=new_time,
                    iteration=iteration,
                )
            )
            logger.debug(
                f"Line {i + 2} moved from {next_line.time}ms to {new_time}ms "
                f"(not after line {i + 1} at {current_line.time}ms)"
            )
            next_line.time = new_time
            corrected += 1
    return corrected


def correct_from(
    lines: MutableSequence,
    line_index: int,
    min_increment: int = config.MIN_INCREMENT_MS,
) -> List[Correction]:
    """
    連鎖修正：從被修改的行開始往後推，直到順序嚴格遞增。

    被修改的行先與前一行比較（前一行本身不會被改動），
    最多執行 len(lines) 輪以避免無限循環。
    """
    log: List[Correction] = []
    if not lines:
        return log

    start_index = line_index - 1
    max_iterations = len(lines)
    iterations = 0
    while iterations < max_iterations:
        iterations += 1
        if _correct_pass(lines, start_index, iterations, min_increment, log) == 0:
            break

    if log:
        logger.info(f"Timecode order corrected: {len(log)} change(s) from line {line_index + 1}")
    return log


def correct_all(lines: MutableSequence, min_increment: int = config.MIN_INCREMENT_MS) -> List[Correction]:
    """整份歌詞修正一輪（不連鎖），用於匯入後"""
    log: List[Correction] = []
    _correct_pass(lines, 0, 1, min_increment, log)
    if log:
        logger.info(f"Timecode order corrected after import: {len(log)} change(s)")
    return log
