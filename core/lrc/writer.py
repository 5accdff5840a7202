"""
LRC 寫入器

作用：
- 將 Timeline 轉為 LRC 字串
- 寫入 LRC 檔案（UTF-8-SIG）
"""

import logging

import config

from .model import Timeline
from .timecode import format_timecode

logger = logging.getLogger(__name__)


class LrcWriter:
    """LRC 文件寫入器"""

    def write_file(self, timeline: Timeline, file_path: str):
        """寫入 LRC 檔案"""
        content = self.to_string(timeline)
        with open(file_path, 'w', encoding=config.LRC_ENCODING) as file_handle:
            file_handle.write(content)
        logger.info(f"LRC written: {file_path}")

    def to_string(self, timeline: Timeline) -> str:
        """將時間軸轉為 LRC 字串"""
        metadata = timeline.metadata
        lines = [
            f"[ti:{metadata.title}]",
            f"[ar:{metadata.artist}]",
        ]
        if metadata.album:
            lines.append(f"[al:{metadata.album}]")
        lines.append(f"[length:{format_timecode(metadata.duration_ms)}]")

        # 空行分隔
        lines.append('')

        # 未同步的行沒有時間碼可寫
        skipped = 0
        for line in timeline.lines:
            if line.time < 0:
                skipped += 1
                continue
            lines.append(f"[{format_timecode(line.time)}]{line.text}")

        if skipped:
            logger.debug(f"{skipped} unsynchronized line(s) left out of LRC output")
        return '\n'.join(lines) + '\n'
