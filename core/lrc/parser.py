"""
LRC 解析器

作用：
- 解析 LRC 文字或檔案內容
- 標籤行填入元資訊，時間碼行依文件順序產生歌詞
- 寬鬆解析：無法辨識的行直接略過，不中斷
"""

import logging
import os
import re
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .model import Timeline
from .timecode import TIMECODE_PATTERN, parse_timecode, timecode_to_ms

logger = logging.getLogger(__name__)

# 標籤行：[ti:xxx]
_TAG_PATTERN = re.compile(r'^\[([A-Za-z]+):(.*)\]$')
# 行首連續的時間碼與其後文字
_TIMED_LINE_PATTERN = re.compile(r'^((?:\[\d{2,}:\d{2}\.\d{2,3}\])+)(.*)$')


@dataclass
class LrcDocument:
    """LRC 解析結果（歌詞維持文件順序）"""

    title: str = ''
    artist: str = ''
    album: str = ''
    duration_ms: int = 0
    entries: List[Tuple[int, str]] = field(default_factory=list)  # (毫秒, 文字)
    skipped_lines: int = 0  # 略過的行數

    def to_timeline(self) -> Timeline:
        """建立時間軸（經 add_lines 排序）"""
        timeline = Timeline.create(self.title, self.artist, self.album, self.duration_ms)
        timeline.add_lines(self.entries)
        return timeline


class LrcParser:
    """歌詞解析器"""

    def parse_file(self, file_path: str) -> Timeline:
        """解析 LRC 檔案"""
        ext = os.path.splitext(file_path)[1].lower()
        if ext not in ('.lrc', '.txt'):
            raise ValueError(f'Unsupported format: {ext}')
        content = self._read_text_file(file_path)
        timeline = self.parse(content)
        logger.info(f"LRC parsed: {file_path} ({len(timeline)} lines)")
        return timeline

    def parse(self, content: str) -> Timeline:
        """解析 LRC 字串為時間軸"""
        return self.parse_document(content).to_timeline()

    def parse_document(self, content: str) -> LrcDocument:
        """解析 LRC 字串內容（不排序）"""
        document = LrcDocument()

        for raw_line in content.lstrip('\ufeff').splitlines():
            line = raw_line.strip()
            if not line:
                continue

            # 歌詞行
            timed = self._parse_lrc_line(line)
            if timed is not None:
                timestamps, text = timed
                # 空白歌詞不保留
                if text:
                    document.entries.extend((timestamp, text) for timestamp in timestamps)
                continue

            # 元資訊
            tag = _TAG_PATTERN.match(line)
            if tag and self._apply_tag(document, tag.group(1).lower(), tag.group(2)):
                continue

            document.skipped_lines += 1

        if document.skipped_lines:
            logger.debug(f"LRC parse skipped {document.skipped_lines} unrecognized line(s)")
        return document

    def _apply_tag(self, document: LrcDocument, name: str, value: str) -> bool:
        """套用元資訊標籤，未知標籤回傳 False"""
        if name == 'ti':
            document.title = value
        elif name == 'ar':
            document.artist = value
        elif name == 'al':
            document.album = value
        elif name == 'length':
            length_ms = parse_timecode(value)
            if length_ms is None:
                return False
            document.duration_ms = length_ms
        else:
            return False
        return True

    def _parse_lrc_line(self, line: str) -> Optional[Tuple[List[int], str]]:
        """
        解析單行 LRC：
        格式：[mm:ss.xx]內容，行首可有多個時間碼
        """
        match = _TIMED_LINE_PATTERN.match(line)
        if not match:
            return None

        prefix, content = match.groups()
        timestamps = [timecode_to_ms(*groups) for groups in TIMECODE_PATTERN.findall(prefix)]
        return timestamps, content.strip()

    def _read_text_file(self, file_path: str) -> str:
        """讀取文字檔案並嘗試編碼"""
        encodings = ['utf-8-sig', 'utf-8', 'gbk']
        for encoding in encodings:
            try:
                with open(file_path, 'r', encoding=encoding) as file_handle:
                    return file_handle.read()
            except UnicodeDecodeError:
                continue
        with open(file_path, 'r', encoding='utf-8', errors='replace') as file_handle:
            return file_handle.read()
