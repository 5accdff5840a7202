"""
歌詞時間軸資料結構定義

作用：
- 定義歌詞行、元資訊與時間軸
- 所有修改都經由 Timeline 方法，集中維護排序與修改時間
- 提供時間軸查詢與 JSON 結構互轉
"""

import re
import time
import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

import config

from .correction import Correction, correct_all, correct_from
from .resolver import resolve_active_line
from .timecode import UNSYNCED

# 匯入殘留的 [12.3s] 形式時間碼
_RESIDUE_PATTERN = re.compile(r'\[-?\d+(?:\.\d+)?s\]\s*')


def _now_iso() -> str:
    """目前時間（UTC ISO-8601）"""
    return datetime.now(timezone.utc).isoformat(timespec='milliseconds')


def _normalize_name(value: Any) -> str:
    """轉小寫，非英數字元轉為底線"""
    text = value if isinstance(value, str) else ''
    return re.sub(r'[^a-z0-9]', '_', text.lower())


def generate_timeline_id(title: str, artist: str, now_ms: Optional[int] = None) -> str:
    """以 artist、title 與建立時間產生 ID（不保證全域唯一）"""
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{_normalize_name(artist)}_{_normalize_name(title)}_{timestamp}"


def generate_line_id() -> str:
    """產生歌詞行 ID"""
    return f"line_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


def strip_timecode_residue(text: str) -> str:
    """移除文字中殘留的 [X.Xs] 時間碼"""
    return _RESIDUE_PATTERN.sub('', text).strip()


class LineType(str, Enum):
    """歌詞行類型"""

    VOCAL = 'vocal'
    CHORUS = 'chorus'
    BRIDGE = 'bridge'
    INSTRUMENTAL = 'instrumental'
    OUTRO = 'outro'

    @classmethod
    def parse(cls, value: Any) -> 'LineType':
        """字串轉類型，未知值視為 vocal"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            return cls.VOCAL


@dataclass
class Line:
    """一行歌詞"""

    id: str  # 行 ID（建立後不變）
    time: int  # 開始時間（毫秒），-1 表示未同步
    text: str = ''  # 文字內容（可為空）
    type: LineType = LineType.VOCAL  # 行類型

    @property
    def is_synced(self) -> bool:
        """是否已同步"""
        return self.time >= 0

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'time': self.time,
            'text': self.text,
            'type': self.type.value,
        }


@dataclass
class Metadata:
    """歌曲元資訊"""

    title: str = ''
    artist: str = ''
    album: str = ''
    duration_ms: int = 0  # 歌曲長度（毫秒）
    created_at: str = field(default_factory=_now_iso)
    last_modified_at: str = field(default_factory=_now_iso)
    audio_ref: Optional[str] = None  # 音訊參照（由外部正規化）
    format_version: str = config.FORMAT_VERSION

    def to_dict(self) -> dict:
        return {
            'title': self.title,
            'artist': self.artist,
            'album': self.album,
            'duration': self.duration_ms,
            'format': self.format_version,
            'created': self.created_at,
            'lastModified': self.last_modified_at,
            'audioPath': self.audio_ref,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Metadata':
        now = _now_iso()
        return cls(
            title=str(data.get('title') or ''),
            artist=str(data.get('artist') or ''),
            album=str(data.get('album') or ''),
            duration_ms=int(data.get('duration') or 0),
            created_at=data.get('created') or now,
            last_modified_at=data.get('lastModified') or now,
            audio_ref=data.get('audioPath') or None,
            format_version=data.get('format') or config.FORMAT_VERSION,
        )


def _sort_key(line: Line) -> Tuple[bool, int]:
    # 未同步的行排在最後，彼此維持原順序
    return (line.time < 0, line.time if line.time >= 0 else 0)


class Timeline:
    """歌詞完整時間軸"""

    def __init__(
        self,
        title: str = '',
        artist: str = '',
        album: str = '',
        duration_ms: int = 0,
        timeline_id: Optional[str] = None,
        lines: Optional[Iterable[Line]] = None,
    ):
        # 時間軸 ID
        self.timeline_id = timeline_id or generate_timeline_id(title, artist)
        # 元資訊
        self.metadata = Metadata(title=title, artist=artist, album=album, duration_ms=duration_ms)
        # 歌詞行（維持給定順序，不重新排序）
        self._lines: List[Line] = [replace(line) for line in lines] if lines else []
        # 無法辨識的欄位（如 syncData），原樣保留
        self.extras: Dict[str, Any] = {}
        # 修改版本號
        self.revision = 0
        # 最近一次修正紀錄
        self.last_corrections: List[Correction] = []
        # 補上缺少或重複的行 ID（建構不算修改）
        self._repair_line_ids()

    @classmethod
    def create(
        cls,
        title: str,
        artist: str,
        album: str = '',
        duration_ms: int = 0,
        timeline_id: Optional[str] = None,
    ) -> 'Timeline':
        """建立空白時間軸"""
        return cls(title, artist, album, duration_ms, timeline_id=timeline_id)

    # ------------------------------------------------------------------
    # 查詢
    # ------------------------------------------------------------------

    @property
    def lines(self) -> Tuple[Line, ...]:
        """歌詞行快照（複本，修改不影響時間軸）"""
        return tuple(replace(line) for line in self._lines)

    def __len__(self) -> int:
        return len(self._lines)

    def get_line(self, index: int) -> Optional[Line]:
        if 0 <= index < len(self._lines):
            return replace(self._lines[index])
        return None

    def index_of(self, line_id: str) -> int:
        """依 ID 找行索引，找不到回傳 -1"""
        for index, line in enumerate(self._lines):
            if line.id == line_id:
                return index
        return -1

    def synchronized_lines(self) -> List[Line]:
        """已同步的行（依序）"""
        return [replace(line) for line in self._lines if line.time >= 0]

    def get_active_line_at(self, time_ms: int) -> Optional[Line]:
        """指定時間正在播放的行"""
        line = resolve_active_line(self._lines, time_ms)
        return replace(line) if line is not None else None

    def get_next_line_after(self, time_ms: int) -> Optional[Line]:
        """第一個時間晚於 time_ms 的行"""
        for line in self._lines:
            if line.time > time_ms:
                return replace(line)
        return None

    def has_custom_timecodes(self) -> bool:
        """時間碼是否與預設等距間隔不同（判斷是否曾被調整）"""
        valid_lines = [line for line in self._lines if line.time >= 0]
        if not valid_lines:
            return False
        for index, line in enumerate(valid_lines):
            expected_time = index * config.DEFAULT_LINE_SPACING_MS
            if abs(line.time - expected_time) > config.CUSTOM_TIMECODE_TOLERANCE_MS:
                return True
        return False

    def has_audio(self) -> bool:
        return bool(self.metadata.audio_ref)

    # ------------------------------------------------------------------
    # 修改
    # ------------------------------------------------------------------

    def touch(self):
        """更新修改時間與版本號"""
        self.metadata.last_modified_at = _now_iso()
        self.revision += 1

    def _sort(self) -> bool:
        """依時間穩定排序，未同步的行放最後；回傳順序是否改變"""
        before = [id(line) for line in self._lines]
        self._lines.sort(key=_sort_key)
        return [id(line) for line in self._lines] != before

    def sort_lines(self) -> bool:
        """重新排序，順序有變動時更新修改時間"""
        changed = self._sort()
        if changed:
            self.touch()
        return changed

    def _new_line_id(self) -> str:
        existing = {line.id for line in self._lines}
        line_id = generate_line_id()
        while line_id in existing:
            line_id = generate_line_id()
        return line_id

    def add_line(self, time_ms: int, text: str = '', line_type: Any = LineType.VOCAL) -> Line:
        """新增一行並重新排序"""
        line = Line(
            id=self._new_line_id(),
            time=int(time_ms) if time_ms is not None and int(time_ms) >= 0 else UNSYNCED,
            text=(text or '').strip(),
            type=LineType.parse(line_type),
        )
        self._lines.append(line)
        self._sort()
        self.touch()
        return replace(line)

    def add_lines(self, entries: Iterable[Any]) -> 'Timeline':
        """
        批次新增。

        每筆可為 dict（time/text/type）、Line 或 (time, text[, type]) tuple。
        不做連鎖修正，呼叫端需自行確保時間大致遞增。
        """
        for entry in entries:
            if isinstance(entry, Line):
                self.add_line(entry.time, entry.text, entry.type)
            elif isinstance(entry, dict):
                self.add_line(entry.get('time', UNSYNCED), entry.get('text', ''), entry.get('type', LineType.VOCAL))
            else:
                self.add_line(*entry)
        return self

    def remove_line(self, index: int) -> Optional[Line]:
        """刪除指定索引的歌詞行，超出範圍則不動作"""
        if not 0 <= index < len(self._lines):
            return None
        removed = self._lines.pop(index)
        self.touch()
        return removed

    def set_line_time(self, index: int, time_ms: int):
        """設定單行時間（之後應呼叫 correct_from）"""
        if not 0 <= index < len(self._lines):
            return
        self._lines[index].time = int(time_ms) if int(time_ms) >= 0 else UNSYNCED
        self.touch()

    def set_line_text(self, index: int, text: str):
        if not 0 <= index < len(self._lines):
            return
        self._lines[index].text = (text or '').strip()
        self.touch()

    def set_line_type(self, index: int, line_type: Any):
        if not 0 <= index < len(self._lines):
            return
        self._lines[index].type = LineType.parse(line_type)
        self.touch()

    def clear_line_timecode(self, index: int):
        """清除單行時間碼（標記為未同步）"""
        if not 0 <= index < len(self._lines):
            return
        self._lines[index].time = UNSYNCED
        self.touch()

    def clear_all_timecodes(self):
        """清除所有時間碼並移除文字中的殘留時間碼"""
        for line in self._lines:
            line.time = UNSYNCED
            if line.text:
                line.text = strip_timecode_residue(line.text)
        self.touch()

    def clean_corrupted_texts(self) -> int:
        """移除文字中的殘留時間碼，回傳修復行數"""
        cleaned_count = 0
        for line in self._lines:
            if not line.text:
                continue
            cleaned = strip_timecode_residue(line.text)
            if cleaned != line.text:
                line.text = cleaned
                cleaned_count += 1
        if cleaned_count:
            self.touch()
        return cleaned_count

    def reset_timecodes_to_default(self, interval_ms: int = config.DEFAULT_LINE_SPACING_MS):
        """以固定間隔重設所有時間碼"""
        for index, line in enumerate(self._lines):
            line.time = index * interval_ms
        self.touch()

    def _repair_line_ids(self) -> int:
        """補上缺少或重複的行 ID（不更新修改時間）"""
        seen = set()
        fixed = 0
        for line in self._lines:
            if not line.id or line.id in seen:
                line.id = generate_line_id()
                while line.id in seen:
                    line.id = generate_line_id()
                fixed += 1
            seen.add(line.id)
        return fixed

    def ensure_line_ids(self) -> int:
        """補上缺少或重複的行 ID，回傳補上的數量"""
        fixed = self._repair_line_ids()
        if fixed:
            self.touch()
        return fixed

    def set_audio_ref(self, ref: Optional[str]) -> 'Timeline':
        """設定音訊參照（不解讀內容）"""
        self.metadata.audio_ref = ref or None
        self.touch()
        return self

    def correct_from(self, line_index: int) -> int:
        """單行修改後連鎖修正時間順序，回傳修正數"""
        self.last_corrections = correct_from(self._lines, line_index)
        if self.last_corrections:
            self.touch()
        return len(self.last_corrections)

    def correct_all(self) -> int:
        """整份修正一輪，回傳修正數"""
        self.last_corrections = correct_all(self._lines)
        if self.last_corrections:
            self.touch()
        return len(self.last_corrections)

    # ------------------------------------------------------------------
    # 序列化
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        """轉為儲存用字典"""
        data = dict(self.extras)
        data.update({
            'songId': self.timeline_id,
            'metadata': self.metadata.to_dict(),
            'lines': [line.to_dict() for line in self._lines],
            'version': config.PAYLOAD_VERSION,
        })
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Timeline':
        """由目前格式的字典還原（維持儲存時的行順序）"""
        metadata = data['metadata']
        if not isinstance(metadata, dict):
            raise ValueError('metadata must be an object')
        raw_lines = data.get('lines') or []
        if not isinstance(raw_lines, list):
            raise ValueError('lines must be an array')

        timeline = cls(timeline_id=str(data.get('songId') or '') or None)
        timeline.metadata = Metadata.from_dict(metadata)
        for raw in raw_lines:
            time_value = raw.get('time', UNSYNCED)
            timeline._lines.append(
                Line(
                    id=str(raw.get('id') or ''),
                    time=int(time_value) if time_value is not None and int(time_value) >= 0 else UNSYNCED,
                    text=str(raw.get('text') or ''),
                    type=LineType.parse(raw.get('type', LineType.VOCAL)),
                )
            )
        timeline.extras = {
            key: value
            for key, value in data.items()
            if key not in ('songId', 'metadata', 'lines', 'version')
        }
        # 舊資料可能缺少行 ID；載入不算修改
        timeline._repair_line_ids()
        return timeline
