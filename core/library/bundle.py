"""
歌曲資料格式解碼

作用：
- 移除根層級重複的元資訊欄位（只保留 metadata 內的版本）
- 判斷匯入資料為目前格式或舊格式，各自轉為 Timeline
- 匯入結果與單筆錯誤的資料結構
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

from core.lrc import Timeline, generate_timeline_id

# 舊格式會出現在根層級的元資訊欄位
DUPLICATE_FIELDS = ('title', 'artist', 'album', 'duration')

# 匯出檔根層級的固定欄位，其餘視為附帶資料原樣保留
BUNDLE_FIELDS = ('exportDate', 'version', 'totalSongs', 'songs')


def strip_duplicate_fields(payload: Dict[str, Any]) -> Dict[str, Any]:
    """回傳移除根層級 title/artist/album/duration 的副本"""
    return {key: value for key, value in payload.items() if key not in DUPLICATE_FIELDS}


@dataclass
class CurrentShape:
    """目前格式：元資訊只在 metadata 內"""

    payload: Dict[str, Any]

    def to_timeline(self) -> Timeline:
        return Timeline.from_dict(self.payload)


@dataclass
class LegacyShape:
    """舊格式：元資訊可能在根層級，或缺少 songId / metadata"""

    payload: Dict[str, Any]

    def to_timeline(self) -> Timeline:
        data = self.payload
        metadata = data.get('metadata')
        if metadata is None:
            metadata = {}
        if not isinstance(metadata, dict):
            raise ValueError('metadata must be an object')

        merged = dict(metadata)
        for name in DUPLICATE_FIELDS:
            merged[name] = metadata.get(name) or data.get(name) or ('' if name != 'duration' else 0)
        if not merged.get('audioPath') and data.get('audioPath'):
            merged['audioPath'] = data['audioPath']

        normalized = strip_duplicate_fields(data)
        normalized.pop('audioPath', None)
        normalized['metadata'] = merged
        normalized['songId'] = data.get('songId') or generate_timeline_id(
            str(merged['title']), str(merged['artist'])
        )
        normalized.setdefault('lines', [])
        return Timeline.from_dict(normalized)


SongShape = Union[CurrentShape, LegacyShape]


def decode_song(data: Any) -> SongShape:
    """判斷單筆歌曲資料的格式"""
    if not isinstance(data, dict):
        raise ValueError('Song entry is not an object')

    is_current = (
        isinstance(data.get('metadata'), dict)
        and bool(data.get('songId'))
        and isinstance(data.get('lines'), list)
        and not any(name in data for name in DUPLICATE_FIELDS)
        and 'audioPath' not in data
    )
    if is_current:
        return CurrentShape(data)
    return LegacyShape(data)


@dataclass
class ImportEntryError:
    """單筆匯入錯誤"""

    index: int  # 在匯入檔中的索引
    message: str  # 錯誤訊息

    def __str__(self) -> str:
        return f"Song {self.index + 1}: {self.message}"


@dataclass
class ImportResult:
    """匯入結果"""

    imported: int = 0
    skipped: int = 0
    errors: List[ImportEntryError] = field(default_factory=list)
    companions: Dict[str, Any] = field(default_factory=dict)  # 附帶資料（原樣保留）

    @property
    def error_count(self) -> int:
        return len(self.errors)
