"""
LRC 模組公開介面
"""

from .correction import Correction
from .model import Line, LineType, Metadata, Timeline, generate_timeline_id
from .parser import LrcDocument, LrcParser
from .resolver import ActiveLineResolver, resolve_active_line
from .timecode import UNSYNCED, format_timecode, parse_timecode
from .validator import LrcValidator, ValidationIssue
from .writer import LrcWriter

__all__ = [
    'Correction',
    'Line',
    'LineType',
    'Metadata',
    'Timeline',
    'generate_timeline_id',
    'LrcDocument',
    'LrcParser',
    'ActiveLineResolver',
    'resolve_active_line',
    'UNSYNCED',
    'format_timecode',
    'parse_timecode',
    'LrcValidator',
    'ValidationIssue',
    'LrcWriter',
]
