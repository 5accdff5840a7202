"""
Configuration for lyrics-sync-maker
"""

import os
from pathlib import Path

# Project paths
PROJECT_ROOT = Path(__file__).parent
DATA_DIR = Path(os.getenv('LYRICS_SYNC_DATA_DIR', str(PROJECT_ROOT / 'data')))
LOG_FILE = Path(os.getenv('LYRICS_SYNC_LOG_FILE', 'lyrics-sync.log'))

# LRC settings
LRC_ENCODING = 'utf-8-sig'
TIME_FORMAT = 'mm:ss.xx'

# Storage keys
LIBRARY_PREFIX = 'lyrics_'
BUILTIN_SONGS_KEY = 'lyrix_builtin_songs'  # 不可落在 LIBRARY_PREFIX 之下

# Serialization
FORMAT_VERSION = 'syncedlyrics-v1.0'
PAYLOAD_VERSION = '1.0'
BUNDLE_VERSION = '1.0'

# Timeline settings (milliseconds)
DEFAULT_LINE_SPACING_MS = 2000
MIN_INCREMENT_MS = 100
CUSTOM_TIMECODE_TOLERANCE_MS = 100

# Record mode
RECORD_THROTTLE_MS = 100  # 最多每秒 10 次位置更新
