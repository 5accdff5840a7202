"""
Record module exports
"""

from .recorder import PositionThrottle, RecordingSession

__all__ = [
    'PositionThrottle',
    'RecordingSession',
]
