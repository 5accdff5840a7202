"""
Pipeline module exports
"""

from .session import EditingSession
from .workflow import LyricsWorkflow

__all__ = [
    'EditingSession',
    'LyricsWorkflow',
]
