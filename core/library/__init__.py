"""
Library module exports
"""

from .bundle import CurrentShape, ImportEntryError, ImportResult, LegacyShape, decode_song
from .library import LibraryEntry, LibraryState, LyricsLibrary
from .registry import BuiltInRegistry
from .store import JsonDirectoryStore, KeyValueStore, MemoryStore

__all__ = [
    'CurrentShape',
    'LegacyShape',
    'decode_song',
    'ImportEntryError',
    'ImportResult',
    'LibraryEntry',
    'LibraryState',
    'LyricsLibrary',
    'BuiltInRegistry',
    'JsonDirectoryStore',
    'KeyValueStore',
    'MemoryStore',
]
