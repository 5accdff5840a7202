"""Test configuration and fixtures.

Provides reusable fixtures for:
- Temporary directories
- In-memory and on-disk key-value stores
- Libraries and sample timelines
"""

import tempfile
from pathlib import Path

import pytest

from core.library import JsonDirectoryStore, LyricsLibrary, MemoryStore
from core.lrc import Line, Timeline


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def library(store):
    return LyricsLibrary(store)


@pytest.fixture
def disk_library(temp_dir):
    return LyricsLibrary(JsonDirectoryStore(temp_dir / 'data'))


@pytest.fixture
def sample_timeline():
    """Four synchronized lines, already in order."""
    timeline = Timeline.create('Digital Dreams', 'Cyber Collective', 'Electronic Visions', 27000)
    timeline.add_lines([
        {'time': 0, 'text': 'In the neon lights we find'},
        {'time': 3000, 'text': 'Digital dreams of a different kind'},
        {'time': 6000, 'text': 'Circuits dancing in the night'},
        {'time': 15000, 'text': 'Download my heart', 'type': 'chorus'},
    ])
    return timeline


@pytest.fixture
def make_timeline():
    """Build a timeline whose lines keep the given order (no sorting)."""

    def _make(times, title='Song', artist='Me'):
        lines = [Line(id=f'line_{i}', time=t, text=f'text {i}') for i, t in enumerate(times)]
        return Timeline(title, artist, lines=lines, timeline_id='me_song_1')

    return _make
