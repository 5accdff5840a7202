"""Test key-value stores."""

import pytest

from core.exceptions import StorageError
from core.library import JsonDirectoryStore, MemoryStore


class TestMemoryStore:
    def test_set_get_remove(self):
        store = MemoryStore()
        store.set('lyrics_a', '{}')
        assert store.get('lyrics_a') == '{}'
        store.remove('lyrics_a')
        store.remove('lyrics_a')
        assert store.get('lyrics_a') is None

    def test_list_keys_by_prefix(self):
        store = MemoryStore()
        store.set('lyrics_a', '1')
        store.set('lyrics_b', '2')
        store.set('other', '3')
        assert sorted(store.list_keys('lyrics_')) == ['lyrics_a', 'lyrics_b']
        assert len(store.list_keys()) == 3

    def test_quota_exceeded(self):
        store = MemoryStore(quota_bytes=20)
        store.set('k', 'x' * 10)
        with pytest.raises(StorageError):
            store.set('k2', 'y' * 10)
        assert store.get('k2') is None

    def test_overwrite_within_quota(self):
        store = MemoryStore(quota_bytes=20)
        store.set('k', 'x' * 15)
        store.set('k', 'y' * 15)
        assert store.get('k') == 'y' * 15


class TestJsonDirectoryStore:
    def test_round_trip_on_disk(self, temp_dir):
        store = JsonDirectoryStore(temp_dir / 'store')
        store.set('lyrics_me_song_1', '{"a": "歌"}')

        reopened = JsonDirectoryStore(temp_dir / 'store')
        assert reopened.get('lyrics_me_song_1') == '{"a": "歌"}'
        assert reopened.list_keys('lyrics_') == ['lyrics_me_song_1']

    def test_keys_with_unsafe_characters(self, temp_dir):
        store = JsonDirectoryStore(temp_dir)
        store.set('lyrics_a/b c', 'v')
        assert store.list_keys() == ['lyrics_a/b c']
        assert store.get('lyrics_a/b c') == 'v'

    def test_remove_and_missing(self, temp_dir):
        store = JsonDirectoryStore(temp_dir)
        assert store.get('missing') is None
        store.set('k', 'v')
        store.remove('k')
        store.remove('k')
        assert store.list_keys() == []

    def test_no_temp_files_left(self, temp_dir):
        store = JsonDirectoryStore(temp_dir)
        store.set('k', 'v')
        assert [path.name for path in temp_dir.iterdir()] == ['k.json']
