"""Test the timeline model."""

import pytest

import core.lrc.model as model
from core.lrc import LineType, Timeline, UNSYNCED


def _times(timeline):
    return [line.time for line in timeline.lines]


class TestAddLines:
    def test_add_line_sorts_and_generates_id(self):
        timeline = Timeline.create('Song', 'Me')
        timeline.add_line(2000, ' second ')
        timeline.add_line(1000, 'first')

        assert _times(timeline) == [1000, 2000]
        assert timeline.lines[1].text == 'second'
        assert all(line.id for line in timeline.lines)

    def test_unsynced_lines_go_last_in_input_order(self):
        timeline = Timeline.create('Song', 'Me')
        timeline.add_lines([
            {'time': -1, 'text': 'u1'},
            {'time': 500, 'text': 'a'},
            {'time': -1, 'text': 'u2'},
            {'time': 100, 'text': 'b'},
        ])
        assert [line.text for line in timeline.lines] == ['b', 'a', 'u1', 'u2']

    def test_equal_times_keep_input_order(self):
        timeline = Timeline.create('Song', 'Me')
        timeline.add_lines([(1000, 'x'), (1000, 'y'), (1000, 'z')])
        assert [line.text for line in timeline.lines] == ['x', 'y', 'z']

    def test_add_lines_does_not_cascade_correct(self):
        timeline = Timeline.create('Song', 'Me')
        timeline.add_lines([(1000, 'a'), (1000, 'b')])
        assert _times(timeline) == [1000, 1000]

    def test_line_ids_unique(self):
        timeline = Timeline.create('Song', 'Me')
        timeline.add_lines([(i * 10, f'l{i}') for i in range(50)])
        ids = [line.id for line in timeline.lines]
        assert len(set(ids)) == 50

    def test_empty_text_allowed_and_type_parsed(self):
        timeline = Timeline.create('Song', 'Me')
        line = timeline.add_line(0, '', 'instrumental')
        assert line.text == ''
        assert line.type is LineType.INSTRUMENTAL

    def test_unknown_type_falls_back_to_vocal(self):
        assert LineType.parse('rap') is LineType.VOCAL

    def test_lines_snapshot_is_a_copy(self, sample_timeline):
        snapshot = sample_timeline.lines
        snapshot[0].time = 99999
        assert sample_timeline.lines[0].time == 0


class TestTimecodeEdits:
    def test_clear_all_timecodes_strips_residue(self):
        timeline = Timeline.create('Song', 'Me')
        timeline.add_line(0, '[12.5s] hello')
        timeline.add_line(1000, '[-3s]world')
        timeline.clear_all_timecodes()

        assert _times(timeline) == [UNSYNCED, UNSYNCED]
        assert [line.text for line in timeline.lines] == ['hello', 'world']

    def test_clear_all_timecodes_idempotent(self, sample_timeline):
        sample_timeline.clear_all_timecodes()
        once = [(line.id, line.time, line.text) for line in sample_timeline.lines]
        sample_timeline.clear_all_timecodes()
        twice = [(line.id, line.time, line.text) for line in sample_timeline.lines]
        assert once == twice

    def test_clear_line_timecode_bounds(self, sample_timeline):
        sample_timeline.clear_line_timecode(1)
        assert sample_timeline.lines[1].time == UNSYNCED

        before = _times(sample_timeline)
        sample_timeline.clear_line_timecode(99)
        sample_timeline.clear_line_timecode(-1)
        assert _times(sample_timeline) == before

    def test_reset_timecodes_to_default(self, sample_timeline):
        sample_timeline.reset_timecodes_to_default()
        assert _times(sample_timeline) == [0, 2000, 4000, 6000]
        assert not sample_timeline.has_custom_timecodes()

    def test_clean_corrupted_texts_counts(self):
        timeline = Timeline.create('Song', 'Me')
        timeline.add_line(0, '[1.0s] a')
        timeline.add_line(100, 'b')
        assert timeline.clean_corrupted_texts() == 1
        assert timeline.clean_corrupted_texts() == 0


class TestQueries:
    def test_has_custom_timecodes(self):
        timeline = Timeline.create('Song', 'Me')
        assert not timeline.has_custom_timecodes()
        timeline.add_lines([(0, 'a'), (2050, 'b'), (4000, 'c')])
        assert not timeline.has_custom_timecodes()
        timeline.add_line(9000, 'd')
        assert timeline.has_custom_timecodes()

    def test_get_next_line_after(self, sample_timeline):
        assert sample_timeline.get_next_line_after(3000).text == 'Circuits dancing in the night'
        assert sample_timeline.get_next_line_after(-5).time == 0
        assert sample_timeline.get_next_line_after(15000) is None

    def test_synchronized_lines(self):
        timeline = Timeline.create('Song', 'Me')
        timeline.add_lines([(UNSYNCED, 'u'), (500, 'a'), (100, 'b')])
        assert [line.text for line in timeline.synchronized_lines()] == ['b', 'a']

    def test_set_line_type_and_remove(self, sample_timeline):
        sample_timeline.set_line_type(0, 'bridge')
        assert sample_timeline.lines[0].type is LineType.BRIDGE

        removed = sample_timeline.remove_line(0)
        assert removed.type is LineType.BRIDGE
        assert len(sample_timeline) == 3
        assert sample_timeline.remove_line(10) is None

    def test_sort_lines_after_direct_edit(self, make_timeline):
        timeline = make_timeline([3000, UNSYNCED, 1000])
        revision = timeline.revision
        assert timeline.sort_lines()
        assert _times(timeline) == [1000, 3000, UNSYNCED]
        assert timeline.revision > revision

    def test_sort_lines_already_sorted_is_not_a_change(self, sample_timeline):
        revision = sample_timeline.revision
        assert not sample_timeline.sort_lines()
        assert sample_timeline.revision == revision

    def test_set_audio_ref(self, sample_timeline):
        assert not sample_timeline.has_audio()
        sample_timeline.set_audio_ref('assets/audios/dreams.mp3')
        assert sample_timeline.metadata.audio_ref == 'assets/audios/dreams.mp3'
        assert sample_timeline.has_audio()


class TestFreshness:
    def test_every_mutation_touches_last_modified(self, monkeypatch):
        stamps = iter(f'2026-01-01T00:00:{i:02d}.000+00:00' for i in range(60))
        monkeypatch.setattr(model, '_now_iso', lambda: next(stamps))

        timeline = Timeline.create('Song', 'Me')
        operations = [
            lambda: timeline.add_line(0, 'a'),
            lambda: timeline.add_lines([(1000, 'b')]),
            lambda: timeline.set_line_time(1, 500),
            lambda: timeline.set_line_text(0, 'A'),
            lambda: timeline.clear_line_timecode(0),
            lambda: timeline.sort_lines(),
            lambda: timeline.clear_all_timecodes(),
            lambda: timeline.set_audio_ref('x.mp3'),
            lambda: timeline.remove_line(0),
        ]
        for operation in operations:
            before = (timeline.metadata.last_modified_at, timeline.revision)
            operation()
            after = (timeline.metadata.last_modified_at, timeline.revision)
            assert after[0] != before[0]
            assert after[1] > before[1]


class TestSerialization:
    def test_round_trip_dict(self, sample_timeline):
        sample_timeline.set_audio_ref('dreams.mp3')
        sample_timeline.extras['syncData'] = {'offset': 3}
        data = sample_timeline.to_dict()

        assert data['songId'] == sample_timeline.timeline_id
        assert data['metadata']['duration'] == 27000
        assert data['metadata']['audioPath'] == 'dreams.mp3'
        assert 'title' not in data

        restored = Timeline.from_dict(data)
        assert restored.timeline_id == sample_timeline.timeline_id
        assert restored.lines == sample_timeline.lines
        assert restored.metadata == sample_timeline.metadata
        assert restored.extras == {'syncData': {'offset': 3}}

    def test_from_dict_keeps_order_and_fills_ids(self):
        data = {
            'songId': 'me_song_1',
            'metadata': {'title': 'Song', 'artist': 'Me'},
            'lines': [
                {'time': 1000, 'text': 'b'},
                {'time': 0, 'text': 'a', 'id': 'dup'},
                {'time': 500, 'text': 'c', 'id': 'dup'},
            ],
        }
        timeline = Timeline.from_dict(data)
        assert [line.time for line in timeline.lines] == [1000, 0, 500]
        ids = [line.id for line in timeline.lines]
        assert all(ids) and len(set(ids)) == 3

    def test_constructor_repairs_line_ids_without_touching(self):
        lines = [
            model.Line(id='dup', time=0, text='a'),
            model.Line(id='dup', time=100, text='b'),
            model.Line(id='', time=200, text='c'),
        ]
        timeline = Timeline('Song', 'Me', lines=lines)

        ids = [line.id for line in timeline.lines]
        assert ids[0] == 'dup'
        assert all(ids) and len(set(ids)) == 3
        assert timeline.revision == 0

    def test_from_dict_rejects_bad_lines(self):
        with pytest.raises(ValueError):
            Timeline.from_dict({'songId': 'x', 'metadata': {}, 'lines': 'nope'})

    def test_generate_timeline_id(self):
        assert model.generate_timeline_id('Hello World!', 'The Band', now_ms=42) == 'the_band_hello_world__42'
