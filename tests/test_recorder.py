"""Test record mode."""

import pytest
from PyQt5.QtCore import QCoreApplication

from core.lrc import Timeline, UNSYNCED
from core.record import PositionThrottle, RecordingSession


@pytest.fixture(scope='session')
def qapp():
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def advance(self, ms):
        self.now += ms / 1000


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def unsynced_timeline():
    timeline = Timeline.create('Song', 'Me')
    timeline.add_lines([(UNSYNCED, f'line {i}') for i in range(4)])
    return timeline


class TestThrottle:
    def test_first_update_accepted(self, clock):
        assert PositionThrottle(100, clock).accept()

    def test_updates_within_interval_dropped(self, clock):
        throttle = PositionThrottle(100, clock)
        assert throttle.accept()
        clock.advance(40)
        assert not throttle.accept()
        clock.advance(59)
        assert not throttle.accept()
        clock.advance(1)
        assert throttle.accept()

    def test_reset(self, clock):
        throttle = PositionThrottle(100, clock)
        throttle.accept()
        throttle.reset()
        assert throttle.accept()


class TestRecordingSession:
    def test_active_line_signal_only_on_change(self, qapp, clock, sample_timeline):
        session = RecordingSession(sample_timeline, PositionThrottle(100, clock))
        emitted = []
        session.active_line_changed.connect(emitted.append)

        for position in (0, 500, 1000, 3000, 3500, 7000):
            clock.advance(150)
            session.on_position_changed(position)

        assert emitted == [0, 1, 2]

    def test_throttled_positions_ignored(self, qapp, clock, sample_timeline):
        session = RecordingSession(sample_timeline, PositionThrottle(100, clock))
        session.on_position_changed(0)
        clock.advance(10)
        session.on_position_changed(20000)
        assert session.position_ms == 0
        assert session.active_index == 0

    def test_record_lines_in_order(self, qapp, clock, unsynced_timeline):
        session = RecordingSession(unsynced_timeline, PositionThrottle(100, clock))
        recorded = []
        session.line_recorded.connect(lambda *args: recorded.append(args))

        for position in (1000, 2500, 4000):
            clock.advance(200)
            session.on_position_changed(position)
            session.record_next()

        times = [line.time for line in unsynced_timeline.lines]
        assert times == [1000, 2500, 4000, UNSYNCED]
        assert recorded == [(0, 1000, 0), (1, 2500, 0), (2, 4000, 0)]
        assert session.cursor == 3

    def test_record_corrects_late_press(self, qapp, clock, unsynced_timeline):
        session = RecordingSession(unsynced_timeline, PositionThrottle(100, clock))
        session.on_position_changed(3000)
        session.record_next()
        clock.advance(200)
        session.on_position_changed(2000)
        index = session.record_next()

        assert index == 1
        assert unsynced_timeline.lines[1].time == 3100

    def test_record_past_end(self, qapp, clock):
        timeline = Timeline.create('Song', 'Me')
        timeline.add_line(UNSYNCED, 'only')
        session = RecordingSession(timeline, PositionThrottle(100, clock))
        assert session.record_next() == 0
        assert session.record_next() is None

    def test_seek_cursor_clamped(self, qapp, unsynced_timeline):
        session = RecordingSession(unsynced_timeline)
        session.seek_cursor(99)
        assert session.cursor == 4
        session.seek_cursor(-3)
        assert session.cursor == 0
