from datetime import datetime, timedelta, timezone

import pytest

from utils.exceptions import SessionExpired, Unauthorized
from utils.sessions import SessionTracker


class FakeClock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def tracker(clock):
    return SessionTracker(clock=clock)


def test_begin_stamps_login_time_and_client(tracker, clock):
    descriptor = tracker.begin("user-1", "pytest-agent", "10.0.0.1")
    assert descriptor.login_time == clock.now
    assert descriptor.client_agent == "pytest-agent"
    assert descriptor.client_address == "10.0.0.1"
    assert descriptor.session_id.startswith("sess_")


def test_session_ids_are_unique(tracker):
    ids = {tracker.begin("user-1", None, None).session_id for _ in range(50)}
    assert len(ids) == 50


@pytest.mark.parametrize("elapsed", [timedelta(0), timedelta(hours=23, minutes=59), timedelta(hours=24)])
def test_validate_within_ceiling(tracker, clock, elapsed):
    descriptor = tracker.begin("user-1", None, None)
    clock.now += elapsed
    assert tracker.validate(descriptor) is descriptor


def test_validate_past_ceiling(tracker, clock):
    descriptor = tracker.begin("user-1", None, None)
    clock.now += timedelta(hours=24, minutes=1)
    with pytest.raises(SessionExpired):
        tracker.validate(descriptor)


def test_expiry_is_absolute_from_login(tracker, clock):
    descriptor = tracker.begin("user-1", None, None)
    clock.now += timedelta(hours=12)
    tracker.validate(descriptor)
    clock.now += timedelta(hours=12, minutes=1)
    with pytest.raises(SessionExpired):
        tracker.validate(descriptor)


def test_cookie_round_trip(tracker):
    descriptor = tracker.begin("user-1", "agent", "127.0.0.1")
    assert tracker.parse(descriptor.to_cookie()) == descriptor


def test_parse_accepts_javascript_timestamps(tracker):
    raw = '{"sessionId": "sess_1", "loginTime": "2024-05-01T11:00:00.000Z"}'
    descriptor = tracker.parse(raw)
    assert descriptor.login_time == datetime(2024, 5, 1, 11, 0, tzinfo=timezone.utc)
    tracker.validate(descriptor)


@pytest.mark.parametrize(
    "raw",
    [
        "not json",
        "[]",
        '{"sessionId": "sess_1"}',
        '{"sessionId": "sess_1", "loginTime": "yesterday"}',
        '{"sessionId": "sess_1", "loginTime": "2024-05-01T11:00:00"}',
    ],
)
def test_parse_rejects_malformed(tracker, raw):
    with pytest.raises(Unauthorized):
        tracker.parse(raw)


def test_track_records_request(tracker, clock):
    info = tracker.track("sess_1", "agent", "127.0.0.1", "/api/v1/users/current-user", "GET", username="alice")
    assert info.session_id == "sess_1"
    assert info.request_path == "/api/v1/users/current-user"
    assert info.timestamp == clock.now
