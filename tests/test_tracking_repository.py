import json
from unittest.mock import patch

from infrastructure.repositories.sqlite_tracking_repository import (
    SQLiteTrackingRepository,
    TrackingAction,
    TrackingCategory,
)
from use_cases.session_models import PartialSessionScenario


def _repo(tmp_path) -> SQLiteTrackingRepository:
    repo = SQLiteTrackingRepository(str(tmp_path / "auth.db"))
    repo.init_db()
    return repo


def test_track_event_stores_enum_values(tmp_path):
    repo = _repo(tmp_path)
    repo.track_event(
        TrackingCategory.AUTH,
        TrackingAction.LOGIN,
        PartialSessionScenario.MUST_CHANGE_PASSWORD,
        {"platform": "demo"},
    )

    events = repo.get_events()
    assert len(events) == 1
    _, _, category, action, label, metadata_json = events[0]
    assert (category, action, label) == ("Auth", "LOGIN", "MUST_CHANGE_PASSWORD")
    assert json.loads(metadata_json) == {"platform": "demo"}


def test_metadata_is_allow_listed(tmp_path):
    repo = _repo(tmp_path)
    repo.track_event(
        TrackingCategory.AUTH,
        TrackingAction.LOGIN_ERROR,
        None,
        {"platform": "demo", "password": "hunter2", "error_code": "refresh_token expired"},
    )

    metadata = json.loads(repo.get_events()[0][5])
    assert metadata == {"platform": "demo"}


def test_action_filter(tmp_path):
    repo = _repo(tmp_path)
    repo.track_event(TrackingCategory.AUTH, TrackingAction.LOGIN)
    repo.track_event(TrackingCategory.AUTH, TrackingAction.LOGOUT)
    repo.track_event(TrackingCategory.PROFILE, TrackingAction.CHANGE_PASSWORD)

    events = repo.get_events(action_filter=TrackingAction.LOGOUT.value)
    assert [e[3] for e in events] == ["LOGOUT"]
    assert len(repo.get_events(limit=2)) == 2


@patch("infrastructure.repositories.sqlite_tracking_repository.log.error")
def test_tracking_failure_never_raises(mock_log_error, tmp_path):
    # Table was never created
    repo = SQLiteTrackingRepository(str(tmp_path / "missing.db"))

    repo.track_event(TrackingCategory.AUTH, TrackingAction.LOGIN)

    mock_log_error.assert_called_once()
    assert repo.get_events() == []
