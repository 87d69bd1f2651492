"""Tests for the observable state store."""

import dataclasses
import logging

import pytest

from photo_report.domain.state import AppState
from photo_report.services.state_store import StateStore
from tests.conftest import RecordingSubscriber, make_record


def test_update_then_undo_restores_previous_values(store: StateStore) -> None:
    store.set("site_name", "A")
    store.set("site_name", "B")

    assert store.undo() is True
    assert store.state.site_name == "A"
    assert store.undo() is True
    assert store.state.site_name == ""
    assert store.undo() is False


def test_history_is_capped() -> None:
    store = StateStore(history_limit=50)

    for index in range(60):
        store.set("font_size", 6 + index % 10)

    assert store.history_size == 50
    undone = 0
    while store.undo():
        undone += 1
    assert undone == 50


def test_subscribers_receive_new_and_old_state(store: StateStore) -> None:
    subscriber = RecordingSubscriber()
    store.subscribe(subscriber)

    store.set("person_name", "Sato")

    assert len(subscriber.calls) == 1
    new_state, old_state = subscriber.calls[0]
    assert new_state.person_name == "Sato"
    assert old_state.person_name == ""


def test_failing_subscriber_does_not_block_others(
    store: StateStore,
    caplog: pytest.LogCaptureFixture,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setattr(logging.getLogger("photo_report"), "propagate", True)

    def broken(new_state: AppState, old_state: AppState) -> None:
        raise RuntimeError("boom")

    subscriber = RecordingSubscriber()
    store.subscribe(broken)
    store.subscribe(subscriber)

    with caplog.at_level(logging.ERROR, logger="photo_report"):
        store.set("site_name", "Tower")

    assert store.state.site_name == "Tower"
    assert len(subscriber.calls) == 1
    assert "subscriber" in caplog.text


def test_unsubscribe_stops_notifications(store: StateStore) -> None:
    subscriber = RecordingSubscriber()
    unsubscribe = store.subscribe(subscriber)

    unsubscribe()
    store.set("site_name", "Tower")

    assert subscriber.calls == []


def test_unknown_field_is_rejected_without_change(store: StateStore) -> None:
    with pytest.raises(ValueError):
        store.update({"site_name": "X", "colour": "red"})

    assert store.state.site_name == ""
    assert store.history_size == 0


def test_value_outside_choices_is_rejected(store: StateStore) -> None:
    with pytest.raises(ValueError):
        store.set("photos_per_page", 5)
    with pytest.raises(ValueError):
        store.set("orientation", "sideways")

    assert store.state.photos_per_page == 4


def test_get_returns_field_and_rejects_unknown(store: StateStore) -> None:
    assert store.get("orientation") == "portrait"
    with pytest.raises(KeyError):
        store.get("missing")


def test_font_size_is_clamped(store: StateStore) -> None:
    assert store.set("font_size", 2).font_size == 6
    assert store.set("font_size", 40).font_size == 20


def test_update_without_history(store: StateStore) -> None:
    store.set("zoom_level", 1.5, record_history=False)

    assert store.state.zoom_level == 1.5
    assert store.undo() is False


def test_reset_returns_defaults_and_clears_history(store: StateStore) -> None:
    subscriber = RecordingSubscriber()
    store.set("site_name", "Tower")
    store.subscribe(subscriber)

    store.reset()

    assert store.state == AppState()
    assert store.history_size == 0
    assert len(subscriber.calls) == 1


def test_validate_reports_warnings_and_errors() -> None:
    store = StateStore(max_file_count=1)

    result = store.validate()
    assert result.is_valid
    assert len(result.warnings) == 3

    store.update(
        {
            "site_name": "S",
            "person_name": "P",
            "photos": (make_record(1), make_record(2)),
        }
    )
    result = store.validate()
    assert not result.is_valid
    assert result.warnings == []
    assert len(result.errors) == 1


def test_snapshots_are_immutable(store: StateStore) -> None:
    snapshot = store.state

    store.set("site_name", "Tower")

    assert snapshot.site_name == ""
    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.site_name = "changed"  # type: ignore[misc]


def test_duplicate_photo_ids_are_rejected(store: StateStore) -> None:
    with pytest.raises(ValueError):
        store.set("photos", (make_record(1), make_record(1)))

    assert store.state.photos == ()


def test_photo_operations(store: StateStore) -> None:
    store.append_photos([make_record(1), make_record(2), make_record(3)])

    updated = store.update_photo(2, location="gate")
    assert updated is not None
    assert store.state.find_photo(2).location == "gate"
    assert store.update_photo(99, location="x") is None

    assert store.move_photo(3, 0) is True
    assert store.state.photo_ids() == [3, 1, 2]
    assert store.move_photo(3, -5) is False
    assert store.move_photo(99, 1) is False

    removed = store.remove_photo(1)
    assert removed is not None
    assert store.state.photo_ids() == [3, 2]
    assert store.remove_photo(1) is None

    assert store.undo() is True
    assert store.state.photo_ids() == [3, 1, 2]


def test_update_photo_rejects_unknown_fields(store: StateStore) -> None:
    store.append_photos([make_record(1)])

    with pytest.raises(ValueError):
        store.update_photo(1, caption="x")
    with pytest.raises(ValueError):
        store.update_photo(1, id=5)


def test_state_rejects_values_of_the_wrong_type() -> None:
    with pytest.raises(ValueError):
        AppState(photos_per_page=True)
    with pytest.raises(ValueError):
        AppState(zoom_level="big")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        AppState(zoom_level=float("nan"))
    with pytest.raises(ValueError):
        AppState(font_size="12")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        AppState(date=20241019)  # type: ignore[arg-type]


def test_store_rejects_boolean_page_size(store: StateStore) -> None:
    with pytest.raises(ValueError):
        store.set("photos_per_page", True)

    assert store.state.photos_per_page == 4
