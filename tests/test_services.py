import logging
from datetime import date

import pytest

from mealdelivery.services import (
    CurrentUser, DeliveryStatus, DeliveryTracker, aggregate_delivery_status, filter_seniors,
    resolve_seniors, search_records, unassigned_seniors,
)
from conftest import BrokenStore, FakeStore, senior

TODAY = date(2025, 3, 14)


def _assignment(aid, senior_id, volunteer_id, status="active"):
    return {"id": aid, "senior_id": senior_id, "volunteer_id": volunteer_id, "status": status}


def _delivery(did, senior_id, volunteer_id=7, status="pending", day="2025-03-14", notes=""):
    return {"id": did, "senior_id": senior_id, "volunteer_id": volunteer_id, "delivery_date": day,
            "status": status, "notes": notes}


@pytest.fixture
def store():
    return FakeStore(
        seniors=[senior(1), senior(2), senior(3), senior(4, active=False)],
        assignments=[
            _assignment(1, 1, 7),
            _assignment(2, 2, 7),
            _assignment(3, 3, 8),
            _assignment(4, 4, 7),
            _assignment(5, 3, 7, status="inactive"),
        ],
    )


def test_admin_sees_all_active_seniors(store):
    result = resolve_seniors(store, volunteer_id=99, is_admin=True)
    assert [s["id"] for s in result] == [1, 2, 3]


def test_volunteer_sees_only_active_assignments_to_active_seniors(store):
    result = resolve_seniors(store, volunteer_id=7, is_admin=False)
    assert [s["id"] for s in result] == [1, 2]


def test_volunteer_without_assignments_gets_empty_list(store):
    assert resolve_seniors(store, volunteer_id=42, is_admin=False) == []


def test_resolver_store_failure_is_logged_not_raised(caplog):
    with caplog.at_level(logging.ERROR):
        assert resolve_seniors(BrokenStore(), volunteer_id=7, is_admin=False) == []
    assert "Could not resolve seniors" in caplog.text


def test_every_senior_appears_once_with_pending_default():
    seniors = [senior(1), senior(2), senior(3)]
    statuses = aggregate_delivery_status(seniors, [_delivery(10, 2, status="delivered")])

    assert set(statuses) == {1, 2, 3}
    assert statuses[1] == DeliveryStatus(is_delivered=False, status="pending", notes="")
    assert statuses[2].is_delivered is True


def test_deliveries_for_foreign_seniors_are_ignored():
    statuses = aggregate_delivery_status([senior(1)], [_delivery(10, 1), _delivery(11, 99, status="delivered")])
    assert list(statuses) == [1]


def test_status_mapping_carries_status_and_notes():
    seniors = [senior(1), senior(2), senior(3)]
    deliveries = [
        _delivery(10, 1, status="family_confirmed", notes="daughter took it"),
        _delivery(11, 2, status="missed"),
        _delivery(12, 3, status="no_contact", notes="no answer"),
    ]
    statuses = aggregate_delivery_status(seniors, deliveries)

    assert statuses[1] == DeliveryStatus(True, "family_confirmed", "daughter took it")
    assert statuses[2] == DeliveryStatus(False, "missed", "")
    assert statuses[3] == DeliveryStatus(False, "no_contact", "no answer")


def test_latest_delivery_date_wins():
    deliveries = [
        _delivery(11, 1, status="delivered", day="2025-03-14"),
        _delivery(10, 1, status="missed", day="2025-03-07"),
    ]
    assert aggregate_delivery_status([senior(1)], deliveries)[1].status == "delivered"


def _tracker(store, volunteer_id=7, role="volunteer"):
    user = CurrentUser(id=volunteer_id, email="ana@pantry.org", name="Ana", role=role)
    tracker = DeliveryTracker(store, user, today=lambda: TODAY)
    tracker.refresh()
    return tracker


def test_toggle_creates_delivered_row_then_updates_to_pending(store):
    tracker = _tracker(store)
    assert tracker.status_for(1).status == "pending"

    status = tracker.toggle(1, True)
    assert status.is_delivered and status.status == "delivered"
    assert len(store.deliveries) == 1
    created = store.deliveries[0]
    assert created["delivery_date"] == "2025-03-14"
    assert created["volunteer_id"] == 7

    status = tracker.toggle(1, False)
    assert status == DeliveryStatus(False, "pending", "")
    assert len(store.deliveries) == 1
    assert [c[0] for c in store.calls] == ["create_delivery", "update_delivery"]


def test_unchecking_without_a_row_creates_pending_row(store):
    tracker = _tracker(store)
    tracker.toggle(2, False)
    assert store.deliveries[0]["status"] == "pending"


def test_refresh_ignores_other_volunteers_and_other_days(store):
    store.deliveries = [
        _delivery(1, 1, volunteer_id=8, status="delivered"),
        _delivery(2, 2, status="delivered", day="2025-03-13"),
    ]
    tracker = _tracker(store)
    assert tracker.status_for(1).status == "pending"
    assert tracker.status_for(2).status == "pending"
    assert tracker.deliveries == []


def test_assignment_change_drops_stale_status(store):
    store.deliveries = [_delivery(1, 2, status="delivered")]
    tracker = _tracker(store)
    assert tracker.status_for(2).is_delivered

    store.assignments = [a for a in store.assignments if a["senior_id"] != 2]
    tracker.refresh()
    assert 2 not in tracker.statuses


def test_set_status_with_notes_and_rejects_unknown_status(store):
    tracker = _tracker(store)
    status = tracker.set_status(1, "no_contact", "rang twice")
    assert status == DeliveryStatus(False, "no_contact", "rang twice")

    with pytest.raises(ValueError):
        tracker.set_status(1, "lost")
    with pytest.raises(KeyError):
        tracker.set_status(3, "delivered")


def test_complete_all_and_progress(store):
    store.deliveries = [_delivery(1, 1, status="delivered")]
    tracker = _tracker(store)
    assert tracker.progress() == (1, 2, 50.0)

    assert tracker.complete_all() == 1
    assert tracker.progress() == (2, 2, 100.0)


def test_progress_with_no_seniors_is_zero():
    tracker = _tracker(FakeStore())
    assert tracker.progress() == (0, 0, 0.0)


def test_admin_tracker_covers_every_active_senior(store):
    tracker = _tracker(store, volunteer_id=1, role="admin")
    assert [s["id"] for s in tracker.seniors] == [1, 2, 3]


def test_filter_seniors_by_search_and_status():
    seniors = [senior(1, "Alice Wong"), senior(2, "Bob Ray", address="9 Oak Ave"), senior(3, "Carla")]
    statuses = {1: DeliveryStatus(True, "delivered"), 2: DeliveryStatus(), 3: DeliveryStatus()}

    assert [s["id"] for s in filter_seniors(seniors, "oak", "all", statuses)] == [2]
    assert [s["id"] for s in filter_seniors(seniors, "", "completed", statuses)] == [1]
    assert [s["id"] for s in filter_seniors(seniors, "  ", "pending", statuses)] == [2, 3]


def test_search_records_matches_any_field_case_insensitively():
    rows = [{"name": "Dana", "email": "dana@pantry.org", "phone": None}, {"name": "Eli", "email": "eli@x.org"}]
    assert search_records(rows, "PANTRY", ("name", "email", "phone")) == [rows[0]]
    assert search_records(rows, "", ("name",)) == rows


def test_unassigned_seniors_excludes_active_assignments(store):
    assert [s["id"] for s in unassigned_seniors(store)] == []
    store.assignments[0]["status"] = "inactive"
    assert [s["id"] for s in unassigned_seniors(store)] == [1]


def test_unassigned_seniors_falls_back_to_all_when_assignments_fail():
    class NoAssignments(FakeStore):
        def list_assignments(self, *args, **kwargs):
            raise RuntimeError("timeout")

    assert len(unassigned_seniors(NoAssignments(seniors=[senior(1), senior(2)]))) == 2


def test_toggle_takes_over_todays_row_recorded_by_another_volunteer(store):
    store.deliveries = [_delivery(1, 1, volunteer_id=8, status="missed", notes="not home")]
    tracker = _tracker(store)
    assert tracker.status_for(1).status == "pending"

    status = tracker.toggle(1, True)

    assert status.is_delivered
    assert len(store.deliveries) == 1
    row = store.deliveries[0]
    assert (row["id"], row["volunteer_id"], row["status"], row["notes"]) == (1, 7, "delivered", "not home")
    assert [c[0] for c in store.calls] == ["update_delivery"]


def test_complete_all_refreshes_even_when_a_write_fails(store):
    class FailsForSeniorTwo(FakeStore):
        def create_delivery(self, senior_id, *args, **kwargs):
            if senior_id == 2:
                raise RuntimeError("disk full")
            return super().create_delivery(senior_id, *args, **kwargs)

    flaky = FailsForSeniorTwo(seniors=store.seniors, assignments=store.assignments)
    tracker = _tracker(flaky)

    with pytest.raises(RuntimeError):
        tracker.complete_all()

    assert tracker.status_for(1).is_delivered
    assert not tracker.status_for(2).is_delivered
    assert tracker.progress() == (1, 2, 50.0)
