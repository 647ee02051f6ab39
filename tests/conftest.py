import pytest

import db


class FakeStore:
    """In-memory stand-in for the `db` module used by the service tests."""

    def __init__(self, seniors=None, assignments=None, deliveries=None, volunteers=None):
        self.seniors = list(seniors or [])
        self.assignments = list(assignments or [])
        self.deliveries = list(deliveries or [])
        self.volunteers = list(volunteers or [])
        self.batches = []
        self.fail_batches = set()
        self.calls = []
        self._next_id = 1000

    def list_seniors(self, active=None):
        return [dict(s) for s in self.seniors if active is None or bool(s.get("active", True)) == active]

    def list_assignments(self, volunteer_id=None, senior_id=None, status=None):
        rows = self.assignments
        if volunteer_id is not None:
            rows = [a for a in rows if a["volunteer_id"] == volunteer_id]
        if senior_id is not None:
            rows = [a for a in rows if a["senior_id"] == senior_id]
        if status:
            rows = [a for a in rows if a["status"] == status]
        return [dict(a) for a in rows]

    def list_volunteers(self, active=None):
        return [dict(v) for v in self.volunteers if active is None or bool(v.get("active", True)) == active]

    def list_deliveries(self, volunteer_id=None, delivery_date=None, start_date=None, end_date=None, senior_id=None):
        rows = self.deliveries
        if volunteer_id is not None:
            rows = [d for d in rows if d["volunteer_id"] == volunteer_id]
        if senior_id is not None:
            rows = [d for d in rows if d["senior_id"] == senior_id]
        if delivery_date:
            rows = [d for d in rows if d["delivery_date"] == delivery_date]
        if start_date:
            rows = [d for d in rows if d["delivery_date"] >= start_date]
        if end_date:
            rows = [d for d in rows if d["delivery_date"] <= end_date]
        return [dict(d) for d in rows]

    def create_delivery(self, senior_id, volunteer_id, delivery_date, status="pending", notes=None,
                        delivery_method=None):
        self._next_id += 1
        self.calls.append(("create_delivery", senior_id, status))
        self.deliveries.append({
            "id": self._next_id, "senior_id": senior_id, "volunteer_id": volunteer_id,
            "delivery_date": delivery_date, "status": status, "notes": notes or "",
        })
        return self._next_id

    def update_delivery(self, delivery_id, updates):
        self.calls.append(("update_delivery", delivery_id, updates.get("status")))
        for d in self.deliveries:
            if d["id"] == delivery_id:
                d.update(updates)
                return True
        return False

    def bulk_create_seniors(self, records):
        number = len(self.batches) + 1
        self.batches.append(list(records))
        if number in self.fail_batches:
            raise RuntimeError("insert rejected")
        self.seniors.extend(records)
        return len(records)


class BrokenStore(FakeStore):
    def list_assignments(self, *args, **kwargs):
        raise RuntimeError("connection refused")

    def list_seniors(self, active=None):
        raise RuntimeError("connection refused")


@pytest.fixture
def sqlite_db(tmp_path, monkeypatch):
    monkeypatch.setattr(db, "DB_PATH", str(tmp_path / "meals-test.db"))
    db.init_db()
    return db


def senior(sid, name=None, active=True, **extra):
    row = {"id": sid, "name": name or f"Senior {sid}", "address": f"{sid} Main St", "active": active}
    row.update(extra)
    return row
