"""Delivery logic for the meal delivery app.

Keep the store-facing reconciliation here so `ui.py` stays focused on rendering.
`store` is anything exposing the `db` module's functions; the app passes `db`
itself and the tests pass an in-memory fake.
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)

DELIVERY_STATUSES = ("pending", "delivered", "missed", "no_contact", "family_confirmed")
COMPLETED_STATUSES = frozenset({"delivered", "family_confirmed"})
ADMIN_ROLES = frozenset({"admin", "super_admin"})


@dataclass(frozen=True)
class DeliveryStatus:
    is_delivered: bool = False
    status: str = "pending"
    notes: str = ""


PENDING = DeliveryStatus()


@dataclass(frozen=True)
class CurrentUser:
    id: int
    email: str
    name: str
    role: str = "volunteer"

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES


def is_completed(status: Optional[str]) -> bool:
    return status in COMPLETED_STATUSES


def resolve_seniors(store, volunteer_id: int, is_admin: bool) -> List[Dict]:
    """Return the seniors the caller may act on.

    Admins see every active senior. Volunteers see the active seniors behind
    their own active assignments. Store failures are logged and yield [].
    """
    try:
        if is_admin:
            return store.list_seniors(active=True)
        assignments = store.list_assignments()
        senior_ids = {
            a["senior_id"] for a in assignments
            if a["volunteer_id"] == volunteer_id and a["status"] == "active"
        }
        if not senior_ids:
            logger.info(f"No active assignments for volunteer {volunteer_id}")
            return []
        return [s for s in store.list_seniors(active=True) if s["id"] in senior_ids]
    except Exception:
        logger.exception(f"Could not resolve seniors for volunteer {volunteer_id}")
        return []


def unassigned_seniors(store) -> List[Dict]:
    """Active seniors without an active assignment."""
    seniors = store.list_seniors(active=True)
    try:
        assignments = store.list_assignments(status="active")
    except Exception:
        logger.exception("Could not load assignments; treating every senior as unassigned")
        return seniors
    assigned = {a["senior_id"] for a in assignments}
    return [s for s in seniors if s["id"] not in assigned]


def aggregate_delivery_status(seniors: Iterable[Dict], deliveries: Iterable[Dict]) -> Dict[Any, DeliveryStatus]:
    """Merge delivery rows into a per-senior status map.

    Every senior appears exactly once. Deliveries for seniors outside `seniors`
    are dropped; when a senior has several rows the latest delivery_date wins.
    """
    senior_ids = [s["id"] for s in seniors]
    allowed = set(senior_ids)
    result: Dict[Any, DeliveryStatus] = {}
    for d in sorted(deliveries, key=lambda d: d.get("delivery_date") or ""):
        sid = d.get("senior_id")
        if sid is None or sid not in allowed:
            continue
        status = d.get("status") or "pending"
        result[sid] = DeliveryStatus(is_delivered=is_completed(status), status=status, notes=d.get("notes") or "")
    for sid in senior_ids:
        result.setdefault(sid, PENDING)
    return result


def filter_seniors(seniors: Iterable[Dict], search: str = "", status_filter: str = "all",
                   statuses: Optional[Dict[Any, DeliveryStatus]] = None) -> List[Dict]:
    """List-view predicate: name/address search plus all|completed|pending."""
    term = (search or "").strip().lower()
    statuses = statuses or {}
    out = []
    for s in seniors:
        if term and term not in (s.get("name") or "").lower() and term not in (s.get("address") or "").lower():
            continue
        delivered = statuses.get(s["id"], PENDING).is_delivered
        if status_filter == "completed" and not delivered:
            continue
        if status_filter == "pending" and delivered:
            continue
        out.append(s)
    return out


def search_records(records: Iterable[Dict], search: str, fields: Tuple[str, ...]) -> List[Dict]:
    """Case-insensitive substring search across the given fields."""
    term = (search or "").strip().lower()
    if not term:
        return list(records)
    return [r for r in records if any(term in str(r.get(f) or "").lower() for f in fields)]


class DeliveryTracker:
    """Per-session view of the seniors a user delivers to and today's status.

    State is rebuilt wholesale by `refresh()`; every mutation refreshes once.
    """

    def __init__(self, store, user: CurrentUser, today: Callable[[], date] = date.today):
        self.store = store
        self.user = user
        self._today = today
        self.seniors: List[Dict] = []
        self.deliveries: List[Dict] = []
        self.statuses: Dict[Any, DeliveryStatus] = {}

    @property
    def today(self) -> str:
        return self._today().isoformat()

    def refresh(self) -> None:
        seniors = resolve_seniors(self.store, self.user.id, self.user.is_admin)
        try:
            deliveries = self.store.list_deliveries(volunteer_id=self.user.id, delivery_date=self.today)
        except Exception:
            logger.exception(f"Could not load deliveries for volunteer {self.user.id}")
            deliveries = []
        # keep only this user's rows even if the store ignores the filter
        deliveries = [d for d in deliveries if d.get("volunteer_id") == self.user.id]
        self.seniors = seniors
        self.deliveries = deliveries
        self.statuses = aggregate_delivery_status(seniors, deliveries)
        logger.debug(f"Refreshed tracker for {self.user.id}: {len(seniors)} seniors, {len(deliveries)} deliveries")

    def status_for(self, senior_id) -> DeliveryStatus:
        return self.statuses.get(senior_id, PENDING)

    def _delivery_for(self, senior_id) -> Optional[Dict]:
        # one row per senior per day, whoever recorded it
        rows = self.store.list_deliveries(senior_id=senior_id, delivery_date=self.today)
        return rows[0] if rows else None

    def _write_status(self, senior_id, status: str, notes: Optional[str] = None) -> None:
        existing = self._delivery_for(senior_id)
        if existing:
            updates = {"status": status}
            if notes is not None:
                updates["notes"] = notes
            if existing.get("volunteer_id") != self.user.id:
                logger.info(f"Volunteer {self.user.id} takes over delivery {existing['id']} "
                            f"from volunteer {existing.get('volunteer_id')}")
                updates["volunteer_id"] = self.user.id
            self.store.update_delivery(existing["id"], updates)
        else:
            self.store.create_delivery(senior_id, self.user.id, self.today, status=status, notes=notes)
        logger.info(f"Delivery for senior {senior_id} on {self.today} set to {status} by {self.user.id}")

    def set_status(self, senior_id, status: str, notes: Optional[str] = None) -> DeliveryStatus:
        if status not in DELIVERY_STATUSES:
            raise ValueError(f"Unknown delivery status '{status}'")
        if senior_id not in self.statuses:
            raise KeyError(f"Senior {senior_id} is not on this checklist")
        self._write_status(senior_id, status, notes)
        self.refresh()
        return self.status_for(senior_id)

    def toggle(self, senior_id, checked: bool) -> DeliveryStatus:
        return self.set_status(senior_id, "delivered" if checked else "pending")

    def complete_all(self) -> int:
        changed = 0
        try:
            for s in self.seniors:
                if self.status_for(s["id"]).status != "delivered":
                    self._write_status(s["id"], "delivered")
                    changed += 1
        finally:
            # earlier writes stay committed when one fails
            self.refresh()
        return changed

    def progress(self) -> Tuple[int, int, float]:
        total = len(self.seniors)
        completed = sum(1 for s in self.seniors if self.status_for(s["id"]).is_delivered)
        pct = (completed / total) * 100 if total else 0.0
        return completed, total, pct
