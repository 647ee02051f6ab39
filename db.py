import sqlite3
import json
from typing import List, Dict, Optional, Any
from datetime import datetime, timezone

DB_PATH = "meals.db"

CREATE_SENIORS_SQL = """
CREATE TABLE IF NOT EXISTS seniors (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    age INTEGER,
    household_type TEXT NOT NULL DEFAULT 'single',
    family_adults INTEGER DEFAULT 1,
    family_children INTEGER DEFAULT 0,
    race_ethnicity TEXT,
    health_conditions TEXT,
    address TEXT NOT NULL,
    building TEXT,
    unit_apt TEXT,
    zip_code TEXT,
    dietary_restrictions TEXT,
    accessibility_needs TEXT,
    phone TEXT,
    emergency_contact TEXT,
    has_smartphone INTEGER DEFAULT 0,
    preferred_language TEXT DEFAULT 'english',
    needs_translation INTEGER DEFAULT 0,
    delivery_method TEXT DEFAULT 'doorstep',
    special_instructions TEXT,
    active INTEGER DEFAULT 1,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""

CREATE_VOLUNTEERS_SQL = """
CREATE TABLE IF NOT EXISTS volunteers (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    email TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL,
    phone TEXT,
    address TEXT,
    role TEXT NOT NULL DEFAULT 'volunteer',
    languages TEXT,
    availability TEXT,
    vehicle_type TEXT DEFAULT 'none',
    vehicle_capacity INTEGER DEFAULT 0,
    experience_level TEXT DEFAULT 'beginner',
    special_skills TEXT,
    emergency_contact TEXT,
    notes TEXT,
    active INTEGER DEFAULT 1,
    password_hash TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""

CREATE_ADMINS_SQL = """
CREATE TABLE IF NOT EXISTS admins (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    email TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL,
    phone TEXT,
    role TEXT NOT NULL DEFAULT 'admin',
    active INTEGER DEFAULT 1,
    last_login TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
"""

CREATE_ASSIGNMENTS_SQL = """
CREATE TABLE IF NOT EXISTS senior_assignments (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    senior_id INTEGER NOT NULL,
    volunteer_id INTEGER NOT NULL,
    assigned_by INTEGER,
    assignment_date TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'active',
    notes TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    FOREIGN KEY(senior_id) REFERENCES seniors(id),
    FOREIGN KEY(volunteer_id) REFERENCES volunteers(id)
);
"""

CREATE_DELIVERIES_SQL = """
CREATE TABLE IF NOT EXISTS deliveries (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    senior_id INTEGER NOT NULL,
    volunteer_id INTEGER NOT NULL,
    delivery_date TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'pending',
    delivery_method TEXT,
    notes TEXT,
    language_barrier_encountered INTEGER DEFAULT 0,
    translation_needed INTEGER DEFAULT 0,
    created_at TEXT NOT NULL,
    completed_at TEXT,
    FOREIGN KEY(senior_id) REFERENCES seniors(id),
    FOREIGN KEY(volunteer_id) REFERENCES volunteers(id)
);
"""

# at most one active assignment per senior, one delivery per senior per day
CREATE_INDEXES_SQL = [
    "CREATE UNIQUE INDEX IF NOT EXISTS ux_assignment_active_senior ON senior_assignments(senior_id) WHERE status = 'active'",
    "CREATE UNIQUE INDEX IF NOT EXISTS ux_delivery_senior_date ON deliveries(senior_id, delivery_date)",
    "CREATE INDEX IF NOT EXISTS ix_delivery_volunteer_date ON deliveries(volunteer_id, delivery_date)",
]

SENIOR_FIELDS = [
    "name", "age", "household_type", "family_adults", "family_children", "race_ethnicity",
    "health_conditions", "address", "building", "unit_apt", "zip_code", "dietary_restrictions",
    "accessibility_needs", "phone", "emergency_contact", "has_smartphone", "preferred_language",
    "needs_translation", "delivery_method", "special_instructions", "active",
]
SENIOR_BOOL_FIELDS = ("has_smartphone", "needs_translation", "active")
SENIOR_DEFAULTS = {
    "household_type": "single", "family_adults": 1, "family_children": 0,
    "preferred_language": "english", "delivery_method": "doorstep",
}

VOLUNTEER_FIELDS = [
    "email", "name", "phone", "address", "role", "languages", "availability", "vehicle_type",
    "vehicle_capacity", "experience_level", "special_skills", "emergency_contact", "notes", "active",
]
VOLUNTEER_LIST_FIELDS = ("languages", "availability")
VOLUNTEER_DEFAULTS = {"role": "volunteer", "vehicle_type": "none", "vehicle_capacity": 0, "experience_level": "beginner"}

ASSIGNMENT_FIELDS = ["senior_id", "volunteer_id", "assigned_by", "assignment_date", "status", "notes"]
DELIVERY_FIELDS = [
    "volunteer_id", "status", "delivery_method", "notes", "language_barrier_encountered", "translation_needed", "completed_at",
]
DELIVERY_BOOL_FIELDS = ("language_barrier_encountered", "translation_needed")


def configure(path: str) -> None:
    global DB_PATH
    DB_PATH = path


def get_conn():
    conn = sqlite3.connect(DB_PATH)
    conn.row_factory = sqlite3.Row
    return conn


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _ensure_columns():
    # Add columns introduced after the first release (safe to run repeatedly)
    conn = get_conn()
    cur = conn.cursor()
    cur.execute("PRAGMA table_info(volunteers)")
    cols = [r[1] for r in cur.fetchall()]
    if 'reset_token' not in cols:
        cur.execute("ALTER TABLE volunteers ADD COLUMN reset_token TEXT")
    if 'reset_expires' not in cols:
        cur.execute("ALTER TABLE volunteers ADD COLUMN reset_expires TEXT")
    conn.commit()
    conn.close()


def init_db():
    conn = get_conn()
    cur = conn.cursor()
    cur.execute(CREATE_SENIORS_SQL)
    cur.execute(CREATE_VOLUNTEERS_SQL)
    cur.execute(CREATE_ADMINS_SQL)
    cur.execute(CREATE_ASSIGNMENTS_SQL)
    cur.execute(CREATE_DELIVERIES_SQL)
    for stmt in CREATE_INDEXES_SQL:
        cur.execute(stmt)
    conn.commit()
    conn.close()
    _ensure_columns()


def _bool_fields(row: Dict[str, Any], fields) -> Dict[str, Any]:
    for f in fields:
        if f in row and row[f] is not None:
            row[f] = bool(row[f])
    return row


def _senior_row(r) -> Dict[str, Any]:
    return _bool_fields(dict(r), SENIOR_BOOL_FIELDS)


def _volunteer_row(r) -> Dict[str, Any]:
    row = dict(r)
    for f in VOLUNTEER_LIST_FIELDS:
        try:
            row[f] = json.loads(row[f]) if row.get(f) else []
        except (TypeError, ValueError):
            row[f] = []
    # credentials never leave the store through the listing functions
    row.pop("password_hash", None)
    row.pop("reset_token", None)
    row.pop("reset_expires", None)
    if row.get("active") is not None:
        row["active"] = bool(row["active"])
    return row


def _delivery_row(r) -> Dict[str, Any]:
    return _bool_fields(dict(r), DELIVERY_BOOL_FIELDS)


def _senior_values(data: Dict[str, Any]) -> List[Any]:
    values = []
    for f in SENIOR_FIELDS:
        v = data.get(f)
        if v is None:
            v = SENIOR_DEFAULTS.get(f)
        if f in SENIOR_BOOL_FIELDS:
            v = int(bool(v)) if v is not None else (1 if f == "active" else 0)
        values.append(v)
    return values


def _update(table: str, row_id: int, updates: Dict[str, Any], allowed, touch: bool = True) -> bool:
    cols = [k for k in updates if k in allowed]
    if not cols:
        return False
    values = []
    for k in cols:
        v = updates[k]
        if isinstance(v, bool):
            v = int(v)
        elif isinstance(v, (list, tuple)):
            v = json.dumps(list(v))
        values.append(v)
    assignments = ", ".join(f"{c} = ?" for c in cols)
    if touch:
        assignments += ", updated_at = ?"
        values.append(_now())
    values.append(row_id)
    conn = get_conn()
    try:
        cur = conn.cursor()
        cur.execute(f"UPDATE {table} SET {assignments} WHERE id = ?", tuple(values))
        conn.commit()
        changed = cur.rowcount
    finally:
        conn.close()
    return changed > 0


# ---------------------------------------------------------------------------
# seniors
# ---------------------------------------------------------------------------

def list_seniors(active: Optional[bool] = None) -> List[Dict[str, Any]]:
    conn = get_conn()
    cur = conn.cursor()
    if active is None:
        cur.execute("SELECT * FROM seniors ORDER BY name")
    else:
        cur.execute("SELECT * FROM seniors WHERE active = ? ORDER BY name", (int(active),))
    rows = cur.fetchall()
    conn.close()
    return [_senior_row(r) for r in rows]


def get_senior(senior_id: int) -> Optional[Dict[str, Any]]:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute("SELECT * FROM seniors WHERE id = ?", (senior_id,))
    r = cur.fetchone()
    conn.close()
    return _senior_row(r) if r else None


def create_senior(data: Dict[str, Any]) -> int:
    conn = get_conn()
    now = _now()
    cols = ", ".join(SENIOR_FIELDS + ["created_at", "updated_at"])
    marks = ", ".join("?" for _ in range(len(SENIOR_FIELDS) + 2))
    try:
        cur = conn.cursor()
        cur.execute(f"INSERT INTO seniors ({cols}) VALUES ({marks})", tuple(_senior_values(data) + [now, now]))
        conn.commit()
        sid = cur.lastrowid
    finally:
        conn.close()
    return sid


def bulk_create_seniors(records: List[Dict[str, Any]]) -> int:
    """Insert all records in one transaction; nothing is written if any row fails."""
    conn = get_conn()
    now = _now()
    cols = ", ".join(SENIOR_FIELDS + ["created_at", "updated_at"])
    marks = ", ".join("?" for _ in range(len(SENIOR_FIELDS) + 2))
    try:
        with conn:
            conn.executemany(
                f"INSERT INTO seniors ({cols}) VALUES ({marks})",
                [tuple(_senior_values(rec) + [now, now]) for rec in records],
            )
    finally:
        conn.close()
    return len(records)


def update_senior(senior_id: int, updates: Dict[str, Any]) -> bool:
    return _update("seniors", senior_id, updates, SENIOR_FIELDS)


def deactivate_senior(senior_id: int) -> bool:
    return update_senior(senior_id, {"active": False})


def delete_senior(senior_id: int) -> bool:
    conn = get_conn()
    cur = conn.cursor()
    # remove assignments and deliveries for this senior first
    cur.execute("DELETE FROM senior_assignments WHERE senior_id = ?", (senior_id,))
    cur.execute("DELETE FROM deliveries WHERE senior_id = ?", (senior_id,))
    cur.execute("DELETE FROM seniors WHERE id = ?", (senior_id,))
    conn.commit()
    changed = cur.rowcount
    conn.close()
    return changed > 0


# ---------------------------------------------------------------------------
# volunteers
# ---------------------------------------------------------------------------

def create_volunteer(data: Dict[str, Any], password_hash: Optional[str] = None) -> int:
    conn = get_conn()
    cur = conn.cursor()
    now = _now()
    values = []
    for f in VOLUNTEER_FIELDS:
        v = data.get(f)
        if v is None:
            v = VOLUNTEER_DEFAULTS.get(f)
        if f in VOLUNTEER_LIST_FIELDS:
            v = json.dumps(list(v)) if v else None
        elif f == "active":
            v = int(bool(v)) if v is not None else 1
        values.append(v)
    cols = ", ".join(VOLUNTEER_FIELDS + ["password_hash", "created_at", "updated_at"])
    marks = ", ".join("?" for _ in range(len(VOLUNTEER_FIELDS) + 3))
    try:
        cur.execute(f"INSERT INTO volunteers ({cols}) VALUES ({marks})", tuple(values + [password_hash, now, now]))
        conn.commit()
        vid = cur.lastrowid
    finally:
        conn.close()
    return vid


def list_volunteers(active: Optional[bool] = None) -> List[Dict[str, Any]]:
    conn = get_conn()
    cur = conn.cursor()
    if active is None:
        cur.execute("SELECT * FROM volunteers ORDER BY name")
    else:
        cur.execute("SELECT * FROM volunteers WHERE active = ? ORDER BY name", (int(active),))
    rows = cur.fetchall()
    conn.close()
    return [_volunteer_row(r) for r in rows]


def get_volunteer(volunteer_id: int) -> Optional[Dict[str, Any]]:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute("SELECT * FROM volunteers WHERE id = ?", (volunteer_id,))
    r = cur.fetchone()
    conn.close()
    return _volunteer_row(r) if r else None


def get_volunteer_credentials(email: str) -> Optional[Dict[str, Any]]:
    """Full volunteer row including password hash and reset token."""
    conn = get_conn()
    cur = conn.cursor()
    cur.execute("SELECT * FROM volunteers WHERE lower(email) = lower(?)", (email,))
    r = cur.fetchone()
    conn.close()
    return dict(r) if r else None


def get_volunteer_by_reset_token(token: str) -> Optional[Dict[str, Any]]:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute("SELECT * FROM volunteers WHERE reset_token = ?", (token,))
    r = cur.fetchone()
    conn.close()
    return dict(r) if r else None


def update_volunteer(volunteer_id: int, updates: Dict[str, Any]) -> bool:
    return _update("volunteers", volunteer_id, updates, VOLUNTEER_FIELDS)


def set_volunteer_password(volunteer_id: int, password_hash: str) -> bool:
    return _update("volunteers", volunteer_id,
                   {"password_hash": password_hash, "reset_token": None, "reset_expires": None},
                   ("password_hash", "reset_token", "reset_expires"))


def set_reset_token(volunteer_id: int, token: str, expires: str) -> bool:
    return _update("volunteers", volunteer_id, {"reset_token": token, "reset_expires": expires},
                   ("reset_token", "reset_expires"))


def deactivate_volunteer(volunteer_id: int) -> bool:
    return update_volunteer(volunteer_id, {"active": False})


def delete_volunteer(volunteer_id: int) -> bool:
    conn = get_conn()
    cur = conn.cursor()
    # remove any assignments for this volunteer; delivery history is kept
    cur.execute("DELETE FROM senior_assignments WHERE volunteer_id = ?", (volunteer_id,))
    cur.execute("DELETE FROM volunteers WHERE id = ?", (volunteer_id,))
    conn.commit()
    changed = cur.rowcount
    conn.close()
    return changed > 0


# ---------------------------------------------------------------------------
# admins
# ---------------------------------------------------------------------------

def get_admin_by_email(email: str, active_only: bool = True) -> Optional[Dict[str, Any]]:
    conn = get_conn()
    cur = conn.cursor()
    q = "SELECT * FROM admins WHERE lower(email) = lower(?)"
    if active_only:
        q += " AND active = 1"
    cur.execute(q, (email,))
    r = cur.fetchone()
    conn.close()
    return _bool_fields(dict(r), ("active",)) if r else None


def upsert_admin(email: str, name: str, role: str = "admin", phone: Optional[str] = None) -> int:
    conn = get_conn()
    now = _now()
    try:
        cur = conn.cursor()
        cur.execute(
            "INSERT INTO admins (email, name, phone, role, active, created_at, updated_at) VALUES (?, ?, ?, ?, 1, ?, ?) "
            "ON CONFLICT(email) DO UPDATE SET name = excluded.name, role = excluded.role, active = 1, updated_at = excluded.updated_at",
            (email, name, phone, role, now, now),
        )
        conn.commit()
        cur.execute("SELECT id FROM admins WHERE email = ?", (email,))
        aid = cur.fetchone()["id"]
    finally:
        conn.close()
    return aid


def deactivate_admin(email: str) -> bool:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute("UPDATE admins SET active = 0, updated_at = ? WHERE lower(email) = lower(?)", (_now(), email))
    conn.commit()
    changed = cur.rowcount
    conn.close()
    return changed > 0


def touch_admin_login(email: str) -> None:
    conn = get_conn()
    conn.execute("UPDATE admins SET last_login = ? WHERE lower(email) = lower(?)", (_now(), email))
    conn.commit()
    conn.close()


# ---------------------------------------------------------------------------
# senior assignments
# ---------------------------------------------------------------------------

ASSIGNMENT_SELECT = (
    "SELECT a.*, s.name AS senior_name, s.address AS senior_address, s.building AS senior_building, "
    "s.unit_apt AS senior_unit, v.name AS volunteer_name, v.email AS volunteer_email "
    "FROM senior_assignments a "
    "LEFT JOIN seniors s ON a.senior_id = s.id "
    "LEFT JOIN volunteers v ON a.volunteer_id = v.id WHERE 1=1"
)


def list_assignments(volunteer_id: Optional[int] = None, senior_id: Optional[int] = None,
                     status: Optional[str] = None) -> List[Dict[str, Any]]:
    conn = get_conn()
    cur = conn.cursor()
    q = ASSIGNMENT_SELECT
    params: List[Any] = []
    if volunteer_id is not None:
        q += " AND a.volunteer_id = ?"
        params.append(volunteer_id)
    if senior_id is not None:
        q += " AND a.senior_id = ?"
        params.append(senior_id)
    if status:
        q += " AND a.status = ?"
        params.append(status)
    q += " ORDER BY a.created_at DESC, a.id DESC"
    cur.execute(q, tuple(params))
    rows = cur.fetchall()
    conn.close()
    return [dict(r) for r in rows]


def create_assignment(senior_id: int, volunteer_id: int, assignment_date: str, assigned_by: Optional[int],
                      status: str = "active", notes: Optional[str] = None) -> int:
    conn = get_conn()
    cur = conn.cursor()
    now = _now()
    try:
        cur.execute(
            "INSERT INTO senior_assignments (senior_id, volunteer_id, assigned_by, assignment_date, status, notes, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (senior_id, volunteer_id, assigned_by, assignment_date, status, notes, now, now),
        )
        conn.commit()
        aid = cur.lastrowid
    finally:
        conn.close()
    return aid


def bulk_assign_seniors(senior_ids: List[int], volunteer_id: int, assignment_date: str,
                        assigned_by: Optional[int]) -> int:
    conn = get_conn()
    now = _now()
    try:
        with conn:
            conn.executemany(
                "INSERT INTO senior_assignments (senior_id, volunteer_id, assigned_by, assignment_date, status, created_at, updated_at) VALUES (?, ?, ?, ?, 'active', ?, ?)",
                [(sid, volunteer_id, assigned_by, assignment_date, now, now) for sid in senior_ids],
            )
    finally:
        conn.close()
    return len(senior_ids)


def update_assignment(assignment_id: int, updates: Dict[str, Any]) -> bool:
    return _update("senior_assignments", assignment_id, updates, ASSIGNMENT_FIELDS)


def delete_assignment(assignment_id: int) -> bool:
    conn = get_conn()
    cur = conn.cursor()
    cur.execute("DELETE FROM senior_assignments WHERE id = ?", (assignment_id,))
    conn.commit()
    changed = cur.rowcount
    conn.close()
    return changed > 0


# ---------------------------------------------------------------------------
# deliveries
# ---------------------------------------------------------------------------

DELIVERY_SELECT = (
    "SELECT d.*, s.name AS senior_name, s.address AS senior_address, v.name AS volunteer_name "
    "FROM deliveries d "
    "LEFT JOIN seniors s ON d.senior_id = s.id "
    "LEFT JOIN volunteers v ON d.volunteer_id = v.id WHERE 1=1"
)


def list_deliveries(volunteer_id: Optional[int] = None, delivery_date: Optional[str] = None,
                    start_date: Optional[str] = None, end_date: Optional[str] = None,
                    senior_id: Optional[int] = None) -> List[Dict[str, Any]]:
    conn = get_conn()
    cur = conn.cursor()
    q = DELIVERY_SELECT
    params: List[Any] = []
    if volunteer_id is not None:
        q += " AND d.volunteer_id = ?"
        params.append(volunteer_id)
    if senior_id is not None:
        q += " AND d.senior_id = ?"
        params.append(senior_id)
    if delivery_date:
        q += " AND d.delivery_date = ?"
        params.append(delivery_date)
    if start_date:
        q += " AND d.delivery_date >= ?"
        params.append(start_date)
    if end_date:
        q += " AND d.delivery_date <= ?"
        params.append(end_date)
    q += " ORDER BY d.delivery_date DESC, d.id"
    cur.execute(q, tuple(params))
    rows = cur.fetchall()
    conn.close()
    return [_delivery_row(r) for r in rows]


def create_delivery(senior_id: int, volunteer_id: int, delivery_date: str, status: str = "pending",
                    notes: Optional[str] = None, delivery_method: Optional[str] = None) -> int:
    conn = get_conn()
    now = _now()
    completed_at = now if status in ("delivered", "family_confirmed") else None
    try:
        cur = conn.cursor()
        cur.execute(
            "INSERT INTO deliveries (senior_id, volunteer_id, delivery_date, status, delivery_method, notes, created_at, completed_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (senior_id, volunteer_id, delivery_date, status, delivery_method, notes or "", now, completed_at),
        )
        conn.commit()
        did = cur.lastrowid
    finally:
        conn.close()
    return did


def update_delivery(delivery_id: int, updates: Dict[str, Any]) -> bool:
    updates = dict(updates)
    if "status" in updates and "completed_at" not in updates:
        updates["completed_at"] = _now() if updates["status"] in ("delivered", "family_confirmed") else None
    return _update("deliveries", delivery_id, updates, DELIVERY_FIELDS, touch=False)
