"""Email/password accounts for volunteers and admins."""
import logging
import secrets
import sqlite3
from datetime import datetime, timedelta, timezone
from typing import Optional

from werkzeug.security import check_password_hash, generate_password_hash

from utils import VolunteerIn, send_password_reset_email, send_welcome_email
from mealdelivery.services import CurrentUser

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


class AuthError(Exception):
    pass


def hash_password(password: str) -> str:
    return generate_password_hash(password)


def verify_password(password: str, stored: Optional[str]) -> bool:
    if not stored:
        return False
    return check_password_hash(stored, password)


def _check_password(password: str) -> None:
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise AuthError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


class AuthService:
    def __init__(self, store, settings, now=lambda: datetime.now(timezone.utc)):
        self.store = store
        self.settings = settings
        self._now = now

    def _current_user(self, row) -> CurrentUser:
        # an active admins row overrides the volunteer role
        admin = self.store.get_admin_by_email(row["email"])
        role = admin["role"] if admin else (row.get("role") or "volunteer")
        return CurrentUser(id=row["id"], email=row["email"], name=row["name"], role=role)

    def sign_up(self, volunteer: VolunteerIn, password: str) -> CurrentUser:
        _check_password(password)
        data = volunteer.model_dump()
        # self sign-up never grants elevated roles
        data["role"] = "volunteer"
        try:
            vid = self.store.create_volunteer(data, password_hash=hash_password(password))
        except sqlite3.IntegrityError as e:
            raise AuthError(f"An account already exists for {volunteer.email}") from e
        logger.info(f"Volunteer {vid} signed up as {volunteer.email}")
        send_welcome_email(self.settings, volunteer.email, volunteer.name)
        return CurrentUser(id=vid, email=volunteer.email, name=volunteer.name, role="volunteer")

    def sign_in(self, email: str, password: str) -> CurrentUser:
        row = self.store.get_volunteer_credentials((email or "").strip())
        if not row or not verify_password(password, row.get("password_hash")):
            logger.warning(f"Failed sign-in for {email}")
            raise AuthError("Invalid email or password")
        if not row.get("active"):
            raise AuthError("This account has been deactivated")
        user = self._current_user(row)
        if user.is_admin:
            self.store.touch_admin_login(user.email)
        logger.info(f"{user.email} signed in as {user.role}")
        return user

    def reload(self, user: CurrentUser) -> Optional[CurrentUser]:
        """Re-read the session user so role or deactivation changes apply on the next render."""
        row = self.store.get_volunteer_credentials(user.email)
        if not row or not row.get("active"):
            return None
        return self._current_user(row)

    def change_password(self, user: CurrentUser, current: str, new: str) -> None:
        row = self.store.get_volunteer_credentials(user.email)
        if not row or not verify_password(current, row.get("password_hash")):
            raise AuthError("Current password is incorrect")
        _check_password(new)
        self.store.set_volunteer_password(row["id"], hash_password(new))
        logger.info(f"Password changed for {user.email}")

    def request_password_reset(self, email: str) -> bool:
        """Email a reset code. Unknown addresses are indistinguishable from known ones."""
        row = self.store.get_volunteer_credentials((email or "").strip())
        if not row or not row.get("active"):
            logger.info(f"Password reset requested for unknown address {email}")
            return True
        token = secrets.token_urlsafe(16)
        expires = self._now() + timedelta(minutes=self.settings.reset_token_minutes)
        self.store.set_reset_token(row["id"], token, expires.isoformat())
        return send_password_reset_email(self.settings, row["email"], row["name"], token)

    def reset_password(self, token: str, new_password: str) -> None:
        row = self.store.get_volunteer_by_reset_token((token or "").strip())
        if not row or not row.get("reset_expires"):
            raise AuthError("Reset code is invalid")
        if datetime.fromisoformat(row["reset_expires"]) < self._now():
            raise AuthError("Reset code has expired")
        _check_password(new_password)
        self.store.set_volunteer_password(row["id"], hash_password(new_password))
        logger.info(f"Password reset completed for {row['email']}")

    def ensure_bootstrap_admin(self) -> Optional[int]:
        """Create or promote the ADMIN_EMAIL account configured at startup."""
        email, password = self.settings.admin_email, self.settings.admin_password
        if not email:
            return None
        row = self.store.get_volunteer_credentials(email)
        if row:
            vid = row["id"]
            if not verify_password(password, row.get("password_hash")):
                self.store.set_volunteer_password(vid, hash_password(password))
            self.store.update_volunteer(vid, {"role": "super_admin", "active": True})
            name = row["name"]
        else:
            name = "Administrator"
            vid = self.store.create_volunteer(
                {"email": email, "name": name, "role": "super_admin", "active": True},
                password_hash=hash_password(password),
            )
        self.store.upsert_admin(email, name, role="super_admin")
        logger.info(f"Bootstrap admin {email} ready")
        return vid
