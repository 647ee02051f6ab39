"""Startup configuration read once from the environment (and `.env`)."""
import os
import logging
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, model_validator

logger = logging.getLogger(__name__)


class ConfigError(RuntimeError):
    pass


class Settings(BaseModel):
    db_path: str = "meals.db"
    admin_email: Optional[str] = None
    admin_password: Optional[str] = None
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_pass: Optional[str] = None
    from_email: Optional[str] = None
    import_batch_size: int = Field(10, ge=1)
    reset_token_minutes: int = Field(30, ge=1)
    log_level: str = "INFO"

    @model_validator(mode="after")
    def _check_admin_bootstrap(self):
        if bool(self.admin_email) != bool(self.admin_password):
            raise ValueError("ADMIN_EMAIL and ADMIN_PASSWORD must be set together")
        if self.admin_password and len(self.admin_password) < 8:
            raise ValueError("ADMIN_PASSWORD must be at least 8 characters")
        if self.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"LOG_LEVEL '{self.log_level}' is not a logging level")
        self.log_level = self.log_level.upper()
        return self

    @property
    def smtp_enabled(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_pass)


ENV_VARS = {
    "db_path": "MEALS_DB_PATH",
    "admin_email": "ADMIN_EMAIL",
    "admin_password": "ADMIN_PASSWORD",
    "smtp_host": "SMTP_HOST",
    "smtp_port": "SMTP_PORT",
    "smtp_user": "SMTP_USER",
    "smtp_pass": "SMTP_PASS",
    "from_email": "FROM_EMAIL",
    "import_batch_size": "IMPORT_BATCH_SIZE",
    "reset_token_minutes": "RESET_TOKEN_MINUTES",
    "log_level": "LOG_LEVEL",
}


def load_settings(env=None, dotenv: bool = True) -> Settings:
    """Build and validate `Settings`, failing fast with the offending variables named."""
    if env is None:
        if dotenv:
            load_dotenv()
        env = os.environ
    raw = {field: env[var] for field, var in ENV_VARS.items() if env.get(var) not in (None, "")}
    try:
        settings = Settings(**raw)
    except ValidationError as e:
        problems = []
        for err in e.errors():
            loc = err.get("loc") or ()
            var = ENV_VARS.get(loc[0], loc[0]) if loc else "configuration"
            problems.append(f"- {var}: {err['msg']}")
        raise ConfigError("Invalid configuration:\n" + "\n".join(problems)) from e
    if not settings.smtp_enabled:
        logger.warning("SMTP not configured; password reset and welcome emails are disabled")
    return settings
