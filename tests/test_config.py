import pytest

from mealdelivery.config import ConfigError, load_settings


def test_defaults_from_empty_environment():
    settings = load_settings(env={})
    assert settings.db_path == "meals.db"
    assert settings.import_batch_size == 10
    assert settings.smtp_port == 587
    assert settings.log_level == "INFO"
    assert not settings.smtp_enabled


def test_values_are_read_and_coerced():
    settings = load_settings(env={
        "MEALS_DB_PATH": "/tmp/x.db",
        "IMPORT_BATCH_SIZE": "25",
        "SMTP_HOST": "smtp.pantry.org",
        "SMTP_USER": "mailer",
        "SMTP_PASS": "pw",
        "LOG_LEVEL": "debug",
        "ADMIN_EMAIL": "",
    })
    assert settings.db_path == "/tmp/x.db"
    assert settings.import_batch_size == 25
    assert settings.smtp_enabled
    assert settings.log_level == "DEBUG"
    assert settings.admin_email is None


def test_invalid_batch_size_names_the_variable():
    with pytest.raises(ConfigError, match="IMPORT_BATCH_SIZE"):
        load_settings(env={"IMPORT_BATCH_SIZE": "0"})


def test_non_numeric_port_fails_fast():
    with pytest.raises(ConfigError, match="SMTP_PORT"):
        load_settings(env={"SMTP_PORT": "smtp"})


def test_admin_email_requires_password():
    with pytest.raises(ConfigError, match="ADMIN_PASSWORD"):
        load_settings(env={"ADMIN_EMAIL": "boss@pantry.org"})


def test_short_admin_password_rejected():
    with pytest.raises(ConfigError, match="at least 8"):
        load_settings(env={"ADMIN_EMAIL": "boss@pantry.org", "ADMIN_PASSWORD": "short"})
