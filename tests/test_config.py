from __future__ import annotations

import pytest

from csv_calendar.config import DEFAULT_SETTINGS, load_settings, validate_setting


def test_load_settings_uses_defaults(monkeypatch) -> None:
    for key in DEFAULT_SETTINGS:
        monkeypatch.delenv(f"CSVCAL_{key.upper()}", raising=False)

    settings = load_settings()

    assert settings.default_duration_min == 60
    assert settings.all_day_literal == "All day"
    assert settings.log_level == "WARNING"


def test_load_settings_reads_environment(monkeypatch) -> None:
    monkeypatch.setenv("CSVCAL_DEFAULT_DURATION_MIN", "30")
    monkeypatch.setenv("CSVCAL_ALL_DAY_LITERAL", "Todo el día")
    monkeypatch.setenv("CSVCAL_LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.default_duration_min == 30
    assert settings.all_day_literal == "Todo el día"
    assert settings.log_level == "DEBUG"


def test_load_settings_ignores_blank_environment(monkeypatch) -> None:
    monkeypatch.setenv("CSVCAL_DEFAULT_DURATION_MIN", "   ")
    assert load_settings().default_duration_min == 60


def test_load_settings_rejects_invalid_environment(monkeypatch) -> None:
    monkeypatch.setenv("CSVCAL_DEFAULT_DURATION_MIN", "-5")
    with pytest.raises(ValueError, match="must be an integer >= 0"):
        load_settings()


@pytest.mark.parametrize(
    ("key", "value", "message"),
    [
        ("timezone", "UTC", "Unknown setting key: timezone"),
        ("default_duration_min", "an hour", "must be an integer."),
        ("all_day_literal", "  ", "must not be empty"),
        ("log_level", "LOUD", "must be one of"),
    ],
)
def test_validate_setting_rejects_bad_values(key: str, value: str, message: str) -> None:
    with pytest.raises(ValueError, match=message):
        validate_setting(key, value)
