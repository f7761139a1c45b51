from __future__ import annotations

from dataclasses import dataclass
import logging
import os

DEFAULT_SETTINGS: dict[str, str] = {
    "default_duration_min": "60",
    "all_day_literal": "All day",
    "log_level": "WARNING",
}
ENV_PREFIX = "CSVCAL_"

_LOG_LEVELS: set[str] = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


@dataclass(frozen=True)
class Settings:
    default_duration_min: int
    all_day_literal: str
    log_level: str

    def as_items(self) -> list[tuple[str, str]]:
        return [
            ("all_day_literal", self.all_day_literal),
            ("default_duration_min", str(self.default_duration_min)),
            ("log_level", self.log_level),
        ]


def validate_setting(key: str, value: str) -> None:
    if key not in DEFAULT_SETTINGS:
        allowed = ", ".join(sorted(DEFAULT_SETTINGS))
        raise ValueError(f"Unknown setting key: {key}. Allowed keys: {allowed}.")

    if key == "default_duration_min":
        try:
            parsed = int(value)
        except ValueError as exc:
            raise ValueError(f"Invalid value for {key}: must be an integer.") from exc
        if parsed < 0:
            raise ValueError(f"Invalid value for {key}: must be an integer >= 0.")
        return

    if key == "all_day_literal":
        if not value.strip():
            raise ValueError(f"Invalid value for {key}: must not be empty.")
        return

    if key == "log_level":
        if value.strip().upper() not in _LOG_LEVELS:
            allowed = ", ".join(sorted(_LOG_LEVELS))
            raise ValueError(f"Invalid value for {key}: must be one of {allowed}.")
        return


def env_var_name(key: str) -> str:
    return f"{ENV_PREFIX}{key.upper()}"


def load_settings() -> Settings:
    """Build settings from defaults overridden by CSVCAL_* environment variables."""
    values: dict[str, str] = {}
    for key, default in DEFAULT_SETTINGS.items():
        raw = os.getenv(env_var_name(key), "").strip()
        value = raw or default
        validate_setting(key, value)
        values[key] = value

    return Settings(
        default_duration_min=int(values["default_duration_min"]),
        all_day_literal=values["all_day_literal"],
        log_level=values["log_level"].upper(),
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
