"""Configuration settings for xcallure."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Framework and app boilerplate activities that never become steps.
DEFAULT_EXCLUDED_ACTIVITIES = [
    "Set Up",
    "Open ru.aviasales.app",
    "Launch ru.aviasales.app",
    "Wait for accessibility to load",
    "Setting up automation session",
    "Synthesize event",
    "Capturing element debug description",
    "Tear Down",
]

DEFAULT_EXCLUDED_ACTIVITY_PREFIXES = [
    "Terminate ru.aviasales.app",
    "Get all elements",
    "Some attachments were deleted",
    "Some screenshots were deleted ",
    "Added attachment ",
    "Get all elements bound by index for:",
    "Checking `",
    "Wait for ru.aviasales.app",
    "Find the ",
    'Tap "',
    "Check for interrupting",
    "Waiting ",
    'Swipe down "',
    'Press "',
    "Checking existence of ",
]


class Settings(BaseSettings):
    """Exporter settings loaded from ``XCALLURE_*`` environment variables.

    List settings are read as JSON arrays, e.g.
    ``XCALLURE_EXCLUDED_ACTIVITIES='["Set Up", "Tear Down"]'``.
    """

    model_config = SettingsConfigDict(
        env_prefix="XCALLURE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Activity filtering
    excluded_activities: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDED_ACTIVITIES)
    )
    excluded_activity_prefixes: list[str] = Field(
        default_factory=lambda: list(DEFAULT_EXCLUDED_ACTIVITY_PREFIXES)
    )

    # Constant labels
    os_label_name: str = "Os"
    os_label_value: str = "ios"
    key_scenario_label_name: str = "KeyScenarioTest"
    key_scenario_label_value: str = "UI Tests"

    # History id fallback when no "suite" label is supplied
    default_suite: str = "Default"

    # Logging
    log_level: str = "INFO"
    log_json_format: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
