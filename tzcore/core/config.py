# tzcore/core/config.py
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Global configuration for the scheduling core.

    Values are loaded from environment variables (or a local `.env` file)
    at runtime. Services receive plain values from here; they never read
    the environment themselves.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    APP_NAME: str = "Timezone Scheduling Core"
    APP_ENV: str = Field("local", description="Environment name: local/dev/stage/prod")
    LOG_LEVEL: str = Field("INFO", description="Root log level for the tzcore loggers.")

    DEFAULT_ZONE: str = Field(
        "UTC",
        description="Zone used when a caller does not supply one (IANA name or abbreviation).",
    )

    DST_WARNING_DAYS: int = Field(
        7,
        ge=0,
        description="How many days ahead an upcoming DST transition is reported.",
    )

    SLOT_GRANULARITY_MINUTES: int = Field(
        30,
        gt=0,
        description="Spacing of the candidate grid used by the meeting time finder.",
    )
    MIN_USABLE_SCORE: int = Field(
        50,
        ge=0,
        le=100,
        description=(
            "Candidates scoring below this total are dropped, unless that would "
            "leave no suggestion at all."
        ),
    )
    MAX_SUGGESTIONS: int = Field(
        10,
        gt=0,
        description="Default number of ranked slots returned by /scheduling/find-slots.",
    )

    WORKING_HOURS_FILE: str | None = Field(
        default=None,
        description="Optional path to a YAML document with a `working_hours` section.",
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Cached accessor for application settings.

    Settings are read and validated only once per process; tests that need
    different values call `get_settings.cache_clear()` after patching the
    environment.
    """
    return Settings()
