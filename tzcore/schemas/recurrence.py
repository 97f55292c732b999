# tzcore/schemas/recurrence.py
from __future__ import annotations

from datetime import date, datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field, field_validator


class OccurrenceException(BaseModel):
    """
    Per-occurrence override of a recurring series.

    A deleted occurrence stays recorded (EXDATE semantics) so that every
    later expansion of the rule keeps skipping it.
    """

    model_config = ConfigDict(frozen=True)

    series_id: str = Field(..., examples=["series-standup"])
    occurrence_date: date = Field(..., examples=["2025-03-12"])
    start: datetime | None = Field(None, description="Replacement start, if moved.")
    end: datetime | None = Field(None, description="Replacement end, if resized or moved.")
    title: str | None = Field(None, description="Replacement title.")
    deleted: bool = Field(False)


class RecurringSeries(BaseModel):
    """
    Master definition of a recurring event plus its exceptions.

    `rule` is an RFC 5545 RRULE (with or without the `RRULE:` prefix); it
    is expanded on the wall-clock time of `start`, in `start`'s zone.
    """

    model_config = ConfigDict(frozen=True)

    series_id: str = Field(..., examples=["series-standup"])
    title: str = Field("", examples=["Daily standup"])
    rule: str = Field(..., examples=["FREQ=WEEKLY;BYDAY=MO,WE,FR"])
    start: datetime = Field(
        ...,
        description="First occurrence; must be timezone-aware.",
        examples=["2025-03-03T09:30:00-05:00"],
    )
    duration: timedelta = Field(..., examples=["PT15M"])
    exceptions: dict[date, OccurrenceException] = Field(default_factory=dict)

    @field_validator("start")
    @classmethod
    def _start_must_be_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            raise ValueError("series start must be timezone-aware")
        return value

    @property
    def excluded_dates(self) -> frozenset[date]:
        return frozenset(d for d, exc in self.exceptions.items() if exc.deleted)


class RecurringInstance(BaseModel):
    """
    One materialized occurrence of a series.
    """

    model_config = ConfigDict(frozen=True)

    series_id: str
    occurrence_date: date
    start: datetime
    end: datetime
    title: str
    is_exception: bool = False
