# tzcore/schemas/working_hours.py
from __future__ import annotations

from datetime import time
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


WEEKDAY_NAMES: tuple[str, ...] = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


class BreakType(str, Enum):
    LUNCH = "lunch"
    COFFEE = "coffee"
    CUSTOM = "custom"


class BreakBlock(BaseModel):
    """
    A local time interval during which events may not be scheduled.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., examples=["Lunch"])
    start: time = Field(..., description="Inclusive start (HH:MM).", examples=["12:00"])
    end: time = Field(..., description="Exclusive end (HH:MM).", examples=["13:00"])
    type: BreakType = Field(BreakType.CUSTOM, examples=["lunch"])


class DaySchedule(BaseModel):
    """
    Working hours and breaks for one weekday (or the default/weekend buckets).

    `start`/`end` may be missing in a partial configuration; the validator
    then skips the working-hours check rather than failing.
    """

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(True)
    start: time | None = Field(time(9, 0), examples=["09:00"])
    end: time | None = Field(time(17, 0), examples=["17:00"])
    breaks: tuple[BreakBlock, ...] = Field(
        (),
        description="Break blocks in configuration order.",
    )


class WorkingHoursConfig(BaseModel):
    """
    Working-hours policy: a default schedule plus optional per-weekday
    overrides and a `weekend` bucket applied to Saturday and Sunday.
    """

    model_config = ConfigDict(frozen=True)

    default: DaySchedule | None = None
    monday: DaySchedule | None = None
    tuesday: DaySchedule | None = None
    wednesday: DaySchedule | None = None
    thursday: DaySchedule | None = None
    friday: DaySchedule | None = None
    saturday: DaySchedule | None = None
    sunday: DaySchedule | None = None
    weekend: DaySchedule | None = None

    def override_for(self, weekday: str) -> DaySchedule | None:
        return getattr(self, weekday, None)


class ValidationSeverity(str, Enum):
    """
    Outcome of validating an event; ordered ALLOWED < SOFT_WARNING < HARD_REJECT.
    """

    ALLOWED = "allowed"
    SOFT_WARNING = "soft_warning"
    HARD_REJECT = "hard_reject"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    ValidationSeverity.ALLOWED: 0,
    ValidationSeverity.SOFT_WARNING: 1,
    ValidationSeverity.HARD_REJECT: 2,
}


class ValidationOutcome(BaseModel):
    """
    Result of checking one event against a WorkingHoursConfig.
    """

    model_config = ConfigDict(frozen=True)

    severity: ValidationSeverity = Field(..., examples=["hard_reject"])
    reason: str | None = Field(
        None,
        description="Human-readable explanation when the event is not allowed.",
        examples=["Event cannot be scheduled during Lunch (12:00 - 13:00)"],
    )
    break_name: str | None = Field(None, description="Break that caused a hard reject.")
    minutes_before_start: int | None = Field(
        None,
        description="How far the event starts before working hours begin.",
    )
    minutes_after_end: int | None = Field(
        None,
        description="How far the event runs past the end of working hours.",
    )

    @property
    def allowed(self) -> bool:
        return self.severity is ValidationSeverity.ALLOWED
