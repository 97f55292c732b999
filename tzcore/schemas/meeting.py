# tzcore/schemas/meeting.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field, computed_field

from tzcore.schemas.zone import ZoneHandle


@dataclass(frozen=True)
class ParticipantZone:
    """
    A participant identifier (opaque, usually an email) paired with the
    zone they work in.
    """

    participant: str
    zone: ZoneHandle


class CandidateSlot(BaseModel):
    """
    A proposed meeting start instant plus duration.
    """

    model_config = ConfigDict(frozen=True)

    start: datetime = Field(..., description="UTC start instant.", examples=["2025-06-10T13:00:00Z"])
    duration: timedelta = Field(..., examples=["PT1H"])
    local_starts: dict[str, datetime] = Field(
        default_factory=dict,
        description="Start time as seen by each participant, keyed by participant id.",
    )

    @computed_field  # type: ignore[misc]
    @property
    def end(self) -> datetime:
        return self.start + self.duration


class ScoreBreakdown(BaseModel):
    """
    Five-factor score of a candidate slot. `total` is always the sum of the
    five sub-scores and lies in 0..100.
    """

    model_config = ConfigDict(frozen=True)

    working_hours_coverage: int = Field(..., ge=0, le=40)
    time_quality: int = Field(..., ge=0, le=25)
    cultural_fit: int = Field(..., ge=0, le=15)
    weekday_preference: int = Field(..., ge=0, le=10)
    holiday_avoidance: int = Field(..., ge=0, le=10)

    @computed_field  # type: ignore[misc]
    @property
    def total(self) -> int:
        return (
            self.working_hours_coverage
            + self.time_quality
            + self.cultural_fit
            + self.weekday_preference
            + self.holiday_avoidance
        )


class ScoredSlot(BaseModel):
    """
    Unit of output of the meeting time finder.
    """

    model_config = ConfigDict(frozen=True)

    slot: CandidateSlot
    score: ScoreBreakdown
