# tzcore/schemas/api.py
from __future__ import annotations

from datetime import date, datetime, time

from pydantic import BaseModel, Field

from tzcore.schemas.dst import DSTTransition, DSTWarning, LocalTimeClassification
from tzcore.schemas.meeting import ScoredSlot
from tzcore.schemas.working_hours import WorkingHoursConfig
from tzcore.schemas.zone import ZoneHandle
from tzcore.services.time_converter import Disambiguation


class ZoneRead(BaseModel):
    """
    Public representation of a resolved zone.
    """

    name: str = Field(..., examples=["America/New_York"])
    region: str = Field(..., examples=["America"])
    abbreviations: list[str] = Field(default_factory=list, examples=[["EDT", "EST"]])

    @classmethod
    def from_handle(cls, handle: ZoneHandle) -> "ZoneRead":
        return cls(name=handle.name, region=handle.region, abbreviations=list(handle.abbreviations))


class ZoneListResponse(BaseModel):
    count: int = Field(..., examples=[2])
    zones: list[ZoneRead]


class ConvertRequest(BaseModel):
    """
    Body of POST /timezones/convert.

    `value` with an offset (or `Z`) is an absolute instant; without one it is
    a wall-clock time in `from_zone`.
    """

    value: datetime = Field(..., examples=["2025-03-09T03:00:00"])
    from_zone: str = Field(..., examples=["UTC"])
    to_zone: str = Field(..., examples=["America/New_York"])
    disambiguation: Disambiguation | None = Field(
        None,
        description="Required when `value` is a wall-clock time inside a DST gap or overlap.",
    )


class TransitionsResponse(BaseModel):
    zone: str = Field(..., examples=["America/New_York"])
    year: int = Field(..., examples=[2025])
    transitions: list[DSTTransition]


class ClassifyRequest(BaseModel):
    zone: str = Field(..., examples=["America/New_York"])
    local_time: datetime = Field(..., description="Wall-clock time (offset ignored).", examples=["2025-03-09T02:30:00"])
    window_days: int | None = Field(
        None,
        ge=0,
        description="How far ahead to look for an upcoming transition. Defaults to DST_WARNING_DAYS.",
    )


class ClassifyResponse(BaseModel):
    classification: LocalTimeClassification
    warning: DSTWarning | None = None
    alternatives: list[datetime] = Field(
        default_factory=list,
        description="Real times the caller may pick instead of a nonexistent or ambiguous one.",
    )


class ValidateRequest(BaseModel):
    """
    Body of POST /scheduling/validate. Times are local to the user.
    """

    event_start: time = Field(..., examples=["12:30"])
    event_end: time = Field(..., examples=["13:00"])
    weekday: str | int = Field(..., description="Day name or 0..6 (Monday = 0).", examples=["monday"])
    config: WorkingHoursConfig | None = Field(
        None,
        description="Working-hours policy to apply. Defaults to the server's configured policy.",
    )


class ParticipantRequest(BaseModel):
    participant: str = Field(..., examples=["alice@example.com"])
    zone: str = Field(..., examples=["Asia/Tokyo"])


class FindSlotsRequest(BaseModel):
    participants: list[ParticipantRequest] = Field(..., min_length=1)
    duration_minutes: int = Field(..., gt=0, examples=[60])
    search_start: date = Field(..., examples=["2025-06-09"])
    search_end: date = Field(..., examples=["2025-06-13"])
    working_hours_start: time = Field(time(9, 0), examples=["09:00"])
    working_hours_end: time = Field(time(17, 0), examples=["17:00"])
    caller_zone: str | None = Field(
        None,
        description="Zone of the caller's working-hours window. Defaults to DEFAULT_ZONE.",
        examples=["America/New_York"],
    )
    exclude_weekends: bool = Field(True)
    limit: int | None = Field(None, gt=0, description="Defaults to MAX_SUGGESTIONS.")


class FindSlotsResponse(BaseModel):
    caller_zone: str = Field(..., examples=["America/New_York"])
    slots: list[ScoredSlot]
