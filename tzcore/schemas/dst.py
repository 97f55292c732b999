# tzcore/schemas/dst.py
from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class TransitionDirection(str, Enum):
    """
    Direction of a UTC offset change.
    """

    FORWARD = "forward"  # spring forward, an hour of wall-clock time is lost
    BACKWARD = "backward"  # fall back, an hour of wall-clock time repeats


class DSTTransition(BaseModel):
    """
    A single offset change of a zone.
    """

    model_config = ConfigDict(frozen=True)

    instant: datetime = Field(
        ...,
        description="UTC instant at which the new offset takes effect.",
        examples=["2025-03-09T07:00:00Z"],
    )
    direction: TransitionDirection = Field(..., examples=["forward"])
    abbreviation: str = Field(
        ...,
        description="Zone abbreviation that becomes active.",
        examples=["EDT"],
    )
    offset_seconds: int = Field(
        ...,
        description="UTC offset (seconds east of UTC) after the transition.",
        examples=[-14400],
    )
    previous_offset_seconds: int = Field(
        ...,
        description="UTC offset (seconds east of UTC) before the transition.",
        examples=[-18000],
    )
    is_dst: bool = Field(..., description="Whether the new offset is daylight saving time.")

    @property
    def shift_seconds(self) -> int:
        """
        Absolute width of the skipped or repeated wall-clock window.
        """
        return abs(self.offset_seconds - self.previous_offset_seconds)

    @property
    def wall_clock_start(self) -> datetime:
        """
        Naive local time at which the affected window begins.

        Forward: first skipped wall-clock time. Backward: first repeated one.
        """
        naive = self.instant.replace(tzinfo=None)
        return naive + timedelta(seconds=min(self.offset_seconds, self.previous_offset_seconds))

    @property
    def wall_clock_end(self) -> datetime:
        """
        Naive local time (exclusive) at which the affected window ends.
        """
        naive = self.instant.replace(tzinfo=None)
        return naive + timedelta(seconds=max(self.offset_seconds, self.previous_offset_seconds))

    def contains_wall_clock(self, local: datetime) -> bool:
        return self.wall_clock_start <= local < self.wall_clock_end


class ClassificationKind(str, Enum):
    UNAMBIGUOUS = "unambiguous"
    NONEXISTENT = "nonexistent"
    AMBIGUOUS = "ambiguous"


class LocalTimeClassification(BaseModel):
    """
    How a wall-clock time on a specific date maps onto real instants.
    """

    model_config = ConfigDict(frozen=True)

    zone: str = Field(..., examples=["America/New_York"])
    local_time: datetime = Field(
        ...,
        description="The queried wall-clock time (naive).",
        examples=["2025-11-02T01:30:00"],
    )
    kind: ClassificationKind = Field(..., examples=["ambiguous"])
    offsets_seconds: list[int] = Field(
        ...,
        description=(
            "Candidate UTC offsets. One entry when unambiguous; for ambiguous "
            "times the offset of the earlier instant first; for nonexistent "
            "times the offsets before and after the gap."
        ),
        examples=[[-14400, -18000]],
    )
    transition: DSTTransition | None = Field(
        None,
        description="The transition responsible for a gap or overlap.",
    )


class WarningSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class DSTWarning(BaseModel):
    """
    Warning raised when a requested local time is in, or close to, a DST
    transition.
    """

    model_config = ConfigDict(frozen=True)

    transition: DSTTransition
    days_until: int = Field(
        ...,
        ge=0,
        description="Whole days from the checked time to the upcoming transition (0 inside it).",
        examples=[3],
    )
    in_gap: bool = Field(False, description="The checked time does not exist.")
    in_overlap: bool = Field(False, description="The checked time occurs twice.")
    severity: WarningSeverity = Field(..., examples=["warning"])
    message: str = Field(
        ...,
        examples=["Daylight Saving Time begins in 3 days (clocks spring forward 1 hour)"],
    )
