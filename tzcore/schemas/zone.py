# tzcore/schemas/zone.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone, tzinfo

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True)
class ZoneHandle:
    """
    A resolved time zone: canonical IANA name, its common abbreviations and
    the `tzinfo` used for arithmetic.

    Handles are created by the ZoneRegistry and compared by name only.
    """

    name: str
    abbreviations: tuple[str, ...] = ()
    tz: tzinfo = field(default=timezone.utc, compare=False, repr=False)

    @property
    def region(self) -> str:
        """
        Continent/region prefix used to group zones for display.
        """
        if "/" in self.name:
            return self.name.split("/", 1)[0]
        return "Other"

    def __str__(self) -> str:
        return self.name


class ConvertedTime(BaseModel):
    """
    Result of converting an instant (or a resolved wall-clock time) into a
    target zone.
    """

    model_config = ConfigDict(frozen=True)

    zone: str = Field(..., description="Canonical name of the target zone.", examples=["America/New_York"])
    local_time: datetime = Field(
        ...,
        description="Wall-clock date/time in the target zone (offset-aware).",
        examples=["2025-03-08T22:00:00-05:00"],
    )
    utc_offset_seconds: int = Field(
        ...,
        description="Signed UTC offset in seconds east of UTC at this instant.",
        examples=[-18000],
    )
    is_dst: bool = Field(..., description="True if daylight saving time is in effect.")
    abbreviation: str = Field(..., description="Zone abbreviation at this instant.", examples=["EST"])
    instant: datetime = Field(
        ...,
        description="The absolute instant, expressed in UTC.",
        examples=["2025-03-09T03:00:00Z"],
    )

    def reconstructed_instant(self) -> datetime:
        """
        Rebuild the UTC instant from the wall-clock fields and the offset only.

        Always equals `instant`; exposed so callers (and tests) can check the
        round-trip invariant without trusting the tzinfo object.
        """
        wall = self.local_time.replace(tzinfo=None)
        return (wall - timedelta(seconds=self.utc_offset_seconds)).replace(tzinfo=timezone.utc)


class ZoneInfoSummary(BaseModel):
    """
    Snapshot of a zone at a given instant, including the next offset change.
    """

    model_config = ConfigDict(frozen=True)

    zone: str = Field(..., examples=["Europe/London"])
    abbreviation: str = Field(..., examples=["GMT"])
    utc_offset_seconds: int = Field(..., examples=[0])
    is_dst: bool = Field(...)
    next_transition: datetime | None = Field(
        None,
        description="UTC instant of the next offset change within a year, if any.",
    )
