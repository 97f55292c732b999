# tzcore/core/errors.py
from __future__ import annotations

from datetime import datetime


class SchedulingError(Exception):
    """
    Base class for every error raised by the scheduling core.
    """


class UnknownZone(SchedulingError, LookupError):
    """
    Raised when a zone identifier is neither a known IANA name nor a
    configured abbreviation. Always surfaced to the caller.
    """

    def __init__(self, raw: str) -> None:
        self.raw = raw
        super().__init__(f"Unknown time zone {raw!r}")


class LocalTimeError(SchedulingError, ValueError):
    """
    A wall-clock time that cannot be mapped to a single instant.

    Recoverable: the caller either supplies a disambiguation or picks a
    different time. The core never guesses.
    """

    def __init__(self, message: str, zone: str, local_time: datetime) -> None:
        self.zone = zone
        self.local_time = local_time
        super().__init__(message)


class NonExistentLocalTime(LocalTimeError):
    """
    The wall-clock time falls inside a spring-forward gap.
    """

    def __init__(
        self,
        zone: str,
        local_time: datetime,
        gap_start: datetime,
        gap_end: datetime,
    ) -> None:
        self.gap_start = gap_start
        self.gap_end = gap_end
        super().__init__(
            f"{local_time:%Y-%m-%d %H:%M} does not exist in {zone} "
            f"(clocks spring forward from {gap_start:%H:%M} to {gap_end:%H:%M})",
            zone,
            local_time,
        )


class AmbiguousLocalTime(LocalTimeError):
    """
    The wall-clock time falls inside a fall-back overlap and occurs twice.
    """

    def __init__(
        self,
        zone: str,
        local_time: datetime,
        offsets_seconds: tuple[int, int],
    ) -> None:
        self.offsets_seconds = offsets_seconds
        first, second = (o / 3600 for o in offsets_seconds)
        super().__init__(
            f"{local_time:%Y-%m-%d %H:%M} occurs twice in {zone} "
            f"(UTC{first:+g} and UTC{second:+g}); choose the earlier or later instant",
            zone,
            local_time,
        )


class NoCandidatesInWindow(SchedulingError):
    """
    The search window holds no instant that satisfies the grid, working-hours
    and weekend filters. Callers should widen the window or the hours.
    """


class MeetingSearchCancelled(SchedulingError):
    """
    The caller's cancellation token was set while the candidate grid was
    being scored.
    """


class WorkingHoursConfigError(SchedulingError, ValueError):
    """
    Raised by the configuration loader (never by the validator) when a
    working-hours document is malformed.
    """

    def __init__(self, issues: list[str]) -> None:
        self.issues = list(issues)
        super().__init__("Invalid working hours configuration: " + "; ".join(self.issues))


class InvalidRecurrenceRule(SchedulingError, ValueError):
    """
    The RRULE text of a recurring series could not be parsed.
    """
