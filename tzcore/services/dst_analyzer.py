# tzcore/services/dst_analyzer.py
from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone, tzinfo

from tzcore.schemas.dst import (
    ClassificationKind,
    DSTTransition,
    DSTWarning,
    LocalTimeClassification,
    TransitionDirection,
    WarningSeverity,
)
from tzcore.schemas.zone import ZoneHandle, ZoneInfoSummary

logger = logging.getLogger(__name__)

DEFAULT_WARNING_DAYS = 7
# Local midnight of the first and last scanned years must stay inside
# datetime's range once converted to UTC.
MIN_YEAR = 2
MAX_YEAR = 9997

_SCAN_STEP = timedelta(hours=1)


def _offset_seconds(tz: tzinfo, instant: datetime) -> int:
    offset = instant.astimezone(tz).utcoffset()
    return int(offset.total_seconds()) if offset is not None else 0


def _epoch(instant: datetime) -> int:
    return int(instant.timestamp())


def _from_epoch(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def _describe_shift(seconds: int) -> str:
    hours, rem = divmod(seconds, 3600)
    minutes = rem // 60
    if minutes and hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes} minutes"
    return f"{hours} hour" if hours == 1 else f"{hours} hours"


class DSTAnalyzer:
    """
    Computes offset transitions of a zone and classifies wall-clock times
    against them.

    Nothing is cached: transitions are recomputed on every call because a
    zone's rules can differ from one year to the next. All methods are pure
    functions of their arguments and safe to call from several threads.

    Transitions are found by sampling the UTC offset every hour and
    bisecting each change down to the second. Two offset changes less than
    an hour apart are reported as their net effect.
    """

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def transitions_for_year(self, zone: ZoneHandle, year: int) -> list[DSTTransition]:
        """
        Return every offset change between local midnight on January 1st of
        `year` and local midnight on January 1st of `year + 1`, in
        chronological order.

        Zones without DST (fixed offsets) yield an empty list.

        Raises
        ------
        ValueError
            If `year` is outside `MIN_YEAR..MAX_YEAR`.
        """
        if not MIN_YEAR <= year <= MAX_YEAR:
            raise ValueError(f"year must be between {MIN_YEAR} and {MAX_YEAR}, got {year}")
        tz = zone.tz
        start = datetime(year, 1, 1, tzinfo=tz).astimezone(timezone.utc)
        end = datetime(year + 1, 1, 1, tzinfo=tz).astimezone(timezone.utc)
        transitions = self._scan(tz, start, end)
        logger.debug(
            "Computed %d transitions",
            len(transitions),
            extra={"zone": zone.name, "year": year},
        )
        return transitions

    def transitions_between(
        self,
        zone: ZoneHandle,
        start: datetime,
        end: datetime,
    ) -> list[DSTTransition]:
        """
        Offset changes with `start <= instant < end` (both aware instants).
        """
        return self._scan(zone.tz, start.astimezone(timezone.utc), end.astimezone(timezone.utc))

    def upcoming_warning(
        self,
        zone: ZoneHandle,
        reference: datetime,
        window_days: int = DEFAULT_WARNING_DAYS,
    ) -> DSTTransition | None:
        """
        Return the first transition strictly after `reference` if it happens
        within `window_days` days, otherwise None. Works across year
        boundaries.
        """
        if window_days <= 0:
            return None
        start = reference.astimezone(timezone.utc) + timedelta(seconds=1)
        end = start + timedelta(days=window_days)
        transitions = self._scan(zone.tz, start, end)
        return transitions[0] if transitions else None

    # ------------------------------------------------------------------
    # Wall-clock classification
    # ------------------------------------------------------------------

    def classify(self, zone: ZoneHandle, local: datetime) -> LocalTimeClassification:
        """
        Classify a wall-clock time on its specific calendar date.

        Rules
        -----
        - Both PEP 495 folds give the same offset      => UNAMBIGUOUS
        - The time lies in the window skipped by a
          forward transition                             => NONEXISTENT
        - The time lies in the window repeated by a
          backward transition                            => AMBIGUOUS

        For AMBIGUOUS the offsets are reported in instant order (first
        occurrence first); for NONEXISTENT they are the offsets before and
        after the gap. An aware `local` is reduced to its wall-clock fields.
        """
        tz = zone.tz
        wall = local.replace(tzinfo=None, fold=0)

        first_offset = wall.replace(tzinfo=tz, fold=0).utcoffset()
        second_offset = wall.replace(tzinfo=tz, fold=1).utcoffset()

        if first_offset == second_offset or first_offset is None or second_offset is None:
            offset = int(first_offset.total_seconds()) if first_offset is not None else 0
            return LocalTimeClassification(
                zone=zone.name,
                local_time=wall,
                kind=ClassificationKind.UNAMBIGUOUS,
                offsets_seconds=[offset],
            )

        before = int(first_offset.total_seconds())
        after = int(second_offset.total_seconds())
        transition = self._transition_around(tz, wall, before, after)

        if transition is None or not transition.contains_wall_clock(wall):
            # The tzinfo reports two folds but no offset change brackets this
            # time; treat it like any other time.
            return LocalTimeClassification(
                zone=zone.name,
                local_time=wall,
                kind=ClassificationKind.UNAMBIGUOUS,
                offsets_seconds=[before],
            )

        if transition.direction is TransitionDirection.FORWARD:
            kind = ClassificationKind.NONEXISTENT
        else:
            kind = ClassificationKind.AMBIGUOUS

        return LocalTimeClassification(
            zone=zone.name,
            local_time=wall,
            kind=kind,
            offsets_seconds=[before, after],
            transition=transition,
        )

    def check_local_time(
        self,
        zone: ZoneHandle,
        local: datetime,
        window_days: int = DEFAULT_WARNING_DAYS,
    ) -> DSTWarning | None:
        """
        Build a user-facing warning for a requested wall-clock time.

        Severity
        --------
        - time inside a spring-forward gap          => error
        - time inside a fall-back overlap           => warning
        - spring-forward within `window_days` ahead => warning
        - fall-back within `window_days` ahead      => info
        Only transitions after `local` are reported, so `days_until` is
        never negative. Returns None when nothing is worth reporting.
        """
        classification = self.classify(zone, local)
        transition = classification.transition

        if classification.kind is ClassificationKind.NONEXISTENT and transition is not None:
            return DSTWarning(
                transition=transition,
                days_until=0,
                in_gap=True,
                severity=WarningSeverity.ERROR,
                message="This time will not exist due to Daylight Saving Time (clocks spring forward)",
            )

        if classification.kind is ClassificationKind.AMBIGUOUS and transition is not None:
            return DSTWarning(
                transition=transition,
                days_until=0,
                in_overlap=True,
                severity=WarningSeverity.WARNING,
                message="This time occurs twice due to Daylight Saving Time (clocks fall back)",
            )

        instant = classification.local_time.replace(tzinfo=zone.tz).astimezone(timezone.utc)
        upcoming = self.upcoming_warning(zone, instant, window_days)
        if upcoming is None:
            return None

        days_until = (upcoming.instant - instant).days
        shift = _describe_shift(upcoming.shift_seconds)
        if upcoming.direction is TransitionDirection.FORWARD:
            return DSTWarning(
                transition=upcoming,
                days_until=days_until,
                severity=WarningSeverity.WARNING,
                message=f"Daylight Saving Time begins in {days_until} days (clocks spring forward {shift})",
            )
        return DSTWarning(
            transition=upcoming,
            days_until=days_until,
            severity=WarningSeverity.INFO,
            message=f"Daylight Saving Time ends in {days_until} days (clocks fall back {shift})",
        )

    def suggest_alternatives(self, zone: ZoneHandle, local: datetime) -> list[datetime]:
        """
        Suggest real, aware times to use instead of a problematic wall-clock
        time.

        - Nonexistent: the same wall time one shift earlier and one later
          (02:30 in a 02:00->03:00 gap gives 01:30 and 03:30).
        - Ambiguous: both real instants, first occurrence first.
        - Unambiguous: nothing to suggest.
        """
        classification = self.classify(zone, local)
        transition = classification.transition
        tz = zone.tz
        wall = classification.local_time

        if classification.kind is ClassificationKind.NONEXISTENT and transition is not None:
            shift = timedelta(seconds=transition.shift_seconds)
            candidates = [wall - shift, wall + shift]
            return [c.replace(tzinfo=tz).astimezone(timezone.utc).astimezone(tz) for c in candidates]

        if classification.kind is ClassificationKind.AMBIGUOUS:
            return [
                wall.replace(tzinfo=tz, fold=fold).astimezone(timezone.utc).astimezone(tz)
                for fold in (0, 1)
            ]

        return []

    def zone_info(self, zone: ZoneHandle, at: datetime) -> ZoneInfoSummary:
        """
        Offset, abbreviation and DST status of `zone` at instant `at`, plus
        the next offset change within a year.
        """
        local = at.astimezone(zone.tz)
        upcoming = self.upcoming_warning(zone, at, window_days=366)
        return ZoneInfoSummary(
            zone=zone.name,
            abbreviation=local.tzname() or zone.name,
            utc_offset_seconds=_offset_seconds(zone.tz, at),
            is_dst=bool(local.dst()),
            next_transition=upcoming.instant if upcoming else None,
        )

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _scan(self, tz: tzinfo, start: datetime, end: datetime) -> list[DSTTransition]:
        transitions: list[DSTTransition] = []
        if end <= start:
            return transitions

        previous = start
        previous_offset = _offset_seconds(tz, previous)

        while previous < end:
            cursor = min(previous + _SCAN_STEP, end)
            offset = _offset_seconds(tz, cursor)
            if offset != previous_offset:
                instant = self._bisect(tz, previous, cursor, previous_offset)
                if instant < end:
                    transitions.append(self._build(tz, instant, previous_offset))
                previous_offset = offset
            previous = cursor

        return transitions

    def _transition_around(
        self,
        tz: tzinfo,
        wall: datetime,
        first_offset: int,
        second_offset: int,
    ) -> DSTTransition | None:
        # The two candidate instants of `wall` bracket the transition.
        candidates = sorted(
            (wall - timedelta(seconds=first_offset), wall - timedelta(seconds=second_offset))
        )
        low = candidates[0].replace(tzinfo=timezone.utc)
        high = candidates[1].replace(tzinfo=timezone.utc)
        low_offset = _offset_seconds(tz, low)
        if _offset_seconds(tz, high) == low_offset:
            return None
        instant = self._bisect(tz, low, high, low_offset)
        return self._build(tz, instant, low_offset)

    @staticmethod
    def _bisect(tz: tzinfo, low: datetime, high: datetime, low_offset: int) -> datetime:
        """
        First whole second in (low, high] whose offset differs from `low_offset`.
        """
        lo = _epoch(low)
        hi = _epoch(high)
        while hi - lo > 1:
            mid = (lo + hi) // 2
            if _offset_seconds(tz, _from_epoch(mid)) == low_offset:
                lo = mid
            else:
                hi = mid
        return _from_epoch(hi)

    @staticmethod
    def _build(tz: tzinfo, instant: datetime, previous_offset: int) -> DSTTransition:
        local = instant.astimezone(tz)
        offset = _offset_seconds(tz, instant)
        direction = (
            TransitionDirection.FORWARD if offset > previous_offset else TransitionDirection.BACKWARD
        )
        return DSTTransition(
            instant=instant,
            direction=direction,
            abbreviation=local.tzname() or "",
            offset_seconds=offset,
            previous_offset_seconds=previous_offset,
            is_dst=bool(local.dst()),
        )
