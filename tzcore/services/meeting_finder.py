# tzcore/services/meeting_finder.py
from __future__ import annotations

import logging
import threading
from collections.abc import Iterable, Iterator, Sequence
from datetime import date, datetime, time, timedelta, timezone

from tzcore.core.errors import MeetingSearchCancelled, NoCandidatesInWindow
from tzcore.schemas.dst import ClassificationKind
from tzcore.schemas.meeting import CandidateSlot, ParticipantZone, ScoredSlot
from tzcore.schemas.recurrence import RecurringSeries
from tzcore.schemas.zone import ZoneHandle
from tzcore.services.recurrence import overlapping_instances
from tzcore.services.slot_scorer import SlotScorer
from tzcore.services.time_converter import Disambiguation, TimeConverter

logger = logging.getLogger(__name__)

DEFAULT_GRANULARITY_MINUTES = 30
DEFAULT_MIN_USABLE_SCORE = 50


class MeetingTimeFinder:
    """
    Enumerates candidate meeting slots for a set of participant zones and
    ranks them with SlotScorer.

    Parameters
    ----------
    converter:
        Used to resolve caller-local grid times and express each slot in
        participant zones.
    scorer:
        Five-factor rubric.
    granularity_minutes:
        Grid step in caller-local wall-clock minutes.
    min_usable_score:
        Slots scoring below this are dropped, unless that would leave
        nothing, in which case every scored slot is returned.
    """

    def __init__(
        self,
        converter: TimeConverter | None = None,
        scorer: SlotScorer | None = None,
        granularity_minutes: int = DEFAULT_GRANULARITY_MINUTES,
        min_usable_score: int = DEFAULT_MIN_USABLE_SCORE,
    ) -> None:
        if granularity_minutes <= 0:
            raise ValueError("granularity_minutes must be positive")
        self.converter = converter or TimeConverter()
        self.scorer = scorer or SlotScorer()
        self.granularity = timedelta(minutes=granularity_minutes)
        self.min_usable_score = min_usable_score

    def find_slots(
        self,
        participants: Sequence[ParticipantZone],
        duration: timedelta,
        search_start: date,
        search_end: date,
        working_hours_start: time,
        working_hours_end: time,
        caller_zone: ZoneHandle,
        exclude_weekends: bool = True,
        existing_series: Iterable[RecurringSeries] = (),
        limit: int | None = None,
        cancel_event: threading.Event | None = None,
    ) -> list[ScoredSlot]:
        """
        Rank candidate slots in the caller-local date range
        `[search_start, search_end]` (both inclusive).

        Rules
        -----
        1) Grid: caller-local starts every `granularity_minutes` from
           `working_hours_start`, keeping only meetings that end by
           `working_hours_end`. An end at or before the start closes the
           window on the next day (18:00-00:00 runs to midnight, 22:00-02:00
           spans it). Nonexistent local times are skipped; for ambiguous
           ones the earlier instant is used.
        2) Weekends (caller-local) are dropped when `exclude_weekends`.
        3) Slots overlapping any non-deleted instance of `existing_series`
           are dropped, including occurrences moved into the window.
        4) Sort by total score desc, then earliest start.
        5) Apply the usability floor with fallback, then `limit`.

        Raises
        ------
        ValueError
            No participants, non-positive duration or an inverted date
            window.
        NoCandidatesInWindow
            The filtered grid is empty (scores are never a reason).
        MeetingSearchCancelled
            `cancel_event` was set during scoring.
        """
        if not participants:
            raise ValueError("At least one participant is required")
        if duration <= timedelta(0):
            raise ValueError("Meeting duration must be positive")
        if search_end < search_start:
            raise ValueError("search_end must not be before search_start")

        grid = list(
            self._grid(
                duration,
                search_start,
                search_end,
                working_hours_start,
                working_hours_end,
                caller_zone,
                exclude_weekends,
            )
        )
        grid = self._without_conflicts(grid, duration, existing_series)
        if not grid:
            raise NoCandidatesInWindow(
                f"No candidate slots between {search_start.isoformat()} and {search_end.isoformat()} "
                f"within {working_hours_start:%H:%M}-{working_hours_end:%H:%M} {caller_zone.name}"
            )

        scored: list[ScoredSlot] = []
        for start in grid:
            if cancel_event is not None and cancel_event.is_set():
                raise MeetingSearchCancelled("Meeting search was cancelled")
            slot = CandidateSlot(
                start=start,
                duration=duration,
                local_starts={
                    p.participant: self.converter.at(start, p.zone).local_time for p in participants
                },
            )
            score = self.scorer.score(start, duration, participants, caller_zone)
            scored.append(ScoredSlot(slot=slot, score=score))

        scored.sort(key=lambda s: (-s.score.total, s.slot.start))
        logger.debug(
            "Scored %d candidate slots",
            len(scored),
            extra={"participants": len(participants), "caller_zone": caller_zone.name},
        )

        usable = [s for s in scored if s.score.total >= self.min_usable_score]
        if not usable:
            logger.warning(
                "No slot reaches the usability floor %d; returning best available",
                self.min_usable_score,
            )
            usable = scored

        if limit is not None:
            usable = usable[: max(limit, 0)]
        return usable

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _grid(
        self,
        duration: timedelta,
        search_start: date,
        search_end: date,
        working_hours_start: time,
        working_hours_end: time,
        caller_zone: ZoneHandle,
        exclude_weekends: bool,
    ) -> Iterator[datetime]:
        analyzer = self.converter.analyzer
        day = search_start
        while day <= search_end:
            if not (exclude_weekends and day.weekday() >= 5):
                wall = datetime.combine(day, working_hours_start)
                day_end = datetime.combine(day, working_hours_end)
                if working_hours_end <= working_hours_start:
                    day_end += timedelta(days=1)
                while wall + duration <= day_end:
                    kind = analyzer.classify(caller_zone, wall).kind
                    if kind is not ClassificationKind.NONEXISTENT:
                        yield self.converter.to_instant(wall, caller_zone, Disambiguation.EARLIER)
                    wall += self.granularity
            day += timedelta(days=1)

    @staticmethod
    def _without_conflicts(
        grid: list[datetime],
        duration: timedelta,
        existing_series: Iterable[RecurringSeries],
    ) -> list[datetime]:
        series_list = list(existing_series)
        if not grid or not series_list:
            return grid

        range_start = min(grid)
        range_end = max(grid) + duration
        busy = [
            (instance.start.astimezone(timezone.utc), instance.end.astimezone(timezone.utc))
            for series in series_list
            for instance in overlapping_instances(series, range_start, range_end)
        ]
        if not busy:
            return grid

        kept = [
            start
            for start in grid
            if not any(start < busy_end and busy_start < start + duration for busy_start, busy_end in busy)
        ]
        logger.debug("Dropped %d slots conflicting with existing series", len(grid) - len(kept))
        return kept
