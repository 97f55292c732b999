# tzcore/services/slot_scorer.py
from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from datetime import datetime, time, timedelta, timezone

from tzcore.schemas.meeting import ParticipantZone, ScoreBreakdown
from tzcore.schemas.zone import ZoneHandle
from tzcore.services.holiday_calendar import HolidayCalendar

logger = logging.getLogger(__name__)

# Zones where Friday is part of the weekend or a short prayer day.
MIDDLE_EAST_ZONES: tuple[str, ...] = (
    "Asia/Dubai",
    "Asia/Riyadh",
    "Asia/Qatar",
    "Asia/Kuwait",
    "Asia/Bahrain",
    "Asia/Muscat",
    "Asia/Aden",
    "Asia/Baghdad",
    "Asia/Tehran",
    "Asia/Amman",
    "Asia/Damascus",
    "Asia/Beirut",
    "Africa/Cairo",
)

COVERAGE_MAX = 40
TIME_QUALITY_MAX = 25
CULTURAL_FIT_MAX = 15
WEEKDAY_MAX = 10
HOLIDAY_MAX = 10

_CORE_START = time(9, 0)
_CORE_END = time(17, 0)
_LUNCH = (12 * 60, 13 * 60)

# (from_minute, to_minute, score in tenths)
_QUALITY_BANDS: tuple[tuple[int, int, int], ...] = (
    (9 * 60, 11 * 60, 10),   # excellent
    (11 * 60, 14 * 60, 8),   # good
    (14 * 60, 17 * 60, 6),   # fair
    (8 * 60, 9 * 60, 3),     # poor
    (17 * 60, 18 * 60, 3),   # poor
)

# Monday=0 .. Sunday=6
_WEEKDAY_SCORES = (8, 10, 10, 8, 5, 0, 0)


def _minutes(value: datetime) -> int:
    return value.hour * 60 + value.minute


def _band_tenths(local_start: datetime) -> int:
    minute = _minutes(local_start)
    for low, high, tenths in _QUALITY_BANDS:
        if low <= minute < high:
            return tenths
    return 0


class SlotScorer:
    """
    Five-factor rubric for a candidate meeting slot.

    Factors
    -------
    - working_hours_coverage (0-40): share of participants whose whole meeting
      lies inside 09:00-17:00 on one local date.
    - time_quality (0-25): mean band score of each participant's local start.
    - cultural_fit (0-15): 15 minus a fixed weight for each kind of friction
      that applies to at least one participant.
    - weekday_preference (0-10): caller-local weekday.
    - holiday_avoidance (0-10): share of participants not on a public holiday.

    Every factor is floored to an integer, so `total` is an int in 0..100.
    """

    def __init__(
        self,
        holiday_calendar: HolidayCalendar | None = None,
        middle_east_zones: Iterable[str] = MIDDLE_EAST_ZONES,
        friday_afternoon_weight: int = 6,
        lunch_overlap_weight: int = 5,
        monday_early_weight: int = 4,
    ) -> None:
        self.holiday_calendar = holiday_calendar or HolidayCalendar()
        self.middle_east_zones = frozenset(middle_east_zones)
        self.friday_afternoon_weight = friday_afternoon_weight
        self.lunch_overlap_weight = lunch_overlap_weight
        self.monday_early_weight = monday_early_weight

    def score(
        self,
        start: datetime,
        duration: timedelta,
        participants: Sequence[ParticipantZone],
        caller_zone: ZoneHandle,
    ) -> ScoreBreakdown:
        """
        Score the slot starting at the aware instant `start`.
        """
        if not participants:
            raise ValueError("At least one participant is required")

        start_utc = start.astimezone(timezone.utc)
        end_utc = start_utc + duration
        windows = [
            (p, start_utc.astimezone(p.zone.tz), end_utc.astimezone(p.zone.tz)) for p in participants
        ]

        return ScoreBreakdown(
            working_hours_coverage=self.coverage(windows),
            time_quality=self.time_quality(windows),
            cultural_fit=self.cultural_fit(windows),
            weekday_preference=self.weekday_preference(start_utc.astimezone(caller_zone.tz)),
            holiday_avoidance=self.holiday_avoidance(windows),
        )

    # ------------------------------------------------------------------
    # Factors
    # ------------------------------------------------------------------

    @staticmethod
    def coverage(windows: Sequence[tuple[ParticipantZone, datetime, datetime]]) -> int:
        covered = sum(
            1
            for _, local_start, local_end in windows
            if local_start.date() == local_end.date()
            and local_start.time() >= _CORE_START
            and local_end.time() <= _CORE_END
        )
        return COVERAGE_MAX * covered // len(windows)

    @staticmethod
    def time_quality(windows: Sequence[tuple[ParticipantZone, datetime, datetime]]) -> int:
        tenths = sum(_band_tenths(local_start) for _, local_start, _ in windows)
        return TIME_QUALITY_MAX * tenths // (10 * len(windows))

    def cultural_fit(self, windows: Sequence[tuple[ParticipantZone, datetime, datetime]]) -> int:
        friday_afternoon = lunch_overlap = monday_early = False

        for participant, local_start, local_end in windows:
            start_minute = _minutes(local_start)
            end_minute = _minutes(local_end) if local_end.date() == local_start.date() else 24 * 60

            if (
                participant.zone.name in self.middle_east_zones
                and local_start.weekday() == 4
                and start_minute >= 12 * 60
            ):
                friday_afternoon = True
            if start_minute < _LUNCH[1] and _LUNCH[0] < end_minute:
                lunch_overlap = True
            if local_start.weekday() == 0 and start_minute < 9 * 60:
                monday_early = True

        deduction = 0
        if friday_afternoon:
            deduction += self.friday_afternoon_weight
        if lunch_overlap:
            deduction += self.lunch_overlap_weight
        if monday_early:
            deduction += self.monday_early_weight
        return max(0, CULTURAL_FIT_MAX - deduction)

    @staticmethod
    def weekday_preference(caller_local_start: datetime) -> int:
        return _WEEKDAY_SCORES[caller_local_start.weekday()]

    def holiday_avoidance(self, windows: Sequence[tuple[ParticipantZone, datetime, datetime]]) -> int:
        affected = sum(
            1
            for participant, local_start, _ in windows
            if self.holiday_calendar.is_holiday(participant.zone, local_start.date())
        )
        if affected:
            logger.debug("Slot falls on a holiday for %d participant(s)", affected)
        n = len(windows)
        return HOLIDAY_MAX * (n - affected) // n
