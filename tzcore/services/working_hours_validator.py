# tzcore/services/working_hours_validator.py
from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import datetime, time

from tzcore.schemas.recurrence import RecurringInstance, RecurringSeries
from tzcore.schemas.working_hours import (
    WEEKDAY_NAMES,
    BreakBlock,
    DaySchedule,
    ValidationOutcome,
    ValidationSeverity,
    WorkingHoursConfig,
)
from tzcore.services.recurrence import instances

logger = logging.getLogger(__name__)

_MINUTES_PER_DAY = 24 * 60
_WEEKEND = ("saturday", "sunday")

ALLOWED = ValidationOutcome(severity=ValidationSeverity.ALLOWED)


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


def _weekday_name(weekday: str | int) -> str | None:
    if isinstance(weekday, int):
        return WEEKDAY_NAMES[weekday] if 0 <= weekday < 7 else None
    name = weekday.strip().lower()
    return name if name in WEEKDAY_NAMES else None


def _describe_offset(minutes: int, side: str) -> str:
    hours, mins = divmod(minutes, 60)
    if mins:
        return f"{hours}h {mins}m {side}"
    return f"{hours} hour(s) {side}"


def resolve_schedule(weekday: str | int, config: WorkingHoursConfig | None) -> DaySchedule | None:
    """
    Pick the DaySchedule in force for `weekday`.

    Rules
    -----
    1) An explicit override for the weekday, if enabled.
    2) For Saturday/Sunday, the `weekend` bucket, if enabled.
    3) The `default` schedule, if enabled.
    4) Otherwise None: no working-hours policy applies.
    """
    if config is None:
        return None

    name = _weekday_name(weekday)
    if name is not None:
        override = config.override_for(name)
        if override is not None and override.enabled:
            return override
        if name in _WEEKEND and config.weekend is not None and config.weekend.enabled:
            return config.weekend

    if config.default is not None and config.default.enabled:
        return config.default
    return None


class WorkingHoursValidator:
    """
    Checks events against working hours (soft) and break blocks (hard).

    Rules
    -----
    1) Event overlaps a break block             => HARD_REJECT
    2) Event not fully inside working hours     => SOFT_WARNING
    3) Otherwise                                => ALLOWED

    Break start is inclusive and break end exclusive; the first overlapping
    break in configuration order is reported. A break violation is never
    downgraded to a warning.

    Note
    ----
    Malformed configuration (break start >= end, missing or inverted
    working hours) is skipped rather than raised, so validation stays
    available with partial configs. Catching those problems is the job of
    the load-time check in working_hours_loader.
    """

    @staticmethod
    def validate(
        event_start: time,
        event_end: time,
        weekday: str | int,
        config: WorkingHoursConfig | None,
    ) -> ValidationOutcome:
        """
        Validate an event given as local wall-clock start/end on `weekday`
        (a day name or 0..6 with Monday = 0).

        An end at or before the start is read as running until midnight.
        """
        schedule = resolve_schedule(weekday, config)
        if schedule is None:
            return ALLOWED

        start = _minutes(event_start)
        end = _minutes(event_end)
        if end <= start:
            end = _MINUTES_PER_DAY

        for block in schedule.breaks:
            if WorkingHoursValidator._overlaps_break(start, end, block):
                return ValidationOutcome(
                    severity=ValidationSeverity.HARD_REJECT,
                    reason=(
                        f"Event cannot be scheduled during {block.name} "
                        f"({block.start:%H:%M} - {block.end:%H:%M})"
                    ),
                    break_name=block.name,
                )

        if schedule.start is None or schedule.end is None:
            return ALLOWED

        work_start = _minutes(schedule.start)
        work_end = _minutes(schedule.end)
        if work_end <= work_start:
            logger.warning(
                "Skipping working-hours check for inverted schedule %s-%s",
                schedule.start,
                schedule.end,
            )
            return ALLOWED

        if start < work_start:
            before = work_start - start
            return ValidationOutcome(
                severity=ValidationSeverity.SOFT_WARNING,
                reason=(
                    f"Event scheduled outside working hours ({schedule.start:%H:%M} - "
                    f"{schedule.end:%H:%M}) - {_describe_offset(before, 'before start')}"
                ),
                minutes_before_start=before,
            )

        if end > work_end:
            after = end - work_end
            return ValidationOutcome(
                severity=ValidationSeverity.SOFT_WARNING,
                reason=(
                    f"Event scheduled outside working hours ({schedule.start:%H:%M} - "
                    f"{schedule.end:%H:%M}) - {_describe_offset(after, 'after end')}"
                ),
                minutes_after_end=after,
            )

        return ALLOWED

    @staticmethod
    def validate_event(
        start: datetime,
        end: datetime,
        config: WorkingHoursConfig | None,
    ) -> ValidationOutcome:
        """
        Validate an event given as datetimes already expressed in the user's
        zone; the weekday is taken from `start`. Events running past midnight
        are checked up to midnight of the start date.
        """
        event_end = end.time() if end.date() == start.date() else time(0, 0)
        return WorkingHoursValidator.validate(start.time(), event_end, start.weekday(), config)

    @staticmethod
    def validate_series(
        series: RecurringSeries,
        range_start: datetime,
        range_end: datetime,
        config: WorkingHoursConfig | None,
    ) -> Iterator[tuple[RecurringInstance, ValidationOutcome]]:
        """
        Validate every materialized occurrence of `series` in the range,
        honoring its exceptions (deleted occurrences are skipped, modified
        ones are checked at their new time).
        """
        for instance in instances(series, range_start, range_end):
            tz = series.start.tzinfo
            local_start = instance.start.astimezone(tz)
            local_end = instance.end.astimezone(tz)
            yield instance, WorkingHoursValidator.validate_event(local_start, local_end, config)

    @staticmethod
    def _overlaps_break(start: int, end: int, block: BreakBlock) -> bool:
        break_start = _minutes(block.start)
        break_end = _minutes(block.end)
        if break_end <= break_start:
            logger.warning(
                "Skipping malformed break %r (%s - %s)",
                block.name,
                block.start,
                block.end,
            )
            return False
        return start < break_end and break_start < end
