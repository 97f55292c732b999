# tzcore/services/recurrence.py
from __future__ import annotations

import logging
from collections.abc import Iterator
from datetime import date, datetime, time, timedelta, timezone

from dateutil.rrule import rrule, rrulestr

from tzcore.core.errors import InvalidRecurrenceRule
from tzcore.schemas.recurrence import OccurrenceException, RecurringInstance, RecurringSeries

logger = logging.getLogger(__name__)


def parse_rule(series: RecurringSeries) -> rrule:
    """
    Parse the series' RRULE anchored at its (aware) start.

    The rule is expanded on wall-clock time in the start's zone, so a 09:30
    meeting stays at 09:30 local across DST changes. Per RFC 5545, an UNTIL
    value must then be given in UTC (`...Z`).
    """
    text = series.rule.strip()
    if text.upper().startswith("RRULE:"):
        text = text[len("RRULE:"):]
    try:
        rule = rrulestr(text, dtstart=series.start)
    except (ValueError, TypeError) as exc:
        raise InvalidRecurrenceRule(f"Invalid recurrence rule {series.rule!r}: {exc}") from exc
    if not isinstance(rule, rrule):
        raise InvalidRecurrenceRule(f"Expected a single RRULE, got {series.rule!r}")
    return rule


def _normalize(local: datetime) -> datetime:
    # A wall time inside a DST gap is moved forward to the real instant
    # (02:30 in a 02:00->03:00 gap becomes 03:30).
    tz = local.tzinfo
    return local.astimezone(timezone.utc).astimezone(tz)


class SeriesInstances:
    """
    Lazy, restartable view of a series' occurrences in `[range_start, range_end)`.

    Each iteration re-expands the rule, so the view always reflects the
    series it was built from and can be consumed any number of times.
    Occurrences are selected by their rule-derived start; a modified
    occurrence is reported at its new time.
    """

    def __init__(self, series: RecurringSeries, range_start: datetime, range_end: datetime) -> None:
        if range_start.tzinfo is None or range_end.tzinfo is None:
            raise ValueError("range_start and range_end must be timezone-aware")
        self.series = series
        self.range_start = range_start
        self.range_end = range_end

    def __iter__(self) -> Iterator[RecurringInstance]:
        series = self.series
        tz = series.start.tzinfo

        if self.range_end <= self.range_start:
            return

        rule = parse_rule(series)
        for occurrence in rule.xafter(self.range_start, inc=True):
            if occurrence >= self.range_end:
                break

            occurrence_date = occurrence.date()
            override = series.exceptions.get(occurrence_date)
            if override is not None and override.deleted:
                continue

            start = _normalize(occurrence)
            end = (start.astimezone(timezone.utc) + series.duration).astimezone(tz)
            title = series.title

            if override is not None:
                if override.start is not None:
                    start = override.start.astimezone(tz)
                    if override.end is None:
                        end = (override.start.astimezone(timezone.utc) + series.duration).astimezone(tz)
                if override.end is not None:
                    end = override.end.astimezone(tz)
                if override.title is not None:
                    title = override.title

            yield RecurringInstance(
                series_id=series.series_id,
                occurrence_date=occurrence_date,
                start=start,
                end=end,
                title=title,
                is_exception=override is not None,
            )


def instances(series: RecurringSeries, range_start: datetime, range_end: datetime) -> SeriesInstances:
    """
    Occurrences of `series` whose rule-derived start lies in
    `[range_start, range_end)`, with exceptions applied and deleted
    occurrences skipped.
    """
    return SeriesInstances(series, range_start, range_end)


def overlapping_instances(
    series: RecurringSeries, range_start: datetime, range_end: datetime
) -> list[RecurringInstance]:
    """
    Non-deleted occurrences whose effective `[start, end)` intersects
    `[range_start, range_end)`.

    Unlike `instances`, an occurrence moved by an exception is found at its
    new time even when its rule-derived start lies far outside the range.
    """
    if range_start.tzinfo is None or range_end.tzinfo is None:
        raise ValueError("range_start and range_end must be timezone-aware")

    found = {i.occurrence_date: i for i in instances(series, range_start - series.duration, range_end)}
    tz = series.start.tzinfo
    for occurrence_date, override in series.exceptions.items():
        if override.deleted or occurrence_date in found:
            continue
        day_start = datetime.combine(occurrence_date, time(0, 0), tzinfo=tz)
        for instance in instances(series, day_start, day_start + timedelta(days=1)):
            if instance.occurrence_date == occurrence_date:
                found[occurrence_date] = instance

    return sorted(
        (i for i in found.values() if i.start < range_end and range_start < i.end),
        key=lambda i: i.start,
    )


def _rule_start(series: RecurringSeries, occurrence_date: date) -> datetime | None:
    tz = series.start.tzinfo
    day_start = datetime.combine(occurrence_date, time(0, 0), tzinfo=tz)
    day_end = datetime.combine(occurrence_date + timedelta(days=1), time(0, 0), tzinfo=tz)
    rule = parse_rule(series)
    first = next(iter(rule.xafter(day_start, inc=True)), None)
    if first is None or first >= day_end or first.date() != occurrence_date:
        return None
    return _normalize(first)


def is_occurrence(series: RecurringSeries, occurrence_date: date) -> bool:
    """
    True if the master rule produces an occurrence on `occurrence_date`
    (local date in the series' zone), regardless of exceptions.
    """
    return _rule_start(series, occurrence_date) is not None


def apply_exception(
    series: RecurringSeries,
    occurrence_date: date,
    new_start: datetime | None = None,
    new_end: datetime | None = None,
    deleted: bool = False,
    new_title: str | None = None,
) -> RecurringSeries:
    """
    Return a copy of `series` with an exception recorded for one occurrence.

    Rules
    -----
    - The master rule is never modified.
    - Deleting marks the date as excluded; the record stays in the mapping
      so every later expansion skips it.
    - Exactly one exception exists per occurrence date: applying another one
      replaces the previous record. Applying the same exception twice gives
      an identical series.

    Raises
    ------
    ValueError
        If `occurrence_date` is not produced by the rule, or replacement
        times are naive, or the end is not after the (new or rule-derived)
        start.
    """
    rule_start = _rule_start(series, occurrence_date)
    if rule_start is None:
        raise ValueError(
            f"{occurrence_date.isoformat()} is not an occurrence of series {series.series_id!r}"
        )

    for value in (new_start, new_end):
        if value is not None and value.tzinfo is None:
            raise ValueError("Exception start/end must be timezone-aware")
    if new_start is not None and new_end is not None and new_end <= new_start:
        raise ValueError("Exception end must be after its start")
    if new_start is None and new_end is not None and new_end <= rule_start:
        raise ValueError("Exception end must be after the occurrence start")

    if deleted:
        record = OccurrenceException(
            series_id=series.series_id,
            occurrence_date=occurrence_date,
            deleted=True,
        )
    else:
        record = OccurrenceException(
            series_id=series.series_id,
            occurrence_date=occurrence_date,
            start=new_start,
            end=new_end,
            title=new_title,
        )

    exceptions = dict(series.exceptions)
    previous = exceptions.get(occurrence_date)
    if previous is not None and previous != record:
        logger.debug(
            "Replacing exception",
            extra={"series_id": series.series_id, "occurrence_date": occurrence_date.isoformat()},
        )
    exceptions[occurrence_date] = record
    return series.model_copy(update={"exceptions": exceptions})
