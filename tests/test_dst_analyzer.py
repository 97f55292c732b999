# tests/test_dst_analyzer.py
from collections import Counter
from datetime import date, datetime, timedelta, timezone

import pytest

from tzcore.schemas.dst import ClassificationKind, TransitionDirection, WarningSeverity


def test_new_york_transitions_2025(analyzer, new_york):
    transitions = analyzer.transitions_for_year(new_york, 2025)

    assert [t.instant for t in transitions] == [
        datetime(2025, 3, 9, 7, 0, tzinfo=timezone.utc),
        datetime(2025, 11, 2, 6, 0, tzinfo=timezone.utc),
    ]
    spring, fall = transitions
    assert spring.direction is TransitionDirection.FORWARD
    assert spring.abbreviation == "EDT"
    assert spring.previous_offset_seconds == -18000
    assert spring.offset_seconds == -14400
    assert spring.is_dst is True
    assert spring.shift_seconds == 3600
    assert spring.wall_clock_start == datetime(2025, 3, 9, 2, 0)
    assert spring.wall_clock_end == datetime(2025, 3, 9, 3, 0)

    assert fall.direction is TransitionDirection.BACKWARD
    assert fall.abbreviation == "EST"
    assert fall.is_dst is False
    assert fall.wall_clock_start == datetime(2025, 11, 2, 1, 0)
    assert fall.wall_clock_end == datetime(2025, 11, 2, 2, 0)


def test_southern_hemisphere_order(analyzer, registry):
    transitions = analyzer.transitions_for_year(registry.resolve("Australia/Sydney"), 2025)

    assert [(t.instant, t.direction) for t in transitions] == [
        (datetime(2025, 4, 5, 16, 0, tzinfo=timezone.utc), TransitionDirection.BACKWARD),
        (datetime(2025, 10, 4, 16, 0, tzinfo=timezone.utc), TransitionDirection.FORWARD),
    ]


def test_half_hour_shift(analyzer, registry):
    transitions = analyzer.transitions_for_year(registry.resolve("Australia/Lord_Howe"), 2025)

    assert len(transitions) == 2
    assert {t.shift_seconds for t in transitions} == {1800}


@pytest.mark.parametrize("zone_name", ["Asia/Tokyo", "UTC", "Asia/Kathmandu"])
def test_fixed_offset_zones_have_no_transitions(analyzer, registry, zone_name):
    zone = registry.resolve(zone_name)

    assert analyzer.transitions_for_year(zone, 2025) == []
    assert analyzer.classify(zone, datetime(2025, 3, 9, 2, 30)).kind is ClassificationKind.UNAMBIGUOUS


@pytest.mark.parametrize("year", [0, 1, 9998])
def test_transitions_for_year_outside_datetime_range(analyzer, tokyo, year):
    with pytest.raises(ValueError):
        analyzer.transitions_for_year(tokyo, year)


def test_transitions_for_earliest_supported_year(analyzer, tokyo):
    """
    Local midnight of year 2 in an east-of-UTC zone still converts to UTC.
    """
    assert analyzer.transitions_for_year(tokyo, 2) == []


def test_transitions_between_crosses_years(analyzer, new_york):
    transitions = analyzer.transitions_between(
        new_york,
        datetime(2024, 10, 1, tzinfo=timezone.utc),
        datetime(2025, 4, 1, tzinfo=timezone.utc),
    )

    assert [t.instant for t in transitions] == [
        datetime(2024, 11, 3, 6, 0, tzinfo=timezone.utc),
        datetime(2025, 3, 9, 7, 0, tzinfo=timezone.utc),
    ]


def test_classify_spring_forward_gap(analyzer, new_york):
    result = analyzer.classify(new_york, datetime(2025, 3, 9, 2, 30))

    assert result.kind is ClassificationKind.NONEXISTENT
    assert result.offsets_seconds == [-18000, -14400]
    assert result.transition is not None
    assert result.transition.direction is TransitionDirection.FORWARD


def test_classify_fall_back_overlap(analyzer, new_york):
    result = analyzer.classify(new_york, datetime(2025, 11, 2, 1, 30))

    assert result.kind is ClassificationKind.AMBIGUOUS
    assert result.offsets_seconds == [-4 * 3600, -5 * 3600]


@pytest.mark.parametrize(
    "local, expected",
    [
        (datetime(2025, 3, 9, 1, 59), ClassificationKind.UNAMBIGUOUS),
        (datetime(2025, 3, 9, 2, 0), ClassificationKind.NONEXISTENT),
        (datetime(2025, 3, 9, 3, 0), ClassificationKind.UNAMBIGUOUS),
        (datetime(2025, 11, 2, 0, 59), ClassificationKind.UNAMBIGUOUS),
        (datetime(2025, 11, 2, 1, 0), ClassificationKind.AMBIGUOUS),
        (datetime(2025, 11, 2, 2, 0), ClassificationKind.UNAMBIGUOUS),
        (datetime(2025, 1, 15, 12, 0), ClassificationKind.UNAMBIGUOUS),
    ],
)
def test_classify_boundaries(analyzer, new_york, local, expected):
    assert analyzer.classify(new_york, local).kind is expected


def test_classify_uses_wall_clock_of_aware_input(analyzer, new_york):
    aware = datetime(2025, 3, 9, 2, 30, tzinfo=timezone.utc)

    assert analyzer.classify(new_york, aware).kind is ClassificationKind.NONEXISTENT


def test_every_minute_classified_once_around_transitions(analyzer, new_york):
    """
    One 1-hour spring-forward plus one 1-hour fall-back give exactly 60
    nonexistent and 60 ambiguous minutes.
    """
    days = [date(2025, 3, d) for d in (8, 9, 10)] + [date(2025, 11, d) for d in (1, 2, 3)]
    counts = Counter()
    for day in days:
        start = datetime(day.year, day.month, day.day)
        for minute in range(24 * 60):
            counts[analyzer.classify(new_york, start + timedelta(minutes=minute)).kind] += 1

    assert counts[ClassificationKind.NONEXISTENT] == 60
    assert counts[ClassificationKind.AMBIGUOUS] == 60
    assert sum(counts.values()) == len(days) * 24 * 60


def test_upcoming_warning_within_window(analyzer, new_york):
    reference = datetime(2025, 3, 3, 12, 0, tzinfo=timezone.utc)

    upcoming = analyzer.upcoming_warning(new_york, reference, window_days=7)

    assert upcoming is not None
    assert upcoming.instant == datetime(2025, 3, 9, 7, 0, tzinfo=timezone.utc)
    assert analyzer.upcoming_warning(new_york, reference, window_days=3) is None
    assert analyzer.upcoming_warning(new_york, reference, window_days=0) is None


def test_upcoming_warning_is_strictly_after_reference(analyzer, new_york):
    reference = datetime(2025, 3, 9, 7, 0, tzinfo=timezone.utc)

    assert analyzer.upcoming_warning(new_york, reference, window_days=30) is None


def test_check_local_time_in_gap_is_error(analyzer, new_york):
    warning = analyzer.check_local_time(new_york, datetime(2025, 3, 9, 2, 30))

    assert warning is not None
    assert warning.severity is WarningSeverity.ERROR
    assert warning.in_gap is True
    assert "will not exist" in warning.message


def test_check_local_time_in_overlap_is_warning(analyzer, new_york):
    warning = analyzer.check_local_time(new_york, datetime(2025, 11, 2, 1, 30))

    assert warning is not None
    assert warning.severity is WarningSeverity.WARNING
    assert warning.in_overlap is True
    assert "occurs twice" in warning.message


def test_check_local_time_upcoming_spring_forward(analyzer, new_york):
    warning = analyzer.check_local_time(new_york, datetime(2025, 3, 5, 10, 0))

    assert warning is not None
    assert warning.severity is WarningSeverity.WARNING
    assert warning.days_until == 3
    assert warning.message == "Daylight Saving Time begins in 3 days (clocks spring forward 1 hour)"


def test_check_local_time_upcoming_fall_back(analyzer, new_york):
    warning = analyzer.check_local_time(new_york, datetime(2025, 10, 30, 10, 0))

    assert warning is not None
    assert warning.severity is WarningSeverity.INFO
    assert warning.message == "Daylight Saving Time ends in 2 days (clocks fall back 1 hour)"


def test_check_local_time_quiet_period(analyzer, new_york):
    assert analyzer.check_local_time(new_york, datetime(2025, 7, 1, 10, 0)) is None


def test_check_local_time_ignores_transition_that_just_passed(analyzer, new_york):
    """
    The day after spring forward nothing is reported; `days_until` never
    counts backwards.
    """
    assert analyzer.check_local_time(new_york, datetime(2025, 3, 10, 10, 0)) is None

    warning = analyzer.check_local_time(new_york, datetime(2025, 3, 9, 1, 59))
    assert warning is not None
    assert warning.days_until == 0


def test_suggest_alternatives_for_gap(analyzer, new_york):
    suggestions = analyzer.suggest_alternatives(new_york, datetime(2025, 3, 9, 2, 30))

    assert [s.replace(tzinfo=None) for s in suggestions] == [
        datetime(2025, 3, 9, 1, 30),
        datetime(2025, 3, 9, 3, 30),
    ]
    assert [s.utcoffset() for s in suggestions] == [timedelta(hours=-5), timedelta(hours=-4)]


def test_suggest_alternatives_for_overlap(analyzer, new_york):
    suggestions = analyzer.suggest_alternatives(new_york, datetime(2025, 11, 2, 1, 30))

    assert [s.astimezone(timezone.utc) for s in suggestions] == [
        datetime(2025, 11, 2, 5, 30, tzinfo=timezone.utc),
        datetime(2025, 11, 2, 6, 30, tzinfo=timezone.utc),
    ]


def test_suggest_alternatives_for_ordinary_time(analyzer, new_york):
    assert analyzer.suggest_alternatives(new_york, datetime(2025, 7, 1, 10, 0)) == []


def test_zone_info(analyzer, london):
    info = analyzer.zone_info(london, datetime(2025, 1, 15, 12, 0, tzinfo=timezone.utc))

    assert info.zone == "Europe/London"
    assert info.abbreviation == "GMT"
    assert info.utc_offset_seconds == 0
    assert info.is_dst is False
    assert info.next_transition == datetime(2025, 3, 30, 1, 0, tzinfo=timezone.utc)
