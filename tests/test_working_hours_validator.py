# tests/test_working_hours_validator.py
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

import pytest

from tzcore.schemas.recurrence import RecurringSeries
from tzcore.schemas.working_hours import (
    BreakBlock,
    DaySchedule,
    ValidationSeverity,
    WorkingHoursConfig,
)
from tzcore.services.recurrence import apply_exception
from tzcore.services.working_hours_validator import WorkingHoursValidator, resolve_schedule

NY = ZoneInfo("America/New_York")


def test_event_inside_lunch_is_rejected(lunch_config):
    outcome = WorkingHoursValidator.validate(time(12, 30), time(13, 0), "monday", lunch_config)

    assert outcome.severity is ValidationSeverity.HARD_REJECT
    assert outcome.break_name == "Lunch"
    assert outcome.reason == "Event cannot be scheduled during Lunch (12:00 - 13:00)"


def test_event_starting_at_break_end_is_allowed(lunch_config):
    outcome = WorkingHoursValidator.validate(time(13, 0), time(13, 30), "monday", lunch_config)

    assert outcome.severity is ValidationSeverity.ALLOWED
    assert outcome.allowed
    assert outcome.reason is None


def test_event_ending_at_break_start_is_allowed(lunch_config):
    outcome = WorkingHoursValidator.validate(time(11, 0), time(12, 0), "monday", lunch_config)

    assert outcome.allowed


def test_break_wins_over_working_hours_warning(lunch_config):
    """
    An event that both starts before working hours and crosses lunch is a
    hard reject, never a soft warning.
    """
    outcome = WorkingHoursValidator.validate(time(7, 0), time(12, 30), "tuesday", lunch_config)

    assert outcome.severity is ValidationSeverity.HARD_REJECT
    assert outcome.severity.rank > ValidationSeverity.SOFT_WARNING.rank > ValidationSeverity.ALLOWED.rank


def test_before_start_is_soft_warning(lunch_config):
    outcome = WorkingHoursValidator.validate(time(8, 0), time(9, 30), "wednesday", lunch_config)

    assert outcome.severity is ValidationSeverity.SOFT_WARNING
    assert outcome.minutes_before_start == 60
    assert outcome.reason == "Event scheduled outside working hours (09:00 - 17:00) - 1 hour(s) before start"


def test_after_end_is_soft_warning(lunch_config):
    outcome = WorkingHoursValidator.validate(time(16, 30), time(18, 15), "thursday", lunch_config)

    assert outcome.severity is ValidationSeverity.SOFT_WARNING
    assert outcome.minutes_after_end == 75
    assert outcome.reason.endswith("1h 15m after end")


def test_end_before_start_runs_to_midnight(lunch_config):
    outcome = WorkingHoursValidator.validate(time(16, 0), time(0, 0), "friday", lunch_config)

    assert outcome.severity is ValidationSeverity.SOFT_WARNING
    assert outcome.minutes_after_end == 7 * 60


def test_first_overlapping_break_in_config_order_is_reported():
    config = WorkingHoursConfig(
        default=DaySchedule(
            breaks=(
                BreakBlock(name="Coffee", start="10:00", end="10:15", type="coffee"),
                BreakBlock(name="Lunch", start="12:00", end="13:00", type="lunch"),
            )
        )
    )

    outcome = WorkingHoursValidator.validate(time(10, 0), time(12, 30), 0, config)

    assert outcome.break_name == "Coffee"


def test_malformed_break_is_skipped():
    config = WorkingHoursConfig(
        default=DaySchedule(breaks=(BreakBlock(name="Broken", start="14:00", end="13:00"),))
    )

    assert WorkingHoursValidator.validate(time(13, 30), time(14, 30), "monday", config).allowed


def test_inverted_working_hours_degrade_to_allowed():
    config = WorkingHoursConfig(default=DaySchedule(start="18:00", end="09:00"))

    assert WorkingHoursValidator.validate(time(7, 0), time(8, 0), "monday", config).allowed


def test_missing_working_hours_still_check_breaks():
    config = WorkingHoursConfig(
        default=DaySchedule(start=None, end=None, breaks=(BreakBlock(name="Lunch", start="12:00", end="13:00"),))
    )

    assert WorkingHoursValidator.validate(time(6, 0), time(7, 0), "monday", config).allowed
    assert (
        WorkingHoursValidator.validate(time(12, 0), time(12, 15), "monday", config).severity
        is ValidationSeverity.HARD_REJECT
    )


def test_no_config_allows_everything():
    assert WorkingHoursValidator.validate(time(3, 0), time(4, 0), "sunday", None).allowed
    assert WorkingHoursValidator.validate(time(3, 0), time(4, 0), "sunday", WorkingHoursConfig()).allowed


def test_schedule_resolution_order():
    default = DaySchedule(start="09:00", end="17:00")
    friday = DaySchedule(start="09:00", end="13:00")
    monday_disabled = DaySchedule(enabled=False, start="10:00", end="11:00")
    weekend = DaySchedule(start="10:00", end="14:00")
    config = WorkingHoursConfig(default=default, friday=friday, monday=monday_disabled, weekend=weekend)

    assert resolve_schedule("friday", config) == friday
    assert resolve_schedule("Monday", config) == default
    assert resolve_schedule(5, config) == weekend
    assert resolve_schedule("sunday", config) == weekend
    assert resolve_schedule("wednesday", config) == default
    assert resolve_schedule("funday", config) == default


def test_disabled_default_means_no_policy():
    config = WorkingHoursConfig(default=DaySchedule(enabled=False))

    assert resolve_schedule("tuesday", config) is None


def test_friday_override_applies(lunch_config):
    config = lunch_config.model_copy(update={"friday": DaySchedule(start="09:00", end="13:00")})

    outcome = WorkingHoursValidator.validate(time(13, 30), time(14, 0), "friday", config)

    assert outcome.severity is ValidationSeverity.SOFT_WARNING
    assert outcome.minutes_after_end == 60


def test_validate_event_from_datetimes(lunch_config):
    start = datetime(2025, 6, 10, 12, 15, tzinfo=NY)

    outcome = WorkingHoursValidator.validate_event(start, start + timedelta(minutes=30), lunch_config)

    assert outcome.severity is ValidationSeverity.HARD_REJECT


def test_validate_series_honors_exceptions(lunch_config):
    series = RecurringSeries(
        series_id="lunch-sync",
        title="Lunch sync",
        rule="FREQ=DAILY;BYDAY=MO,TU,WE,TH,FR",
        start=datetime(2025, 6, 9, 12, 30, tzinfo=NY),
        duration=timedelta(minutes=30),
    )
    series = apply_exception(
        series,
        date(2025, 6, 10),
        new_start=datetime(2025, 6, 10, 14, 0, tzinfo=NY),
        new_end=datetime(2025, 6, 10, 14, 30, tzinfo=NY),
    )
    series = apply_exception(series, date(2025, 6, 11), deleted=True)

    results = list(
        WorkingHoursValidator.validate_series(
            series,
            datetime(2025, 6, 9, tzinfo=timezone.utc),
            datetime(2025, 6, 14, tzinfo=timezone.utc),
            lunch_config,
        )
    )

    by_date = {instance.occurrence_date: outcome.severity for instance, outcome in results}
    assert by_date == {
        date(2025, 6, 9): ValidationSeverity.HARD_REJECT,
        date(2025, 6, 10): ValidationSeverity.ALLOWED,
        date(2025, 6, 12): ValidationSeverity.HARD_REJECT,
        date(2025, 6, 13): ValidationSeverity.HARD_REJECT,
    }


@pytest.mark.parametrize("weekday", ["saturday", 6])
def test_weekend_without_bucket_uses_default(lunch_config, weekday):
    outcome = WorkingHoursValidator.validate(time(12, 0), time(12, 30), weekday, lunch_config)

    assert outcome.severity is ValidationSeverity.HARD_REJECT
