# tzcore/api/dependencies/services.py
from functools import lru_cache
from pathlib import Path

from tzcore.core.config import get_settings
from tzcore.schemas.working_hours import BreakBlock, BreakType, DaySchedule, WorkingHoursConfig
from tzcore.services.dst_analyzer import DSTAnalyzer
from tzcore.services.meeting_finder import MeetingTimeFinder
from tzcore.services.slot_scorer import SlotScorer
from tzcore.services.time_converter import TimeConverter
from tzcore.services.working_hours_loader import load_working_hours
from tzcore.services.zone_registry import ZoneRegistry, get_zone_registry


# Used when WORKING_HOURS_FILE is not configured.
DEFAULT_WORKING_HOURS = WorkingHoursConfig(
    default=DaySchedule(
        breaks=(BreakBlock(name="Lunch", start="12:00", end="13:00", type=BreakType.LUNCH),),
    ),
)


def get_registry() -> ZoneRegistry:
    """
    Dependency returning the process-wide zone registry.

    Tests replace it through `app.dependency_overrides[get_registry]`.
    """
    return get_zone_registry()


@lru_cache()
def get_analyzer() -> DSTAnalyzer:
    return DSTAnalyzer()


@lru_cache()
def get_converter() -> TimeConverter:
    return TimeConverter(analyzer=get_analyzer())


@lru_cache()
def get_finder() -> MeetingTimeFinder:
    """
    Meeting time finder configured from settings (grid step and usability
    floor).
    """
    settings = get_settings()
    return MeetingTimeFinder(
        converter=get_converter(),
        scorer=SlotScorer(),
        granularity_minutes=settings.SLOT_GRANULARITY_MINUTES,
        min_usable_score=settings.MIN_USABLE_SCORE,
    )


@lru_cache()
def get_working_hours() -> WorkingHoursConfig:
    """
    Working-hours policy applied when a request does not carry its own.

    Rules
    -----
    - WORKING_HOURS_FILE set  -> loaded (and checked) once per process;
                                 a broken file fails the request loudly.
    - Not set                 -> 09:00-17:00 with a 12:00-13:00 lunch break.
    """
    settings = get_settings()
    if settings.WORKING_HOURS_FILE:
        return load_working_hours(Path(settings.WORKING_HOURS_FILE))
    return DEFAULT_WORKING_HOURS
