# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from tzcore.api.dependencies.services import get_registry
from tzcore.main import create_app
from tzcore.schemas.working_hours import BreakBlock, BreakType, DaySchedule, WorkingHoursConfig
from tzcore.services.dst_analyzer import DSTAnalyzer
from tzcore.services.time_converter import TimeConverter
from tzcore.services.zone_registry import ZoneRegistry

# Frozen catalog so results do not depend on the host's zone list.
FIXTURE_ZONES = (
    "UTC",
    "America/New_York",
    "America/Chicago",
    "America/Denver",
    "America/Los_Angeles",
    "Asia/Dubai",
    "Asia/Kathmandu",
    "Asia/Kolkata",
    "Asia/Tokyo",
    "Australia/Lord_Howe",
    "Australia/Sydney",
    "Europe/London",
    "Europe/Paris",
    "Pacific/Auckland",
)


@pytest.fixture(scope="session")
def registry() -> ZoneRegistry:
    return ZoneRegistry(zone_names=FIXTURE_ZONES, reference_year=2025)


@pytest.fixture(scope="session")
def analyzer() -> DSTAnalyzer:
    return DSTAnalyzer()


@pytest.fixture(scope="session")
def converter(analyzer) -> TimeConverter:
    return TimeConverter(analyzer=analyzer)


@pytest.fixture
def new_york(registry):
    return registry.resolve("America/New_York")


@pytest.fixture
def tokyo(registry):
    return registry.resolve("Asia/Tokyo")


@pytest.fixture
def london(registry):
    return registry.resolve("Europe/London")


@pytest.fixture
def lunch_config() -> WorkingHoursConfig:
    """
    09:00-17:00 with a 12:00-13:00 lunch break.
    """
    return WorkingHoursConfig(
        default=DaySchedule(
            start="09:00",
            end="17:00",
            breaks=(BreakBlock(name="Lunch", start="12:00", end="13:00", type=BreakType.LUNCH),),
        )
    )


@pytest.fixture(scope="session")
def client(registry) -> TestClient:
    """
    Shared TestClient fixture for all API tests.

    Uses the application factory and swaps the zone registry for the frozen
    fixture catalog.
    """
    app = create_app()
    app.dependency_overrides[get_registry] = lambda: registry
    with TestClient(app) as test_client:
        yield test_client
