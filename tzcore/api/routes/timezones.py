# tzcore/api/routes/timezones.py
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query

from tzcore.api.dependencies.services import get_analyzer, get_converter, get_registry
from tzcore.core.config import get_settings
from tzcore.schemas.api import (
    ClassifyRequest,
    ClassifyResponse,
    ConvertRequest,
    TransitionsResponse,
    ZoneListResponse,
    ZoneRead,
)
from tzcore.schemas.zone import ConvertedTime, ZoneInfoSummary
from tzcore.services.dst_analyzer import MAX_YEAR, MIN_YEAR, DSTAnalyzer
from tzcore.services.time_converter import TimeConverter
from tzcore.services.zone_registry import ZoneRegistry

router = APIRouter(prefix="/timezones", tags=["Timezones"])


@router.get(
    "",
    response_model=ZoneListResponse,
    summary="List known time zones",
    description=(
        "List canonical IANA zones ordered by region, then name.\n\n"
        "`filter` is a case-insensitive substring of the zone name "
        "(e.g. `york`, `europe/`)."
    ),
)
async def list_timezones(
    filter: str | None = Query(None, description="Case-insensitive substring of the zone name."),
    registry: ZoneRegistry = Depends(get_registry),
) -> ZoneListResponse:
    zones = [ZoneRead.from_handle(handle) for handle in registry.list(filter)]
    return ZoneListResponse(count=len(zones), zones=zones)


@router.get(
    "/resolve",
    response_model=ZoneRead,
    summary="Resolve a zone name or abbreviation",
    description=(
        "Resolve an IANA name (case-sensitive) or a common abbreviation "
        "(case-insensitive, e.g. `pst`, `IST`) to its canonical zone.\n\n"
        "Unknown identifiers return **404**."
    ),
    responses={404: {"description": "Unknown time zone."}},
)
async def resolve_timezone(
    zone: str = Query(..., description="IANA name or abbreviation.", examples=["PST"]),
    registry: ZoneRegistry = Depends(get_registry),
) -> ZoneRead:
    return ZoneRead.from_handle(registry.resolve(zone))


@router.get(
    "/info",
    response_model=ZoneInfoSummary,
    summary="Offset, abbreviation and next DST change of a zone",
    responses={404: {"description": "Unknown time zone."}},
)
async def timezone_info(
    zone: str = Query(..., examples=["Europe/London"]),
    at: datetime | None = Query(
        None,
        description="Instant to describe (ISO 8601 with offset). Defaults to now; naive values are UTC.",
    ),
    registry: ZoneRegistry = Depends(get_registry),
    analyzer: DSTAnalyzer = Depends(get_analyzer),
) -> ZoneInfoSummary:
    handle = registry.resolve(zone)
    instant = at or datetime.now(tz=timezone.utc)
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return analyzer.zone_info(handle, instant)


@router.post(
    "/convert",
    response_model=ConvertedTime,
    summary="Convert a time between zones",
    description=(
        "Convert an instant or a wall-clock time from one zone to another.\n\n"
        "A wall-clock time inside a DST gap or overlap is never guessed: the "
        "request fails with **409** unless `disambiguation` is `earlier` or `later`."
    ),
    responses={
        404: {"description": "Unknown time zone."},
        409: {"description": "Nonexistent or ambiguous wall-clock time."},
    },
)
async def convert_time(
    payload: ConvertRequest,
    registry: ZoneRegistry = Depends(get_registry),
    converter: TimeConverter = Depends(get_converter),
) -> ConvertedTime:
    from_zone = registry.resolve(payload.from_zone)
    to_zone = registry.resolve(payload.to_zone)
    return converter.convert(payload.value, from_zone, to_zone, payload.disambiguation)


@router.get(
    "/dst-transitions",
    response_model=TransitionsResponse,
    summary="DST transitions of a zone in a year",
    description=(
        "Every UTC-offset change between local midnight on January 1st of "
        "`year` and the next January 1st. Zones without DST return an empty list."
    ),
    responses={404: {"description": "Unknown time zone."}},
)
async def dst_transitions(
    zone: str = Query(..., examples=["America/New_York"]),
    year: int = Query(..., ge=MIN_YEAR, le=MAX_YEAR, examples=[2025]),
    registry: ZoneRegistry = Depends(get_registry),
    analyzer: DSTAnalyzer = Depends(get_analyzer),
) -> TransitionsResponse:
    handle = registry.resolve(zone)
    return TransitionsResponse(
        zone=handle.name,
        year=year,
        transitions=analyzer.transitions_for_year(handle, year),
    )


@router.post(
    "/classify",
    response_model=ClassifyResponse,
    summary="Classify a wall-clock time against DST",
    description=(
        "Report whether a local time is unambiguous, nonexistent (spring-forward "
        "gap) or ambiguous (fall-back overlap), together with a user-facing "
        "warning and alternative times to choose from."
    ),
    responses={404: {"description": "Unknown time zone."}},
)
async def classify_local_time(
    payload: ClassifyRequest,
    registry: ZoneRegistry = Depends(get_registry),
    analyzer: DSTAnalyzer = Depends(get_analyzer),
) -> ClassifyResponse:
    handle = registry.resolve(payload.zone)
    window_days = payload.window_days
    if window_days is None:
        window_days = get_settings().DST_WARNING_DAYS

    return ClassifyResponse(
        classification=analyzer.classify(handle, payload.local_time),
        warning=analyzer.check_local_time(handle, payload.local_time, window_days),
        alternatives=analyzer.suggest_alternatives(handle, payload.local_time),
    )
