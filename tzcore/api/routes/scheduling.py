# tzcore/api/routes/scheduling.py
from datetime import timedelta

from fastapi import APIRouter, Depends

from tzcore.api.dependencies.services import get_finder, get_registry, get_working_hours
from tzcore.core.config import get_settings
from tzcore.schemas.api import FindSlotsRequest, FindSlotsResponse, ValidateRequest
from tzcore.schemas.meeting import ParticipantZone
from tzcore.schemas.working_hours import ValidationOutcome, WorkingHoursConfig
from tzcore.services.meeting_finder import MeetingTimeFinder
from tzcore.services.working_hours_validator import WorkingHoursValidator
from tzcore.services.zone_registry import ZoneRegistry

router = APIRouter(prefix="/scheduling", tags=["Scheduling"])


@router.post(
    "/validate",
    response_model=ValidationOutcome,
    summary="Check an event against working hours and breaks",
    description=(
        "Validate a local event window for a weekday.\n\n"
        "- Overlapping a break → `hard_reject` (never downgraded).\n"
        "- Outside working hours → `soft_warning`.\n"
        "- Otherwise → `allowed`.\n\n"
        "Without an explicit `config` the server's configured policy is used."
    ),
)
async def validate_event(
    payload: ValidateRequest,
    default_config: WorkingHoursConfig = Depends(get_working_hours),
) -> ValidationOutcome:
    config = payload.config if payload.config is not None else default_config
    return WorkingHoursValidator.validate(payload.event_start, payload.event_end, payload.weekday, config)


@router.post(
    "/find-slots",
    response_model=FindSlotsResponse,
    summary="Find and rank meeting slots across zones",
    description=(
        "Enumerate candidate slots inside the caller's working-hours window for "
        "every date in `[search_start, search_end]` and rank them with the "
        "five-factor score (coverage, time quality, cultural fit, weekday, "
        "holidays).\n\n"
        "Returns **422** when the window holds no candidate at all; low scores "
        "never empty the result."
    ),
    responses={
        400: {"description": "Invalid search window, duration or participants."},
        404: {"description": "Unknown time zone."},
        422: {"description": "No candidate slots in the window."},
    },
)
async def find_slots(
    payload: FindSlotsRequest,
    registry: ZoneRegistry = Depends(get_registry),
    finder: MeetingTimeFinder = Depends(get_finder),
) -> FindSlotsResponse:
    settings = get_settings()
    caller_zone = registry.resolve(payload.caller_zone or settings.DEFAULT_ZONE)
    participants = [
        ParticipantZone(participant=p.participant, zone=registry.resolve(p.zone))
        for p in payload.participants
    ]

    slots = finder.find_slots(
        participants,
        timedelta(minutes=payload.duration_minutes),
        payload.search_start,
        payload.search_end,
        payload.working_hours_start,
        payload.working_hours_end,
        caller_zone,
        exclude_weekends=payload.exclude_weekends,
        limit=payload.limit or settings.MAX_SUGGESTIONS,
    )
    return FindSlotsResponse(caller_zone=caller_zone.name, slots=slots)
