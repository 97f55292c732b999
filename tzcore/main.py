# tzcore/main.py
import logging
from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from tzcore.api.routes import health, scheduling, timezones
from tzcore.core.config import get_settings
from tzcore.core.errors import (
    AmbiguousLocalTime,
    InvalidRecurrenceRule,
    MeetingSearchCancelled,
    NoCandidatesInWindow,
    NonExistentLocalTime,
    UnknownZone,
    WorkingHoursConfigError,
)
from tzcore.core.logging import configure_logging

logger = logging.getLogger(__name__)


def _register_error_handlers(app: FastAPI) -> None:
    """
    Map scheduling errors to HTTP responses.

    Rules
    -----
    - UnknownZone                              -> 404
    - NonExistentLocalTime / AmbiguousLocalTime -> 409 (caller must disambiguate)
    - NoCandidatesInWindow                      -> 422
    - WorkingHoursConfigError                   -> 500 (server misconfiguration)
    - InvalidRecurrenceRule / other ValueError  -> 400
    - MeetingSearchCancelled                    -> 503
    """

    @app.exception_handler(UnknownZone)
    async def unknown_zone_handler(request: Request, exc: UnknownZone) -> JSONResponse:
        return JSONResponse(
            status_code=HTTPStatus.NOT_FOUND,
            content={"detail": str(exc), "zone": exc.raw},
        )

    @app.exception_handler(NonExistentLocalTime)
    async def nonexistent_handler(request: Request, exc: NonExistentLocalTime) -> JSONResponse:
        return JSONResponse(
            status_code=HTTPStatus.CONFLICT,
            content={
                "detail": str(exc),
                "kind": "nonexistent",
                "zone": exc.zone,
                "gap_start": exc.gap_start.isoformat(),
                "gap_end": exc.gap_end.isoformat(),
            },
        )

    @app.exception_handler(AmbiguousLocalTime)
    async def ambiguous_handler(request: Request, exc: AmbiguousLocalTime) -> JSONResponse:
        return JSONResponse(
            status_code=HTTPStatus.CONFLICT,
            content={
                "detail": str(exc),
                "kind": "ambiguous",
                "zone": exc.zone,
                "offsets_seconds": list(exc.offsets_seconds),
            },
        )

    @app.exception_handler(NoCandidatesInWindow)
    async def no_candidates_handler(request: Request, exc: NoCandidatesInWindow) -> JSONResponse:
        return JSONResponse(status_code=HTTPStatus.UNPROCESSABLE_ENTITY, content={"detail": str(exc)})

    @app.exception_handler(WorkingHoursConfigError)
    async def config_error_handler(request: Request, exc: WorkingHoursConfigError) -> JSONResponse:
        logger.error("Working hours configuration is invalid", extra={"issues": exc.issues})
        return JSONResponse(
            status_code=HTTPStatus.INTERNAL_SERVER_ERROR,
            content={"detail": str(exc), "issues": exc.issues},
        )

    @app.exception_handler(InvalidRecurrenceRule)
    async def rule_error_handler(request: Request, exc: InvalidRecurrenceRule) -> JSONResponse:
        return JSONResponse(status_code=HTTPStatus.BAD_REQUEST, content={"detail": str(exc)})

    @app.exception_handler(MeetingSearchCancelled)
    async def cancelled_handler(request: Request, exc: MeetingSearchCancelled) -> JSONResponse:
        return JSONResponse(status_code=HTTPStatus.SERVICE_UNAVAILABLE, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(request: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=HTTPStatus.BAD_REQUEST, content={"detail": str(exc)})


def create_app() -> FastAPI:
    """
    Application factory for the timezone scheduling service.
    """
    settings = get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title=settings.APP_NAME,
        description=(
            "Timezone-aware scheduling core: zone lookup and conversion, DST\n"
            "transition analysis, working-hours and break validation, and\n"
            "multi-zone meeting time suggestions."
        ),
        version="0.1.0",
    )

    _register_error_handlers(app)

    # Routers
    app.include_router(health.router)
    app.include_router(timezones.router)
    app.include_router(scheduling.router)

    return app


app = create_app()
