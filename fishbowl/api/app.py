"""
FastAPI Application - Local HTTP API for the host UI.

Endpoints:
    GET    /api/v1/health               Liveness and version
    GET    /api/v1/game                 Current game state
    POST   /api/v1/game/actions         Apply one action
    POST   /api/v1/game/tick            Advance the turn timer
    POST   /api/v1/game/restart         Full game restart
    GET    /api/v1/game/events          Event log (?type= to filter)
    GET    /api/v1/game/results         Scores, totals and winner
    GET    /api/v1/game/resume          Saved game on offer
    POST   /api/v1/game/resume          Resume the saved game
    DELETE /api/v1/game/resume          Discard the saved game

The server runs on the host device next to the UI; there is one live game.
Engine rejections are not HTTP errors: they come back as 200 with
success=false and the (unchanged or error-carrying) state.

Run with: uvicorn fishbowl.api.app:create_app --factory
"""

from contextlib import asynccontextmanager
from typing import Optional, Union
import logging
import os

from .. import __version__

# Environment configuration
FISHBOWL_ENV = os.getenv("FISHBOWL_ENV", "development")
FISHBOWL_DATA_DIR = os.getenv("FISHBOWL_DATA_DIR", None)
FISHBOWL_TICK_INTERVAL_MS = int(os.getenv("FISHBOWL_TICK_INTERVAL_MS", "250"))
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger(__name__)


def create_app(service=None, run_ticker: bool = True):
    """
    Create the FastAPI application.

    Args:
        service: Optional FishbowlService (creates one with a file store if
            not provided)
        run_ticker: Drive the turn timer from a server-side ticker while
            the app is running

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Body, Query
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .service import FishbowlService
    from .schemas import (
        # Request models
        ActionRequest,
        TickRequest,
        # Response models
        ActionResponse,
        GameStateResponse,
        EventsResponse,
        ResultsResponse,
        ResumeOfferResponse,
        ErrorResponse,
        HealthResponse,
        # Enums
        ErrorCode,
        EventName,
    )
    from ..session import GameSession, TimerTicker
    from ..storage import FileGameStore

    if service is None:
        store = FileGameStore(data_dir=FISHBOWL_DATA_DIR)
        service = FishbowlService(session=GameSession(store=store))
    api_service = service

    @asynccontextmanager
    async def lifespan(app):
        ticker = None
        if run_ticker:
            ticker = TimerTicker(api_service.session, interval_ms=FISHBOWL_TICK_INTERVAL_MS)
            ticker.start()
        try:
            yield
        finally:
            if ticker is not None:
                ticker.stop()

    app = FastAPI(
        title="Fishbowl Game API",
        description="""
Single-device fishbowl party game engine.

## Game flow

`hostSetup → wordEntry ⇄ entryHandoff → ready → turnHandoff → turnStart →
turnActive → timeUp | roundComplete → … → final`

Every UI tap is one `POST /actions`. Actions sent from the wrong screen are
ignored (`PRECONDITION_FAILED`) and leave the state untouched.

## Error Codes

| Code | Description |
|------|-------------|
| `VALIDATION_ERROR` | Word entry or round start rejected |
| `NOTHING_TO_UNDO` | No undoable action this round |
| `PRECONDITION_FAILED` | Action not allowed on this screen |
| `INVALID_ACTION` | Missing required fields |
| `NO_SAVED_GAME` | No saved game to resume |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    # =========================================================================
    # Health
    # =========================================================================

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health() -> HealthResponse:
        return HealthResponse(version=__version__, environment=FISHBOWL_ENV)

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/game",
        response_model=GameStateResponse,
        tags=["Game"],
        summary="Get the current game state",
    )
    async def get_game() -> GameStateResponse:
        return api_service.get_state()

    @app.post(
        "/api/v1/game/actions",
        response_model=ActionResponse,
        responses={400: {"model": ErrorResponse, "description": "Missing action fields"}},
        tags=["Game"],
        summary="Apply one action",
    )
    async def apply_action(request: ActionRequest) -> Union[ActionResponse, JSONResponse]:
        """
        Apply a single UI action.

        Validation errors and empty undos set `last_error` on the returned
        state; stale actions return the state unchanged.
        """
        try:
            return api_service.apply_action(request)
        except ValueError as e:
            return make_error_response(ErrorCode.INVALID_ACTION, str(e))

    @app.post(
        "/api/v1/game/tick",
        response_model=ActionResponse,
        tags=["Game"],
        summary="Advance the turn timer",
    )
    async def tick(request: Optional[TickRequest] = Body(None)) -> ActionResponse:
        """Recompute remaining turn time from the given (or server) clock."""
        return api_service.tick(request.now_ms if request else None)

    @app.post(
        "/api/v1/game/restart",
        response_model=ActionResponse,
        tags=["Game"],
        summary="Restart the whole game",
    )
    async def restart_game() -> ActionResponse:
        logger.info("Game restart requested")
        return api_service.restart_game()

    @app.get(
        "/api/v1/game/events",
        response_model=EventsResponse,
        tags=["Game"],
        summary="Get the event log",
    )
    async def get_events(
        event_type: Optional[EventName] = Query(None, alias="type"),
    ) -> EventsResponse:
        return api_service.get_events(event_type)

    @app.get(
        "/api/v1/game/results",
        response_model=ResultsResponse,
        tags=["Game"],
        summary="Get scores and the winner",
    )
    async def get_results() -> ResultsResponse:
        return api_service.get_results()

    # =========================================================================
    # Resume Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/game/resume",
        response_model=ResumeOfferResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Resume"],
        summary="Get the saved game on offer",
    )
    async def get_resume_offer() -> Union[ResumeOfferResponse, JSONResponse]:
        offer = api_service.get_resume_offer()
        if offer is None:
            return make_error_response(ErrorCode.NO_SAVED_GAME, "No saved game", status_code=404)
        return offer

    @app.post(
        "/api/v1/game/resume",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Resume"],
        summary="Resume the saved game",
    )
    async def resume_game() -> Union[GameStateResponse, JSONResponse]:
        try:
            return api_service.resume()
        except LookupError as e:
            return make_error_response(ErrorCode.NO_SAVED_GAME, str(e), status_code=404)

    @app.delete(
        "/api/v1/game/resume",
        response_model=GameStateResponse,
        tags=["Resume"],
        summary="Discard the saved game",
    )
    async def discard_saved_game() -> GameStateResponse:
        api_service.discard_saved()
        return api_service.get_state()

    return app
