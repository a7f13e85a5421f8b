"""
API Module - Local HTTP interface for the host UI.

The UI (running on the same device):
1. Reads the current state and renders the screen it names
2. Sends each tap as one action
3. Polls the timer while a turn runs
4. Offers to resume a saved game at startup

There is exactly one live game; no accounts, no network play.
"""

from .schemas import (
    # Requests
    ActionRequest,
    TickRequest,
    # Responses
    ActionResponse,
    GameStateResponse,
    EventsResponse,
    ResultsResponse,
    ResumeOfferResponse,
    ErrorResponse,
    HealthResponse,
    # Enums
    ActionName,
    ErrorCode,
    EventName,
)
from .service import FishbowlService, state_to_response
from .app import create_app

__all__ = [
    # Requests
    "ActionRequest",
    "TickRequest",
    # Responses
    "ActionResponse",
    "GameStateResponse",
    "EventsResponse",
    "ResultsResponse",
    "ResumeOfferResponse",
    "ErrorResponse",
    "HealthResponse",
    # Enums
    "ActionName",
    "ErrorCode",
    "EventName",
    # Service
    "FishbowlService",
    "state_to_response",
    "create_app",
]
