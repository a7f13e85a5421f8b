"""
Engine errors.

Handlers raise these; Reducer.apply catches them at its boundary and turns
them into an ActionResult. None of them escape the reducer.
"""

from __future__ import annotations


class FishbowlError(Exception):
    """Base class for recoverable engine errors."""
    error_code = "ENGINE_ERROR"


class ValidationError(FishbowlError):
    """User input was rejected (bad item, duplicate, missing name, ...)."""
    error_code = "VALIDATION_ERROR"


class NothingToUndoError(FishbowlError):
    """Undo requested with an empty or cross-round undo stack."""
    error_code = "NOTHING_TO_UNDO"

    def __init__(self, message: str = "Nothing to undo."):
        super().__init__(message)


class PreconditionError(FishbowlError):
    """
    Action issued from a screen or state that does not permit it.

    Treated as a stale or duplicate UI event: the state is left untouched
    and no lastError is shown.
    """
    error_code = "PRECONDITION_FAILED"
