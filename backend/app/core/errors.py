"""
Error taxonomy for the test engine.

Services raise these; app.main maps them onto HTTP responses. None of them
depend on FastAPI so the services stay usable from workers and scripts.
"""
from typing import Any, Optional


class EngineError(Exception):
    """Base class for errors surfaced to the caller."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, *, extra: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.extra = extra or {}


class InvalidRequestError(EngineError):
    """Missing or conflicting input. Raised before any external call."""

    status_code = 400
    error_code = "INVALID_REQUEST"


class NotFoundError(EngineError):
    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: str):
        super().__init__(
            f"{entity} '{entity_id}' not found",
            extra={"entity": entity, "id": entity_id},
        )


class AccessDeniedError(EngineError):
    status_code = 403
    error_code = "ACCESS_DENIED"


class UpstreamGenerationError(EngineError):
    """The text generator call itself failed (network, quota, bad key...)."""

    status_code = 502
    error_code = "GENERATION_UNAVAILABLE"

    def __init__(self, cause: BaseException):
        super().__init__(
            "Test generation failed, please try again later",
            extra={"cause": f"{cause.__class__.__name__}: {cause}"},
        )
        self.cause = cause


class InsufficientQuestionsError(EngineError):
    """Every attempt was spent and not a single question passed validation."""

    status_code = 422
    error_code = "INSUFFICIENT_QUESTIONS"

    def __init__(self, requested: int, attempts: int):
        super().__init__(
            "Could not generate good enough questions. "
            "Try changing the topic or the difficulty level.",
            extra={"requested": requested, "attempts": attempts},
        )
