"""
Service error taxonomy.

Services raise these instead of HTTPException so the same code can run
outside a request (CLI, tests). The application registers one handler that
turns any ServiceError into ``{"error": <kind>, "message": <text>}`` with the
matching HTTP status.
"""


class ServiceError(Exception):
    """Base class for errors surfaced to API callers."""
    status_code = 500
    kind = "ServiceError"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.kind, "message": self.message}


class NotFound(ServiceError):
    """Unknown studentId on an operation that requires an existing record."""
    status_code = 404
    kind = "NotFound"


class Conflict(ServiceError):
    """Duplicate studentId on create."""
    status_code = 409
    kind = "Conflict"


class BadRequest(ServiceError):
    """Malformed or missing request fields."""
    status_code = 400
    kind = "BadRequest"


class Unavailable(ServiceError):
    """Storage unreachable or timed out; safe for the client to retry."""
    status_code = 503
    kind = "Unavailable"
