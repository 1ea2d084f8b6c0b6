"""Error taxonomy for entity operations.

Every failure an operation can produce is a CrudError subclass carrying the
HTTP status and a machine-readable code. The API layer is the only place
that turns these into responses.
"""

from typing import Any


class CrudError(Exception):
    """Base class for all entity operation errors."""

    status_code: int = 500
    code: str = "ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.message, "code": self.code}


class BadRequest(CrudError):
    """Malformed input: bad JSON, invalid id, missing fields, unknown action."""

    status_code = 400
    code = "BAD_REQUEST"


class InvalidId(BadRequest):
    code = "INVALID_ID"

    def __init__(self, raw: str):
        super().__init__(f"Invalid ID '{raw}'")
        self.raw = raw


class InvalidBody(BadRequest):
    code = "INVALID_BODY"


class NoFieldsProvided(BadRequest):
    code = "NO_FIELDS_PROVIDED"

    def __init__(self, entity_key: str):
        super().__init__(f"No updatable fields provided for '{entity_key}'")


class ValidationFailed(CrudError):
    """A before-hook rejected the operation."""

    status_code = 400
    code = "VALIDATION_FAILED"


class NotFound(CrudError):
    status_code = 404
    code = "NOT_FOUND"


class MethodNotAllowed(CrudError):
    status_code = 405
    code = "METHOD_NOT_ALLOWED"


class StoreFailure(CrudError):
    """Connection or statement failure.

    The message shown to callers is always generic; the original exception
    is kept on ``__cause__`` for server-side logging.
    """

    status_code = 500
    code = "STORE_FAILURE"

    def __init__(self, message: str = "Database error"):
        super().__init__(message)
