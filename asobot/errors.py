# asobot/errors.py
"""Exception taxonomy shared by the services and the JSON API."""


class AsobotError(Exception):
    """Base exception for errors surfaced to API callers"""
    status_code = 500
    label = "Internal Server Error"

    def __init__(self, message, status_code=None):
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self):
        return {"error": self.label, "message": self.message}


class ValidationError(AsobotError):
    """Malformed or missing input (blank title, empty candidate list, unknown vote)"""
    status_code = 400
    label = "Bad Request"


class InvalidTransitionError(ValidationError):
    """The wish's current phase does not allow the requested transition"""
    status_code = 409
    label = "Conflict"


class PermissionDeniedError(AsobotError):
    """Action attempted by someone other than the wish creator, or too late"""
    status_code = 403
    label = "Forbidden"


class NotFoundError(AsobotError):
    status_code = 404
    label = "Not Found"


class ConflictError(AsobotError):
    """Duplicate insert on a unique constraint.

    Raised by the storage helpers and recovered locally by callers that treat
    the duplicate as an idempotent no-op.
    """
    status_code = 409
    label = "Conflict"


class DependencyError(AsobotError):
    """Storage or notification dispatch failure"""
    status_code = 502
    label = "Bad Gateway"
