"""
Domain error taxonomy.

Every service raises one of these; the API layer renders them with a single
exception handler so each denial carries its reason class.
"""


class HarvestLogError(Exception):
    """Base exception for HarvestLog domain errors."""

    status_code = 500
    reason = "error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message())
        self.message = message or self.default_message()

    @classmethod
    def default_message(cls) -> str:
        return "Request failed."


class InvalidRequest(HarvestLogError):
    """Input rejected before any state changed (weak password, missing church)."""

    status_code = 400
    reason = "invalid_request"

    @classmethod
    def default_message(cls) -> str:
        return "Invalid request."


class AuthenticationRequired(HarvestLogError):
    """No valid session."""

    status_code = 401
    reason = "not_authenticated"

    @classmethod
    def default_message(cls) -> str:
        return "Not logged in."


class PermissionDenied(HarvestLogError):
    """Resolved context lacks the needed permission."""

    status_code = 403
    reason = "not_permitted"

    @classmethod
    def default_message(cls) -> str:
        return "Not permitted."


class NotFound(HarvestLogError):
    """Referenced organization, branch, user or request does not exist."""

    status_code = 404
    reason = "not_found"

    @classmethod
    def default_message(cls) -> str:
        return "Record not found."


class Conflict(HarvestLogError):
    """State transition attempted on an entity that is no longer eligible."""

    status_code = 409
    reason = "conflict"

    @classmethod
    def default_message(cls) -> str:
        return "Conflicting state."


class UpstreamUnavailable(HarvestLogError):
    """Store or identity provider call failed or timed out."""

    status_code = 503

    def __init__(self, message: str = "", timed_out: bool = False) -> None:
        super().__init__(message)
        self.timed_out = timed_out

    @property
    def reason(self) -> str:  # type: ignore[override]
        return "timed_out" if self.timed_out else "unavailable"

    @classmethod
    def default_message(cls) -> str:
        return "Temporarily unavailable. Please try again."
