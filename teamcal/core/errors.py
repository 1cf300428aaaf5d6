"""
Application error taxonomy.

Every error a route can report is a TeamcalError subclass carrying the
HTTP status and the public `error` string. The handlers registered in
teamcal.core.middleware render them as {"error": ..., "message": ...}.

Integration errors (teamcal.environments.base) never reach the client
directly; services translate them into one of these.
"""

from typing import Optional

from fastapi import status


class TeamcalError(Exception):
    """Base class for errors that map to an HTTP response."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    error: str = "Internal Server Error"

    def __init__(self, error: Optional[str] = None, message: Optional[str] = None):
        self.error = error or self.error
        self.message = message
        super().__init__(message or self.error)

    def to_body(self) -> dict:
        body = {"error": self.error}
        if self.message:
            body["message"] = self.message
        return body


class UnauthorizedError(TeamcalError):
    """No session user, or the user has no tokens."""
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Authentication required"


class UpstreamAuthExpiredError(UnauthorizedError):
    """Google rejected the stored token; tokens were cleared from the session."""
    error = "Google token expired. Please re-authenticate."


class NotFoundError(TeamcalError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not found"


class RequestValidationFailedError(TeamcalError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Invalid request"


class UpstreamFailureError(TeamcalError):
    """Google Calendar failed for a reason other than an expired grant."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Failed to fetch availability"


class AuthenticationFailedError(TeamcalError):
    """The OAuth callback could not complete."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Authentication failed"


class ServiceUnavailableError(TeamcalError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error = "Service unavailable"


class InternalFailureError(TeamcalError):
    """Session store failures and other server-side faults."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Internal Server Error"
