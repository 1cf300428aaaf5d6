"""
API error handling and response hardening middleware.

Registers FastAPI exception handlers that convert TeamcalError subclasses
and request validation errors (as 400) into {"error": "...", "message": "..."}
JSON bodies, plus two ASGI middlewares:

- CatchAllErrorMiddleware: anything unhandled becomes a 500 with the same
  envelope; exception text is only included outside production.
- SecurityHeadersMiddleware: the usual browser hardening headers.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from teamcal.core.errors import RequestValidationFailedError, TeamcalError


logger = logging.getLogger("teamcal.core.middleware")


async def _handle_teamcal_error(request: Request, exc: TeamcalError) -> JSONResponse:
    """Render a domain error with its own status code."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.error}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and parameters use the same envelope as everything else."""
    details = "; ".join(
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}" for error in exc.errors()
    )
    return await _handle_teamcal_error(request, RequestValidationFailedError(message=details))


class CatchAllErrorMiddleware(BaseHTTPMiddleware):
    """
    Converts any unhandled exception into a 500 JSON response.

    Sits above the Starlette exception handler layer so nothing reaches
    the default plain-text error page. The traceback is logged; the
    client only ever sees the exception text, and only when
    expose_details is on (non-production).
    """

    def __init__(self, app, expose_details: bool = False):
        super().__init__(app)
        self.expose_details = expose_details

    async def dispatch(self, request: Request, call_next):
        try:
            return await call_next(request)
        except Exception as exc:
            logger.error(
                f"Unhandled exception on {request.method} {request.url.path}",
                exc_info=True,
            )
            body = {"error": "Internal Server Error"}
            if self.expose_details:
                body["message"] = str(exc)
            return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds browser hardening headers to every response."""

    def __init__(self, app, hsts: bool = False):
        super().__init__(app)
        self.headers = {
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "SAMEORIGIN",
            "Referrer-Policy": "no-referrer",
            "Cross-Origin-Opener-Policy": "same-origin",
            "Cross-Origin-Resource-Policy": "same-origin",
            "X-DNS-Prefetch-Control": "off",
            "Content-Security-Policy": "default-src 'self'; frame-ancestors 'self'",
        }
        if hsts:
            self.headers["Strict-Transport-Security"] = "max-age=15552000; includeSubDomains"

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        return response


def register_error_handlers(app: FastAPI, expose_details: bool = False) -> None:
    """
    Attach the exception handlers and the catch-all middleware.

    Call this from create_app() after constructing the FastAPI instance.
    """
    app.add_exception_handler(TeamcalError, _handle_teamcal_error)  # type: ignore[arg-type]
    app.add_exception_handler(RequestValidationError, _handle_validation_error)  # type: ignore[arg-type]
    app.add_middleware(CatchAllErrorMiddleware, expose_details=expose_details)
