"""Per-request access log for the configurator API, tagged with the wizard session."""
import logging
import re
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("configurator-api.middleware")

SKIP_LOG_PATHS = {"/health"}

_SESSION_PATH = re.compile(r"^/api/configurator/sessions/(?P<session_id>[^/]+)")


def session_id_from_path(path: str):
    """Wizard session id addressed by ``path``, or None for non-session routes."""
    match = _SESSION_PATH.match(path)
    return match.group("session_id") if match else None


def _level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """
    Stamps every response with X-Request-ID and X-Process-Time and writes one
    access line per request. Lines for wizard-session routes carry the
    session id so a configurator run can be followed across requests.
    Client errors are logged as warnings, server errors as errors.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        session_id = session_id_from_path(request.url.path)
        request.state.request_id = request_id
        request.state.session_id = session_id
        start_time = time.perf_counter()

        response: Response = await call_next(request)

        duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
        response.headers["X-Request-ID"] = request_id
        response.headers["X-Process-Time"] = str(duration_ms)

        if request.url.path in SKIP_LOG_PATHS:
            return response

        extra = {
            "http_method": request.method,
            "http_path": request.url.path,
            "http_status": response.status_code,
            "request_id": request_id,
            "duration_ms": duration_ms,
        }
        if session_id is not None:
            extra["session_id"] = session_id
        logger.log(
            _level_for(response.status_code),
            "%s %s -> %d",
            request.method,
            request.url.path,
            response.status_code,
            extra=extra,
        )
        return response
