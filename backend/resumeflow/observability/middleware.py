"""Request correlation middleware.

Every request gets an id, taken from a well-formed X-Request-ID header or
generated. The id is echoed on the response and attached to every log
record emitted while the request is handled. Probe endpoints are not
access-logged unless they fail.
"""

import re
import time
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from .logging_config import get_logger
from .request_id import generate_request_id, request_id_var

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Client ids are kept only when short and made of token characters
VALID_REQUEST_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")

QUIET_PATHS = frozenset({"/health", "/ready", "/metrics"})


def resolve_request_id(header_value: Optional[str]) -> str:
    """Use the caller's request id when it is well formed, else mint one.

    Example:
        >>> resolve_request_id("abc-123")
        'abc-123'
    """
    if header_value and VALID_REQUEST_ID.match(header_value):
        return header_value
    return generate_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Binds a request id to the request's logging context."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = resolve_request_id(request.headers.get(REQUEST_ID_HEADER))
        token = request_id_var.set(request_id)
        path = request.url.path
        started = time.perf_counter()

        try:
            response = await call_next(request)
            duration_ms = round((time.perf_counter() - started) * 1000, 2)
            if path not in QUIET_PATHS or response.status_code >= 500:
                logger.info(
                    f"{request.method} {path} -> {response.status_code}",
                    extra={
                        "method": request.method,
                        "path": path,
                        "status_code": response.status_code,
                        "duration_ms": duration_ms,
                    },
                )
        except Exception:
            logger.error(
                f"{request.method} {path} raised",
                extra={
                    "method": request.method,
                    "path": path,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
                exc_info=True,
            )
            raise
        finally:
            request_id_var.reset(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
