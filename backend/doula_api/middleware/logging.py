"""
Doula JSON Backend — Request Logging Middleware
=================================================

What:  One access-log line per HTTP request, tagged with the collection the
       request touched (`bookings`, `doulas`, ..., `all` for the aggregate).
Level: 5xx → ERROR, 4xx → WARNING, everything else → INFO.

Example line:
    PUT /api/doulas/17 [doulas#17] 404 2.1ms [a1b2c3d4] from 127.0.0.1

Request bodies are never logged; records can hold client names and phone
numbers.
"""

import logging
import time
from typing import Optional, Tuple

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from doula_api.middleware.request_id import request_id_var

logger = logging.getLogger("doula_api.access")

API_PREFIX = "/api/"

# Health checks, too frequent to be useful in the access log
UNLOGGED_PATHS = {"/health"}


def level_for_status(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def collection_target(path: str) -> Tuple[Optional[str], Optional[str]]:
    """
    Split `/api/<collection>[/<id>]` into (collection, record id).

    Paths outside /api/ give (None, None).
    """
    if not path.startswith(API_PREFIX):
        return None, None
    parts = path[len(API_PREFIX):].strip("/").split("/", 1)
    collection = parts[0] or None
    record_id = parts[1] if len(parts) > 1 and parts[1] else None
    return collection, record_id


def describe_target(collection: Optional[str], record_id: Optional[str]) -> str:
    if collection is None:
        return "-"
    if record_id is None:
        return collection
    return f"{collection}#{record_id}"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each collection request once the response is ready."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in UNLOGGED_PATHS:
            return await call_next(request)

        collection, record_id = collection_target(path)
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

        rid = request_id_var.get("")
        client_ip = request.client.host if request.client else "unknown"
        logger.log(
            level_for_status(response.status_code),
            "%s %s [%s] %d %.1fms [%s] from %s",
            request.method,
            path,
            describe_target(collection, record_id),
            response.status_code,
            elapsed_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "collection": collection,
                "record_id": record_id,
                "status": response.status_code,
                "duration_ms": elapsed_ms,
            },
        )
        return response
