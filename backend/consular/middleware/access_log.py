"""
One JSON line per HTTP request on the `consular.access` logger.

Requests are tagged with an id (the caller's X-Request-ID, or a fresh one)
that is echoed back on the response so a booking can be traced from the
client to the log. Server errors are logged at WARNING.
"""

import json
import logging
import time
import uuid

from fastapi import Request

logger = logging.getLogger("consular.access")

REQUEST_ID_HEADER = "X-Request-ID"


def _identity(request: Request) -> str:
    for header, kind in (("X-Admin-ID", "admin"), ("X-User-ID", "user")):
        value = request.headers.get(header)
        if value:
            return f"{kind}:{value}"
    return "anonymous"


def _client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "-"


async def access_log_middleware(request: Request, call_next):
    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    started = time.perf_counter()

    status = 500
    try:
        response = await call_next(request)
        status = response.status_code
    finally:
        entry = {
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "query": request.url.query or None,
            "status": status,
            "identity": _identity(request),
            "client": _client_ip(request),
            "elapsed_ms": round((time.perf_counter() - started) * 1000, 1),
        }
        level = logging.WARNING if status >= 500 else logging.INFO
        logger.log(level, json.dumps(entry, ensure_ascii=False))

    response.headers[REQUEST_ID_HEADER] = request_id
    return response
