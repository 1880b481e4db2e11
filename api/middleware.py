import time
import uuid

import structlog
from fastapi import Request

from core.logging import BusinessEvents

REQUEST_ID_HEADER = "X-Request-ID"


async def log_api_entry(request: Request, call_next):
    """Bind a request id to every log line of the request and log its outcome."""
    log = structlog.get_logger(__name__)

    request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)

    started = time.perf_counter()
    # Query strings are never logged: client tokens and nonces travel there
    log.info(
        BusinessEvents.API_ENTRY,
        method=request.method,
        path=request.url.path,
        client_host=request.client.host if request.client else None,
    )
    response = await call_next(request)

    response.headers[REQUEST_ID_HEADER] = request_id
    log.info(
        BusinessEvents.API_RESPONSE,
        path=request.url.path,
        status=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 2),
    )
    return response
