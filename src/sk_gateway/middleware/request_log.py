"""Access log for the reward API.

One line per request. The request id lands in request.state (the envelope
builders read it from there) and in the X-Request-ID response header.
Server errors log at WARNING so a failing price source or database shows up
without DEBUG logging:

    INFO    POST /api/v1/reward 201 4ms client=127.0.0.1 req_a1b2c3d4e5f6
    WARNING GET /api/v1/portfolio/u1 500 12ms client=10.0.0.7 req_0f1e2d3c4b5a
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.sk_common.response import new_request_id

logger = logging.getLogger("sk.request")

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = new_request_id()
        request.state.request_id = request_id

        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        response.headers[REQUEST_ID_HEADER] = request_id
        logger.log(
            logging.WARNING if response.status_code >= 500 else logging.INFO,
            "%s %s %d %.0fms client=%s %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request.client.host if request.client else "-",
            request_id,
        )
        return response
