# projectdollar/middleware/correlation.py
"""
Correlation ID middleware for request tracing.

Every request gets an id, taken from X-Correlation-ID, then X-Request-ID,
or generated. The id is stored in context so log records emitted while
handling the request (including price source and rate fetches) carry it,
and it is echoed back in the X-Correlation-ID response header.

Client Usage:
    curl -H "X-Correlation-ID: my-trace-123" http://localhost:8000/portfolio/valuation
"""

import logging
import uuid
from typing import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from projectdollar.utils.context import clear_correlation_id, set_correlation_id

logger = logging.getLogger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"
REQUEST_ID_HEADER = "X-Request-ID"
MAX_CORRELATION_ID_LENGTH = 128


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Attach a correlation id to each request and its response."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        correlation_id = self._get_correlation_id(request)
        set_correlation_id(correlation_id)

        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id
            return response
        finally:
            clear_correlation_id()

    @staticmethod
    def _get_correlation_id(request: Request) -> str:
        """
        First non-empty header wins; oversized values are replaced by a
        fresh UUID so a client cannot flood the logs.
        """
        for header in (CORRELATION_ID_HEADER, REQUEST_ID_HEADER):
            value = request.headers.get(header, "").strip()
            if value and len(value) <= MAX_CORRELATION_ID_LENGTH:
                return value
        return str(uuid.uuid4())
