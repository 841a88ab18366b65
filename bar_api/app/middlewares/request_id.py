"""Request id propagation.

The id lands in the ``X-Request-ID`` response header, in every log record
through :class:`~bar_api.app.obs.logging.RequestIdFilter` and in the
``request_id`` field of error envelopes.
"""

import re
import uuid
from contextvars import ContextVar

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

# Context variable used by log filter to inject request id
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)

# Client-supplied ids outside this pattern are replaced with a UUID4.
_CLIENT_ID_RE = re.compile(r"^[A-Za-z0-9._:-]{1,64}$")


def resolve_request_id(header_value: str | None) -> str:
    """Return the client's id when well formed, otherwise a fresh UUID4."""

    if header_value and _CLIENT_ID_RE.match(header_value):
        return header_value
    return str(uuid.uuid4())


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Bind a request id for the duration of each request."""

    async def dispatch(self, request: Request, call_next):
        req_id = getattr(request.state, "request_id", None) or resolve_request_id(
            request.headers.get("X-Request-ID")
        )
        token = request_id_ctx.set(req_id)
        request.state.request_id = req_id
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        response.headers["X-Request-ID"] = req_id
        return response
