"""Last-resort error middleware.

Learn: Registered first, so it is the innermost middleware. An
exception nothing else handled becomes a generic 500 here, which still
passes through CORS, security headers and RequestIdMiddleware on the
way out. Starlette's own Exception handler would sit outside all of
them.
"""

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from taskmanager.errors import InternalError

logger = structlog.get_logger()


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """Turn unexpected exceptions into a 500 that leaks no internals."""

    async def dispatch(self, request: Request, call_next) -> Response:
        try:
            return await call_next(request)
        except Exception:
            logger.exception("taskmanager.unhandled_error", path=request.url.path)
            err = InternalError()
            return JSONResponse(status_code=err.status_code, content=err.to_dict())
