"""ASGI middleware answering ``/health`` inside an existing application.

Requests whose path is exactly ``/health`` are answered here and never reach
the rest of the chain; every other request is passed through untouched.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence

from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from health_dropin.health import (
    HEALTH_PATH,
    HealthCheck,
    freeze_checks,
    handle_health_request,
)

Dispatch = Callable[[Request, RequestResponseEndpoint], Awaitable[Response]]


def middleware(checks: Sequence[HealthCheck] | None = None) -> Dispatch:
    """Return an HTTP middleware function for ``app.middleware("http")``.

    Args:
        checks: Callables returning True if healthy.
    """
    frozen = freeze_checks(checks)

    async def dispatch(request: Request, call_next: RequestResponseEndpoint) -> Response:
        if request.url.path != HEALTH_PATH:
            return await call_next(request)

        response = Response()
        # Checks may block (database pings etc.)
        await run_in_threadpool(handle_health_request, request, response, frozen)
        return response

    return dispatch


class HealthCheckMiddleware(BaseHTTPMiddleware):
    """Answers ``/health`` from the configured checks.

    Usage::

        app.add_middleware(HealthCheckMiddleware, checks=[db_reachable])
    """

    def __init__(
        self, app: ASGIApp, checks: Sequence[HealthCheck] | None = None
    ) -> None:
        super().__init__(app, dispatch=middleware(checks))
