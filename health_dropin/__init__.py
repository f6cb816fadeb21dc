"""Drop-in ``/health`` endpoint for Starlette and FastAPI services.

Two ways to mount it::

    server = init([db_reachable])              # standalone, port from $port
    app.add_middleware(HealthCheckMiddleware, checks=[db_reachable])
"""

from health_dropin.config import HealthSettings
from health_dropin.health import (
    HealthCheck,
    create_health_router,
    evaluate_checks,
    handle_health_request,
)
from health_dropin.logging import setup_logging
from health_dropin.middleware import HealthCheckMiddleware, middleware
from health_dropin.server import HealthServer, init

__all__ = [
    "HealthCheck",
    "HealthCheckMiddleware",
    "HealthServer",
    "HealthSettings",
    "create_health_router",
    "evaluate_checks",
    "handle_health_request",
    "init",
    "middleware",
    "setup_logging",
]
