"""Health evaluation and the ``/health`` route.

A health check is a zero-argument callable returning ``bool``. The endpoint
answers 200 when every configured check passes (or none are configured) and
503 otherwise. Responses carry no body.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence

from fastapi import APIRouter, Request, Response, status

from health_dropin.logging import get_logger

HealthCheck = Callable[[], bool]
CheckSet = tuple[HealthCheck, ...]

HEALTH_PATH = "/health"
HTTP_HEALTHY = status.HTTP_200_OK
HTTP_FAILED = status.HTTP_503_SERVICE_UNAVAILABLE

log = get_logger(__name__)


def freeze_checks(checks: Sequence[HealthCheck] | None) -> CheckSet:
    """Normalize configured checks into an immutable tuple.

    ``None`` and an empty sequence both mean "no checks configured".

    Raises:
        TypeError: If an entry is not callable.
    """
    if checks is None:
        return ()
    frozen = tuple(checks)
    for check in frozen:
        if not callable(check):
            raise TypeError(f"health check must be callable, got {check!r}")
    return frozen


def _check_name(check: HealthCheck) -> str:
    return getattr(check, "__name__", repr(check))


def _run_check(check: HealthCheck) -> bool:
    """Invoke one check, failing closed on errors and non-bool results."""
    try:
        result = check()
    except Exception as exc:
        log.warning("health_check_error", check=_check_name(check), error=str(exc))
        return False

    if not isinstance(result, bool):
        log.warning(
            "health_check_invalid_result",
            check=_check_name(check),
            result_type=type(result).__name__,
        )
        return False

    if not result:
        log.info("health_check_failing", check=_check_name(check))
    return result


def evaluate_checks(checks: Sequence[HealthCheck] | None = None) -> bool:
    """Return True if every check passes.

    Every check is invoked, in order, even after one has failed.
    """
    if not checks:
        return True

    healthy = True
    for check in checks:
        healthy = _run_check(check) and healthy
    return healthy


def handle_health_request(
    request: Request,
    response: Response,
    checks: Sequence[HealthCheck] | None = None,
) -> bool:
    """Evaluate ``checks`` and write 200 or 503 onto ``response``.

    Returns:
        The aggregate health result.
    """
    healthy = evaluate_checks(checks)
    response.status_code = HTTP_HEALTHY if healthy else HTTP_FAILED
    log.debug(
        "health_request_handled",
        path=request.url.path,
        status_code=response.status_code,
    )
    return healthy


def create_health_router(
    checks: Sequence[HealthCheck] | None = None,
) -> APIRouter:
    """Build a router exposing ``GET /health``.

    Args:
        checks: Callables returning True if healthy.

    Returns:
        A FastAPI ``APIRouter`` with the health route.
    """
    router = APIRouter(tags=["health"])
    frozen = freeze_checks(checks)

    # Sync endpoint: FastAPI runs it in the threadpool, so blocking checks
    # do not stall the event loop.
    @router.get(HEALTH_PATH, summary="Service health", response_class=Response)
    def health(request: Request) -> Response:
        response = Response()
        handle_health_request(request, response, frozen)
        return response

    return router
