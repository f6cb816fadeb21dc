"""Run the standalone health server with no checks.

Usage:
    port=8080 python -m health_dropin
"""

from __future__ import annotations

import signal
from types import FrameType

from health_dropin.config import HealthSettings
from health_dropin.logging import get_logger, setup_logging
from health_dropin.server import init

log = get_logger(__name__)


def main() -> None:
    settings = HealthSettings()
    setup_logging(
        log_level=settings.log_level,
        json_logs=settings.json_logs,
        service_name=settings.service_name,
    )

    server = init(settings=settings)

    def _shutdown(signum: int, frame: FrameType | None) -> None:
        log.info("health_dropin received shutdown signal", signal=signum)
        server.shutdown()

    for sig in (signal.SIGINT, signal.SIGTERM):
        signal.signal(sig, _shutdown)

    server.wait()
    log.info("health_dropin shut down")


if __name__ == "__main__":
    main()
