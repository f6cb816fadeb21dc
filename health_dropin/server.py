"""Standalone health server.

``init()`` builds a FastAPI app exposing ``GET /health``, binds the listening
socket in the caller's thread and serves it with uvicorn on a background
thread. The returned :class:`HealthServer` owns all of it.
"""

from __future__ import annotations

import socket
import threading
import time
from collections.abc import Sequence

import uvicorn
from fastapi import FastAPI

from health_dropin.config import HealthSettings
from health_dropin.health import HealthCheck, create_health_router
from health_dropin.logging import get_logger

log = get_logger(__name__)

PRODUCT_NAME = "Health Check DropIn"


def create_app(checks: Sequence[HealthCheck] | None = None) -> FastAPI:
    """Construct the FastAPI application serving ``/health``."""
    application = FastAPI(
        title=PRODUCT_NAME,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    application.include_router(create_health_router(checks))
    return application


class HealthServer:
    """Handle to a running health server.

    Further routes may be attached to :attr:`app` while it is serving.
    Middleware must be added before :meth:`start`.
    """

    def __init__(
        self,
        app: FastAPI,
        host: str = "0.0.0.0",
        port: int = 3000,
        log_level: str = "info",
        startup_timeout: float = 5.0,
    ):
        self.app = app
        self.host = host
        self.port = port
        self.startup_timeout = startup_timeout
        self._config = uvicorn.Config(
            app,
            host=host,
            port=port,
            log_level=log_level.lower(),
            log_config=None,
            # Probes hit /health constantly
            access_log=False,
        )
        self._server = uvicorn.Server(self._config)
        self._socket: socket.socket | None = None
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def start(self) -> HealthServer:
        """Bind the port and start serving.

        Raises:
            OSError: If the port cannot be bound.
            RuntimeError: If the server does not come up in time.
        """
        if self._thread is not None:
            raise RuntimeError("health server can only be started once")

        try:
            sock = self._bind()
        except OSError as exc:
            log.error(
                "health_server_bind_failed",
                host=self.host,
                port=self.port,
                error=str(exc),
            )
            raise

        self._socket = sock
        # Port 0 asks the OS for a free port
        self.port = sock.getsockname()[1]

        self._thread = threading.Thread(
            target=self._server.run,
            kwargs={"sockets": [sock]},
            name=f"health-server-{self.port}",
            daemon=True,
        )
        self._thread.start()

        deadline = time.monotonic() + self.startup_timeout
        while not self._server.started:
            if not self._thread.is_alive() or time.monotonic() > deadline:
                self.shutdown()
                raise RuntimeError(f"health server failed to start on {self.url}")
            time.sleep(0.01)

        log.info(
            "health_dropin_listening",
            product=PRODUCT_NAME,
            host=self.host,
            port=self.port,
        )
        return self

    def _bind(self) -> socket.socket:
        family = socket.AF_INET6 if ":" in self.host else socket.AF_INET
        sock = socket.socket(family, socket.SOCK_STREAM)
        try:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind((self.host, self.port))
            sock.listen(self._config.backlog)
        except OSError:
            sock.close()
            raise
        sock.set_inheritable(True)
        return sock

    def wait(self) -> None:
        """Block until the server thread exits."""
        if self._thread is not None:
            # Short joins keep the main thread responsive to KeyboardInterrupt
            while self._thread.is_alive():
                self._thread.join(timeout=0.5)

    def shutdown(self, timeout: float = 5.0) -> None:
        """Stop serving and release the socket."""
        if self._socket is None:
            return
        log.info("health_server_shutting_down", port=self.port)
        self._server.should_exit = True
        if self._thread is not None:
            self._thread.join(timeout=timeout)
        if self._socket is not None:
            self._socket.close()
            self._socket = None

    def __enter__(self) -> HealthServer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.shutdown()


def init(
    checks: Sequence[HealthCheck] | None = None,
    *,
    settings: HealthSettings | None = None,
) -> HealthServer:
    """Start a standalone health server.

    Args:
        checks: Optional callables returning True if healthy.
        settings: Server settings; read from the environment if omitted.

    Returns:
        The running :class:`HealthServer`.

    Raises:
        OSError: If the configured port cannot be bound.
    """
    settings = settings or HealthSettings()
    server = HealthServer(
        create_app(checks),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level,
        startup_timeout=settings.startup_timeout,
    )
    return server.start()
