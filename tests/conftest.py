"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from health_dropin.config import HealthSettings

_SETTINGS_ENV = ("port", "host", "log_level", "environment", "service_name", "startup_timeout")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep host environment variables out of HealthSettings."""
    for name in _SETTINGS_ENV:
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(name.upper(), raising=False)


@pytest.fixture
def local_settings() -> HealthSettings:
    """Loopback settings on an OS-assigned port."""
    return HealthSettings(host="127.0.0.1", port=0, _env_file=None)


class RecordingCheck:
    """Check returning a fixed value and recording each call."""

    def __init__(self, result: object, name: str = "check", calls: list[str] | None = None):
        self.result = result
        self.__name__ = name
        self.calls = calls if calls is not None else []

    def __call__(self) -> object:
        self.calls.append(self.__name__)
        if isinstance(self.result, BaseException):
            raise self.result
        return self.result


@pytest.fixture
def make_check() -> Callable[..., RecordingCheck]:
    return RecordingCheck
