"""Global Pytest fixtures for environment sanitization and free ports."""

from __future__ import annotations

import os
import socket

import pytest

_ENV_PREFIXES = (
    "AWS_",
    "SNS_",
    "CALLBACK_",
    "CONFIRMATION_",
    "HANDSHAKE_",
    "LOG_",
)


@pytest.fixture(autouse=True)
def _clear_subscription_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove residual provider env vars between tests (no cross-test leakage)."""
    for key in list(os.environ):
        if key.startswith(_ENV_PREFIXES):
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def free_port() -> int:
    """Return a localhost port that was free a moment ago."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]
