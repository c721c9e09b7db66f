"""Shared fixtures for listener tests."""

import socket
import threading
from collections.abc import Callable, Iterator
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

import pytest
import structlog

from loopback_redirect.config.settings import ListenerSettings
from loopback_redirect.listener.server import LOOPBACK_HOST


@pytest.fixture(autouse=True)
def reset_structlog() -> Iterator[None]:
    """Undo structlog configuration done by CLI tests."""
    yield
    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def clean_env(
    monkeypatch: pytest.MonkeyPatch, tmp_path_factory: pytest.TempPathFactory
) -> None:
    """Keep user config files and env vars out of settings."""
    for name in (
        "LOOPBACK_REDIRECT_CONFIG",
        "LOOPBACK_REDIRECT_LISTENER_POLL_INTERVAL",
        "LOOPBACK_REDIRECT_LISTENER_READ_TIMEOUT",
        "LOOPBACK_REDIRECT_LISTENER_MAX_REQUEST_LINE",
        "LOOPBACK_REDIRECT_LISTENER_DEFAULT_PORT",
        "LOOPBACK_REDIRECT_LISTENER_DEFAULT_TIMEOUT",
        "LOOPBACK_REDIRECT_LISTENER_APP_NAME",
        "LOOPBACK_REDIRECT_LOG_LEVEL",
        "LOOPBACK_REDIRECT_LOG_JSON_OUTPUT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path_factory.mktemp("xdg")))


@pytest.fixture
def free_port() -> int:
    """Return a loopback port that was free a moment ago."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind((LOOPBACK_HOST, 0))
        return sock.getsockname()[1]


@pytest.fixture
def fast_settings() -> ListenerSettings:
    """Listener settings with a short poll interval for quick tests."""
    return ListenerSettings(poll_interval=0.02, read_timeout=2.0)


@pytest.fixture
def run_in_background() -> Iterator[Callable[..., Future[Any]]]:
    """Run a listener function on a worker thread and wait until it is bound.

    The wrapped function must accept an ``on_listening`` keyword argument.
    """
    executor = ThreadPoolExecutor(max_workers=4)

    def start(func: Callable[..., Any], *args: Any, **kwargs: Any) -> Future[Any]:
        bound = threading.Event()
        future = executor.submit(
            func, *args, on_listening=lambda _port: bound.set(), **kwargs
        )
        # Fails fast if binding raised instead of signalling
        while not bound.wait(0.01):
            if future.done():
                break
        return future

    yield start
    executor.shutdown(wait=True)


def send_raw(port: int, payload: bytes, timeout: float = 5.0) -> bytes:
    """Send raw bytes to the listener and return everything it answers."""
    chunks: list[bytes] = []
    with socket.create_connection((LOOPBACK_HOST, port), timeout=timeout) as sock:
        sock.sendall(payload)
        try:
            while chunk := sock.recv(4096):
                chunks.append(chunk)
        except ConnectionResetError:
            pass
    return b"".join(chunks)


@pytest.fixture
def send_request() -> Callable[..., bytes]:
    """Expose :func:`send_raw` to tests."""
    return send_raw
