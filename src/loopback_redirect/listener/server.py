"""Single-use loopback listener that captures an OAuth authorization code.

The listener binds ``127.0.0.1:<port>``, waits for exactly one connection
until a deadline, reads the request line, answers with a confirmation page
and hands the ``code`` query value back to the caller. The listening socket
is closed before any of the public functions return.
"""

import contextlib
import socket
import time
from collections.abc import Callable
from types import TracebackType
from typing import BinaryIO

from structlog import get_logger

from loopback_redirect.config.settings import ListenerSettings
from loopback_redirect.core.async_utils import run_in_executor
from loopback_redirect.exceptions import (
    AcceptError,
    BindError,
    MalformedRedirectError,
    RedirectIOError,
    RedirectTimeoutError,
    RequestReadError,
)
from loopback_redirect.listener.parsing import extract_authorization_code
from loopback_redirect.listener.response import build_confirmation_response
from loopback_redirect.models import (
    CodeReceived,
    IoFailure,
    Outcome,
    RedirectRequest,
    TimedOut,
)


logger = get_logger(__name__)

LOOPBACK_HOST = "127.0.0.1"

# Remaining request headers are read and discarded before replying
DRAIN_TIMEOUT = 0.2
MAX_HEADER_LINES = 100

ListeningCallback = Callable[[int], None]


class RedirectListener:
    """Loopback listener for a single OAuth redirect.

    Use as a context manager so the port is bound before the browser is sent
    to the provider:

        with RedirectListener(53142, timeout_seconds=120) as listener:
            webbrowser.open(auth_url)
            code = listener.wait()

    The deadline starts when binding succeeds. There is no way to cancel a
    running ``wait()`` other than the deadline.
    """

    def __init__(
        self,
        port: int,
        timeout_seconds: float,
        *,
        settings: ListenerSettings | None = None,
        on_listening: ListeningCallback | None = None,
    ) -> None:
        """Initialize the listener.

        Args:
            port: Loopback TCP port to bind (1-65535)
            timeout_seconds: Seconds to wait for the redirect once bound
            settings: Listener tuning, loaded from the environment if omitted
            on_listening: Called with the port right after binding succeeds

        Raises:
            pydantic.ValidationError: If port or timeout are out of range
        """
        self.request = RedirectRequest(port=port, timeout_seconds=timeout_seconds)
        self.settings = settings or ListenerSettings()
        self._on_listening = on_listening
        self._socket: socket.socket | None = None
        self._deadline: float | None = None

    @property
    def port(self) -> int:
        return self.request.port

    @property
    def is_bound(self) -> bool:
        return self._socket is not None

    def __enter__(self) -> "RedirectListener":
        self.bind()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def bind(self) -> None:
        """Bind the loopback socket and start the deadline clock.

        Raises:
            BindError: If the port cannot be bound
        """
        if self._socket is not None:
            raise RuntimeError("Listener is already bound")

        try:
            sock = socket.create_server((LOOPBACK_HOST, self.port), backlog=1)
        except OSError as e:
            logger.warning("redirect_listener_bind_failed", port=self.port, error=str(e))
            raise BindError(self.port, str(e)) from e

        self._socket = sock
        self._deadline = time.monotonic() + self.request.timeout_seconds
        logger.info(
            "redirect_listener_bound",
            host=LOOPBACK_HOST,
            port=self.port,
            timeout_seconds=self.request.timeout_seconds,
        )

        if self._on_listening is not None:
            try:
                self._on_listening(self.port)
            except BaseException:
                self.close()
                raise

    def close(self) -> None:
        """Release the listening socket. Safe to call more than once."""
        if self._socket is None:
            return
        self._socket.close()
        self._socket = None
        logger.debug("redirect_listener_closed", port=self.port)

    def wait(self) -> str:
        """Wait for the redirect and return its authorization code.

        The listening socket is closed when this returns or raises, whatever
        the outcome.

        Returns:
            The ``code`` query value, undecoded

        Raises:
            RedirectTimeoutError: If no connection arrived before the deadline
            AcceptError: If accepting the connection failed
            RequestReadError: If the request line could not be read
            MalformedRedirectError: If the request carried no usable code
        """
        if self._socket is None or self._deadline is None:
            raise RuntimeError("Listener is not bound; call bind() first")

        try:
            conn = self._accept(self._socket, self._deadline)
            with conn:
                code = self._handle_connection(conn)
        finally:
            self.close()

        logger.info("redirect_code_received", port=self.port)
        return code

    def _accept(self, listener: socket.socket, deadline: float) -> socket.socket:
        while True:
            remaining = deadline - time.monotonic()
            if remaining < 0:
                logger.info(
                    "redirect_listener_timed_out",
                    port=self.port,
                    timeout_seconds=self.request.timeout_seconds,
                )
                raise RedirectTimeoutError(self.request.timeout_seconds)

            listener.settimeout(min(self.settings.poll_interval, remaining))
            try:
                conn, peer = listener.accept()
            except (TimeoutError, BlockingIOError, InterruptedError):
                continue
            except OSError as e:
                logger.warning("redirect_accept_failed", port=self.port, error=str(e))
                raise AcceptError(str(e)) from e

            logger.debug(
                "redirect_connection_accepted", port=self.port, peer=f"{peer[0]}:{peer[1]}"
            )
            return conn

    def _handle_connection(self, conn: socket.socket) -> str:
        conn.settimeout(self.settings.read_timeout)
        with conn.makefile("rb") as reader:
            request_line = self._read_request_line(reader)
            try:
                code = extract_authorization_code(request_line)
            except MalformedRedirectError:
                logger.warning("redirect_malformed", port=self.port)
                raise
            self._drain_headers(conn, reader)

        self._send_confirmation(conn)
        return code

    def _read_request_line(self, reader: BinaryIO) -> str:
        limit = self.settings.max_request_line
        try:
            raw = reader.readline(limit + 1)
        except OSError as e:
            logger.warning("redirect_read_failed", port=self.port, error=str(e))
            raise RequestReadError(str(e)) from e

        if len(raw) > limit:
            logger.warning("redirect_malformed", port=self.port, reason="too_long")
            raise MalformedRedirectError()

        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.warning("redirect_read_failed", port=self.port, error=str(e))
            raise RequestReadError("request line is not valid UTF-8") from e

    def _drain_headers(self, conn: socket.socket, reader: BinaryIO) -> None:
        # Unread input at close time makes the kernel reset the connection,
        # which can cut off the confirmation page in the browser.
        conn.settimeout(DRAIN_TIMEOUT)
        with contextlib.suppress(OSError):
            for _ in range(MAX_HEADER_LINES):
                line = reader.readline(self.settings.max_request_line)
                if line in (b"", b"\r\n", b"\n"):
                    break

    def _send_confirmation(self, conn: socket.socket) -> None:
        response = build_confirmation_response(self.settings.app_name)
        try:
            conn.sendall(response)
        except OSError as e:
            # The code is already captured; the page is a courtesy only.
            logger.debug("confirmation_write_failed", port=self.port, error=str(e))


def listen_for_redirect(
    port: int,
    timeout_seconds: float,
    *,
    settings: ListenerSettings | None = None,
    on_listening: ListeningCallback | None = None,
) -> str:
    """Bind, wait for one redirect and return its authorization code.

    Blocks the calling thread for at most ``timeout_seconds`` plus one poll
    interval (plus the read timeout once a client has connected).

    Raises:
        BindError: If the port cannot be bound
        RedirectTimeoutError: If no connection arrived before the deadline
        AcceptError: If accepting the connection failed
        RequestReadError: If the request line could not be read
        MalformedRedirectError: If the request carried no usable code
    """
    with RedirectListener(
        port, timeout_seconds, settings=settings, on_listening=on_listening
    ) as listener:
        return listener.wait()


async def await_redirect(
    port: int,
    timeout_seconds: float,
    *,
    settings: ListenerSettings | None = None,
    on_listening: ListeningCallback | None = None,
) -> str:
    """Async form of :func:`listen_for_redirect`, run on a worker thread.

    Cancelling the awaiting task does not stop the worker; it still runs
    until its deadline and then releases the port.
    """
    return await run_in_executor(
        listen_for_redirect,
        port,
        timeout_seconds,
        settings=settings,
        on_listening=on_listening,
    )


def capture_outcome(
    port: int,
    timeout_seconds: float,
    *,
    settings: ListenerSettings | None = None,
    on_listening: ListeningCallback | None = None,
) -> Outcome:
    """Like :func:`listen_for_redirect` but report the result as an Outcome."""
    try:
        code = listen_for_redirect(
            port, timeout_seconds, settings=settings, on_listening=on_listening
        )
    except RedirectTimeoutError as e:
        return TimedOut(timeout_seconds=e.timeout_seconds)
    except RedirectIOError as e:
        return IoFailure(message=e.message, error_type=e.error_type)
    return CodeReceived(code=code)


async def await_outcome(
    port: int,
    timeout_seconds: float,
    *,
    settings: ListenerSettings | None = None,
    on_listening: ListeningCallback | None = None,
) -> Outcome:
    """Async form of :func:`capture_outcome`, run on a worker thread."""
    return await run_in_executor(
        capture_outcome,
        port,
        timeout_seconds,
        settings=settings,
        on_listening=on_listening,
    )
