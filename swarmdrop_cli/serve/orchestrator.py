"""Stand up file server + tunnel with retries, then hold them until cancelled.

State machine::

    selecting_port -> starting_server -> starting_tunnel -> awaiting_url -> running -> shutting_down
          ^                 |  bind failed                       |  no URL
          +-----------------+------------------------------------+   (port + 1, attempts + 1)

    starting_server --(other startup failure)--> failed
    any retry with attempts == max_attempts    --> failed
"""

import atexit
import logging
import signal
import threading
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from ..config import (
    DEFAULT_BASE_PORT,
    MAX_ATTEMPTS,
    PORT_SCAN_LIMIT,
    TUNNEL_URL_TIMEOUT,
)
from ..exceptions import (
    PortBindError,
    RetryBudgetExhaustedError,
    ServeError,
    TunnelURLNotFoundError,
)
from .local_server import FileServer
from .port_allocator import PortAllocator
from .process import ManagedProcess
from .providers import TunnelProvider
from .tunnel_client import TunnelClient
from .url_extractor import await_url

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    SELECTING_PORT = "selecting_port"
    STARTING_SERVER = "starting_server"
    STARTING_TUNNEL = "starting_tunnel"
    AWAITING_URL = "awaiting_url"
    RUNNING = "running"
    SHUTTING_DOWN = "shutting_down"
    FAILED = "failed"


@dataclass
class ServerSession:
    """The one live server + tunnel pair and where it got to."""

    root_directory: Path
    port: Optional[int] = None
    server: Optional[ManagedProcess] = None
    tunnel: Optional[ManagedProcess] = None
    tunnel_url: Optional[str] = None
    state: SessionState = SessionState.SELECTING_PORT
    attempts: int = 0

    @property
    def is_running(self) -> bool:
        return (
            self.state == SessionState.RUNNING
            and self.port is not None
            and self.server is not None
            and self.tunnel is not None
            and bool(self.tunnel_url)
        )


class Orchestrator:
    """Runs the retry loop and owns both subprocesses.

    Usage::

        with Orchestrator(root, CLOUDFLARED) as orch:
            session = orch.start()
            print(session.tunnel_url)
            orch.wait()       # until Ctrl+C / SIGTERM
        # both subprocesses are stopped here
    """

    def __init__(
        self,
        root_directory: Path,
        provider: TunnelProvider,
        *,
        base_port: int = DEFAULT_BASE_PORT,
        max_attempts: int = MAX_ATTEMPTS,
        port_scan_limit: int = PORT_SCAN_LIMIT,
        url_timeout: float = TUNNEL_URL_TIMEOUT,
        allocator: Optional[PortAllocator] = None,
        file_server: Optional[FileServer] = None,
        tunnel_client: Optional[TunnelClient] = None,
        extractor: Callable[..., str] = await_url,
        on_state_change: Optional[Callable[[ServerSession], None]] = None,
    ):
        self.provider = provider
        self.base_port = base_port
        self.max_attempts = max_attempts
        self.port_scan_limit = port_scan_limit
        self.url_timeout = url_timeout
        self.allocator = allocator or PortAllocator()
        self.file_server = file_server or FileServer()
        self.tunnel_client = tunnel_client or TunnelClient(provider)
        self.extractor = extractor
        self.on_state_change = on_state_change

        self.session = ServerSession(root_directory=Path(root_directory))
        self._cancelled = threading.Event()
        self._log_paths = set()
        self._atexit_registered = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
        return False

    # -----------------------------------------------------------------
    # Startup
    # -----------------------------------------------------------------

    def start(self) -> ServerSession:
        """Bring up server and tunnel, retrying on busy ports and missing URLs.

        Raises:
            RetryBudgetExhaustedError: ``max_attempts`` tries all failed.
            ServeError: A non-retryable failure (startup crash, no free port).
        """
        if not self._atexit_registered:
            atexit.register(self._atexit_cleanup)
            self._atexit_registered = True

        session = self.session
        candidate = self.base_port
        last_log = ""

        while session.attempts < self.max_attempts:
            try:
                self._set_state(SessionState.SELECTING_PORT)
                port = self.allocator.next_free_port(candidate, self.port_scan_limit)

                session.port = port
                self._set_state(SessionState.STARTING_SERVER)
                session.server = self.file_server.start(session.root_directory, port)
                self._log_paths.add(session.server.log_path)

                self._set_state(SessionState.STARTING_TUNNEL)
                session.tunnel = self.tunnel_client.start(port)
                self._log_paths.add(session.tunnel.log_path)

                self._set_state(SessionState.AWAITING_URL)
                session.tunnel_url = self.extractor(
                    session.tunnel.log_path,
                    self.provider.url_pattern,
                    self.url_timeout,
                    is_alive=session.tunnel.is_alive,
                )
            except (PortBindError, TunnelURLNotFoundError) as e:
                last_log = e.log
                session.attempts += 1
                logger.info("Attempt %s/%s on port %s failed: %s", session.attempts, self.max_attempts, session.port, e)
                self._stop_processes()
                candidate = session.port + 1
                continue
            except ServeError:
                self._stop_processes()
                self._set_state(SessionState.FAILED)
                raise

            self._set_state(SessionState.RUNNING)
            return session

        self._set_state(SessionState.FAILED)
        raise RetryBudgetExhaustedError(session.attempts, last_log)

    # -----------------------------------------------------------------
    # Running
    # -----------------------------------------------------------------

    def wait(self, poll_interval: float = 0.5) -> None:
        """Block until cancelled or until both subprocesses have exited.

        A tunnel that dies on its own while the server keeps running is
        logged once as a warning.

        SIGINT and SIGTERM are turned into :meth:`cancel` while waiting
        (main thread only); previous handlers are restored afterwards.
        """
        restore = self._install_signal_handlers()
        tunnel_reported = False
        try:
            while not self._cancelled.wait(poll_interval):
                if not self._any_alive():
                    logger.warning("File server and tunnel have both exited")
                    break
                tunnel = self.session.tunnel
                if not tunnel_reported and tunnel is not None and not tunnel.is_alive():
                    # server still up, but the public URL no longer works
                    logger.warning(
                        "Tunnel client exited; %s is no longer reachable. Press Ctrl+C and run again.",
                        self.session.tunnel_url,
                    )
                    tunnel_reported = True
        finally:
            for signum, handler in restore.items():
                if handler is not None:
                    signal.signal(signum, handler)

    def cancel(self) -> None:
        """Ask :meth:`wait` to return. Safe to call from a signal handler."""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    # -----------------------------------------------------------------
    # Teardown
    # -----------------------------------------------------------------

    def shutdown(self) -> None:
        """Stop both subprocesses once and remove their logs. Idempotent."""
        session = self.session
        if session.state == SessionState.RUNNING:
            self._set_state(SessionState.SHUTTING_DOWN)

        self._stop_processes()

        for path in self._log_paths:
            try:
                path.unlink()
            except OSError:
                pass
        self._log_paths.clear()

    def _stop_processes(self) -> None:
        session = self.session
        for attr in ("tunnel", "server"):
            handle = getattr(session, attr)
            if handle is None:
                continue
            setattr(session, attr, None)
            try:
                handle.stop()
            except Exception as e:
                logger.debug("Ignoring error stopping %s: %s", attr, e)
        session.tunnel_url = None

    # -----------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------

    def _set_state(self, state: SessionState) -> None:
        self.session.state = state
        logger.debug("Session state -> %s", state.value)
        if self.on_state_change:
            self.on_state_change(self.session)

    def _any_alive(self) -> bool:
        return any(
            handle is not None and handle.is_alive()
            for handle in (self.session.server, self.session.tunnel)
        )

    def _install_signal_handlers(self) -> dict:
        if threading.current_thread() is not threading.main_thread():
            return {}

        def _handler(signum, frame):
            logger.info("Received signal %s, shutting down", signum)
            self.cancel()

        previous = {}
        for signum in (signal.SIGINT, signal.SIGTERM):
            previous[signum] = signal.getsignal(signum)
            signal.signal(signum, _handler)
        return previous

    def _atexit_cleanup(self) -> None:
        """Safety net: kill subprocesses on interpreter exit."""
        self.shutdown()
