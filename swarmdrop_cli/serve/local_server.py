"""Launch a static file server subprocess rooted at the swarm directory."""

import logging
import re
import sys
import time
from pathlib import Path
from typing import List, Optional

import requests

from ..config import (
    SERVER_BIND_HOST,
    SERVER_HEALTH_TIMEOUT,
    SERVER_POLL_INTERVAL,
    SERVER_SETTLE_TIMEOUT,
)
from ..exceptions import PortBindError, ServerStartupError
from .process import ManagedProcess, log_path_for

logger = logging.getLogger(__name__)

# Linux errno 98 / macOS errno 48 both print "Address already in use"
_ADDRESS_IN_USE = re.compile(
    r"(address already in use|EADDRINUSE|WinError 10048)",
    re.IGNORECASE,
)

_SERVING_BANNER = "Serving HTTP on"


class FileServer:
    """Starts ``python -m http.server`` for a directory on a given port.

    Usage::

        server = FileServer()
        handle = server.start(Path("~/rl-swarm").expanduser(), 8000)
        ...
        handle.stop()
    """

    def __init__(
        self,
        bind_host: str = SERVER_BIND_HOST,
        settle_timeout: float = SERVER_SETTLE_TIMEOUT,
        poll_interval: float = SERVER_POLL_INTERVAL,
        log_dir: Optional[str] = None,
    ):
        self.bind_host = bind_host
        self.settle_timeout = settle_timeout
        self.poll_interval = poll_interval
        self.log_dir = log_dir

    def command(self, root_directory: Path, port: int) -> List[str]:
        # -u so the "Serving HTTP on" banner reaches the log immediately
        return [
            sys.executable, "-u", "-m", "http.server", str(port),
            "--bind", self.bind_host,
            "--directory", str(root_directory),
        ]

    def start(self, root_directory: Path, port: int) -> ManagedProcess:
        """Spawn the server and wait for it to either bind or die.

        Raises:
            PortBindError: The port was taken. Caller should try another one.
            ServerStartupError: Any other startup failure.
        """
        cmd = self.command(root_directory, port)
        log_path = log_path_for("server", self.log_dir)
        try:
            handle = ManagedProcess.spawn("file server", cmd, log_path, cwd=str(root_directory))
        except OSError as e:
            log_path.unlink(missing_ok=True)
            raise ServerStartupError(f"Failed to start file server: {e}")

        deadline = time.monotonic() + self.settle_timeout

        while True:
            if not handle.is_alive():
                self._raise_startup_failure(handle, port)

            if _SERVING_BANNER in handle.read_log() and self._is_healthy(port):
                logger.info("File server ready on port %s", port)
                return handle

            if time.monotonic() >= deadline:
                # Still running after the settle window: treat as bound.
                logger.info("File server alive on port %s after %.1fs", port, self.settle_timeout)
                return handle

            time.sleep(self.poll_interval)

    # -----------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------

    def _raise_startup_failure(self, handle: ManagedProcess, port: int) -> None:
        log = handle.read_log()
        code = handle.returncode
        handle.stop()
        handle.remove_log()
        if _ADDRESS_IN_USE.search(log):
            logger.info("Port %s already in use", port)
            raise PortBindError(port, log)

        logger.warning("File server exited with code %s", code)
        raise ServerStartupError(f"File server exited during startup (exit {code})", log)

    @staticmethod
    def _is_healthy(port: int) -> bool:
        """GET / on the loopback address; any non-5xx answer means serving."""
        try:
            resp = requests.get(f"http://127.0.0.1:{port}/", timeout=SERVER_HEALTH_TIMEOUT)
            return resp.status_code < 500
        except requests.ConnectionError:
            return False
        except requests.Timeout:
            return False
