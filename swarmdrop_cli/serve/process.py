"""Handle for a background subprocess whose output goes to a log file."""

import logging
import os
import signal
import subprocess
from pathlib import Path
from typing import List, Optional

from ..config import LOG_DIR, PROCESS_STOP_TIMEOUT

logger = logging.getLogger(__name__)


def log_path_for(kind: str, log_dir: Optional[str] = None) -> Path:
    """Per-invocation log file, scoped by our PID so parallel runs don't collide."""
    return Path(log_dir or LOG_DIR) / f"swarmdrop-{os.getpid()}-{kind}.log"


class ManagedProcess:
    """A spawned subprocess plus the log file capturing its stdout/stderr.

    Each process runs in its own session (process group) so :meth:`stop`
    also takes down any children it forked.
    """

    def __init__(self, name: str, process: subprocess.Popen, log_path: Path):
        self.name = name
        self.log_path = log_path
        self._process: Optional[subprocess.Popen] = process

    @classmethod
    def spawn(cls, name: str, cmd: List[str], log_path: Path, cwd: Optional[str] = None) -> "ManagedProcess":
        """Start ``cmd`` with output redirected to ``log_path`` (truncated).

        Raises OSError if the binary cannot be executed.
        """
        log_path.parent.mkdir(parents=True, exist_ok=True)
        with open(log_path, "wb") as log_file:
            process = subprocess.Popen(
                cmd,
                cwd=cwd,
                stdin=subprocess.DEVNULL,
                stdout=log_file,
                stderr=subprocess.STDOUT,
                start_new_session=True,  # own process group for clean kill
            )
        logger.debug("Started %s (pid %s): %s", name, process.pid, " ".join(cmd))
        return cls(name, process, log_path)

    @property
    def returncode(self) -> Optional[int]:
        return self._process.poll() if self._process else None

    def is_alive(self) -> bool:
        return self._process is not None and self._process.poll() is None

    def stop(self) -> None:
        """Stop the process and all children via process group kill."""
        if not self._process:
            return

        try:
            pgid = os.getpgid(self._process.pid)
            os.killpg(pgid, signal.SIGTERM)
            try:
                self._process.wait(timeout=PROCESS_STOP_TIMEOUT)
            except subprocess.TimeoutExpired:
                os.killpg(pgid, signal.SIGKILL)
                self._process.wait(timeout=2)
        except (ProcessLookupError, OSError):
            pass  # already dead
        finally:
            logger.debug("Stopped %s", self.name)
            self._process = None

    # -----------------------------------------------------------------
    # Log access
    # -----------------------------------------------------------------

    def read_log(self) -> str:
        try:
            return self.log_path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            return ""

    def remove_log(self) -> None:
        try:
            self.log_path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.debug("Could not remove %s: %s", self.log_path, e)
