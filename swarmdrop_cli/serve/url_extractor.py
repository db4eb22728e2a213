"""Scrape a tunnel client's log for the public URL it was assigned."""

import logging
import time
from pathlib import Path
from re import Pattern
from typing import Callable, Optional

from ..config import TUNNEL_POLL_INTERVAL, TUNNEL_URL_TIMEOUT
from ..exceptions import TunnelURLNotFoundError

logger = logging.getLogger(__name__)


def find_url(text: str, pattern: Pattern[str]) -> Optional[str]:
    """Return the first URL in ``text`` matching ``pattern``, in file order.

    Tunnel clients draw boxes and progress output with bare carriage
    returns; those are turned into newlines before matching.
    """
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    for line in text.splitlines():
        match = pattern.search(line)
        if match:
            return match.group(0)
    return None


def await_url(
    log_path: Path,
    pattern: Pattern[str],
    timeout: float = TUNNEL_URL_TIMEOUT,
    *,
    is_alive: Optional[Callable[[], bool]] = None,
    poll_interval: float = TUNNEL_POLL_INTERVAL,
) -> str:
    """Poll ``log_path`` until a matching URL shows up or ``timeout`` passes.

    If ``is_alive`` is given and reports the tunnel process has exited, the
    log is scanned one last time and the wait ends early.

    Raises:
        TunnelURLNotFoundError: No match before the deadline.
    """
    deadline = time.monotonic() + timeout

    while True:
        exited = is_alive is not None and not is_alive()
        text = _read(log_path)
        url = find_url(text, pattern)
        if url:
            logger.info("Tunnel URL found: %s", url)
            return url

        if exited:
            raise TunnelURLNotFoundError("Tunnel client exited before reporting a URL", text)
        if time.monotonic() >= deadline:
            raise TunnelURLNotFoundError(f"No tunnel URL after {timeout:g}s", text)

        time.sleep(poll_interval)


def _read(log_path: Path) -> str:
    try:
        return Path(log_path).read_text(encoding="utf-8", errors="replace")
    except FileNotFoundError:
        return ""
