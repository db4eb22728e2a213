"""Launch a third-party tunnel client pointed at the local file server."""

import logging
from typing import Optional

from ..exceptions import TunnelError
from .process import ManagedProcess, log_path_for
from .providers import TunnelProvider

logger = logging.getLogger(__name__)


class TunnelClient:
    """Spawns the provider's binary for a local port.

    Launching is fire-and-forget: the public URL is discovered afterwards by
    scraping ``handle.log_path`` (see :mod:`.url_extractor`).
    """

    def __init__(self, provider: TunnelProvider, log_dir: Optional[str] = None):
        self.provider = provider
        self.log_dir = log_dir

    def start(self, local_port: int) -> ManagedProcess:
        """Start the tunnel client.

        Raises:
            TunnelError: If the binary could not be executed at all.
        """
        cmd = self.provider.command(local_port)
        log_path = log_path_for("tunnel", self.log_dir)
        try:
            handle = ManagedProcess.spawn(f"{self.provider.name} tunnel", cmd, log_path)
        except OSError as e:
            log_path.unlink(missing_ok=True)
            raise TunnelError(f"Could not start {self.provider.name}: {e}")

        logger.info("Tunnel client %s started for port %s", self.provider.name, local_port)
        return handle
