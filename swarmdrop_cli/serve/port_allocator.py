"""Find a free local TCP port by scanning upward from a base port."""

import logging
import socket

from ..config import PORT_SCAN_LIMIT, SERVER_BIND_HOST
from ..exceptions import PortsExhaustedError

logger = logging.getLogger(__name__)

MAX_PORT = 65535


class PortAllocator:
    """Scan for a port nobody is listening on.

    ``host`` should be the address the file server will bind, so the check
    sees the same conflicts the server would.
    """

    def __init__(self, host: str = SERVER_BIND_HOST):
        self.host = host

    def next_free_port(self, base: int, max_attempts: int = PORT_SCAN_LIMIT) -> int:
        """Return the first free port >= ``base``.

        Raises:
            PortsExhaustedError: If ``max_attempts`` candidates are all taken.
        """
        last = min(base + max_attempts - 1, MAX_PORT)
        for port in range(base, last + 1):
            if self.is_port_free(port):
                return port
            logger.debug("Port %s is occupied", port)

        raise PortsExhaustedError(f"No free port found in range {base}-{last}")

    def is_port_free(self, port: int) -> bool:
        """Check if a port is available.

        A port counts as free only if nothing accepts a connection on
        localhost and we can bind it ourselves.
        """
        return not self._accepts_connections(port) and self._can_bind(port)

    def _can_bind(self, port: int) -> bool:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            try:
                s.bind((self.host, port))
                return True
            except OSError:
                return False

    @staticmethod
    def _accepts_connections(port: int) -> bool:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.settimeout(0.5)
            return s.connect_ex(("127.0.0.1", port)) == 0
