"""Serve package — static file server, tunnel client, and the glue between them."""

from .local_server import FileServer
from .orchestrator import Orchestrator, ServerSession, SessionState
from .port_allocator import PortAllocator
from .providers import PROVIDERS, TunnelProvider, get_provider
from .tunnel_client import TunnelClient
from .url_extractor import await_url, find_url

__all__ = [
    "FileServer",
    "Orchestrator",
    "ServerSession",
    "SessionState",
    "PortAllocator",
    "PROVIDERS",
    "TunnelProvider",
    "get_provider",
    "TunnelClient",
    "await_url",
    "find_url",
]
