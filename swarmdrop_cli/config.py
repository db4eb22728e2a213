"""Defaults for swarmdrop. Most are overridable via CLI options / env vars."""

import tempfile

# Port search
DEFAULT_BASE_PORT = 8000
MAX_ATTEMPTS = 10        # server + tunnel attempts before giving up
PORT_SCAN_LIMIT = 100    # candidates the allocator checks per attempt

# Static file server
SERVER_BIND_HOST = "0.0.0.0"
SERVER_SETTLE_TIMEOUT = 3.0
SERVER_POLL_INTERVAL = 0.25
SERVER_HEALTH_TIMEOUT = 1.0

# Tunnel
DEFAULT_PROVIDER = "cloudflared"
TUNNEL_URL_TIMEOUT = 10.0
TUNNEL_POLL_INTERVAL = 0.5

# Subprocess teardown
PROCESS_STOP_TIMEOUT = 5

# Filesystem
SWARM_DIR_NAME = "rl-swarm"
LOG_DIR = tempfile.gettempdir()

SUPPORTED_PLATFORMS = ("linux", "darwin")
