import socket
import sys

import pytest

from swarmdrop_cli.artifacts import ARTIFACTS
from swarmdrop_cli.serve.providers import CLOUDFLARED, TunnelProvider


@pytest.fixture
def swarm_dir(tmp_path):
    """An rl-swarm directory holding all three credential files."""
    root = tmp_path / "rl-swarm"
    for artifact in ARTIFACTS:
        path = artifact.path_in(root)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(f"contents of {artifact.name}\n")
    return root


@pytest.fixture
def log_dir(tmp_path):
    path = tmp_path / "logs"
    path.mkdir()
    return str(path)


@pytest.fixture
def listener():
    """Occupy ports with plain listening sockets; closed after the test."""
    sockets = []

    def _listen(port: int = 0) -> int:
        s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        s.bind(("0.0.0.0", port))
        s.listen(1)
        sockets.append(s)
        return s.getsockname()[1]

    yield _listen

    for s in sockets:
        s.close()


def fake_tunnel(*lines: str, linger: int = 60) -> TunnelProvider:
    """A "tunnel client" that is just the current interpreter printing lines."""
    script = "; ".join(
        ["import sys, time"]
        + [f"print({line!r}, flush=True)" for line in lines]
        + [f"time.sleep({linger})"]
    )
    return TunnelProvider(
        name="fake",
        binary=sys.executable,
        args=("-c", script),
        url_pattern=CLOUDFLARED.url_pattern,
    )


@pytest.fixture
def make_tunnel():
    return fake_tunnel
