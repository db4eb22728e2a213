import time

import pytest
import requests

from swarmdrop_cli.exceptions import PortBindError, ServerStartupError
from swarmdrop_cli.serve.local_server import FileServer
from swarmdrop_cli.serve.port_allocator import PortAllocator


@pytest.fixture
def file_server(log_dir):
    return FileServer(settle_timeout=5, poll_interval=0.1, log_dir=log_dir)


def test_serves_files_read_only(file_server, swarm_dir, listener):
    port = PortAllocator().next_free_port(listener() + 1)
    handle = file_server.start(swarm_dir, port)
    try:
        assert handle.is_alive()
        resp = requests.get(f"http://127.0.0.1:{port}/modal-login/temp-data/userData.json", timeout=5)
        assert resp.status_code == 200
        assert resp.text == "contents of userData.json\n"

        resp = requests.put(f"http://127.0.0.1:{port}/swarm.pem", data=b"x", timeout=5)
        assert resp.status_code == 501
        assert (swarm_dir / "swarm.pem").read_text() == "contents of swarm.pem\n"
    finally:
        handle.stop()
    assert not handle.is_alive()


def test_busy_port_is_a_bind_failure_not_a_startup_failure(file_server, swarm_dir, listener):
    port = listener()
    started = time.monotonic()
    with pytest.raises(PortBindError) as exc:
        file_server.start(swarm_dir, port)
    assert time.monotonic() - started < file_server.settle_timeout
    assert exc.value.port == port
    assert "already in use" in exc.value.log.lower()


def test_other_startup_failures_are_fatal(swarm_dir, log_dir, listener):
    # TEST-NET-1: never assigned to a local interface
    server = FileServer(bind_host="192.0.2.1", settle_timeout=5, poll_interval=0.1, log_dir=log_dir)
    port = PortAllocator().next_free_port(listener() + 1)
    with pytest.raises(ServerStartupError) as exc:
        server.start(swarm_dir, port)
    assert not isinstance(exc.value, PortBindError)
    assert exc.value.log


def test_command_serves_the_given_directory(swarm_dir):
    cmd = FileServer(bind_host="127.0.0.1").command(swarm_dir, 8123)
    assert cmd[1:5] == ["-u", "-m", "http.server", "8123"]
    assert cmd[cmd.index("--bind") + 1] == "127.0.0.1"
    assert cmd[cmd.index("--directory") + 1] == str(swarm_dir)
