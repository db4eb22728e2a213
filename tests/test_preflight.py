import pytest

from swarmdrop_cli import preflight
from swarmdrop_cli.exceptions import (
    DependencyMissingError,
    DirectoryNotFoundError,
    NoArtifactsError,
    UnsupportedPlatformError,
)
from swarmdrop_cli.serve.providers import LOCALTUNNEL


@pytest.fixture
def which(monkeypatch):
    monkeypatch.setattr(preflight.shutil, "which", lambda name: f"/usr/bin/{name}")


def test_platforms():
    assert preflight.check_platform("linux") == "linux"
    assert preflight.check_platform("darwin") == "darwin"
    with pytest.raises(UnsupportedPlatformError, match="win32"):
        preflight.check_platform("win32")


def test_missing_dependency_mentions_install_hint(monkeypatch):
    monkeypatch.setattr(preflight.shutil, "which", lambda name: None)
    with pytest.raises(DependencyMissingError, match="npm install -g localtunnel"):
        preflight.check_dependency(LOCALTUNNEL)


def test_explicit_directory_must_exist(tmp_path):
    with pytest.raises(DirectoryNotFoundError):
        preflight.locate_swarm_dir(str(tmp_path / "missing"))


def test_current_directory_named_rl_swarm_wins(swarm_dir, tmp_path):
    home = tmp_path / "home"
    (home / "rl-swarm").mkdir(parents=True)
    root, warnings = preflight.locate_swarm_dir(cwd=swarm_dir, home=home)
    assert root == swarm_dir.resolve()
    assert warnings == []


def test_falls_back_to_home_rl_swarm(swarm_dir, tmp_path):
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    root, warnings = preflight.locate_swarm_dir(cwd=elsewhere, home=swarm_dir.parent)
    assert root == swarm_dir.resolve()
    assert warnings == []


def test_falls_back_to_cwd_with_warning(tmp_path):
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    root, warnings = preflight.locate_swarm_dir(cwd=elsewhere, home=tmp_path / "nohome")
    assert root == elsewhere.resolve()
    assert "Not in rl-swarm directory" in warnings[0]


def test_partial_availability_is_reported(which, swarm_dir):
    (swarm_dir / "swarm.pem").unlink()
    report = preflight.run_preflight(LOCALTUNNEL, str(swarm_dir), platform="linux")

    assert [a.name for a in report.present] == ["userData.json", "userApiKey.json"]
    assert [a.name for a in report.missing] == ["swarm.pem"]
    assert report.warnings == []
    assert report.tunnel_binary == "/usr/bin/lt"


def test_no_artifacts_is_fatal(which, tmp_path):
    with pytest.raises(NoArtifactsError, match="No required files found"):
        preflight.run_preflight(LOCALTUNNEL, str(tmp_path), platform="linux")
