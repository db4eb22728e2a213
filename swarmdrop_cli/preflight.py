"""Checks run before anything is started: platform, tunnel binary, directory, files."""

import logging
import shutil
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from .artifacts import ARTIFACTS, Artifact, split_available
from .config import SUPPORTED_PLATFORMS, SWARM_DIR_NAME
from .exceptions import (
    DependencyMissingError,
    DirectoryNotFoundError,
    NoArtifactsError,
    UnsupportedPlatformError,
)
from .serve.providers import TunnelProvider

logger = logging.getLogger(__name__)


@dataclass
class PreflightReport:
    root: Path
    tunnel_binary: str
    present: List[Artifact] = field(default_factory=list)
    missing: List[Artifact] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def check_platform(platform: Optional[str] = None) -> str:
    """WSL reports as linux, which is fine."""
    platform = platform or sys.platform
    for supported in SUPPORTED_PLATFORMS:
        if platform.startswith(supported):
            return supported
    raise UnsupportedPlatformError(f"Unsupported OS: {platform}")


def check_dependency(provider: TunnelProvider) -> str:
    """Return the full path of the provider's binary."""
    path = shutil.which(provider.binary)
    if not path:
        raise DependencyMissingError(provider.binary, provider.install_hint)
    return path


def locate_swarm_dir(
    explicit: Optional[str] = None,
    cwd: Optional[Path] = None,
    home: Optional[Path] = None,
) -> Tuple[Path, List[str]]:
    """Pick the directory to serve.

    Order: explicit path (must exist), the current directory if it is
    ``rl-swarm``, ``~/rl-swarm``, and finally the current directory.
    Returns ``(directory, warnings)``.
    """
    if explicit:
        path = Path(explicit).expanduser().resolve()
        if not path.is_dir():
            raise DirectoryNotFoundError(f"Directory not found: {path}")
        return path, []

    cwd = Path(cwd or Path.cwd()).resolve()
    if cwd.name == SWARM_DIR_NAME:
        return cwd, []

    home_dir = Path(home or Path.home()) / SWARM_DIR_NAME
    if home_dir.is_dir():
        return home_dir.resolve(), []

    return cwd, [f"Not in {SWARM_DIR_NAME} directory, using current directory: {cwd}"]


def run_preflight(
    provider: TunnelProvider,
    directory: Optional[str] = None,
    *,
    cwd: Optional[Path] = None,
    home: Optional[Path] = None,
    platform: Optional[str] = None,
) -> PreflightReport:
    """Run every check; the first fatal problem raises a PreflightError."""
    check_platform(platform)
    binary = check_dependency(provider)
    root, warnings = locate_swarm_dir(directory, cwd=cwd, home=home)

    present, missing = split_available(root, ARTIFACTS)
    for artifact in missing:
        logger.info("%s not found at %s", artifact.name, artifact.path_in(root))

    if not present:
        raise NoArtifactsError(
            "No required files found! Expected:\n"
            + "\n".join(f"  {a.name}: {a.path_in(root)}" for a in ARTIFACTS)
        )

    for warning in warnings:
        logger.info(warning)
    return PreflightReport(root=root, tunnel_binary=binary, present=present, missing=missing, warnings=warnings)
