"""The rl-swarm credential files swarmdrop shares, and their download URLs."""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Tuple


@dataclass(frozen=True)
class Artifact:
    name: str       # "swarm.pem"
    subpath: str    # POSIX path relative to the swarm directory; also the URL path

    def path_in(self, root: Path) -> Path:
        return Path(root).joinpath(*self.subpath.split("/"))

    def url(self, tunnel_url: str) -> str:
        return f"{tunnel_url.rstrip('/')}/{self.subpath}"


ARTIFACTS: Tuple[Artifact, ...] = (
    Artifact("swarm.pem", "swarm.pem"),
    Artifact("userData.json", "modal-login/temp-data/userData.json"),
    Artifact("userApiKey.json", "modal-login/temp-data/userApiKey.json"),
)


def split_available(root: Path, artifacts: Iterable[Artifact] = ARTIFACTS) -> Tuple[List[Artifact], List[Artifact]]:
    """Partition artifacts into (present, missing) under ``root``."""
    present, missing = [], []
    for artifact in artifacts:
        (present if artifact.path_in(root).is_file() else missing).append(artifact)
    return present, missing


def download_commands(artifact: Artifact, tunnel_url: str) -> Tuple[str, str]:
    """wget and curl one-liners that save the file under its own name."""
    url = artifact.url(tunnel_url)
    return f"wget -O {artifact.name} {url}", f"curl -fsSL -o {artifact.name} {url}"
