"""Known tunnel clients and how to recognise their public URL."""

import re
from dataclasses import dataclass
from typing import Dict, List, Tuple

from ..exceptions import SwarmDropError


@dataclass(frozen=True)
class TunnelProvider:
    """How to launch a tunnel client and scrape its URL from the output."""

    name: str                  # "cloudflared", "localtunnel"
    binary: str                # executable looked up on PATH
    args: Tuple[str, ...]      # may contain {port} and {url}
    url_pattern: re.Pattern
    install_hint: str = ""

    def command(self, port: int) -> List[str]:
        local_url = f"http://localhost:{port}"
        return [self.binary] + [a.format(port=port, url=local_url) for a in self.args]


CLOUDFLARED = TunnelProvider(
    name="cloudflared",
    binary="cloudflared",
    args=("tunnel", "--no-autoupdate", "--url", "{url}"),
    url_pattern=re.compile(r"https://[-0-9a-z]+\.trycloudflare\.com"),
    install_hint="https://developers.cloudflare.com/cloudflare-one/connections/connect-networks/downloads/",
)

LOCALTUNNEL = TunnelProvider(
    name="localtunnel",
    binary="lt",
    args=("--port", "{port}", "--local-host", "localhost"),
    url_pattern=re.compile(r"https://[^\s]*\.loca\.lt"),
    install_hint="npm install -g localtunnel",
)

PROVIDERS: Dict[str, TunnelProvider] = {
    CLOUDFLARED.name: CLOUDFLARED,
    LOCALTUNNEL.name: LOCALTUNNEL,
}


def get_provider(name: str) -> TunnelProvider:
    try:
        return PROVIDERS[name]
    except KeyError:
        raise SwarmDropError(
            f"Unknown tunnel provider '{name}'. Choose one of: {', '.join(PROVIDERS)}"
        )
