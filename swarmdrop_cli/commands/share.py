"""swarmdrop share — serve the credential files through a public tunnel."""

import click
from rich.console import Console
from rich.panel import Panel

from ..artifacts import download_commands
from ..exceptions import PreflightError, ServeError
from ..preflight import run_preflight
from ..serve.orchestrator import Orchestrator, ServerSession, SessionState
from ..serve.providers import get_provider

console = Console()

_STATUS_MESSAGES = {
    SessionState.SELECTING_PORT: "Looking for a free port",
    SessionState.STARTING_SERVER: "Starting file server on port {port}",
    SessionState.STARTING_TUNNEL: "Starting {provider} tunnel",
    SessionState.AWAITING_URL: "Waiting for {provider} to report a public URL",
}


@click.command("share")
@click.pass_obj
def share_command(obj: dict):
    """Serve swarm.pem and the modal-login session files over a tunnel.

    Starts a read-only HTTP server in the rl-swarm directory, exposes it
    through a temporary public URL, and prints ready-to-paste download
    commands. Press Ctrl+C to stop both processes.

    \b
    Examples:
      swarmdrop                           # same as: swarmdrop share
      swarmdrop --provider localtunnel    # use lt instead of cloudflared
      swarmdrop --dir ~/rl-swarm --port 9000
    """
    provider = get_provider(obj["provider"])

    try:
        report = run_preflight(provider, obj.get("directory"))
    except PreflightError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise SystemExit(1)

    for warning in report.warnings:
        console.print(f"  [yellow]![/yellow] {warning}")
    for artifact in report.missing:
        console.print(f"  [yellow]![/yellow] {artifact.name} not found at {artifact.path_in(report.root)}")
    console.print(f"  [green]✓[/green] Tunnel client: [dim]{report.tunnel_binary}[/dim]")
    console.print(f"  [green]✓[/green] Serving [bold]{report.root}[/bold]")

    with Orchestrator(
        report.root,
        provider,
        base_port=obj["port"],
        max_attempts=obj["attempts"],
    ) as orchestrator:
        try:
            with console.status("[dim]Starting...[/dim]") as status:
                orchestrator.on_state_change = lambda s: _update_status(status, s, provider.name, obj["attempts"])
                session = orchestrator.start()
        except ServeError as e:
            console.print(f"[red]Error:[/red] {e}")
            if e.log:
                console.print(Panel(e.log_tail(), title="Last output", border_style="red"))
            raise SystemExit(1)
        finally:
            orchestrator.on_state_change = None

        console.print(f"  [green]✓[/green] File server on port {session.port}")
        console.print(f"  [green]✓[/green] Tunnel established at: [bold green]{session.tunnel_url}[/bold green]")
        _display_downloads(session.tunnel_url, report.present)
        console.print("\n[bold blue]Press Ctrl+C to stop servers when done[/bold blue]")

        orchestrator.wait()
        console.print("\n[dim]Stopping servers...[/dim]")

    console.print("[green]✓[/green] Servers stopped")


def _update_status(status, session: ServerSession, provider: str, max_attempts: int) -> None:
    template = _STATUS_MESSAGES.get(session.state)
    if not template:
        return
    text = template.format(port=session.port, provider=provider)
    if session.attempts:
        text += f" (attempt {session.attempts + 1}/{max_attempts})"
    status.update(f"[dim]{text}...[/dim]")


def _display_downloads(tunnel_url: str, artifacts: list):
    """Print links and wget/curl one-liners under section rules.

    Plain lines with soft_wrap rather than a Panel/Table: rich would fold
    long URLs inside a box, and these have to stay copy-pasteable.
    """
    console.print()
    console.rule("[bold green]Download links[/bold green]")
    for artifact in artifacts:
        console.print(f"[bold]{artifact.name}[/bold]")
        console.print(f"   [blue]{artifact.url(tunnel_url)}[/blue]", soft_wrap=True)

    console.print()
    console.rule("[bold green]wget / curl commands[/bold green]")
    for artifact in artifacts:
        wget, curl = download_commands(artifact, tunnel_url)
        console.print(f"[yellow]{wget}[/yellow]", soft_wrap=True, highlight=False)
        console.print(f"[dim]{curl}[/dim]", soft_wrap=True, highlight=False)
