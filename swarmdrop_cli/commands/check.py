"""swarmdrop check — run the pre-flight checks without starting anything."""

import click
from rich.console import Console
from rich.table import Table

from ..artifacts import ARTIFACTS, split_available
from ..exceptions import PreflightError
from ..preflight import check_dependency, check_platform, locate_swarm_dir
from ..serve.providers import get_provider

console = Console()


@click.command("check")
@click.pass_obj
def check_command(obj: dict):
    """Show which credential files would be shared, and whether the tunnel
    client is installed.

    \b
    Examples:
      swarmdrop check
      swarmdrop --provider localtunnel check
    """
    provider = get_provider(obj["provider"])
    problems = []

    table = Table(title="Pre-flight")
    table.add_column("Check", style="bold")
    table.add_column("Status")
    table.add_column("Detail", style="dim")

    try:
        platform = check_platform()
        table.add_row("Platform", "[green]✓[/green]", platform)
    except PreflightError as e:
        problems.append(e)
        table.add_row("Platform", "[red]✗[/red]", str(e))

    try:
        binary = check_dependency(provider)
        table.add_row(provider.name, "[green]✓[/green]", binary)
    except PreflightError as e:
        problems.append(e)
        table.add_row(provider.name, "[red]✗[/red]", str(e))

    try:
        root, warnings = locate_swarm_dir(obj.get("directory"))
    except PreflightError as e:
        problems.append(e)
        table.add_row("Directory", "[red]✗[/red]", str(e))
        console.print(table)
        raise SystemExit(1)

    table.add_row("Directory", "[yellow]![/yellow]" if warnings else "[green]✓[/green]", str(root))

    present, _ = split_available(root, ARTIFACTS)
    for artifact in ARTIFACTS:
        found = artifact in present
        table.add_row(
            artifact.name,
            "[green]✓[/green]" if found else "[yellow]missing[/yellow]",
            str(artifact.path_in(root)),
        )

    console.print(table)
    for warning in warnings:
        console.print(f"  [yellow]![/yellow] {warning}")

    if not present:
        console.print("[red]No required files found.[/red]")
        raise SystemExit(1)
    if problems:
        raise SystemExit(1)

    console.print(f"[green]Ready.[/green] {len(present)}/{len(ARTIFACTS)} files will be shared.")
