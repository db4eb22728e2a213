"""swarmdrop command-line entry point.

Usage:
    swarmdrop                     # share the files (default command)
    swarmdrop check               # pre-flight only
"""

import logging
import sys

import click

from . import __version__
from .commands import check, share
from .config import DEFAULT_BASE_PORT, DEFAULT_PROVIDER, MAX_ATTEMPTS
from .serve.providers import PROVIDERS


def _configure_logging(verbose: bool) -> None:
    # stderr only: stdout carries the download commands
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="swarmdrop")
@click.option("--dir", "directory", envvar="SWARMDROP_DIR", type=click.Path(file_okay=False),
              help="Directory to serve (default: ./ if named rl-swarm, else ~/rl-swarm, else ./)")
@click.option("--provider", envvar="SWARMDROP_PROVIDER", default=DEFAULT_PROVIDER, show_default=True,
              type=click.Choice(sorted(PROVIDERS)), help="Tunnel client to use")
@click.option("--port", envvar="SWARMDROP_BASE_PORT", default=DEFAULT_BASE_PORT, show_default=True,
              type=click.IntRange(1, 65535), help="First port to try for the file server")
@click.option("--attempts", envvar="SWARMDROP_MAX_ATTEMPTS", default=MAX_ATTEMPTS, show_default=True,
              type=click.IntRange(min=1), help="Server/tunnel attempts before giving up")
@click.option("--verbose", "-v", is_flag=True, help="Debug logging to stderr")
@click.pass_context
def cli(ctx, directory, provider, port, attempts, verbose):
    """Share rl-swarm credentials (swarm.pem, userData.json, userApiKey.json)
    from this machine through a temporary public URL.

    Run with no arguments on the remote box, then paste the printed wget
    commands on your own machine.
    """
    _configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj.update(directory=directory, provider=provider, port=port, attempts=attempts)

    if ctx.invoked_subcommand is None:
        ctx.invoke(share.share_command)


cli.add_command(share.share_command)
cli.add_command(check.check_command)


def main():
    cli(obj={})


if __name__ == "__main__":
    main()
