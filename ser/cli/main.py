"""Main CLI entry point for ser."""

import sys
from pathlib import Path

import click
from rich.console import Console

from ser import __version__
from ser.cli.config import config
from ser.cli.control import restart, start, stop
from ser.cli.edit import edit
from ser.cli.list import list_services
from ser.cli.logs import logs
from ser.cli.new import generate, new
from ser.cli.show import show
from ser.exceptions import SerError
from ser.utils import setup_logging

console = Console()


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Log the native commands being run")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Path to config file",
)
@click.version_option(__version__, prog_name="ser")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, config_path: Path | None) -> None:
    """ser - one command line for launchd and systemd services.

    Lists, inspects, controls and creates services on macOS (launchd) and
    Linux (systemd) with the same commands.
    """
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["verbose"] = verbose


@cli.command()
@click.pass_context
def help(ctx: click.Context) -> None:
    """Show this help message."""
    click.echo(ctx.parent.get_help())


# Register commands
cli.add_command(list_services, name="list")
cli.add_command(list_services, name="status")
cli.add_command(show)
cli.add_command(start)
cli.add_command(stop)
cli.add_command(restart)
cli.add_command(new)
cli.add_command(new, name="create")
cli.add_command(generate)
cli.add_command(edit)
cli.add_command(logs)
cli.add_command(config)


def main() -> None:
    """Main entry point with error handling."""
    try:
        cli()
    except SerError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except Exception as e:
        if "--verbose" in sys.argv or "-v" in sys.argv:
            raise
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
