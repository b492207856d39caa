"""Logs command for ser CLI."""

import contextlib
import subprocess

import click

from ser.cli.common import error, get_config, get_service, not_found
from ser.exceptions import ServiceNotFoundError


@click.command()
@click.argument("name")
@click.option("-n", "--lines", type=click.IntRange(min=1), help="Number of lines to show")
@click.option("-f", "--follow", is_flag=True, help="Follow log output")
@click.pass_context
def logs(ctx: click.Context, name: str, lines: int | None, follow: bool) -> None:
    """Show a service's logs.

    Uses journalctl on Linux. On macOS the service's log files are tailed,
    or the unified log is searched when it has none.

    Examples:
        ser logs demo
        ser logs demo -n 200
        ser logs demo -f
    """
    if lines is None:
        lines = get_config(ctx).logs.lines
    try:
        args = get_service(ctx).log_command(name, lines=lines, follow=follow)
    except ServiceNotFoundError as e:
        raise not_found(e) from e

    try:
        with contextlib.suppress(KeyboardInterrupt):
            result = subprocess.run(args)
            if result.returncode != 0:
                ctx.exit(result.returncode)
    except FileNotFoundError as e:
        error(f"{args[0]} is not installed")
        raise click.Abort() from e
