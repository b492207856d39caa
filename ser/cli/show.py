"""Show command for ser CLI."""

import click

from ser.cli.common import get_service, not_found, print_descriptor
from ser.exceptions import ServiceNotFoundError


@click.command()
@click.argument("name")
@click.pass_context
def show(ctx: click.Context, name: str) -> None:
    """Show a service's configuration and live status.

    NAME may omit the homebrew.mxcl. prefix or the .service suffix.
    """
    try:
        descriptor = get_service(ctx).show(name)
    except ServiceNotFoundError as e:
        raise not_found(e) from e

    print_descriptor(descriptor)
