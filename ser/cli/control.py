"""Start, stop and restart commands for ser CLI."""

import click

from ser.cli.common import format_status, get_service, not_found, success
from ser.exceptions import ServiceNotFoundError


@click.command()
@click.argument("name")
@click.pass_context
def start(ctx: click.Context, name: str) -> None:
    """Start a service. A running service is left alone.

    Examples:
        ser start demo
    """
    try:
        descriptor = get_service(ctx).start(name)
    except ServiceNotFoundError as e:
        raise not_found(e) from e

    success(f"Started {descriptor.display_name}: {format_status(descriptor.status)}")


@click.command()
@click.argument("name")
@click.pass_context
def stop(ctx: click.Context, name: str) -> None:
    """Stop a service. A stopped service is left alone."""
    try:
        descriptor = get_service(ctx).stop(name)
    except ServiceNotFoundError as e:
        raise not_found(e) from e

    success(f"Stopped {descriptor.display_name}: {format_status(descriptor.status)}")


@click.command()
@click.argument("name")
@click.pass_context
def restart(ctx: click.Context, name: str) -> None:
    """Restart a service, or start it if it is not running."""
    try:
        descriptor = get_service(ctx).restart(name)
    except ServiceNotFoundError as e:
        raise not_found(e) from e

    success(f"Restarted {descriptor.display_name}: {format_status(descriptor.status)}")
