"""Edit command for ser CLI."""

import click

from ser.cli.common import format_status, get_config, get_service, info, not_found, success
from ser.exceptions import ServiceNotFoundError


@click.command()
@click.argument("name")
@click.option("--editor", help="Editor to use (default: config 'editor', then $EDITOR)")
@click.pass_context
def edit(ctx: click.Context, name: str, editor: str | None) -> None:
    """Open a service's descriptor file in an editor.

    After the editor exits the file is parsed again and the daemon is told
    to reload it. A running service keeps its old configuration until it
    is restarted.
    """
    service = get_service(ctx)
    try:
        path = service.file_path(name)
    except ServiceNotFoundError as e:
        raise not_found(e) from e

    click.edit(filename=str(path), editor=editor or get_config(ctx).editor)

    descriptor = service.edited(name)
    success(f"Reloaded {descriptor.display_name}: {format_status(descriptor.status)}")
    if descriptor.status.is_running:
        info(f"Run 'ser restart {descriptor.display_name}' to apply the changes")
