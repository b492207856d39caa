"""List command for ser CLI."""

import click
from rich.table import Table

from ser.cli.common import console, format_flag, format_status, get_config, get_service


@click.command("list")
@click.option(
    "-a",
    "--all",
    "include_all",
    is_flag=True,
    help="Include system services and services not created by ser",
)
@click.option("--managed", is_flag=True, help="Only services created by ser")
@click.pass_context
def list_services(ctx: click.Context, include_all: bool, managed: bool) -> None:
    """List services with their live status.

    By default only user services are listed, and on Linux only the ones
    ser created. Unreadable descriptor files are skipped with a warning.

    Examples:
        ser list            # Your services
        ser list --all      # Everything the daemon can see
    """
    # list.all in the config turns --all on by default
    include_all = include_all or get_config(ctx).listing.all
    service = get_service(ctx)

    # Distro units share the user directories, so hide them unless asked
    only_managed = managed or (service.marks_managed and not include_all)

    descriptors = [
        d for d in service.list(include_system=include_all) if d.managed or not only_managed
    ]

    if not console.is_terminal:
        for d in descriptors:
            click.echo(f"{d.display_name}\t{d.status}\t{d.source_path}")
        return

    if not descriptors:
        console.print("[dim]No services found[/dim]")
        return

    table = Table(title=f"Services ({len(descriptors)})")
    table.add_column("Name", style="cyan")
    table.add_column("Status")
    table.add_column("Enabled")
    table.add_column("Run at Load")
    table.add_column("Scope", style="dim")
    table.add_column("Path", style="dim")

    for d in descriptors:
        table.add_row(
            d.display_name,
            format_status(d.status),
            format_flag(d.enabled),
            format_flag(d.run_at_load),
            d.scope.value,
            str(d.source_path),
        )

    console.print(table)
