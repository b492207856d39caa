"""Shared helpers for ser CLI commands."""

from pathlib import Path
from typing import Any

import click
from rich.console import Console

from ser.exceptions import ServiceNotFoundError
from ser.models.config import SerConfig
from ser.models.service import ServiceDescriptor, ServiceState, ServiceStatus
from ser.platform import PlatformService, get_platform_service
from ser.services.config import ConfigService

console = Console()

STATUS_COLORS = {
    ServiceState.RUNNING: "green",
    ServiceState.STOPPED: "dim",
    ServiceState.UNKNOWN: "yellow",
    ServiceState.ERROR: "red",
}


def error(msg: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error:[/red] {msg}")


def warning(msg: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning:[/yellow] {msg}")


def info(msg: str) -> None:
    """Print an info message."""
    console.print(f"[dim]{msg}[/dim]")


def success(msg: str) -> None:
    """Print a success message."""
    console.print(f"[green]✓[/green] {msg}")


def get_config_service(ctx: click.Context) -> ConfigService:
    """Get the config service for the --config path in the context."""
    config_path: Path | None = ctx.obj.get("config_path")
    return ConfigService(config_path)


def get_config(ctx: click.Context) -> SerConfig:
    """Load the configuration once per invocation."""
    if "config" not in ctx.obj:
        ctx.obj["config"] = get_config_service(ctx).load()
    config: SerConfig = ctx.obj["config"]
    return config


def get_service(ctx: click.Context) -> PlatformService:
    """Get the platform service for this host.

    Tests may place a prepared service in ``ctx.obj["platform"]``.
    """
    if "platform" not in ctx.obj:
        ctx.obj["platform"] = get_platform_service(get_config(ctx))
    service: PlatformService = ctx.obj["platform"]
    return service


def format_status(status: ServiceStatus) -> str:
    """Format a status with color."""
    color = STATUS_COLORS.get(status.state, "white")
    text = str(status)
    if status.is_running and status.pid:
        text += f" (pid {status.pid})"
    return f"[{color}]{text}[/{color}]"


def format_flag(value: bool | None) -> str:
    """Format an optional boolean as yes/no/-."""
    if value is None:
        return "[dim]-[/dim]"
    return "[green]yes[/green]" if value else "no"


def not_found(e: ServiceNotFoundError) -> click.Abort:
    """Report a missing service and return the Abort to raise."""
    console.print(f"[red]Service not found:[/red] {e.name}")
    if e.suggestions:
        console.print("\nDid you mean?")
        for suggestion in e.suggestions:
            console.print(f"  - {suggestion}")
    return click.Abort()


def parse_env(values: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated KEY=VALUE options.

    Raises:
        click.BadParameter: If an item has no '='.
    """
    env: dict[str, str] = {}
    for item in values:
        key, sep, value = item.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got '{item}'", param_hint="--env")
        env[key] = value
    return env


def descriptor_rows(descriptor: ServiceDescriptor) -> list[tuple[str, Any]]:
    """Label/value pairs for showing one descriptor."""
    rows: list[tuple[str, Any]] = [
        ("Service", f"[bold]{descriptor.name}[/bold]"),
        ("Path", descriptor.source_path or "[dim]not written[/dim]"),
        ("Scope", descriptor.scope.value),
        ("Status", format_status(descriptor.status)),
        ("Enabled", format_flag(descriptor.enabled)),
        ("Program", descriptor.program),
    ]
    if descriptor.arguments:
        rows.append(("Arguments", " ".join(descriptor.arguments)))
    if descriptor.working_directory:
        rows.append(("Working Directory", descriptor.working_directory))
    if descriptor.stdout_log:
        rows.append(("Stdout Log", descriptor.stdout_log))
    if descriptor.stderr_log:
        rows.append(("Stderr Log", descriptor.stderr_log))
    for key, value in descriptor.environment.items():
        rows.append(("Environment", f"{key}={value}"))
    rows.append(("Run at Load", format_flag(descriptor.run_at_load)))
    return rows


def print_descriptor(descriptor: ServiceDescriptor) -> None:
    """Print one descriptor as label: value lines."""
    for label, value in descriptor_rows(descriptor):
        console.print(f"{label}: {value}", highlight=False)
