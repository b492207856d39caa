"""Create and generate commands for ser CLI."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError

from ser.cli.common import (
    format_status,
    get_config,
    get_service,
    info,
    parse_env,
    print_descriptor,
    success,
)
from ser.codecs import DescriptorCodec, PlistCodec, UnitFileCodec
from ser.models.service import ServiceScope, ServiceSpec

FORMATS: dict[str, type[DescriptorCodec]] = {
    "systemd": UnitFileCodec,
    "launchd": PlistCodec,
}


def spec_options(f: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by ``new`` and ``generate``."""
    options = [
        click.argument("command", nargs=-1, required=True),
        click.option("--name", help="Service name (default: the program's basename)"),
        click.option("--workdir", type=click.Path(path_type=Path), help="Working directory"),
        click.option("--stdout", type=click.Path(path_type=Path), help="File for standard output"),
        click.option("--stderr", type=click.Path(path_type=Path), help="File for standard error"),
        click.option("--env", "env", multiple=True, metavar="KEY=VALUE", help="Environment variable"),
        click.option(
            "--run-at-load/--no-run-at-load",
            default=False,
            help="Start automatically with the session or system",
        ),
        click.option("--system", is_flag=True, help="Create a system-wide service"),
    ]
    for option in reversed(options):
        f = option(f)
    return f


def build_spec(
    command: tuple[str, ...],
    name: str | None,
    workdir: Path | None,
    stdout: Path | None,
    stderr: Path | None,
    env: tuple[str, ...],
    run_at_load: bool,
    system: bool,
) -> ServiceSpec:
    """Build a ServiceSpec from command-line options.

    Raises:
        click.BadParameter: If the options do not describe a valid service.
    """
    try:
        return ServiceSpec.from_command(
            list(command),
            name=name,
            working_directory=workdir.expanduser().absolute() if workdir else None,
            stdout_log=stdout.expanduser().absolute() if stdout else None,
            stderr_log=stderr.expanduser().absolute() if stderr else None,
            environment=parse_env(env),
            run_at_load=run_at_load,
            scope=ServiceScope.SYSTEM if system else None,
        )
    except ValidationError as e:
        messages = "; ".join(err["msg"] for err in e.errors())
        raise click.BadParameter(messages) from e
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="COMMAND") from e


@click.command()
@spec_options
@click.option("--start", "start_now", is_flag=True, help="Start the service after creating it")
@click.pass_context
def new(
    ctx: click.Context,
    command: tuple[str, ...],
    name: str | None,
    workdir: Path | None,
    stdout: Path | None,
    stderr: Path | None,
    env: tuple[str, ...],
    run_at_load: bool,
    system: bool,
    start_now: bool,
) -> None:
    """Create a service that runs COMMAND.

    The descriptor is written to the user's service directory (or the
    system one with --system) and never overwrites an existing service.
    Use -- before COMMAND when it has options of its own.

    Examples:
        ser new /usr/local/bin/demo --name demo
        ser new --run-at-load --start -- python3 -m http.server 8000
        ser new --env PORT=8080 --stdout ~/demo.log ./server.sh
    """
    spec = build_spec(command, name, workdir, stdout, stderr, env, run_at_load, system)
    service = get_service(ctx)

    descriptor = service.create(spec)
    success(f"Created service: {descriptor.name}")
    info(f"  {descriptor.source_path}")

    if start_now:
        descriptor = service.start(descriptor.name)
        success(f"Started {descriptor.display_name}: {format_status(descriptor.status)}")
    else:
        print_descriptor(descriptor)


@click.command()
@spec_options
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["native", *FORMATS]),
    default="native",
    show_default=True,
    help="Descriptor format",
)
@click.pass_context
def generate(
    ctx: click.Context,
    command: tuple[str, ...],
    name: str | None,
    workdir: Path | None,
    stdout: Path | None,
    stderr: Path | None,
    env: tuple[str, ...],
    run_at_load: bool,
    system: bool,
    fmt: str,
) -> None:
    """Print the descriptor file for COMMAND without installing it.

    Examples:
        ser generate --name demo /usr/local/bin/demo
        ser generate --format launchd --name com.example.demo -- ./demo -v
    """
    spec = build_spec(command, name, workdir, stdout, stderr, env, run_at_load, system)

    if fmt == "native":
        service = get_service(ctx)
        click.echo(service.generate(spec), nl=False)
        click.echo(f"# install to {service.descriptor_path(spec)}", err=True)
    else:
        codec = FORMATS[fmt]()
        scope = spec.scope or get_config(ctx).scope
        click.echo(codec.encode(spec.to_descriptor(scope)).decode("utf-8"), nl=False)
