"""Config CLI commands for ser."""

from typing import Any

import click
import yaml
from rich.markup import escape

from ser.cli.common import console, get_config_service, info, success, warning

# Keys whose value is always a list; commas separate the items
LIST_KEYS = frozenset({"extraUserDirs", "extraSystemDirs"})


def _parent(config_data: dict[str, Any], key: str) -> tuple[dict[str, Any] | None, str]:
    """Follow a dotted key to the mapping holding its last part.

    Returns:
        The mapping (None if a parent is missing) and the last key part.
    """
    *parents, last = key.split(".")
    node: Any = config_data
    for part in parents:
        node = node.get(part) if isinstance(node, dict) else None
    return (node if isinstance(node, dict) else None), last


def _coerce(key: str, value: str) -> Any:
    """Read a command-line value as a YAML scalar, so numbers and booleans keep their type."""
    if key in LIST_KEYS:
        return [item.strip() for item in value.split(",") if item.strip()]
    try:
        parsed = yaml.safe_load(value)
    except yaml.YAMLError:
        return value
    if parsed is None or isinstance(parsed, (dict, list)):
        return value
    return parsed


def _dump(data: Any) -> str:
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False).rstrip()


@click.group()
def config() -> None:
    """View and modify configuration."""
    pass


@config.command(name="show")
@click.argument("key", required=False)
@click.option("--effective", is_flag=True, help="Include defaults for keys that are not set")
@click.pass_context
def config_show(ctx: click.Context, key: str | None, effective: bool) -> None:
    """Show configuration values as YAML.

    Examples:
        ser config show              # Show the config file
        ser config show --effective  # Include defaults
        ser config show logs.lines   # Show one value
    """
    config_service = get_config_service(ctx)
    if effective:
        config_data = config_service.load().to_dict()
    else:
        config_data = config_service.get_config()

    if key:
        parent, last = _parent(config_data, key)
        if parent is None or last not in parent:
            warning(f"Key '{key}' is not set")
        else:
            console.print(_dump({key: parent[last]}), markup=False, highlight=False)
        return

    if not config_data:
        info("No configuration set")
        info(f"Config file: {config_service.config_path}")
        return

    info(f"Config file: {config_service.config_path}")
    console.print(_dump(config_data), markup=False, highlight=False)


@config.command(name="set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def config_set(ctx: click.Context, key: str, value: str) -> None:
    """Set a configuration value.

    Use dot notation for nested keys. The file is only written if the
    result is a valid configuration.

    Examples:
        ser config set scope system
        ser config set logs.lines 200
        ser config set extraUserDirs ~/services,~/more-services
    """
    config_service = get_config_service(ctx)
    config_data = config_service.get_config()

    *parents, last = key.split(".")
    node = config_data
    for part in parents:
        if not isinstance(node.get(part), dict):
            node[part] = {}
        node = node[part]
    node[last] = _coerce(key, value)

    config_service.set_config(config_data)
    success(f"Set {escape(_dump({key: node[last]}))}")


@config.command(name="unset")
@click.argument("key")
@click.pass_context
def config_unset(ctx: click.Context, key: str) -> None:
    """Remove a configuration value.

    Examples:
        ser config unset logs.lines
    """
    config_service = get_config_service(ctx)
    config_data = config_service.get_config()

    parent, last = _parent(config_data, key)
    if parent is None or last not in parent:
        warning(f"Key '{key}' not found")
        return

    del parent[last]
    config_service.set_config(config_data)
    success(f"Removed {key}")
