"""Unit-file codec for systemd service descriptors.

systemd unit files look like INI but allow repeated keys (``Environment=``,
``ExecStartPre=``) and backslash line continuations, so they are parsed by
hand instead of with configparser.

Unknown entries are kept in ``ServiceDescriptor.extra`` under
``"Section.Key"`` with a list of values and written back after the known
keys of their section. Comments, key order within a section, and the
``file:``/``truncate:`` output modes do not survive a rewrite.
"""

import shlex
from pathlib import Path
from typing import Any

from ser.codecs.base import DescriptorCodec
from ser.exceptions import MalformedDescriptorError
from ser.models.service import UNIT_SUFFIX, ServiceDescriptor, ServiceScope

# First line of every unit file written by ser
MANAGED_BY_COMMENT = "# Managed by ser"

# Output targets that name a file
LOG_PREFIXES = ("append:", "file:", "truncate:")

# ExecStart special-executable prefixes (see systemd.service(5))
EXEC_PREFIX_CHARS = "-@:+!"

SECTION_ORDER = ("Unit", "Service", "Install")

# Pass-through entries that a set descriptor field replaces on encode.
# Values ser cannot model (StandardError=journal, a second ExecStart) stay in
# extra and are written back.
REPLACED_BY_FIELD = {
    "Service.WorkingDirectory": "working_directory",
    "Service.StandardOutput": "stdout_log",
    "Service.StandardError": "stderr_log",
}

DEFAULT_TARGETS = {
    ServiceScope.USER: "default.target",
    ServiceScope.SYSTEM: "multi-user.target",
}

# [Install] keys that make a unit start with its target
INSTALL_KEYS = ("Install.WantedBy", "Install.RequiredBy")


def parse_unit(text: str, source_path: Path | None = None) -> list[tuple[str, str, str]]:
    """Split unit-file text into (section, key, value) entries.

    Args:
        text: Unit file contents.
        source_path: Used in error messages.

    Returns:
        Entries in file order.

    Raises:
        MalformedDescriptorError: If a line is neither a section header,
            an assignment, nor a comment.
    """
    entries: list[tuple[str, str, str]] = []
    section: str | None = None
    pending = ""

    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not pending and (not line or line[0] in "#;"):
            continue

        if line.endswith("\\"):
            pending += line[:-1] + " "
            continue
        line = pending + line
        pending = ""

        if line.startswith("[") and line.endswith("]"):
            section = line[1:-1].strip()
            continue

        if "=" not in line:
            raise MalformedDescriptorError(f"line {lineno}: expected KEY=VALUE", source_path)
        if section is None:
            raise MalformedDescriptorError(
                f"line {lineno}: assignment outside of a section", source_path
            )

        key, value = line.split("=", 1)
        entries.append((section, key.strip(), value.strip()))

    if pending.strip():
        raise MalformedDescriptorError("file ends with a line continuation", source_path)

    return entries


def _log_path(value: str) -> Path | None:
    for prefix in LOG_PREFIXES:
        if value.startswith(prefix) and value[len(prefix):]:
            return Path(value[len(prefix):])
    return None


def _split_exec(value: str, source_path: Path | None) -> tuple[str, list[str]]:
    try:
        parts = shlex.split(value)
    except ValueError as e:
        raise MalformedDescriptorError(f"cannot parse ExecStart: {e}", source_path) from e
    if not parts:
        raise MalformedDescriptorError("ExecStart is empty", source_path)
    return parts[0], parts[1:]


def _join_exec(program: str, arguments: list[str]) -> str:
    stripped = program.lstrip(EXEC_PREFIX_CHARS)
    prefix = program[: len(program) - len(stripped)]
    return prefix + shlex.join([stripped, *arguments])


def _install_targets(extra: dict[str, Any]) -> list[str]:
    """Targets a unit is installed into; an empty assignment resets the list."""
    targets: list[str] = []
    for key in INSTALL_KEYS:
        current: list[str] = []
        for value in extra.get(key, []):
            current = current + value.split() if value.strip() else []
        targets.extend(current)
    return targets


def _quote_env(key: str, value: str) -> str:
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{key}={escaped}"'


class UnitFileCodec(DescriptorCodec):
    """Convert between systemd .service files and ServiceDescriptor."""

    suffix = UNIT_SUFFIX

    def decode(
        self,
        raw: bytes,
        source_path: Path | None = None,
        scope: ServiceScope = ServiceScope.USER,
        name: str | None = None,
    ) -> ServiceDescriptor:
        """Parse a unit file into a descriptor.

        The name is the unit name without the ``.service`` suffix, taken from
        ``name`` or the file name.

        Raises:
            MalformedDescriptorError: If the file is not valid UTF-8, has no
                usable ExecStart, or no name can be determined.
        """
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise MalformedDescriptorError(f"not valid UTF-8: {e}", source_path) from e

        if name is None:
            if source_path is None:
                raise MalformedDescriptorError("unit name unknown", source_path)
            name = source_path.name
        if name.endswith(self.suffix):
            name = name[: -len(self.suffix)]

        entries = parse_unit(text, source_path)

        program: str | None = None
        arguments: list[str] = []
        working_directory: Path | None = None
        stdout_log: Path | None = None
        stderr_log: Path | None = None
        environment: dict[str, str] = {}
        extra: dict[str, Any] = {}

        for section, key, value in entries:
            full_key = f"{section}.{key}"

            if full_key == "Service.ExecStart":
                # An empty ExecStart= resets the list; only the first command is tracked
                if not value:
                    continue
                if program is None:
                    program, arguments = _split_exec(value, source_path)
                    continue
            elif full_key == "Service.WorkingDirectory" and working_directory is None:
                working_directory = Path(value) if value else None
                continue
            elif full_key == "Service.Environment":
                try:
                    assignments = shlex.split(value)
                except ValueError as e:
                    raise MalformedDescriptorError(
                        f"cannot parse Environment: {e}", source_path
                    ) from e
                for assignment in assignments:
                    env_key, sep, env_value = assignment.partition("=")
                    if sep:
                        environment[env_key] = env_value
                continue
            elif full_key == "Service.StandardOutput" and (path := _log_path(value)):
                stdout_log = path
                continue
            elif full_key == "Service.StandardError" and (path := _log_path(value)):
                stderr_log = path
                continue

            extra.setdefault(full_key, []).append(value)

        if program is None:
            raise MalformedDescriptorError("missing ExecStart in [Service]", source_path)

        first_line = text.lstrip().splitlines()[0] if text.strip() else ""

        return ServiceDescriptor(
            name=name,
            scope=scope,
            program=program,
            arguments=arguments,
            working_directory=working_directory,
            stdout_log=stdout_log,
            stderr_log=stderr_log,
            environment=environment,
            run_at_load=bool(_install_targets(extra)),
            source_path=source_path,
            managed=first_line.strip() == MANAGED_BY_COMMENT,
            extra=extra,
        )

    def encode(self, descriptor: ServiceDescriptor) -> bytes:
        """Serialize a descriptor as a unit file.

        Args:
            descriptor: The descriptor to write.

        Returns:
            Unit file bytes, starting with the managed-by comment.
        """
        sections: dict[str, list[str]] = {name: [] for name in SECTION_ORDER}
        extra: dict[str, list[str]] = {
            k: list(v) if isinstance(v, list) else [str(v)]
            for k, v in descriptor.extra.items()
            if k != "Service.Environment"
            and not (k in REPLACED_BY_FIELD and getattr(descriptor, REPLACED_BY_FIELD[k]))
        }

        # [Unit]
        if "Unit.Description" not in extra:
            sections["Unit"].append(f"Description={descriptor.name}")

        # [Service]
        service = sections["Service"]
        service.append(f"ExecStart={_join_exec(descriptor.program, descriptor.arguments)}")
        if descriptor.working_directory:
            service.append(f"WorkingDirectory={descriptor.working_directory}")
        for key, value in descriptor.environment.items():
            service.append(f"Environment={_quote_env(key, value)}")
        if descriptor.stdout_log:
            service.append(f"StandardOutput=append:{descriptor.stdout_log}")
        if descriptor.stderr_log:
            service.append(f"StandardError=append:{descriptor.stderr_log}")

        # [Install]: install targets follow run_at_load
        if descriptor.run_at_load:
            if not _install_targets(extra):
                wanted_by = extra.get("Install.WantedBy", [])
                extra["Install.WantedBy"] = [*wanted_by, DEFAULT_TARGETS[descriptor.scope]]
        else:
            for key in INSTALL_KEYS:
                extra.pop(key, None)

        for full_key, values in extra.items():
            section, _, key = full_key.partition(".")
            lines = sections.setdefault(section, [])
            lines.extend(f"{key}={value}" for value in values)

        out = [MANAGED_BY_COMMENT]
        for section, lines in sections.items():
            if not lines:
                continue
            out.append("")
            out.append(f"[{section}]")
            out.extend(lines)

        return ("\n".join(out) + "\n").encode("utf-8")
