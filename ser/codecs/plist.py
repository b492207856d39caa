"""Property-list codec for launchd job descriptors."""

import plistlib
from pathlib import Path
from typing import Any

from ser.codecs.base import DescriptorCodec
from ser.exceptions import MalformedDescriptorError
from ser.models.service import ServiceDescriptor, ServiceScope

# Keys mapped onto ServiceDescriptor fields; everything else passes through.
KNOWN_KEYS = frozenset(
    {
        "Label",
        "Program",
        "ProgramArguments",
        "WorkingDirectory",
        "StandardOutPath",
        "StandardErrorPath",
        "RunAtLoad",
        "EnvironmentVariables",
    }
)


class PlistCodec(DescriptorCodec):
    """Convert between launchd plist files and ServiceDescriptor."""

    suffix = ".plist"

    def decode(
        self,
        raw: bytes,
        source_path: Path | None = None,
        scope: ServiceScope = ServiceScope.USER,
        name: str | None = None,
    ) -> ServiceDescriptor:
        """Parse a plist (XML or binary) into a descriptor.

        The name always comes from the Label key; ``name`` is ignored.

        Args:
            raw: File contents.
            source_path: Where the file was read from.
            scope: Scope of the directory the file was found in.
            name: Unused.

        Returns:
            The decoded descriptor with an unknown status.

        Raises:
            MalformedDescriptorError: If the plist is unreadable or lacks a
                label or program.
        """
        try:
            data = plistlib.loads(raw)
        except Exception as e:
            raise MalformedDescriptorError(f"invalid property list: {e}", source_path) from e

        if not isinstance(data, dict):
            raise MalformedDescriptorError("top-level object is not a dictionary", source_path)

        label = data.get("Label")
        if not isinstance(label, str) or not label:
            raise MalformedDescriptorError("missing Label", source_path)

        program, arguments = self._read_program(data, source_path)

        environment = data.get("EnvironmentVariables", {})
        if not isinstance(environment, dict):
            raise MalformedDescriptorError("EnvironmentVariables is not a dictionary", source_path)
        if not all(isinstance(v, str) for v in environment.values()):
            raise MalformedDescriptorError(
                "EnvironmentVariables values must be strings", source_path
            )

        extra = {k: v for k, v in data.items() if k not in KNOWN_KEYS}

        return ServiceDescriptor(
            name=label,
            scope=scope,
            program=program,
            arguments=arguments,
            working_directory=_optional_path(data, "WorkingDirectory"),
            stdout_log=_optional_path(data, "StandardOutPath"),
            stderr_log=_optional_path(data, "StandardErrorPath"),
            environment=dict(environment),
            run_at_load=bool(data.get("RunAtLoad", False)),
            source_path=source_path,
            enabled=not bool(data.get("Disabled", False)),
            extra=extra,
        )

    def encode(self, descriptor: ServiceDescriptor) -> bytes:
        """Serialize a descriptor as an XML plist.

        Args:
            descriptor: The descriptor to write.

        Returns:
            Plist bytes that decode back to the same tracked fields.
        """
        plist: dict[str, Any] = {"Label": descriptor.name}

        if descriptor.arguments:
            plist["ProgramArguments"] = [descriptor.program, *descriptor.arguments]
        else:
            plist["Program"] = descriptor.program

        if descriptor.working_directory:
            plist["WorkingDirectory"] = str(descriptor.working_directory)
        if descriptor.stdout_log:
            plist["StandardOutPath"] = str(descriptor.stdout_log)
        if descriptor.stderr_log:
            plist["StandardErrorPath"] = str(descriptor.stderr_log)
        if descriptor.environment:
            plist["EnvironmentVariables"] = dict(descriptor.environment)
        plist["RunAtLoad"] = descriptor.run_at_load

        for key, value in descriptor.extra.items():
            if key not in KNOWN_KEYS:
                plist[key] = value

        return plistlib.dumps(plist, fmt=plistlib.FMT_XML, sort_keys=False)

    def _read_program(
        self, data: dict[str, Any], source_path: Path | None
    ) -> tuple[str, list[str]]:
        """Extract the program and its arguments.

        ``Program`` wins over ``ProgramArguments[0]`` when both are set, as
        launchd itself does.
        """
        program = data.get("Program")
        argv = data.get("ProgramArguments", [])

        if not isinstance(argv, list) or not all(isinstance(a, str) for a in argv):
            raise MalformedDescriptorError("ProgramArguments is not a list of strings", source_path)
        if program is not None and not isinstance(program, str):
            raise MalformedDescriptorError("Program is not a string", source_path)

        if program:
            return program, list(argv[1:])
        if argv and argv[0]:
            return argv[0], list(argv[1:])
        raise MalformedDescriptorError("missing Program or ProgramArguments", source_path)


def _optional_path(data: dict[str, Any], key: str) -> Path | None:
    value = data.get(key)
    if isinstance(value, str) and value:
        return Path(value)
    return None
