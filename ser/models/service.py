"""Service descriptor model for ser."""

import shlex
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Prefixes stripped from names before comparing (homebrew formulae, unit suffix)
HOMEBREW_PREFIX = "homebrew.mxcl."
UNIT_SUFFIX = ".service"


class ServiceState(str, Enum):
    """Coarse service state shared by every platform."""

    RUNNING = "running"
    STOPPED = "stopped"
    UNKNOWN = "unknown"
    ERROR = "error"


class ServiceScope(str, Enum):
    """Where a descriptor lives: the user session or the whole system."""

    USER = "user"
    SYSTEM = "system"


class ServiceStatus(BaseModel):
    """Live status derived from the native daemon at query time."""

    model_config = ConfigDict(frozen=True)

    state: ServiceState = ServiceState.UNKNOWN
    code: int | None = Field(default=None, description="Exit code for the error state")
    detail: str | None = Field(default=None, description="Native sub-state, e.g. not-loaded")
    pid: int | None = None

    @classmethod
    def running(cls, pid: int | None = None, detail: str | None = None) -> "ServiceStatus":
        """Build a running status."""
        return cls(state=ServiceState.RUNNING, pid=pid, detail=detail)

    @classmethod
    def stopped(cls, detail: str | None = None) -> "ServiceStatus":
        """Build a stopped status (registered with the daemon, not running)."""
        return cls(state=ServiceState.STOPPED, detail=detail)

    @classmethod
    def unknown(cls, detail: str | None = None) -> "ServiceStatus":
        """Build an unknown status (the daemon has no record of the service)."""
        return cls(state=ServiceState.UNKNOWN, detail=detail)

    @classmethod
    def error(cls, code: int, detail: str | None = None) -> "ServiceStatus":
        """Build an error status carrying the last exit code."""
        return cls(state=ServiceState.ERROR, code=code, detail=detail)

    @property
    def is_running(self) -> bool:
        """Check if the service is running."""
        return self.state == ServiceState.RUNNING

    @property
    def is_loaded(self) -> bool:
        """Check if the daemon knows about the service at all."""
        return self.state != ServiceState.UNKNOWN

    def __str__(self) -> str:
        if self.state == ServiceState.ERROR:
            return f"error({self.code})"
        if self.detail and self.state == ServiceState.UNKNOWN:
            return f"unknown ({self.detail})"
        return self.state.value


class ServiceDescriptor(BaseModel):
    """A service as described by a native descriptor file.

    Static fields come from the descriptor codec. ``status`` and ``enabled``
    are overlaid by the control backend every time the descriptor is
    returned, and are never written back to the file.
    """

    model_config = ConfigDict(validate_assignment=True)

    # Identity
    name: str = Field(frozen=True, description="Platform-native service label")
    scope: ServiceScope = Field(default=ServiceScope.USER)

    # Executable
    program: str = Field(description="Executable path")
    arguments: list[str] = Field(default_factory=list)
    working_directory: Path | None = None
    environment: dict[str, str] = Field(default_factory=dict)

    # Logs
    stdout_log: Path | None = None
    stderr_log: Path | None = None

    # Load policy
    run_at_load: bool = False

    # Native file
    source_path: Path | None = Field(
        default=None, description="Descriptor file; None until first written"
    )
    managed: bool = Field(default=False, description="Written by ser")
    extra: dict[str, Any] = Field(
        default_factory=dict, description="Unknown native keys, passed through on encode"
    )

    # Live fields
    status: ServiceStatus = Field(default_factory=ServiceStatus)
    enabled: bool | None = None

    @property
    def command(self) -> str:
        """The full command line, shell-quoted."""
        return shlex.join([self.program, *self.arguments])

    @property
    def display_name(self) -> str:
        """Name with the homebrew prefix removed."""
        if self.name.startswith(HOMEBREW_PREFIX):
            return self.name[len(HOMEBREW_PREFIX):]
        return self.name

    def static_fields(self) -> dict[str, Any]:
        """The fields persisted in the descriptor file."""
        return self.model_dump(
            include={
                "name",
                "program",
                "arguments",
                "working_directory",
                "environment",
                "stdout_log",
                "stderr_log",
                "run_at_load",
            }
        )


class ServiceSpec(BaseModel):
    """Configuration for creating a new service."""

    name: str
    program: str
    arguments: list[str] = Field(default_factory=list)
    working_directory: Path | None = None
    stdout_log: Path | None = None
    stderr_log: Path | None = None
    environment: dict[str, str] = Field(default_factory=dict)
    run_at_load: bool = False
    scope: ServiceScope | None = Field(
        default=None, description="Target scope; None uses the configured default"
    )

    @field_validator("name")
    @classmethod
    def _check_name(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Service name cannot be empty")
        if any(c.isspace() for c in value) or "/" in value:
            raise ValueError("Service name cannot contain spaces or slashes")
        return value

    @field_validator("program")
    @classmethod
    def _check_program(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Program cannot be empty")
        return value

    @classmethod
    def from_command(cls, command: list[str], name: str | None = None, **kwargs: Any) -> "ServiceSpec":
        """Build a spec from a command line.

        A single element is split shell-style, so both ``["/bin/echo", "hi"]``
        and ``["/bin/echo hi"]`` work. Without an explicit name, the binary's
        basename is used.

        Args:
            command: Program followed by its arguments.
            name: Optional service name.
            **kwargs: Remaining spec fields.

        Returns:
            The service spec.

        Raises:
            ValueError: If the command is empty.
        """
        parts = shlex.split(command[0]) if len(command) == 1 else list(command)
        if not parts:
            raise ValueError("Command cannot be empty")
        return cls(
            name=name or Path(parts[0]).name,
            program=parts[0],
            arguments=parts[1:],
            **kwargs,
        )

    def to_descriptor(self, scope: ServiceScope) -> ServiceDescriptor:
        """Build an unwritten descriptor from this spec."""
        return ServiceDescriptor(
            name=self.name,
            scope=self.scope or scope,
            program=self.program,
            arguments=list(self.arguments),
            working_directory=self.working_directory,
            stdout_log=self.stdout_log,
            stderr_log=self.stderr_log,
            environment=dict(self.environment),
            run_at_load=self.run_at_load,
            managed=True,
        )


def normalize_service_name(name: str) -> str:
    """Normalize a service name for lookups.

    Strips the homebrew prefix, any ``@instance`` part and the ``.service``
    suffix, so ``homebrew.mxcl.redis``, ``redis.service`` and ``redis`` all
    compare equal.

    Args:
        name: Name as typed by the user or read from a file.

    Returns:
        Normalized name.
    """
    name = name.strip()
    if name.endswith(UNIT_SUFFIX):
        name = name[: -len(UNIT_SUFFIX)]
    name = name.split("@", 1)[0]
    if name.startswith(HOMEBREW_PREFIX):
        name = name[len(HOMEBREW_PREFIX):]
    return name
