"""Custom exceptions for ser."""

from pathlib import Path


class SerError(Exception):
    """Base exception for ser errors."""

    pass


class UnsupportedPlatformError(SerError):
    """Raised when the host has neither launchd nor systemd."""

    def __init__(self, system: str) -> None:
        self.system = system
        super().__init__(f"Service management not supported on {system}")


class ConfigError(SerError):
    """Raised when the configuration file cannot be read or is invalid."""

    pass


class MalformedDescriptorError(SerError):
    """Raised when a native descriptor file cannot be parsed."""

    def __init__(self, reason: str, path: Path | None = None) -> None:
        self.reason = reason
        self.path = path
        if path:
            super().__init__(f"Malformed descriptor {path}: {reason}")
        else:
            super().__init__(f"Malformed descriptor: {reason}")


class ServiceNotFoundError(SerError):
    """Raised when no descriptor file exists for a service name."""

    def __init__(self, name: str, suggestions: list[str] | None = None) -> None:
        self.name = name
        self.suggestions = suggestions or []
        msg = f"Service '{name}' not found"
        if self.suggestions:
            msg += "\n\nDid you mean?\n  - " + "\n  - ".join(self.suggestions)
        super().__init__(msg)


class ServiceExistsError(SerError):
    """Raised when creating a service whose name is already taken."""

    def __init__(self, name: str, path: Path) -> None:
        self.name = name
        self.path = path
        super().__init__(f"Service '{name}' already exists: {path}")


class ControlError(SerError):
    """Base exception for failures reported by the native service daemon."""

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        self.message = message
        super().__init__(f"{name}: {message}")


class PermissionDeniedError(ControlError):
    """Raised when the daemon requires elevated privileges."""

    pass


class ControlNotFoundError(ControlError):
    """Raised when the daemon has no record of the service."""

    pass


class DaemonUnavailableError(ControlError):
    """Raised when the control binary or bus cannot be reached."""

    pass
