"""Base control backend interface."""

import logging
import shlex
import subprocess
from abc import ABC, abstractmethod

from ser.exceptions import (
    ControlError,
    ControlNotFoundError,
    DaemonUnavailableError,
    PermissionDeniedError,
)
from ser.models.service import ServiceDescriptor, ServiceStatus

logger = logging.getLogger(__name__)

# Lowercased stderr fragments, checked in order
PERMISSION_MARKERS = (
    "operation not permitted",
    "permission denied",
    "access denied",
    "authentication required",
    "not privileged",
)
NOT_FOUND_MARKERS = (
    "could not find",
    "not found",
    "not loaded",
    "no such process",
    "does not exist",
)
UNAVAILABLE_MARKERS = (
    "failed to connect to bus",
    "failed to get d-bus connection",
    "has not been booted with systemd",
)


class CommandRunner:
    """Run native control commands.

    Every command is logged at DEBUG level as ``+ program args``, which is
    what ``ser --verbose`` shows.
    """

    def run(self, args: list[str]) -> subprocess.CompletedProcess[str]:
        """Run a command and capture its output.

        Args:
            args: Program and arguments.

        Returns:
            The completed process; a non-zero exit is not an exception.

        Raises:
            DaemonUnavailableError: If the program is not installed.
        """
        logger.debug("+ %s", shlex.join(args))
        try:
            return subprocess.run(args, capture_output=True, text=True)
        except FileNotFoundError as e:
            raise DaemonUnavailableError(args[0], f"{args[0]} is not installed") from e


class ControlBackend(ABC):
    """Abstract base class for native service daemons.

    Subclasses implement the native verbs; this class adds the shared
    policy: start and stop are idempotent, restart of a service that is not
    running is a plain start, and failures are raised as typed
    ControlError subclasses without retrying.
    """

    #: Name of the control program, used in error messages
    program = ""

    def __init__(self, runner: CommandRunner | None = None) -> None:
        """Initialize the backend.

        Args:
            runner: Command runner. Defaults to running real subprocesses.
        """
        self.runner = runner or CommandRunner()

    @abstractmethod
    def query_status(self, descriptor: ServiceDescriptor) -> ServiceStatus:
        """Ask the daemon for the current status of a service.

        Returns:
            Unknown when the daemon has no record of the service.

        Raises:
            ControlError: If the daemon cannot be queried.
        """
        pass

    @abstractmethod
    def _start(self, descriptor: ServiceDescriptor, status: ServiceStatus) -> None:
        """Load (if needed) and start a service that is not running."""
        pass

    @abstractmethod
    def _stop(self, descriptor: ServiceDescriptor) -> None:
        """Stop a loaded service."""
        pass

    @abstractmethod
    def _restart(self, descriptor: ServiceDescriptor) -> None:
        """Restart a running service with the native atomic primitive."""
        pass

    @abstractmethod
    def enable(self, descriptor: ServiceDescriptor) -> None:
        """Register a service to start automatically with its scope."""
        pass

    @abstractmethod
    def log_command(self, descriptor: ServiceDescriptor, lines: int, follow: bool) -> list[str]:
        """Build the command that shows a service's logs."""
        pass

    def reload(self, descriptor: ServiceDescriptor) -> None:
        """Make the daemon pick up new or edited descriptor files."""
        pass

    def start(self, descriptor: ServiceDescriptor) -> None:
        """Start a service. Starting a running service is a no-op."""
        status = self.query_status(descriptor)
        if status.is_running:
            logger.info("%s is already running", descriptor.name)
            return
        logger.info("Starting %s", descriptor.name)
        self._start(descriptor, status)

    def stop(self, descriptor: ServiceDescriptor) -> None:
        """Stop a service. Stopping a service the daemon does not know is a no-op."""
        status = self.query_status(descriptor)
        if not status.is_loaded:
            logger.info("%s is not loaded", descriptor.name)
            return
        logger.info("Stopping %s", descriptor.name)
        self._stop(descriptor)

    def restart(self, descriptor: ServiceDescriptor) -> None:
        """Restart a service, starting it if it is not running."""
        status = self.query_status(descriptor)
        if not status.is_running:
            logger.info("%s is not running, starting it", descriptor.name)
            self._start(descriptor, status)
            return
        logger.info("Restarting %s", descriptor.name)
        self._restart(descriptor)

    def _run(self, args: list[str], name: str) -> subprocess.CompletedProcess[str]:
        """Run a control command, raising on a non-zero exit."""
        result = self.runner.run(args)
        if result.returncode != 0:
            raise self._error_for(name, result)
        return result

    def _error_for(self, name: str, result: subprocess.CompletedProcess[str]) -> ControlError:
        """Map a failed command to a typed error."""
        message = (result.stderr or result.stdout or "").strip()
        if not message:
            message = f"{self.program} exited with status {result.returncode}"
        lowered = message.lower()

        if any(marker in lowered for marker in UNAVAILABLE_MARKERS):
            return DaemonUnavailableError(name, message)
        if any(marker in lowered for marker in PERMISSION_MARKERS):
            return PermissionDeniedError(name, message)
        if any(marker in lowered for marker in NOT_FOUND_MARKERS):
            return ControlNotFoundError(name, message)
        return ControlError(name, message)
