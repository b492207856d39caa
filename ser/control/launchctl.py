"""macOS launchd control backend."""

import os
import re
from pathlib import Path

from ser.control.base import CommandRunner, ControlBackend
from ser.models.service import ServiceDescriptor, ServiceScope, ServiceStatus

LAUNCHCTL = "launchctl"

# launchctl exits with this code when a label is not loaded in the domain
EXIT_NOT_FOUND = 113

# Top-level fields of `launchctl print` are indented by exactly one tab
_PRINT_FIELD = re.compile(r"^\t(state|pid|last exit code) = (.+)$", re.MULTILINE)
_EXIT_CODE = re.compile(r"-?\d+")


def parse_print_output(output: str) -> ServiceStatus:
    """Derive a status from ``launchctl print <domain>/<label>`` output.

    Args:
        output: Standard output of a successful ``launchctl print``.

    Returns:
        Running with the pid when ``state = running``, error with the exit
        code when the last run failed, stopped otherwise.
    """
    fields: dict[str, str] = {}
    for match in _PRINT_FIELD.finditer(output):
        fields.setdefault(match.group(1), match.group(2).strip())

    state = fields.get("state", "")
    if state == "running":
        pid = fields.get("pid")
        return ServiceStatus.running(pid=int(pid) if pid and pid.isdigit() else None)

    # "78: EX_CONFIG", or "(never exited)" when the job has not run yet
    match = _EXIT_CODE.match(fields.get("last exit code", ""))
    code = int(match.group(0)) if match else 0
    if code != 0:
        return ServiceStatus.error(code, detail=state or None)
    return ServiceStatus.stopped(detail=state or None)


class LaunchctlBackend(ControlBackend):
    """Drive launchd through launchctl's domain-target verbs."""

    program = LAUNCHCTL

    def __init__(self, runner: CommandRunner | None = None, uid: int | None = None) -> None:
        """Initialize the backend.

        Args:
            runner: Command runner.
            uid: User whose gui domain holds agents. Defaults to the current user.
        """
        super().__init__(runner)
        self.uid = os.getuid() if uid is None else uid

    def domain(self, descriptor: ServiceDescriptor) -> str:
        """Get the launchd domain for a descriptor.

        Daemons live in the system domain; agents run in the user's gui session.
        """
        path = descriptor.source_path
        if path is not None and "LaunchDaemons" in path.parts:
            return "system"
        if path is None and descriptor.scope == ServiceScope.SYSTEM:
            return "system"
        return f"gui/{self.uid}"

    def target(self, descriptor: ServiceDescriptor) -> str:
        """Get the service target, e.g. ``gui/501/com.example.demo``."""
        return f"{self.domain(descriptor)}/{descriptor.name}"

    def query_status(self, descriptor: ServiceDescriptor) -> ServiceStatus:
        result = self.runner.run([LAUNCHCTL, "print", self.target(descriptor)])
        if result.returncode == EXIT_NOT_FOUND or (
            result.returncode != 0 and "could not find" in (result.stderr or "").lower()
        ):
            return ServiceStatus.unknown("not-loaded")
        if result.returncode != 0:
            raise self._error_for(descriptor.name, result)
        return parse_print_output(result.stdout)

    def _bootstrap(self, descriptor: ServiceDescriptor) -> None:
        if descriptor.source_path is None:
            raise ValueError(f"{descriptor.name} has no descriptor file to load")
        target = self.target(descriptor)
        # Clear any persistent "disabled" override, as `load -w` used to
        self._run([LAUNCHCTL, "enable", target], descriptor.name)
        self._run(
            [LAUNCHCTL, "bootstrap", self.domain(descriptor), str(descriptor.source_path)],
            descriptor.name,
        )

    def _start(self, descriptor: ServiceDescriptor, status: ServiceStatus) -> None:
        if not status.is_loaded:
            self._bootstrap(descriptor)
        # Without -k, kickstart leaves an already running job alone
        self._run([LAUNCHCTL, "kickstart", self.target(descriptor)], descriptor.name)

    def _stop(self, descriptor: ServiceDescriptor) -> None:
        # bootout rather than `kill`, so KeepAlive jobs stay down
        self._run([LAUNCHCTL, "bootout", self.target(descriptor)], descriptor.name)

    def _restart(self, descriptor: ServiceDescriptor) -> None:
        self._run([LAUNCHCTL, "kickstart", "-k", self.target(descriptor)], descriptor.name)

    def enable(self, descriptor: ServiceDescriptor) -> None:
        status = self.query_status(descriptor)
        if status.is_loaded:
            self._run([LAUNCHCTL, "enable", self.target(descriptor)], descriptor.name)
        else:
            self._bootstrap(descriptor)

    def log_command(self, descriptor: ServiceDescriptor, lines: int, follow: bool) -> list[str]:
        log_files = [str(p) for p in (descriptor.stdout_log, descriptor.stderr_log) if p]
        # Both streams often point at one file
        log_files = list(dict.fromkeys(log_files))
        if log_files:
            args = ["tail", "-n", str(lines)]
            if follow:
                args.append("-f")
            return [*args, *log_files]

        process = Path(descriptor.program).name
        predicate = f'process == "{process}"'
        if follow:
            return ["log", "stream", "--predicate", predicate, "--style", "syslog"]
        return ["log", "show", "--last", "1h", "--predicate", predicate, "--style", "syslog"]
