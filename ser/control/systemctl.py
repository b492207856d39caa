"""Linux systemd control backend."""

from ser.control.base import ControlBackend
from ser.models.service import UNIT_SUFFIX, ServiceDescriptor, ServiceScope, ServiceStatus

SYSTEMCTL = "systemctl"
JOURNALCTL = "journalctl"

STATUS_PROPERTIES = ("LoadState", "ActiveState", "SubState", "ExecMainStatus", "MainPID")

RUNNING_STATES = frozenset({"active", "reloading", "activating"})
STOPPED_STATES = frozenset({"inactive", "deactivating"})


def parse_show_output(output: str) -> ServiceStatus:
    """Derive a status from ``systemctl show --property=...`` output.

    Args:
        output: KEY=VALUE lines.

    Returns:
        The derived status. A unit systemd cannot find is unknown.
    """
    props: dict[str, str] = {}
    for line in output.splitlines():
        key, sep, value = line.partition("=")
        if sep:
            props[key.strip()] = value.strip()

    load_state = props.get("LoadState", "")
    active_state = props.get("ActiveState", "")
    sub_state = props.get("SubState") or None

    if load_state in ("", "not-found", "masked"):
        return ServiceStatus.unknown(load_state or "not-found")

    if active_state in RUNNING_STATES:
        pid = props.get("MainPID", "0")
        return ServiceStatus.running(
            pid=int(pid) if pid.isdigit() and pid != "0" else None,
            detail=sub_state,
        )
    if active_state == "failed":
        status = props.get("ExecMainStatus", "")
        code = int(status) if status.isdigit() and status != "0" else 1
        return ServiceStatus.error(code, detail=sub_state)
    if active_state in STOPPED_STATES:
        return ServiceStatus.stopped(detail=sub_state)
    return ServiceStatus.unknown(active_state or None)


class SystemctlBackend(ControlBackend):
    """Drive systemd through systemctl, user or system manager by scope."""

    program = SYSTEMCTL

    def unit(self, descriptor: ServiceDescriptor) -> str:
        """Get the unit name, e.g. ``demo.service``."""
        return f"{descriptor.name}{UNIT_SUFFIX}"

    def _systemctl(self, descriptor: ServiceDescriptor, *args: str) -> list[str]:
        if descriptor.scope == ServiceScope.USER:
            return [SYSTEMCTL, "--user", *args]
        return [SYSTEMCTL, *args]

    def query_status(self, descriptor: ServiceDescriptor) -> ServiceStatus:
        result = self._run(
            self._systemctl(
                descriptor,
                "show",
                self.unit(descriptor),
                f"--property={','.join(STATUS_PROPERTIES)}",
                "--no-pager",
            ),
            descriptor.name,
        )
        return parse_show_output(result.stdout)

    def _start(self, descriptor: ServiceDescriptor, status: ServiceStatus) -> None:
        if not status.is_loaded:
            self.reload(descriptor)
        self._run(self._systemctl(descriptor, "start", self.unit(descriptor)), descriptor.name)

    def _stop(self, descriptor: ServiceDescriptor) -> None:
        self._run(self._systemctl(descriptor, "stop", self.unit(descriptor)), descriptor.name)

    def _restart(self, descriptor: ServiceDescriptor) -> None:
        self._run(self._systemctl(descriptor, "restart", self.unit(descriptor)), descriptor.name)

    def enable(self, descriptor: ServiceDescriptor) -> None:
        self._run(self._systemctl(descriptor, "enable", self.unit(descriptor)), descriptor.name)

    def reload(self, descriptor: ServiceDescriptor) -> None:
        self._run(self._systemctl(descriptor, "daemon-reload"), descriptor.name)

    def log_command(self, descriptor: ServiceDescriptor, lines: int, follow: bool) -> list[str]:
        args = [JOURNALCTL]
        if descriptor.scope == ServiceScope.USER:
            args.append("--user")
        args.extend(["-u", self.unit(descriptor), "-n", str(lines)])
        if follow:
            args.append("-f")
        args.append("--no-pager")
        return args
