"""Base platform service interface."""

import logging
import platform
from abc import ABC, abstractmethod
from collections.abc import Iterator
from difflib import get_close_matches
from pathlib import Path

from ser.codecs.base import DescriptorCodec
from ser.control.base import CommandRunner, ControlBackend
from ser.exceptions import (
    MalformedDescriptorError,
    ServiceExistsError,
    ServiceNotFoundError,
    UnsupportedPlatformError,
)
from ser.models.config import SerConfig
from ser.models.service import (
    ServiceDescriptor,
    ServiceScope,
    ServiceSpec,
    normalize_service_name,
)

logger = logging.getLogger(__name__)


class PlatformService(ABC):
    """One service interface over the host's native service manager.

    Exactly two variants exist, MacService and LinuxService; use
    get_platform_service() to pick the one for the current host.

    Static descriptor fields come from the codec, live status from the
    control backend. Status is queried again on every call and never cached.
    """

    #: Whether the codec can tell files written by ser apart from others
    marks_managed: bool = False

    #: Whether a service name is always its descriptor file name
    names_from_filename: bool = False

    def __init__(
        self,
        config: SerConfig | None = None,
        backend: ControlBackend | None = None,
        user_dirs: list[Path] | None = None,
        system_dirs: list[Path] | None = None,
    ) -> None:
        """Initialize the platform service.

        Args:
            config: User configuration. Defaults to built-in defaults.
            backend: Control backend. Defaults to the platform's native one.
            user_dirs: Replace the user-scope descriptor directories.
            system_dirs: Replace the system-scope descriptor directories.
        """
        self.config = config or SerConfig()
        self.codec = self._make_codec()
        self.backend = backend or self._make_backend()
        self._dirs = {
            ServiceScope.USER: (
                user_dirs
                if user_dirs is not None
                else [*self.config.extra_user_dirs, *self.default_user_dirs()]
            ),
            ServiceScope.SYSTEM: (
                system_dirs
                if system_dirs is not None
                else [*self.config.extra_system_dirs, *self.default_system_dirs()]
            ),
        }

    @abstractmethod
    def _make_codec(self) -> DescriptorCodec:
        """Create the descriptor codec for this platform."""
        pass

    @abstractmethod
    def _make_backend(self) -> ControlBackend:
        """Create the native control backend for this platform."""
        pass

    @abstractmethod
    def default_user_dirs(self) -> list[Path]:
        """User-scope descriptor directories, highest precedence first."""
        pass

    @abstractmethod
    def default_system_dirs(self) -> list[Path]:
        """System-scope descriptor directories, highest precedence first."""
        pass

    def _is_enabled(self, descriptor: ServiceDescriptor) -> bool | None:
        """Check whether a service is enabled, if the platform can tell."""
        return descriptor.enabled

    def directories(self, scope: ServiceScope) -> list[Path]:
        """Get the descriptor directories for a scope."""
        return list(self._dirs[scope])

    def target_dir(self, scope: ServiceScope) -> Path:
        """Get the directory new descriptors of a scope are written to."""
        return self._dirs[scope][0]

    def descriptor_path(self, spec: ServiceSpec) -> Path:
        """Get the path a new service's descriptor would be written to."""
        scope = spec.scope or self.config.scope
        return self.target_dir(scope) / self.codec.filename(spec.name)

    def file_path(self, name: str) -> Path:
        """Get the descriptor file of a service, for editing.

        Raises:
            ServiceNotFoundError: If no descriptor has that name.
        """
        return self._find(name).source_path  # type: ignore[return-value]

    def log_command(self, name: str, lines: int = 50, follow: bool = False) -> list[str]:
        """Build the command that shows a service's logs."""
        return self.backend.log_command(self._find(name), lines, follow)

    # Enumeration

    def _scan(self, include_system: bool) -> Iterator[tuple[Path, ServiceScope]]:
        """Yield candidate descriptor files in precedence order."""
        scopes = [ServiceScope.USER]
        if include_system:
            scopes.append(ServiceScope.SYSTEM)

        for scope in scopes:
            for directory in self._dirs[scope]:
                if not directory.is_dir():
                    continue
                for path in sorted(directory.glob(f"*{self.codec.suffix}")):
                    if path.is_file():
                        yield path, scope

    def _overlay(self, descriptor: ServiceDescriptor) -> ServiceDescriptor:
        """Fill in the live status and enabled flag."""
        descriptor.status = self.backend.query_status(descriptor)
        descriptor.enabled = self._is_enabled(descriptor)
        return descriptor

    def list(self, include_system: bool = False) -> Iterator[ServiceDescriptor]:
        """List services with their live status.

        Files that fail to parse are logged and skipped. When the same name
        appears in several directories of one scope, the first (highest
        precedence) file wins.

        Args:
            include_system: Also enumerate system-scope directories.

        Yields:
            Descriptors with fresh status, in directory order.
        """
        seen: set[tuple[ServiceScope, str]] = set()
        for path, scope in self._scan(include_system):
            try:
                descriptor = self.codec.read(path, scope)
            except MalformedDescriptorError as e:
                logger.warning("Skipping %s: %s", path, e.reason)
                continue

            key = (scope, descriptor.name)
            if key in seen:
                logger.debug("%s is shadowed by an earlier descriptor", path)
                continue
            seen.add(key)

            yield self._overlay(descriptor)

    def _find(self, name: str, exact: bool = False) -> ServiceDescriptor:
        """Find a descriptor by name without querying its status.

        An exact name (with or without the file suffix) wins. Only when no
        descriptor has exactly that name are names compared normalized, so
        ``redis`` also finds ``homebrew.mxcl.redis`` but never shadows a
        service actually called ``redis``.

        Files whose name matches are decoded first, and parse errors on them
        are raised. Other files are only decoded to compare labels that
        differ from the file name, and parse errors there are skipped.

        Args:
            name: Service name as typed by the user.
            exact: Skip the normalized comparison.

        Raises:
            ServiceNotFoundError: If no descriptor has that name.
            MalformedDescriptorError: If the matching file cannot be parsed.
        """
        suffix = self.codec.suffix
        exact_name = name.strip()
        if exact_name.endswith(suffix):
            exact_name = exact_name[: -len(suffix)]

        candidates = [
            (path, scope, path.name[: -len(suffix)])
            for path, scope in self._scan(include_system=True)
        ]

        def is_exact(candidate: str) -> bool:
            return candidate == exact_name

        def is_similar(candidate: str) -> bool:
            return normalize_service_name(candidate) == normalize_service_name(name)

        # Labels of files whose name differs from their label, decoded once
        labels: dict[Path, ServiceDescriptor] = {}
        known: list[str] = []
        if self.names_from_filename:
            known = [normalize_service_name(stem) for _, _, stem in candidates]
        else:
            for path, scope, _ in candidates:
                try:
                    labels[path] = self.codec.read(path, scope)
                except MalformedDescriptorError:
                    continue
                known.append(labels[path].display_name)

        checks = [is_exact] if exact else [is_exact, is_similar]
        for matches in checks:
            for path, scope, stem in candidates:
                if matches(stem):
                    descriptor = self.codec.read(path, scope)
                    if matches(descriptor.name):
                        return descriptor
            for descriptor in labels.values():
                if matches(descriptor.name):
                    return descriptor

        raise ServiceNotFoundError(name, get_close_matches(name, known, n=3, cutoff=0.6))

    # Operations

    def show(self, name: str) -> ServiceDescriptor:
        """Show one service with its live status.

        Raises:
            ServiceNotFoundError: If no descriptor has that name.
            MalformedDescriptorError: If its descriptor cannot be parsed.
        """
        return self._overlay(self._find(name))

    def start(self, name: str) -> ServiceDescriptor:
        """Start a service; a running service is left alone.

        Returns:
            The descriptor with its status after starting.
        """
        descriptor = self._find(name)
        self.backend.start(descriptor)
        return self._overlay(descriptor)

    def stop(self, name: str) -> ServiceDescriptor:
        """Stop a service; a stopped service is left alone.

        Returns:
            The descriptor with its status after stopping.
        """
        descriptor = self._find(name)
        self.backend.stop(descriptor)
        return self._overlay(descriptor)

    def restart(self, name: str) -> ServiceDescriptor:
        """Restart a service with the daemon's atomic restart.

        Returns:
            The descriptor with its status after restarting.
        """
        descriptor = self._find(name)
        self.backend.restart(descriptor)
        return self._overlay(descriptor)

    def create(self, spec: ServiceSpec) -> ServiceDescriptor:
        """Write a descriptor for a new service.

        The daemon is told to rescan its descriptors, and when
        ``run_at_load`` is set the service is registered to start with its
        scope. An existing service is never overwritten.

        Args:
            spec: The new service's configuration.

        Returns:
            The descriptor as read back from the new file, with live status.

        Raises:
            ServiceExistsError: If a service with that name already exists.
        """
        scope = spec.scope or self.config.scope
        target = self.descriptor_path(spec)

        if target.exists():
            raise ServiceExistsError(spec.name, target)
        try:
            existing = self._find(spec.name, exact=True)
        except ServiceNotFoundError:
            pass
        else:
            raise ServiceExistsError(spec.name, existing.source_path or target)

        data = self.codec.encode(spec.to_descriptor(scope))

        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            with open(target, "xb") as f:
                f.write(data)
        except FileExistsError as e:
            raise ServiceExistsError(spec.name, target) from e
        logger.info("Wrote %s", target)

        descriptor = self.codec.read(target, scope)
        self.backend.reload(descriptor)
        if descriptor.run_at_load:
            self.backend.enable(descriptor)

        return self._overlay(descriptor)

    def generate(self, spec: ServiceSpec, codec: DescriptorCodec | None = None) -> str:
        """Render a descriptor for a spec without writing it.

        Args:
            spec: The service configuration.
            codec: Format to render. Defaults to this platform's format.

        Returns:
            The descriptor file contents.
        """
        codec = codec or self.codec
        return codec.encode(spec.to_descriptor(spec.scope or self.config.scope)).decode("utf-8")

    def edited(self, name: str) -> ServiceDescriptor:
        """Re-read a descriptor after it was edited and notify the daemon.

        Raises:
            MalformedDescriptorError: If the edit broke the file.
        """
        descriptor = self._find(name)
        self.backend.reload(descriptor)
        return self._overlay(descriptor)


def get_platform_service(
    config: SerConfig | None = None,
    runner: CommandRunner | None = None,
) -> PlatformService:
    """Get the platform service for the current host.

    Args:
        config: User configuration.
        runner: Command runner for the control backend.

    Returns:
        MacService on macOS, LinuxService on Linux.

    Raises:
        UnsupportedPlatformError: If the platform is not supported.
    """
    system = platform.system()

    if system == "Darwin":
        from ser.control.launchctl import LaunchctlBackend
        from ser.platform.macos import MacService

        return MacService(config, backend=LaunchctlBackend(runner))
    elif system == "Linux":
        from ser.control.systemctl import SystemctlBackend
        from ser.platform.linux import LinuxService

        return LinuxService(config, backend=SystemctlBackend(runner))
    else:
        raise UnsupportedPlatformError(system)
