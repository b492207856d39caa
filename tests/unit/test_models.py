"""Unit tests for the service models."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from ser.models.service import (
    ServiceDescriptor,
    ServiceScope,
    ServiceSpec,
    ServiceState,
    ServiceStatus,
    normalize_service_name,
)


class TestServiceStatus:
    """Tests for ServiceStatus."""

    def test_default_is_unknown(self) -> None:
        """A new status should be unknown."""
        assert ServiceStatus().state == ServiceState.UNKNOWN
        assert not ServiceStatus().is_loaded

    def test_error_carries_code(self) -> None:
        """error() should keep the exit code."""
        status = ServiceStatus.error(78)
        assert status.state == ServiceState.ERROR
        assert status.code == 78
        assert str(status) == "error(78)"

    def test_str(self) -> None:
        """str() should give the state, with detail for unknown."""
        assert str(ServiceStatus.running(pid=42)) == "running"
        assert str(ServiceStatus.stopped()) == "stopped"
        assert str(ServiceStatus.unknown("not-loaded")) == "unknown (not-loaded)"

    def test_frozen(self) -> None:
        """Statuses should be immutable."""
        with pytest.raises(ValidationError):
            ServiceStatus.running().state = ServiceState.STOPPED  # type: ignore[misc]


class TestServiceDescriptor:
    """Tests for ServiceDescriptor."""

    def test_name_is_frozen(self) -> None:
        """A descriptor's name cannot change after creation."""
        descriptor = ServiceDescriptor(name="demo", program="/bin/echo")
        with pytest.raises(ValidationError):
            descriptor.name = "other"  # type: ignore[misc]

    def test_status_can_be_overlaid(self) -> None:
        """Live fields should be assignable."""
        descriptor = ServiceDescriptor(name="demo", program="/bin/echo")
        descriptor.status = ServiceStatus.running(pid=7)
        assert descriptor.status.pid == 7

    def test_command(self) -> None:
        """command should shell-quote the arguments."""
        descriptor = ServiceDescriptor(
            name="demo", program="/bin/echo", arguments=["hello world"]
        )
        assert descriptor.command == "/bin/echo 'hello world'"

    def test_display_name_strips_homebrew_prefix(self) -> None:
        """display_name should drop homebrew.mxcl."""
        descriptor = ServiceDescriptor(name="homebrew.mxcl.redis", program="redis-server")
        assert descriptor.display_name == "redis"


class TestServiceSpec:
    """Tests for ServiceSpec."""

    def test_from_command_list(self) -> None:
        """from_command should take program and arguments from a list."""
        spec = ServiceSpec.from_command(["/bin/echo", "hello"])
        assert spec.name == "echo"
        assert spec.program == "/bin/echo"
        assert spec.arguments == ["hello"]

    def test_from_command_string(self) -> None:
        """from_command should split a single string shell-style."""
        spec = ServiceSpec.from_command(["/bin/echo 'hello world'"], name="demo")
        assert spec.name == "demo"
        assert spec.arguments == ["hello world"]

    def test_from_command_empty_raises(self) -> None:
        """from_command should reject an empty command."""
        with pytest.raises(ValueError):
            ServiceSpec.from_command([""])

    @pytest.mark.parametrize("name", ["", "   ", "my service", "a/b"])
    def test_invalid_name_raises(self, name: str) -> None:
        """Names must be non-empty without spaces or slashes."""
        with pytest.raises(ValidationError):
            ServiceSpec(name=name, program="/bin/echo")

    def test_to_descriptor(self) -> None:
        """to_descriptor should copy the fields and mark it managed."""
        spec = ServiceSpec(
            name="demo",
            program="/bin/echo",
            arguments=["hello"],
            working_directory=Path("/tmp"),
            environment={"A": "1"},
            run_at_load=True,
        )
        descriptor = spec.to_descriptor(ServiceScope.SYSTEM)

        assert descriptor.name == "demo"
        assert descriptor.scope == ServiceScope.SYSTEM
        assert descriptor.environment == {"A": "1"}
        assert descriptor.run_at_load
        assert descriptor.managed
        assert descriptor.source_path is None

    def test_to_descriptor_prefers_own_scope(self) -> None:
        """An explicit spec scope should win over the default."""
        spec = ServiceSpec(name="demo", program="/bin/echo", scope=ServiceScope.USER)
        assert spec.to_descriptor(ServiceScope.SYSTEM).scope == ServiceScope.USER


class TestNormalizeServiceName:
    """Tests for normalize_service_name."""

    @pytest.mark.parametrize(
        "name",
        ["redis", "redis.service", "homebrew.mxcl.redis", "redis@6379.service", " redis "],
    )
    def test_variants_normalize_equal(self, name: str) -> None:
        """Common spellings of one service should compare equal."""
        assert normalize_service_name(name) == "redis"
