"""Base descriptor codec interface."""

from abc import ABC, abstractmethod
from pathlib import Path

from ser.exceptions import MalformedDescriptorError
from ser.models.service import ServiceDescriptor, ServiceScope


class DescriptorCodec(ABC):
    """Abstract base class for native descriptor formats."""

    #: File suffix of descriptors in this format
    suffix: str = ""

    @abstractmethod
    def decode(
        self,
        raw: bytes,
        source_path: Path | None = None,
        scope: ServiceScope = ServiceScope.USER,
        name: str | None = None,
    ) -> ServiceDescriptor:
        """Parse native file contents into a descriptor.

        Args:
            raw: File contents.
            source_path: Where the file was read from.
            scope: Scope of the directory the file was found in.
            name: Service name, for formats that do not store it in the file.

        Returns:
            The decoded descriptor with an unknown status.

        Raises:
            MalformedDescriptorError: If the contents cannot be parsed.
        """
        pass

    @abstractmethod
    def encode(self, descriptor: ServiceDescriptor) -> bytes:
        """Serialize a descriptor in the native format.

        Args:
            descriptor: The descriptor to write.

        Returns:
            File contents.
        """
        pass

    def filename(self, name: str) -> str:
        """Get the descriptor filename for a service name."""
        return f"{name}{self.suffix}"

    def read(self, path: Path, scope: ServiceScope = ServiceScope.USER) -> ServiceDescriptor:
        """Read and decode a descriptor file.

        Raises:
            MalformedDescriptorError: If the file is unreadable or malformed.
        """
        try:
            raw = path.read_bytes()
        except OSError as e:
            raise MalformedDescriptorError(f"cannot read file: {e}", path) from e
        return self.decode(raw, source_path=path, scope=scope)
