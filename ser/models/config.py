"""Configuration model for ser."""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from ser.models.service import ServiceScope


class ListConfig(BaseModel):
    """Defaults for ``ser list``."""

    all: bool = Field(default=False, description="Include system-scope services")


class LogsConfig(BaseModel):
    """Defaults for ``ser logs``."""

    lines: int = Field(default=50, ge=1)


class SerConfig(BaseModel):
    """User configuration stored in ~/.ser/config.yaml."""

    scope: ServiceScope = Field(default=ServiceScope.USER, description="Default scope for create")
    editor: str | None = None
    listing: ListConfig = Field(default_factory=ListConfig, alias="list")
    logs: LogsConfig = Field(default_factory=LogsConfig)
    extra_user_dirs: list[Path] = Field(default_factory=list, alias="extraUserDirs")
    extra_system_dirs: list[Path] = Field(default_factory=list, alias="extraSystemDirs")

    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a dictionary for YAML serialization."""
        data: dict[str, Any] = {
            "scope": self.scope.value,
            "list": self.listing.model_dump(),
            "logs": self.logs.model_dump(),
        }
        if self.editor:
            data["editor"] = self.editor
        if self.extra_user_dirs:
            data["extraUserDirs"] = [str(p) for p in self.extra_user_dirs]
        if self.extra_system_dirs:
            data["extraSystemDirs"] = [str(p) for p in self.extra_system_dirs]
        return data
