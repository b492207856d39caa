"""Unit tests for ConfigService."""

from pathlib import Path

import pytest
import yaml

from ser.exceptions import ConfigError
from ser.models.config import SerConfig
from ser.models.service import ServiceScope
from ser.services.config import ConfigService


class TestConfigPath:
    """Tests for config file discovery."""

    def test_default_path(self, isolated_home: Path) -> None:
        """The default config should live in ~/.ser."""
        assert ConfigService().config_path == isolated_home / ".ser" / "config.yaml"

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """SER_CONFIG should override the default path."""
        monkeypatch.setenv("SER_CONFIG", str(tmp_path / "other.yaml"))
        assert ConfigService().config_path == tmp_path / "other.yaml"

    def test_explicit_path_wins(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """An explicit path should win over SER_CONFIG."""
        monkeypatch.setenv("SER_CONFIG", str(tmp_path / "other.yaml"))
        assert ConfigService(tmp_path / "mine.yaml").config_path == tmp_path / "mine.yaml"


class TestLoad:
    """Tests for loading configuration."""

    def test_missing_file_gives_defaults(self, tmp_path: Path) -> None:
        """A missing file should give the default config."""
        config = ConfigService(tmp_path / "config.yaml").load()
        assert config == SerConfig()
        assert config.scope == ServiceScope.USER
        assert config.logs.lines == 50

    def test_reads_aliases(self, tmp_path: Path) -> None:
        """camelCase and section keys should be read."""
        path = tmp_path / "config.yaml"
        path.write_text(
            "scope: system\n"
            "editor: vim\n"
            "list:\n  all: true\n"
            "logs:\n  lines: 200\n"
            "extraUserDirs:\n  - /opt/services\n"
        )
        config = ConfigService(path).load()

        assert config.scope == ServiceScope.SYSTEM
        assert config.editor == "vim"
        assert config.listing.all is True
        assert config.logs.lines == 200
        assert config.extra_user_dirs == [Path("/opt/services")]

    def test_scope_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """SER_SCOPE should override the scope key."""
        path = tmp_path / "config.yaml"
        path.write_text("scope: user\n")
        monkeypatch.setenv("SER_SCOPE", "system")
        assert ConfigService(path).load().scope == ServiceScope.SYSTEM

    @pytest.mark.parametrize(
        "text",
        ["scope: [unclosed\n", "- a\n- list\n", "scope: everywhere\n", "logs:\n  lines: 0\n"],
        ids=["bad-yaml", "not-a-mapping", "bad-scope", "bad-lines"],
    )
    def test_invalid_raises(self, tmp_path: Path, text: str) -> None:
        """Invalid files should raise ConfigError."""
        path = tmp_path / "config.yaml"
        path.write_text(text)
        with pytest.raises(ConfigError):
            ConfigService(path).load()


class TestSetConfig:
    """Tests for saving configuration."""

    def test_set_config_writes_yaml(self, tmp_path: Path) -> None:
        """set_config should create the directory and write YAML."""
        path = tmp_path / "nested" / "config.yaml"
        ConfigService(path).set_config({"logs": {"lines": 10}})

        assert yaml.safe_load(path.read_text()) == {"logs": {"lines": 10}}

    def test_set_config_rejects_invalid(self, tmp_path: Path) -> None:
        """Invalid configuration should not be written."""
        path = tmp_path / "config.yaml"
        with pytest.raises(ConfigError):
            ConfigService(path).set_config({"scope": "nowhere"})
        assert not path.exists()

    def test_to_dict_round_trip(self, tmp_path: Path) -> None:
        """A saved to_dict() should load back equal."""
        config = SerConfig(scope=ServiceScope.SYSTEM, editor="nano")
        service = ConfigService(tmp_path / "config.yaml")
        service.set_config(config.to_dict())
        assert service.load() == config
