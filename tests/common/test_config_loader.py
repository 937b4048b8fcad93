"""Tests for multi-source configuration loading."""

import pytest
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from fileprint.common import ConfigLoader


class _Section(BaseModel):
    model_config = ConfigDict(extra='forbid')

    window_size_bytes: int = 8192
    enabled: bool = False
    name: str = "default"


class _Root(BaseModel):
    model_config = ConfigDict(extra='forbid')

    section: _Section = Field(default_factory=_Section)


class TestConfigLoader:
    """Tests for ConfigLoader."""

    def test_no_sources_gives_model_defaults(self, isolated_config):
        """Test loading with no config files present."""
        config = ConfigLoader(app_name="fileprint", config_class=_Root).load()

        assert config.section.window_size_bytes == 8192
        assert config.section.name == "default"

    def test_explicit_defaults_file(self, isolated_config):
        """Test that an explicit defaults file is applied."""
        defaults = isolated_config / "defaults.toml"
        defaults.write_text('[section]\nname = "from-file"\n', encoding="utf-8")

        config = ConfigLoader(app_name="fileprint", config_class=_Root).load(defaults_path=defaults)

        assert config.section.name == "from-file"

    def test_local_defaults_file(self, isolated_config):
        """Test that ./config/defaults.toml is picked up."""
        local = isolated_config / "config" / "defaults.toml"
        local.parent.mkdir()
        local.write_text('[section]\nwindow_size_bytes = 4096\n', encoding="utf-8")

        config = ConfigLoader(app_name="fileprint", config_class=_Root).load()

        assert config.section.window_size_bytes == 4096

    def test_user_config_overrides_defaults(self, isolated_config):
        """Test that user config is merged over defaults."""
        defaults = isolated_config / "defaults.toml"
        defaults.write_text('[section]\nname = "defaults"\nwindow_size_bytes = 1\n', encoding="utf-8")
        user_config = isolated_config / "user-config" / "config.toml"
        user_config.parent.mkdir()
        user_config.write_text('[section]\nname = "user"\n', encoding="utf-8")

        config = ConfigLoader(app_name="fileprint", config_class=_Root).load(defaults_path=defaults)

        assert config.section.name == "user"
        assert config.section.window_size_bytes == 1

    def test_env_overrides_with_nested_keys(self, isolated_config, monkeypatch):
        """Test that env variables override nested keys containing underscores."""
        monkeypatch.setenv("FILEPRINT_SECTION__WINDOW_SIZE_BYTES", "16384")
        monkeypatch.setenv("FILEPRINT_SECTION__ENABLED", "true")

        config = ConfigLoader(app_name="fileprint", config_class=_Root).load()

        assert config.section.window_size_bytes == 16384
        assert config.section.enabled is True

    def test_unknown_env_key_is_rejected(self, isolated_config, monkeypatch):
        """Test that typos in env overrides fail validation."""
        monkeypatch.setenv("FILEPRINT_SECTION__WINDOW_SIZ", "1")

        with pytest.raises(ValidationError):
            ConfigLoader(app_name="fileprint", config_class=_Root).load()

    def test_without_config_class_returns_dict(self, isolated_config):
        """Test loading into a plain dict."""
        assert ConfigLoader(app_name="fileprint").load() == {}

    @pytest.mark.parametrize("raw, expected", [
        ("true", True),
        ("No", False),
        ("1", 1),
        ("0", 0),
        ("2.5", 2.5),
        ("a, b", ["a", "b"]),
        ("text", "text"),
    ])
    def test_env_value_conversion(self, raw, expected):
        """Test conversion of env strings to typed values."""
        assert ConfigLoader()._convert_env_value(raw) == expected
