"""Tests for settings loading and YAML interpolation."""

import os
from unittest.mock import patch

import pytest

from verses.config import (
    CONFIG_PATH_ENV,
    get_config_path,
    get_settings,
    interpolate_env_vars,
    load_app_config,
)


class TestInterpolateEnvVars:
    def test_replaces_variables(self):
        with patch.dict(os.environ, {"VERSES_DB": "sqlite+aiosqlite:///x.db"}):
            assert interpolate_env_vars("$VERSES_DB") == "sqlite+aiosqlite:///x.db"

    def test_recurses_into_containers(self):
        with patch.dict(os.environ, {"NAME": "verses"}):
            result = interpolate_env_vars({"a": ["$NAME", 1], "b": {"c": "x-$NAME"}})
        assert result == {"a": ["verses", 1], "b": {"c": "x-verses"}}

    def test_missing_variable_raises(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("VERSES_MISSING_VAR", None)
            with pytest.raises(ValueError, match="VERSES_MISSING_VAR"):
                interpolate_env_vars("$VERSES_MISSING_VAR")


class TestConfigPath:
    def test_env_override(self, tmp_path):
        custom = tmp_path / "custom.yaml"
        with patch.dict(os.environ, {CONFIG_PATH_ENV: str(custom)}):
            assert get_config_path() == custom

    def test_defaults_to_cwd(self):
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop(CONFIG_PATH_ENV, None)
            assert get_config_path().name == "app.yaml"

    def test_missing_file_raises(self, tmp_path):
        with patch.dict(os.environ, {CONFIG_PATH_ENV: str(tmp_path / "nope.yaml")}):
            with pytest.raises(FileNotFoundError):
                load_app_config()


@pytest.mark.usefixtures("clear_settings_cache")
class TestGetSettings:
    def test_defaults_without_yaml(self, tmp_path):
        env = {"SECRET_KEY": "k", CONFIG_PATH_ENV: str(tmp_path / "absent.yaml")}
        with patch.dict(os.environ, env):
            settings = get_settings()

        assert settings.secret_key == "k"
        assert settings.poems.drafts_visible is True
        assert settings.poems.max_page_size == 50
        assert settings.auth.issuer == "verses"

    def test_yaml_sections_override_defaults(self, temp_app_yaml):
        config_path = temp_app_yaml(
            {
                "debug": True,
                "log_level": "debug",
                "db": {"url": "$TEST_DB_URL"},
                "auth": {"token_ttl_minutes": 15},
                "poems": {"drafts_visible": False},
            }
        )
        env = {
            "SECRET_KEY": "k",
            "TEST_DB_URL": "sqlite+aiosqlite:///yaml.db",
            CONFIG_PATH_ENV: str(config_path),
        }
        with patch.dict(os.environ, env):
            settings = get_settings()

        assert settings.debug is True
        assert settings.log_level == "debug"
        assert settings.db.url == "sqlite+aiosqlite:///yaml.db"
        assert settings.auth.token_ttl_minutes == 15
        assert settings.auth.issuer == "verses"
        assert settings.poems.drafts_visible is False

    def test_settings_are_cached(self, tmp_path):
        env = {"SECRET_KEY": "k", CONFIG_PATH_ENV: str(tmp_path / "absent.yaml")}
        with patch.dict(os.environ, env):
            assert get_settings() is get_settings()
