"""Tests for configuration loading and precedence."""

import argparse
import logging

from cli_config import (
    Settings,
    apply_http_overrides,
    build_settings,
    load_config_file,
    resolve_config_path,
)
from constants import Constants


def _args(**overrides):
    values = {"BUILD_FROM_SOURCE": False, "QUIET": False}
    values.update(overrides)
    return argparse.Namespace(**values)


class TestResolveConfigPath:
    """Which config file is used."""

    def test_cli_path_first(self, install_root, tmp_path):
        env = {Constants.ENV_CONFIG: str(tmp_path / "env.yml")}
        assert resolve_config_path(str(tmp_path / "cli.yml"), install_root, env=env) == tmp_path / "cli.yml"

    def test_env_path_second(self, install_root, tmp_path):
        env = {Constants.ENV_CONFIG: str(tmp_path / "env.yml")}
        assert resolve_config_path(None, install_root, env=env) == tmp_path / "env.yml"

    def test_default_when_present(self, install_root):
        (install_root / "config.yml").write_text("quiet: true\n")
        assert resolve_config_path(None, install_root, env={}) == install_root / "config.yml"

    def test_none_when_absent(self, install_root):
        assert resolve_config_path(None, install_root, env={}) is None


class TestLoadConfigFile:
    """YAML loading."""

    def test_loads_mapping(self, tmp_path):
        path = tmp_path / "c.yml"
        path.write_text("registry_url: http://mirror.local\nrequest_timeout: 5\n")
        assert load_config_file(path) == {"registry_url": "http://mirror.local", "request_timeout": 5}

    def test_none_path(self):
        assert load_config_file(None) == {}

    def test_missing_file_warns(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            assert load_config_file(tmp_path / "nope.yml") == {}
        assert "not found" in caplog.text

    def test_invalid_yaml(self, tmp_path, caplog):
        path = tmp_path / "bad.yml"
        path.write_text("registry_url: [unclosed\n")
        with caplog.at_level(logging.ERROR):
            assert load_config_file(path) == {}
        assert "Failed to load config" in caplog.text

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yml"
        path.write_text("- a\n- b\n")
        assert load_config_file(path) == {}

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yml"
        path.write_text("")
        assert load_config_file(path) == {}

    def test_unknown_keys_warn(self, tmp_path, caplog):
        path = tmp_path / "c.yml"
        path.write_text("colour: blue\n")
        with caplog.at_level(logging.WARNING):
            assert load_config_file(path) == {"colour": "blue"}
        assert "colour" in caplog.text


class TestBuildSettings:
    """Precedence between CLI, env and file."""

    def test_defaults(self):
        assert build_settings(_args(), {}, env={}) == Settings()

    def test_file_values(self):
        file_config = {"registry_url": "http://file", "request_timeout": 7, "http_retry_max": 1,
                       "build_from_source": True, "quiet": True}
        settings = build_settings(_args(), file_config, env={})
        assert settings == Settings(registry_url="http://file", request_timeout=7, http_retry_max=1,
                                    build_from_source=True, quiet=True)

    def test_env_beats_file(self):
        env = {Constants.ENV_REGISTRY_URL: "http://env"}
        settings = build_settings(_args(), {"registry_url": "http://file"}, env=env)
        assert settings.registry_url == "http://env"

    def test_cli_flags_beat_file(self):
        settings = build_settings(_args(BUILD_FROM_SOURCE=True, QUIET=True),
                                  {"build_from_source": False, "quiet": False}, env={})
        assert settings.build_from_source is True
        assert settings.quiet is True

    def test_bad_numbers_fall_back(self):
        settings = build_settings(_args(), {"request_timeout": "soon", "http_retry_max": 0}, env={})
        assert settings.request_timeout == Constants.REQUEST_TIMEOUT
        assert settings.http_retry_max == Constants.HTTP_RETRY_MAX

    def test_apply_http_overrides(self):
        apply_http_overrides(Settings(request_timeout=3, http_retry_max=2))
        assert Constants.REQUEST_TIMEOUT == 3
        assert Constants.HTTP_RETRY_MAX == 2

    def test_quoted_false_is_not_true(self, caplog):
        file_config = {"build_from_source": "false", "quiet": "no"}
        with caplog.at_level(logging.WARNING):
            settings = build_settings(_args(), file_config, env={})
        assert settings.build_from_source is False
        assert settings.quiet is False
        assert "build_from_source" in caplog.text
        assert "quiet" in caplog.text

    def test_non_bool_flag_value_is_ignored(self):
        settings = build_settings(_args(), {"quiet": 1, "build_from_source": None}, env={})
        assert settings.quiet is False
        assert settings.build_from_source is False

    def test_yaml_booleans_from_file(self, tmp_path):
        path = tmp_path / "c.yml"
        path.write_text('quiet: "false"\nbuild_from_source: true\n')
        settings = build_settings(_args(), load_config_file(path), env={})
        assert settings.quiet is False
        assert settings.build_from_source is True
