# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""Tests for configuration loading"""

from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest

from github_mcp.core import config as config_module
from github_mcp.core.config import Config, load_config, require_github_token
from github_mcp.core.errors import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("PORT", "RENDER_EXTERNAL_URL", "LOG_LEVEL", "GITHUB_PERSONAL_ACCESS_TOKEN",
                 "GITHUB_MCP_CONFIG_PATH"):
        monkeypatch.delenv(name, raising=False)


def test_missing_file_uses_defaults(tmp_path):
    config = load_config(str(tmp_path / "absent.yaml"))

    assert config == Config()
    assert config.port == 3000
    assert config.cache_ttl_seconds == 60
    assert config.base_url == "http://localhost:3000"


def test_yaml_values(tmp_path):
    path = tmp_path / "server.yaml"
    path.write_text(
        "http:\n"
        "  port: 8080\n"
        "  public_url: https://mcp.example.com/\n"
        "cache:\n"
        "  ttl_seconds: 5\n"
        "  max_entries: 10\n"
        "streaming:\n"
        "  keepalive_interval: 15\n"
        "logging:\n"
        "  format: text\n"
    )

    config = load_config(str(path))

    assert config.port == 8080
    assert config.base_url == "https://mcp.example.com"
    assert config.cache_ttl_seconds == 5.0
    assert config.cache_max_entries == 10
    assert config.keepalive_interval == 15.0
    assert config.log_format == "text"
    assert config.server_name == "github-mcp-server"


def test_environment_overrides(tmp_path, monkeypatch):
    path = tmp_path / "server.yaml"
    path.write_text("http:\n  port: 8080\nlogging:\n  level: INFO\n")
    monkeypatch.setenv("PORT", "9999")
    monkeypatch.setenv("RENDER_EXTERNAL_URL", "https://render.example.com")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")

    config = load_config(str(path))

    assert config.port == 9999
    assert config.public_url == "https://render.example.com"
    assert config.log_level == "DEBUG"


def test_invalid_yaml(tmp_path):
    path = tmp_path / "server.yaml"
    path.write_text("http: [unclosed\n")

    with pytest.raises(ConfigurationError) as exc_info:
        load_config(str(path))
    assert exc_info.value.config_file == str(path)


def test_non_mapping_yaml(tmp_path):
    path = tmp_path / "server.yaml"
    path.write_text("- just\n- a list\n")

    with pytest.raises(ConfigurationError, match="mapping"):
        load_config(str(path))


def test_shipped_config_loads():
    config = load_config(str(Path(__file__).resolve().parent.parent / "configs" / "server.yaml"))

    assert config.protocol_version == "2024-11-05"
    assert config.github_api_url == "https://api.github.com"


def test_config_is_immutable():
    with pytest.raises(FrozenInstanceError):
        Config().port = 1


def test_require_token(monkeypatch):
    monkeypatch.setattr(config_module, "load_dotenv", lambda: None)
    monkeypatch.setenv("GITHUB_PERSONAL_ACCESS_TOKEN", "ghp_x")

    assert require_github_token() == "ghp_x"


def test_require_token_missing(monkeypatch):
    monkeypatch.setattr(config_module, "load_dotenv", lambda: None)

    with pytest.raises(ConfigurationError, match="GITHUB_PERSONAL_ACCESS_TOKEN"):
        require_github_token()


def test_get_config_reads_path_from_environment(tmp_path, monkeypatch):
    path = tmp_path / "custom.yaml"
    path.write_text("server:\n  name: custom-github\n")
    monkeypatch.setenv("GITHUB_MCP_CONFIG_PATH", str(path))
    monkeypatch.setattr(config_module, "_config", None)

    assert config_module.get_config().server_name == "custom-github"
    assert config_module.get_config() is config_module.get_config()


def test_log_level_is_case_insensitive(tmp_path, monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")

    assert load_config(str(tmp_path / "absent.yaml")).log_level == "DEBUG"


@pytest.mark.parametrize("source", ["env", "yaml"])
def test_unknown_log_level_fails_startup(tmp_path, monkeypatch, source):
    path = tmp_path / "server.yaml"
    if source == "env":
        monkeypatch.setenv("LOG_LEVEL", "verbose")
        path.write_text("logging:\n  level: INFO\n")
    else:
        path.write_text("logging:\n  level: verbose\n")

    with pytest.raises(ConfigurationError, match="Invalid log level 'VERBOSE'") as exc_info:
        load_config(str(path))
    assert exc_info.value.config_file == str(path)


def test_unknown_log_format_fails_startup(tmp_path):
    path = tmp_path / "server.yaml"
    path.write_text("logging:\n  format: xml\n")

    with pytest.raises(ConfigurationError, match="Invalid log format"):
        load_config(str(path))


def test_log_file(tmp_path):
    path = tmp_path / "server.yaml"
    path.write_text("logging:\n  file: logs/server.log\n")

    assert load_config(str(path)).log_file == "logs/server.log"
    assert load_config(str(tmp_path / "absent.yaml")).log_file is None
