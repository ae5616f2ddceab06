"""Tests for configuration loading."""

from __future__ import annotations

import copy
from pathlib import Path

import pytest

from lgtv2mqtt import config as config_module
from lgtv2mqtt.config import (
    DEFAULT_CONFIG,
    apply_env_overrides,
    deep_merge,
    get_key_file_path,
    load_config,
    validate_config,
)

from .conftest import MOCK_CONFIG


@pytest.fixture(autouse=True)
def no_search_paths(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep config files on the test machine out of the tests."""
    monkeypatch.setattr(config_module, "CONFIG_SEARCH_PATHS", [])


def write_config(tmp_path: Path, text: str) -> str:
    path = tmp_path / "config.yaml"
    path.write_text(text)
    return str(path)


def test_defaults() -> None:
    """Test the configuration used when nothing is set."""
    config = load_config(environ={})

    assert config["mqtt"]["port"] == 1883
    assert config["mqtt"]["qos"] == 1
    assert config["mqtt"]["retain"] is True
    assert config["tv"]["broadcast"] == "255.255.255.255"
    assert config["tv"]["key_path"] == "/app/lgkey/"
    assert "_config_path" not in config


def test_defaults_not_mutated() -> None:
    before = copy.deepcopy(DEFAULT_CONFIG)
    config = load_config(environ={"MQTT_HOST": "broker"})
    config["options"]["log_level"] = "DEBUG"

    assert DEFAULT_CONFIG == before


def test_load_yaml(tmp_path: Path) -> None:
    """Test that file values are merged over the defaults."""
    path = write_config(
        tmp_path,
        "mqtt:\n"
        "  host: 192.168.1.10\n"
        "  topic_prefix: lgtv\n"
        "tv:\n"
        "  host: 192.168.1.50\n",
    )

    config = load_config(path, environ={})

    assert config["mqtt"]["host"] == "192.168.1.10"
    assert config["mqtt"]["port"] == 1883
    assert config["tv"]["host"] == "192.168.1.50"
    assert config["_config_path"] == path


def test_load_empty_yaml(tmp_path: Path) -> None:
    config = load_config(write_config(tmp_path, ""), environ={})
    assert config["mqtt"]["client_id"] == "lgtv2mqtt"


def test_missing_explicit_file(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "missing.yaml"), environ={})


def test_env_overrides_file(tmp_path: Path) -> None:
    """Test that environment variables win over the file."""
    path = write_config(tmp_path, "mqtt:\n  host: file-broker\n  port: 1883\n")

    config = load_config(
        path,
        environ={
            "MQTT_HOST": "env-broker",
            "MQTT_PORT": "8883",
            "MQTT_USER": "user",
            "MQTT_PASS": "secret",
            "TOPIC_PREFIX": "home/tv",
            "TV_IP": "10.0.0.5",
            "TV_MAC": "aa:bb:cc:dd:ee:ff",
            "BROADCAST_IP": "10.0.0.255",
            "CLIENT_KEY_PATH": "/data/keys",
        },
    )

    assert config["mqtt"]["host"] == "env-broker"
    assert config["mqtt"]["port"] == 8883
    assert config["mqtt"]["username"] == "user"
    assert config["mqtt"]["password"] == "secret"
    assert config["mqtt"]["topic_prefix"] == "home/tv"
    assert config["tv"]["host"] == "10.0.0.5"
    assert config["tv"]["mac"] == "aa:bb:cc:dd:ee:ff"
    assert config["tv"]["broadcast"] == "10.0.0.255"
    assert config["tv"]["key_path"] == "/data/keys"


def test_env_name_precedence() -> None:
    """Test that MQTT_NAME wins over LOGGING_NAME."""
    assert load_config(environ={"LOGGING_NAME": "a"})["mqtt"]["name"] == "a"
    assert load_config(environ={"LOGGING_NAME": "a", "MQTT_NAME": "b"})["mqtt"]["name"] == "b"


def test_env_empty_values_ignored() -> None:
    config = load_config(environ={"MQTT_HOST": "", "MQTT_PORT": ""})

    assert config["mqtt"]["host"] is None
    assert config["mqtt"]["port"] == 1883


def test_env_invalid_number_ignored(caplog: pytest.LogCaptureFixture) -> None:
    config = apply_env_overrides(copy.deepcopy(DEFAULT_CONFIG), {"MQTT_PORT": "abc"})

    assert config["mqtt"]["port"] == 1883
    assert "MQTT_PORT" in caplog.text


def test_deep_merge() -> None:
    base = {"a": {"x": 1, "y": 2}, "b": 1}
    result = deep_merge(base, {"a": {"y": 3}, "c": 4})

    assert result == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
    assert base == {"a": {"x": 1, "y": 2}, "b": 1}


def test_validate_config_ok() -> None:
    assert validate_config(MOCK_CONFIG) == []


def test_validate_config_missing() -> None:
    """Test that every required setting is reported."""
    errors = validate_config(copy.deepcopy(DEFAULT_CONFIG))

    assert len(errors) == 3
    assert any("TOPIC_PREFIX" in error for error in errors)
    assert any("MQTT_HOST" in error for error in errors)
    assert any("TV_IP" in error for error in errors)


def test_key_file_path() -> None:
    assert get_key_file_path(MOCK_CONFIG) == "/tmp/lgkey/keyfile-192.168.1.50"


def test_key_file_path_default_dir() -> None:
    config = {"tv": {"host": "10.0.0.5", "key_path": None}}
    assert get_key_file_path(config) == "/app/lgkey/keyfile-10.0.0.5"
