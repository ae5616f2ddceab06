"""Configuration management for lgtv2mqtt."""

import copy
import logging
import os
from pathlib import Path
from typing import Optional

import yaml

from .const import (
    DEFAULT_BROADCAST,
    DEFAULT_CLIENT_ID,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_KEY_PATH,
    DEFAULT_MQTT_PORT,
    DEFAULT_QOS,
    DEFAULT_RECONNECT_INTERVAL,
    DEFAULT_RETAIN,
)

_LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "mqtt": {
        "host": None,  # Required
        "port": DEFAULT_MQTT_PORT,
        "username": None,
        "password": None,
        "client_id": DEFAULT_CLIENT_ID,
        "name": None,  # Enables the /status/<name> availability topic
        "topic_prefix": None,  # Required
        "qos": DEFAULT_QOS,
        "retain": DEFAULT_RETAIN,
    },
    "tv": {
        "host": None,  # Required
        "mac": None,  # For WoL
        "broadcast": DEFAULT_BROADCAST,
        "key_path": DEFAULT_KEY_PATH,  # Directory for pairing keys
    },
    "options": {
        "reconnect_interval": DEFAULT_RECONNECT_INTERVAL,
        "connect_timeout": DEFAULT_CONNECT_TIMEOUT,
        "log_level": "INFO",
    },
}

CONFIG_SEARCH_PATHS = [
    Path("config.yaml"),
    Path("/app/config.yaml"),
    Path.home() / ".config" / "lgtv2mqtt" / "config.yaml",
    Path("/etc/lgtv2mqtt/config.yaml"),
]

# Format: "ENV_VAR": ("section", "key", optional_converter)
ENV_MAPPINGS = {
    "MQTT_HOST": ("mqtt", "host"),
    "MQTT_PORT": ("mqtt", "port", int),
    "MQTT_USER": ("mqtt", "username"),
    "MQTT_PASS": ("mqtt", "password"),
    "MQTT_CLIENT_ID": ("mqtt", "client_id"),
    "LOGGING_NAME": ("mqtt", "name"),
    "MQTT_NAME": ("mqtt", "name"),  # Wins over LOGGING_NAME
    "TOPIC_PREFIX": ("mqtt", "topic_prefix"),
    "TV_IP": ("tv", "host"),
    "TV_MAC": ("tv", "mac"),
    "BROADCAST_IP": ("tv", "broadcast"),
    "CLIENT_KEY_PATH": ("tv", "key_path"),
    "RECONNECT_INTERVAL": ("options", "reconnect_interval", float),
    "LOG_LEVEL": ("options", "log_level"),
}


def deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_config(config_path: Optional[str] = None, environ: Optional[dict] = None) -> dict:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, searches default locations.
        environ: Environment to read overrides from (default: os.environ)

    Returns:
        Merged configuration dict
    """
    search_paths = []
    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")
        search_paths.append(path)
    search_paths.extend(CONFIG_SEARCH_PATHS)

    config = copy.deepcopy(DEFAULT_CONFIG)

    for path in search_paths:
        if path.exists():
            with open(path) as f:
                user_config = yaml.safe_load(f) or {}
            config = deep_merge(config, user_config)
            config["_config_path"] = str(path)
            break

    return apply_env_overrides(config, os.environ if environ is None else environ)


def apply_env_overrides(config: dict, environ: dict) -> dict:
    """Apply environment variable overrides in place."""
    for env_var, mapping in ENV_MAPPINGS.items():
        value = environ.get(env_var)
        if value is None or value == "":
            continue
        section, key = mapping[0], mapping[1]
        if len(mapping) > 2:
            try:
                value = mapping[2](value)
            except ValueError:
                _LOGGER.warning("Ignoring invalid %s=%r", env_var, value)
                continue
        config.setdefault(section, {})[key] = value

    return config


def validate_config(config: dict) -> list[str]:
    """Validate configuration and return list of errors."""
    errors = []

    if not config.get("mqtt", {}).get("topic_prefix"):
        errors.append("mqtt.topic_prefix is required (TOPIC_PREFIX)")

    if not config.get("mqtt", {}).get("host"):
        errors.append("mqtt.host is required (MQTT_HOST)")

    if not config.get("tv", {}).get("host"):
        errors.append("tv.host is required (TV_IP)")

    return errors


def get_key_file_path(config: dict) -> str:
    """Path of the file holding the TV pairing key."""
    tv_config = config.get("tv", {})
    key_dir = tv_config.get("key_path") or DEFAULT_KEY_PATH
    return os.path.join(key_dir, f"keyfile-{tv_config.get('host')}")
