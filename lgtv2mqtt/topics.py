"""MQTT topic names and normalization."""

import re

# Characters dropped from topic segments
_STRIP_CHARS = re.compile(r"[+\\&*%$#@!’]")
_WHITESPACE = re.compile(r"\s+")
_UNDERSCORES = re.compile(r"_{2,}")

# Topic segments below the configured prefix
SET = "set"
STATUS = "status"
CONNECTED = "connected"

STATUS_VOLUME = "volume"
STATUS_MUTE = "mute"
STATUS_FOREGROUND_APP = "foregroundApp"
STATUS_CURRENT_CHANNEL = "currentChannel"


def normalize(name: str) -> str:
    """Turn an arbitrary string into a canonical topic segment.

    Drops punctuation, turns whitespace into underscores, lowercases and
    collapses separators. ``normalize(normalize(s)) == normalize(s)``.
    """
    name = _STRIP_CHARS.sub("", name)
    name = _WHITESPACE.sub("_", name).lower()
    name = name.replace("-", "_")
    name = _UNDERSCORES.sub("_", name)
    return name.strip("_")


def join_topic(*segments: str) -> str:
    """Normalize each segment and join them into a topic."""
    return "/".join(normalize(segment) for segment in segments)


def command_subscription(prefix: str) -> str:
    """Wildcard subscription for inbound commands."""
    return f"{prefix}/{SET}/#"


def availability_topic(name: str) -> str:
    """Availability topic carrying this process's last will (``/status/<name>``)."""
    return "/" + join_topic(STATUS, name)
