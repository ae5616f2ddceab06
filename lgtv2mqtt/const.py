"""Constants for lgtv2mqtt."""

from enum import Enum

# === MQTT ===
DEFAULT_MQTT_PORT = 1883
DEFAULT_CLIENT_ID = "lgtv2mqtt"
DEFAULT_QOS = 1
DEFAULT_RETAIN = True
DEFAULT_KEEPALIVE = 60

# === TV ===
DEFAULT_KEY_PATH = "/app/lgkey/"
DEFAULT_BROADCAST = "255.255.255.255"
DEFAULT_RECONNECT_INTERVAL = 1.0  # seconds between TV connection attempts
DEFAULT_CONNECT_TIMEOUT = 5

# === Timing (seconds) ===
CHANNEL_SUBSCRIBE_DELAY = 2.5
OPEN_MAX_DELAY = 5.0
OPEN_MAX_CLICK_DELAY = 1.0

# Pointer sweep towards the player's maximize control after open_max
OPEN_MAX_MOVES = 22
OPEN_MAX_DX = 11
OPEN_MAX_DY = -8


class ConnectionState(Enum):
    """Lifecycle of the bus and TV connections."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
