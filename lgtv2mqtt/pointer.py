"""Pointer-input channel of a webOS TV.

The TV hands out a secondary websocket for cursor and button events. Events
are plain text: ``type:<event>`` followed by ``key:value`` lines and a blank
line.
"""

import logging
import ssl
from typing import Any, Optional

import websockets

_LOGGER = logging.getLogger(__name__)


def format_event(event_type: str, payload: Optional[dict] = None) -> str:
    """Encode a pointer event.

    >>> format_event("move", {"dx": 5, "dy": -3, "drag": 0})
    'type:move\\ndx:5\\ndy:-3\\ndrag:0\\n\\n'
    """
    lines = [f"type:{event_type}"]
    for key, value in (payload or {}).items():
        lines.append(f"{key}:{value}")
    return "\n".join(lines) + "\n\n"


class PointerSocket:
    """An open pointer-input websocket."""

    def __init__(self, connection: Any, socket_path: str):
        self._connection = connection
        self.socket_path = socket_path

    @classmethod
    async def open(cls, socket_path: str) -> "PointerSocket":
        """Connect to the socket path returned by getPointerInputSocket."""
        ssl_context = None
        if socket_path.startswith("wss://"):
            # TVs present a self-signed certificate
            ssl_context = ssl.create_default_context()
            ssl_context.check_hostname = False
            ssl_context.verify_mode = ssl.CERT_NONE

        _LOGGER.debug("Opening pointer socket %s", socket_path)
        connection = await websockets.connect(socket_path, ssl=ssl_context)
        return cls(connection, socket_path)

    async def send(self, event_type: str, payload: Optional[dict] = None):
        """Send one pointer event."""
        await self._connection.send(format_event(event_type, payload))

    async def close(self):
        await self._connection.close()
