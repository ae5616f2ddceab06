"""Wake-on-LAN for powering on the TV."""

import logging
import socket

from .const import DEFAULT_BROADCAST

_LOGGER = logging.getLogger(__name__)

WOL_PORT = 9


def create_magic_packet(mac_address: str) -> bytes:
    """Build a Wake-on-LAN magic packet.

    Six 0xFF bytes followed by the MAC address repeated 16 times.

    Args:
        mac_address: MAC address as XX:XX:XX:XX:XX:XX, XX-XX-XX-XX-XX-XX or bare hex

    Returns:
        Magic packet bytes

    Raises:
        ValueError: If the MAC address is malformed
    """
    mac = mac_address.replace(":", "").replace("-", "").replace(".", "")
    if len(mac) != 12:
        raise ValueError(f"Invalid MAC address: {mac_address}")

    return b"\xff" * 6 + bytes.fromhex(mac) * 16


def wake_tv(mac_address: str, broadcast: str = DEFAULT_BROADCAST, port: int = WOL_PORT) -> bool:
    """Broadcast a magic packet for the TV.

    Args:
        mac_address: TV's MAC address
        broadcast: Broadcast address of the TV's network
        port: UDP port (9, some devices listen on 7)

    Returns:
        True if the packet was sent
    """
    try:
        packet = create_magic_packet(mac_address)
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
            sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
            sock.sendto(packet, (broadcast, port))
    except (OSError, ValueError) as e:
        _LOGGER.error("WOL to %s via %s failed: %s", mac_address, broadcast, e)
        return False

    _LOGGER.info("WOL: sent to %s via %s:%d", mac_address, broadcast, port)
    return True
