"""Fixtures for lgtv2mqtt tests."""

from __future__ import annotations

import asyncio
from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from lgtv2mqtt.publisher import DedupPublishCache, StatusPublisher
from lgtv2mqtt.tv import TVConnection

TOPIC_PREFIX = "lgtv"
TV_HOST = "192.168.1.50"
TV_MAC = "aa:bb:cc:dd:ee:ff"

MOCK_CONFIG = {
    "mqtt": {
        "host": "192.168.1.10",
        "port": 1883,
        "username": None,
        "password": None,
        "client_id": "lgtv2mqtt",
        "name": "lgtv2mqtt",
        "topic_prefix": TOPIC_PREFIX,
        "qos": 1,
        "retain": True,
    },
    "tv": {
        "host": TV_HOST,
        "mac": TV_MAC,
        "broadcast": "192.168.1.255",
        "key_path": "/tmp/lgkey",
    },
    "options": {
        "reconnect_interval": 1.0,
        "connect_timeout": 5,
        "log_level": "INFO",
    },
}


async def drain(tasks: set) -> None:
    """Wait for every background task in ``tasks``, including ones they spawn."""
    while tasks:
        await asyncio.gather(*list(tasks))


@pytest.fixture
def published() -> list[tuple[str, str]]:
    """Messages that made it past the dedup cache."""
    return []


@pytest.fixture
def cache(published: list) -> DedupPublishCache:
    """Dedup cache recording into ``published``."""
    return DedupPublishCache(lambda topic, payload: published.append((topic, payload)))


@pytest.fixture
def publisher(cache: DedupPublishCache) -> StatusPublisher:
    return StatusPublisher(cache, TOPIC_PREFIX)


@pytest.fixture
def mock_webos_client() -> MagicMock:
    """Create a mock bscpylgtv WebOsClient instance."""
    client = MagicMock()
    client.client_key = "0123456789abcdef"
    client.is_connected = MagicMock(return_value=True)
    client.connect = AsyncMock()
    client.disconnect = AsyncMock()
    client.request = AsyncMock(return_value={"returnValue": True})
    client.subscribe = AsyncMock()
    return client


@pytest.fixture
def mock_webos_create(mock_webos_client: MagicMock) -> Generator[AsyncMock, None, None]:
    """Patch WebOsClient.create to hand out ``mock_webos_client``."""
    with patch(
        "lgtv2mqtt.tv.WebOsClient.create",
        new=AsyncMock(return_value=mock_webos_client),
    ) as mock_create:
        yield mock_create


@pytest.fixture
def mock_wake_tv() -> Generator[MagicMock, None, None]:
    with patch("lgtv2mqtt.tv.wake_tv", return_value=True) as mock:
        yield mock


@pytest.fixture
def mock_pointer() -> MagicMock:
    """An open pointer socket."""
    pointer = MagicMock()
    pointer.send = AsyncMock()
    pointer.close = AsyncMock()
    return pointer


@pytest.fixture
def tv(publisher: StatusPublisher, tmp_path) -> TVConnection:
    """Disconnected TV connection with no deferred delays."""
    return TVConnection(
        TV_HOST,
        publisher,
        key_file_path=str(tmp_path / f"keyfile-{TV_HOST}"),
        mac_address=TV_MAC,
        broadcast="192.168.1.255",
        reconnect_interval=0,
        channel_subscribe_delay=0,
    )


@pytest.fixture
async def connected_tv(
    tv: TVConnection,
    mock_webos_client: MagicMock,
    mock_webos_create: AsyncMock,
) -> TVConnection:
    """TV connection with an established session."""
    assert await tv._connect()
    return tv


@pytest.fixture
def mock_tv(mock_pointer: MagicMock) -> MagicMock:
    """Mock TVConnection for dispatcher tests."""
    tv = MagicMock()
    tv.generation = 1
    tv.is_connected = True
    tv.is_current = MagicMock(return_value=True)
    tv.request = AsyncMock(return_value={"returnValue": True})
    tv.power_on = AsyncMock()
    tv.power_off = AsyncMock()
    tv.get_pointer_socket = AsyncMock(return_value=mock_pointer)
    tv.close_pointer_socket = AsyncMock()
    return tv
