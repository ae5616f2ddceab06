"""LG webOS TV connection for lgtv2mqtt.

Keeps one websocket session to the TV alive, re-establishes the standing
state subscriptions after every connect and republishes what they report.
"""

import asyncio
import json
import logging
import os
from typing import Any, Awaitable, Callable, Optional

from bscpylgtv import WebOsClient

from . import endpoints as ep
from .const import (
    CHANNEL_SUBSCRIBE_DELAY,
    ConnectionState,
    DEFAULT_BROADCAST,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_RECONNECT_INTERVAL,
)
from .pointer import PointerSocket
from .publisher import StatusPublisher
from .topics import (
    STATUS_CURRENT_CHANNEL,
    STATUS_FOREGROUND_APP,
    STATUS_MUTE,
    STATUS_VOLUME,
)
from .wol import wake_tv

_LOGGER = logging.getLogger(__name__)

SubscriptionCallback = Callable[[dict], Awaitable[None]]


class TVConnection:
    """Connection manager for a single webOS TV."""

    def __init__(
        self,
        host: str,
        publisher: StatusPublisher,
        key_file_path: Optional[str] = None,
        mac_address: Optional[str] = None,
        broadcast: str = DEFAULT_BROADCAST,
        reconnect_interval: float = DEFAULT_RECONNECT_INTERVAL,
        connect_timeout: int = DEFAULT_CONNECT_TIMEOUT,
        channel_subscribe_delay: float = CHANNEL_SUBSCRIBE_DELAY,
    ):
        """Initialize the TV connection.

        Args:
            host: TV IP address or hostname
            publisher: Where TV state changes are republished
            key_file_path: File holding the pairing key
            mac_address: TV's MAC address for Wake-on-LAN
            broadcast: Broadcast address for Wake-on-LAN
            reconnect_interval: Seconds between connection attempts and liveness checks
            connect_timeout: Seconds before a connection attempt is abandoned
            channel_subscribe_delay: Seconds between live TV showing up and
                subscribing to the current channel
        """
        self.host = host
        self.key_file_path = key_file_path
        self.mac_address = mac_address
        self.broadcast = broadcast
        self.reconnect_interval = reconnect_interval
        self.connect_timeout = connect_timeout
        self.channel_subscribe_delay = channel_subscribe_delay

        self.state = ConnectionState.DISCONNECTED
        self.last_error: Optional[str] = None
        self.foreground_app: Optional[str] = None
        # Bumped on every connect and disconnect so deferred work can tell
        # whether the session it was scheduled for is still alive
        self.generation = 0

        self._publisher = publisher
        self._client: Optional[WebOsClient] = None
        self._channels_subscribed = False
        self._pointer: Optional[PointerSocket] = None
        self._pointer_lock = asyncio.Lock()
        self._running = False
        self._tasks: set[asyncio.Task] = set()

    @property
    def is_connected(self) -> bool:
        """Check if connected to TV."""
        return self.state == ConnectionState.CONNECTED

    def is_current(self, generation: int) -> bool:
        """Check that the session identified by ``generation`` is still up."""
        return self.is_connected and generation == self.generation

    # Lifecycle
    async def run(self):
        """Connect and keep reconnecting until stop() is called."""
        self._running = True
        while self._running:
            if not self.is_connected:
                await self._connect()
            elif not self._client.is_connected():
                await self._handle_disconnect()
            await asyncio.sleep(self.reconnect_interval)

    async def stop(self):
        """Stop reconnecting and close the session."""
        self._running = False
        for task in list(self._tasks):
            task.cancel()

        client = self._client
        if self.is_connected:
            await self._handle_disconnect()
        if client is not None:
            try:
                await client.disconnect()
            except Exception as e:
                _LOGGER.debug("Error while disconnecting from TV: %s", e)

    async def _connect(self) -> bool:
        """Make one connection attempt."""
        self.state = ConnectionState.CONNECTING
        _LOGGER.debug("tv trying to connect %s", self.host)

        try:
            if self.key_file_path:
                os.makedirs(os.path.dirname(self.key_file_path) or ".", exist_ok=True)
            client = await WebOsClient.create(
                self.host,
                key_file_path=self.key_file_path,
                timeout_connect=self.connect_timeout,
            )
            if not client.client_key:
                _LOGGER.info("authorization required, accept the pairing prompt on the TV")
            await client.connect()
        except Exception as e:
            self.state = ConnectionState.DISCONNECTED
            self._handle_error(e)
            return False

        await self._handle_connect(client)
        return True

    async def _handle_connect(self, client: WebOsClient):
        """Set up a fresh session."""
        self._client = client
        self.last_error = None
        self.state = ConnectionState.CONNECTED
        self.generation += 1
        self._channels_subscribed = False
        self._pointer = None

        _LOGGER.info("tv connected")
        self._publisher.connected(True)

        await self.subscribe(ep.GET_VOLUME, self._on_volume)
        await self.subscribe(ep.GET_FOREGROUND_APP, self._on_foreground_app)
        await self.subscribe(ep.GET_EXTERNAL_INPUTS, self._on_external_inputs)

    async def _handle_disconnect(self):
        """Tear down the current session."""
        self.last_error = None
        self.state = ConnectionState.DISCONNECTED
        self.generation += 1
        self._client = None
        await self.close_pointer_socket()

        _LOGGER.info("tv disconnected")
        self._publisher.connected(False)

    def _handle_error(self, error: Exception):
        """Log an error unless it repeats the previous one."""
        message = str(error) or type(error).__name__
        if message != self.last_error:
            _LOGGER.error("tv error: %s", message)
        self.last_error = message

    def _schedule(self, coro: Awaitable[Any]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    # Requests
    async def request(self, uri: str, payload: Optional[dict] = None) -> Optional[dict]:
        """Send a request to the TV.

        Args:
            uri: SSAP path, e.g. ``audio/setVolume``
            payload: Request parameters

        Returns:
            Response payload, or None if not connected or the request failed
        """
        if not self.is_connected:
            _LOGGER.debug("tv not connected, dropping %s", ep.ssap_uri(uri))
            return None

        _LOGGER.info("lg > %s:%s", ep.ssap_uri(uri), json.dumps(payload))
        try:
            return await self._client.request(uri, payload)
        except Exception as e:
            self._handle_error(e)
            return None

    async def subscribe(self, uri: str, callback: SubscriptionCallback) -> bool:
        """Subscribe to state updates on the current session."""
        if not self.is_connected:
            _LOGGER.debug("tv not connected, not subscribing to %s", ep.ssap_uri(uri))
            return False

        try:
            await self._client.subscribe(callback, uri)
        except Exception as e:
            _LOGGER.error("Failed to subscribe to %s: %s", ep.ssap_uri(uri), e)
            return False
        return True

    # Pointer input
    async def get_pointer_socket(self) -> Optional[PointerSocket]:
        """Get the pointer-input channel, opening it if needed.

        The channel is cached for the lifetime of the session.

        Returns:
            Open pointer socket, or None if the TV did not provide one
        """
        async with self._pointer_lock:
            if self._pointer is not None:
                return self._pointer

            generation = self.generation
            response = await self.request(ep.POINTER_INPUT_SOCKET)
            socket_path = (response or {}).get("socketPath")
            if not socket_path:
                _LOGGER.warning("TV did not provide a pointer input socket")
                return None

            try:
                pointer = await PointerSocket.open(socket_path)
            except Exception as e:
                _LOGGER.error("Could not open pointer input socket: %s", e)
                return None

            if not self.is_current(generation):
                _LOGGER.debug("tv connection changed while opening pointer socket")
                await pointer.close()
                return None

            self._pointer = pointer
            return pointer

    async def close_pointer_socket(self):
        """Close and forget the pointer-input channel."""
        pointer, self._pointer = self._pointer, None
        if pointer is None:
            return
        try:
            await pointer.close()
        except Exception as e:
            _LOGGER.debug("Error closing pointer socket: %s", e)

    # Power
    async def power_off(self):
        """Turn the TV off."""
        _LOGGER.info("power_off")
        await self.request(ep.POWER_OFF)

    async def power_on(self):
        """Wake the TV.

        A TV that reports no foreground app is fully off; some firmware then
        stays half on after WOL until it also receives a turnOff.
        """
        _LOGGER.info("power_on")
        if self.mac_address:
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, wake_tv, self.mac_address, self.broadcast)
        else:
            _LOGGER.warning("TV MAC address not set, cannot send WOL")

        if self.foreground_app is None:
            _LOGGER.info("lg > %s (to turn it on...)", ep.ssap_uri(ep.POWER_OFF))
            await self.request(ep.POWER_OFF)

    # Subscription callbacks
    async def _on_volume(self, payload: dict):
        _LOGGER.info("audio/getVolume %s", payload)
        payload = payload or {}
        changed = payload.get("changed") or []
        if "volume" in changed:
            self._publisher.status(STATUS_VOLUME, payload.get("volume"))
        if "muted" in changed:
            self._publisher.status(STATUS_MUTE, "1" if payload.get("muted") else "0")

    async def _on_foreground_app(self, payload: dict):
        _LOGGER.info("getForegroundAppInfo %s", payload)
        app_id = (payload or {}).get("appId")
        self._publisher.status(STATUS_FOREGROUND_APP, str(app_id))
        self.foreground_app = app_id or None

        if app_id == ep.LIVE_TV_APP and not self._channels_subscribed:
            self._channels_subscribed = True
            self._schedule(self._subscribe_current_channel(self.generation))

    async def _subscribe_current_channel(self, generation: int):
        await asyncio.sleep(self.channel_subscribe_delay)
        if not self.is_current(generation):
            _LOGGER.debug("tv connection changed, not subscribing to current channel")
            return
        await self.subscribe(ep.GET_CURRENT_CHANNEL, self._on_current_channel)

    async def _on_current_channel(self, payload: dict):
        if not payload:
            _LOGGER.error("Empty current channel update")
            return
        self._publisher.status(
            STATUS_CURRENT_CHANNEL,
            {"val": payload.get("channelNumber"), "lgtv": payload},
        )

    async def _on_external_inputs(self, payload: dict):
        _LOGGER.info("getExternalInputList %s", payload)
