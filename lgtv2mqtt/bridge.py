"""Main bridge class for lgtv2mqtt."""

import asyncio
import logging
import signal
from typing import Optional

from .bus import BusConnection
from .config import get_key_file_path, validate_config
from .dispatcher import CommandDispatcher
from .publisher import StatusPublisher
from .tv import TVConnection

logger = logging.getLogger(__name__)


class LGTVMQTTBridge:
    """Bridge between MQTT broker and LG webOS TV."""

    def __init__(self, config: dict):
        """Initialize the bridge.

        Args:
            config: Configuration dictionary
        """
        errors = validate_config(config)
        if errors:
            for error in errors:
                logger.error(f"Config error: {error}")
            raise ValueError("Invalid configuration")

        self.config = config
        self.running = False

        mqtt_config = config["mqtt"]
        tv_config = config["tv"]
        options = config.get("options", {})
        self.topic_prefix = mqtt_config["topic_prefix"]

        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_event: Optional[asyncio.Event] = None

        # MQTT client for broker
        self._bus = BusConnection(
            host=mqtt_config["host"],
            port=mqtt_config.get("port", 1883),
            topic_prefix=self.topic_prefix,
            username=mqtt_config.get("username"),
            password=mqtt_config.get("password"),
            client_id=mqtt_config.get("client_id", "lgtv2mqtt"),
            name=mqtt_config.get("name"),
            qos=mqtt_config.get("qos", 1),
            retain=mqtt_config.get("retain", True),
            tv_connected=lambda: self._tv.is_connected,
            on_message=self._on_bus_message,
        )
        self._publisher = StatusPublisher(self._bus.cache, self.topic_prefix)

        # LG TV client
        self._tv = TVConnection(
            host=tv_config["host"],
            publisher=self._publisher,
            key_file_path=get_key_file_path(config),
            mac_address=tv_config.get("mac"),
            broadcast=tv_config.get("broadcast", "255.255.255.255"),
            reconnect_interval=options.get("reconnect_interval", 1.0),
            connect_timeout=options.get("connect_timeout", 5),
        )

        self._dispatcher = CommandDispatcher(self._tv, self.topic_prefix)

    @property
    def bus(self) -> BusConnection:
        return self._bus

    @property
    def tv(self) -> TVConnection:
        return self._tv

    @property
    def dispatcher(self) -> CommandDispatcher:
        return self._dispatcher

    def _on_bus_message(self, topic: str, payload: str):
        """Hand an inbound message from the paho thread to the event loop."""
        if self._loop is None or self._loop.is_closed():
            logger.warning(f"Event loop not running, dropping {topic}")
            return None

        future = asyncio.run_coroutine_threadsafe(
            self._dispatcher.dispatch(topic, payload), self._loop
        )
        future.add_done_callback(self._log_dispatch_error)
        return future

    @staticmethod
    def _log_dispatch_error(future):
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Command failed: {error}", exc_info=error)

    async def run(self):
        """Run the bridge until stop() is called."""
        logger.info("Starting lgtv2mqtt bridge...")
        self._loop = asyncio.get_running_loop()
        self._stop_event = asyncio.Event()
        self.running = True

        self._bus.start()
        tv_task = asyncio.create_task(self._tv.run())
        logger.info("lgtv2mqtt bridge started")

        try:
            await self._stop_event.wait()
        finally:
            logger.info("Stopping lgtv2mqtt bridge...")
            self.running = False
            await self._tv.stop()
            tv_task.cancel()
            try:
                await tv_task
            except asyncio.CancelledError:
                pass
            self._bus.stop()
            logger.info("lgtv2mqtt bridge stopped")

    def stop(self):
        """Stop the bridge (safe to call from any thread)."""
        if self._loop is not None and self._stop_event is not None:
            self._loop.call_soon_threadsafe(self._stop_event.set)

    def run_forever(self):
        """Run the bridge until interrupted."""

        async def main():
            loop = asyncio.get_running_loop()
            for signum in (signal.SIGINT, signal.SIGTERM):
                loop.add_signal_handler(signum, self._on_signal, signum)
            await self.run()

        asyncio.run(main())

    def _on_signal(self, signum: int):
        logger.info(f"Received signal {signum}")
        self.stop()
