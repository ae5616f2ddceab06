"""MQTT broker connection for lgtv2mqtt."""

import logging
from typing import Callable, Optional

import paho.mqtt.client as mqtt

from .const import (
    ConnectionState,
    DEFAULT_CLIENT_ID,
    DEFAULT_KEEPALIVE,
    DEFAULT_MQTT_PORT,
    DEFAULT_QOS,
    DEFAULT_RETAIN,
)
from .publisher import DedupPublishCache
from .topics import CONNECTED, availability_topic, command_subscription

logger = logging.getLogger(__name__)


class BusConnection:
    """Owns the MQTT client, its last will and the command subscription.

    Reconnection is left to paho's network loop. Lifecycle callbacks run on
    the paho thread.
    """

    def __init__(
        self,
        host: Optional[str],
        topic_prefix: str,
        port: int = DEFAULT_MQTT_PORT,
        username: Optional[str] = None,
        password: Optional[str] = None,
        client_id: str = DEFAULT_CLIENT_ID,
        name: Optional[str] = None,
        qos: int = DEFAULT_QOS,
        retain: bool = DEFAULT_RETAIN,
        tv_connected: Optional[Callable[[], bool]] = None,
        on_connected: Optional[Callable[[], None]] = None,
        on_disconnected: Optional[Callable[[], None]] = None,
        on_message: Optional[Callable[[str, str], None]] = None,
    ):
        """Initialize the bus connection.

        Args:
            host: Broker host name (required before start())
            topic_prefix: Root of every command and status topic
            port: Broker port
            username: Optional broker user
            password: Optional broker password
            client_id: MQTT client identifier
            name: Availability name; enables the ``/status/<name>`` last will
            qos: QoS for every outbound publish
            retain: Retain flag for every outbound publish
            tv_connected: Returns the TV's last known connectivity
            on_connected: Called after each successful (re)connect
            on_disconnected: Called after each disconnect
            on_message: Called with (topic, payload) for each inbound message
        """
        self.host = host
        self.port = port
        self.topic_prefix = topic_prefix
        self.name = name
        self.qos = qos
        self.retain = retain
        self.state = ConnectionState.DISCONNECTED

        self._tv_connected = tv_connected or (lambda: False)
        self._on_connected = on_connected
        self._on_disconnected = on_disconnected
        self._on_message_cb = on_message

        self.cache = DedupPublishCache(self._publish_raw)

        self._client = mqtt.Client(
            mqtt.CallbackAPIVersion.VERSION2,
            client_id=client_id,
            clean_session=True,
        )
        if username:
            self._client.username_pw_set(username, password)

        self._client.on_connect = self._on_connect
        self._client.on_connect_fail = self._on_connect_fail
        self._client.on_disconnect = self._on_disconnect
        self._client.on_message = self._on_message

        # Last Will and Testament
        if name:
            self._client.will_set(
                self.availability_topic,
                payload="0",
                qos=qos,
                retain=True,
            )

    @property
    def availability_topic(self) -> Optional[str]:
        """Topic announcing whether this process is alive."""
        if not self.name:
            return None
        return availability_topic(self.name)

    @property
    def is_connected(self) -> bool:
        return self.state == ConnectionState.CONNECTED

    def start(self):
        """Connect in the background and start the network loop."""
        if not self.host:
            raise ValueError("MQTT host not set")

        logger.info(f"Connecting to MQTT broker at {self.host}:{self.port}")
        self.state = ConnectionState.CONNECTING
        self._client.reconnect_delay_set(min_delay=1, max_delay=120)
        self._client.connect_async(self.host, self.port, keepalive=DEFAULT_KEEPALIVE)
        self._client.loop_start()

    def stop(self):
        """Announce shutdown and disconnect."""
        if self.is_connected and self.availability_topic:
            info = self._client.publish(self.availability_topic, "0", qos=self.qos, retain=True)
            info.wait_for_publish(timeout=2)
        self._client.disconnect()
        self._client.loop_stop()
        self.state = ConnectionState.DISCONNECTED

    def publish(self, topic: str, payload: str) -> bool:
        """Publish through the dedup cache."""
        return self.cache.attempt_publish(topic, payload)

    def _publish_raw(self, topic: str, payload: str):
        self._client.publish(topic, payload, qos=self.qos, retain=self.retain)

    def _on_connect(self, client, userdata, flags, reason_code, properties=None):
        """Handle broker connection."""
        if reason_code != 0:
            logger.error(f"MQTT connection refused: {reason_code}")
            return

        logger.info("MQTT connected")
        self.state = ConnectionState.CONNECTED
        self.cache.reset()

        if self.availability_topic:
            self.publish(self.availability_topic, "1")

        self.publish(f"{self.topic_prefix}/{CONNECTED}", "1" if self._tv_connected() else "0")

        subscription = command_subscription(self.topic_prefix)
        logger.info(f"mqtt subscribe {subscription}")
        client.subscribe(subscription, qos=1)

        if self._on_connected:
            self._on_connected()

    def _on_connect_fail(self, client, userdata):
        logger.error(f"mqtt: could not reach broker at {self.host}:{self.port}")

    def _on_disconnect(self, client, userdata, flags, reason_code, properties=None):
        """Handle broker disconnection."""
        if self.state == ConnectionState.CONNECTED:
            logger.error(f"mqtt disconnected: {reason_code}")
        self.state = ConnectionState.DISCONNECTED

        if self._on_disconnected:
            self._on_disconnected()

    def _on_message(self, client, userdata, msg):
        """Handle incoming MQTT messages."""
        try:
            payload = msg.payload.decode("utf-8")
        except UnicodeDecodeError:
            payload = str(msg.payload)

        logger.info(f"mqtt < {msg.topic}:{payload}")

        if self._on_message_cb:
            self._on_message_cb(msg.topic, payload)
