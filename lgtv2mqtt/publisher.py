"""Deduplicated status publishing."""

import json
import logging
import threading
from typing import Any, Callable

from .topics import CONNECTED, STATUS, normalize

logger = logging.getLogger(__name__)


class DedupPublishCache:
    """Suppress publishes that repeat the last value sent on a topic.

    Wraps the raw publish function of the bus connection. Entries are keyed by
    the normalized topic; the topic itself is published as given.
    """

    def __init__(self, publish: Callable[[str, str], Any]):
        """Initialize the cache.

        Args:
            publish: Downstream publish taking (topic, payload). QoS and
                retain flags are applied by the owner of this callable.
        """
        self._publish = publish
        self._last: dict[str, str] = {}
        self._lock = threading.Lock()

    def attempt_publish(self, topic: str, payload: str) -> bool:
        """Publish unless the payload equals the last one sent on this topic.

        Returns:
            True if the message was handed to the bus
        """
        key = normalize(topic)
        with self._lock:
            if self._last.get(key) == payload:
                logger.debug(f" * not published: [{topic}:{payload}]")
                return False
            self._last[key] = payload

        logger.debug(f" => published: [{topic}:{payload}]")
        self._publish(topic, payload)
        return True

    def reset(self):
        """Forget every published value."""
        with self._lock:
            self._last.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._last)


class StatusPublisher:
    """Republishes TV state under the configured topic prefix."""

    def __init__(self, cache: DedupPublishCache, prefix: str):
        self._cache = cache
        self.prefix = prefix

    def connected(self, is_connected: bool) -> bool:
        """Publish TV connectivity on ``<prefix>/connected``."""
        return self._cache.attempt_publish(
            f"{self.prefix}/{CONNECTED}", "1" if is_connected else "0"
        )

    def status(self, name: str, payload: Any) -> bool:
        """Publish a status value on ``<prefix>/status/<name>``.

        Dicts and lists are sent as JSON, everything else as ``str()``.
        """
        if isinstance(payload, (dict, list)):
            payload = json.dumps(payload)
        return self._cache.attempt_publish(f"{self.prefix}/{STATUS}/{name}", str(payload))
