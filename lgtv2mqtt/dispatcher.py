"""Translate inbound MQTT commands into TV requests."""

import asyncio
import json
import logging
import re
from typing import Any, Awaitable, Callable, Optional

from . import endpoints as ep
from .const import (
    OPEN_MAX_CLICK_DELAY,
    OPEN_MAX_DELAY,
    OPEN_MAX_DX,
    OPEN_MAX_DY,
    OPEN_MAX_MOVES,
)
from .topics import SET
from .tv import TVConnection

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

# Returned by _parse_json when the payload is not valid JSON
INVALID = object()


def parse_bool(payload: str) -> bool:
    """``"false"`` and ``"0"`` are off, anything else is on."""
    return not (payload == "false" or payload == "0")


def parse_int(payload: str) -> Optional[int]:
    """Parse the leading base-10 integer of a payload ("42.5" -> 42)."""
    match = _LEADING_INT.match(payload)
    if not match:
        return None
    return int(match.group(1))


class CommandDispatcher:
    """Routes ``<prefix>/set/<command>`` messages to the TV.

    Commands missing from the table are forwarded verbatim: the rest of the
    topic is used as the SSAP path and a non-empty payload as JSON parameters.
    """

    def __init__(
        self,
        tv: TVConnection,
        topic_prefix: str,
        open_max_delay: float = OPEN_MAX_DELAY,
        open_max_click_delay: float = OPEN_MAX_CLICK_DELAY,
    ):
        self._tv = tv
        self.topic_prefix = topic_prefix.strip("/")
        self.open_max_delay = open_max_delay
        self.open_max_click_delay = open_max_click_delay
        self._tasks: set[asyncio.Task] = set()

        self._commands: dict[str, Callable[[str, str], Awaitable[None]]] = {
            "toast": self._toast,
            "volume": self._volume,
            "mute": self._mute,
            "input": self._input,
            "launch": self._launch,
            "system_launch_json": self._system_launch_json,
            "am_launch_json": self._am_launch_json,
            "move": self._move,
            "drag": self._move,
            "scroll": self._scroll,
            "click": self._click,
            "power": self._power,
            "button": self._button,
            "open": self._open,
            "open_max": self._open,
            "netflix": self._netflix,
            "amazon_prime": self._amazon_prime,
            "web_video_caster": self._web_video_caster,
            "youtube": self._youtube,
            "plex": self._plex,
        }

    @property
    def commands(self) -> list[str]:
        """Names of the commands with their own handler."""
        return list(self._commands)

    def split_topic(self, topic: str) -> list[str]:
        """Split a topic into the segments below the prefix.

        ``lgtv/set/volume`` -> ``["set", "volume"]``
        """
        if topic.startswith("/"):
            topic = topic[1:]

        if self.topic_prefix and topic.startswith(self.topic_prefix + "/"):
            return topic[len(self.topic_prefix) + 1:].split("/")
        return topic.split("/")[1:]

    async def dispatch(self, topic: str, payload: str):
        """Handle one inbound message."""
        parts = self.split_topic(topic)
        if len(parts) < 2 or parts[0] != SET:
            return

        command = parts[1]
        handler = self._commands.get(command)
        if handler is None:
            await self._forward("/".join(parts[1:]), payload)
        else:
            await handler(command, payload)

    def _schedule(self, coro: Awaitable[Any]) -> asyncio.Task:
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @staticmethod
    def _parse_json(command: str, payload: str, require_object: bool = False) -> Any:
        """Decode a JSON payload, returning INVALID (and logging) on failure."""
        try:
            data = json.loads(payload)
        except ValueError as e:
            logger.error(f"Invalid JSON for {command}: {e}")
            return INVALID
        if require_object and not isinstance(data, dict):
            logger.error(f"Expected a JSON object for {command}, got {payload!r}")
            return INVALID
        return data

    # Plain requests
    async def _toast(self, command: str, payload: str):
        await self._tv.request(ep.CREATE_TOAST, {"message": payload})

    async def _volume(self, command: str, payload: str):
        volume = parse_int(payload)
        if volume is None:
            logger.warning(f"Invalid volume value: {payload!r}")
            return
        await self._tv.request(ep.SET_VOLUME, {"volume": volume})

    async def _mute(self, command: str, payload: str):
        await self._tv.request(ep.SET_MUTE, {"mute": parse_bool(payload)})

    async def _input(self, command: str, payload: str):
        await self._tv.request(ep.SWITCH_INPUT, {"inputId": payload})

    async def _launch(self, command: str, payload: str):
        await self._tv.request(ep.LAUNCH, {"id": payload})

    async def _system_launch_json(self, command: str, payload: str):
        params = self._parse_json(command, payload)
        if params is not INVALID:
            await self._tv.request(ep.LAUNCH, params)

    async def _am_launch_json(self, command: str, payload: str):
        params = self._parse_json(command, payload)
        if params is not INVALID:
            await self._tv.request(ep.AM_LAUNCH, params)

    async def _power(self, command: str, payload: str):
        if parse_bool(payload):
            await self._tv.power_on()
        else:
            await self._tv.power_off()

    async def _open(self, command: str, payload: str):
        await self._tv.request(ep.OPEN, {"target": payload})
        if command == "open_max":
            self._schedule(self._click_max(self._tv.generation))

    # Streaming service shortcuts
    async def _netflix(self, command: str, payload: str):
        params = {"id": ep.APP_NETFLIX}
        if payload:
            params["contentId"] = ep.NETFLIX_CONTENT_ID.format(title=payload)
        await self._tv.request(ep.LAUNCH, params)

    async def _amazon_prime(self, command: str, payload: str):
        await self._tv.request(ep.LAUNCH, {"id": ep.APP_AMAZON})

    async def _web_video_caster(self, command: str, payload: str):
        await self._tv.request(ep.LAUNCH, {"id": ep.APP_WEB_VIDEO_CASTER})

    async def _youtube(self, command: str, payload: str):
        params: dict[str, Any] = {"id": ep.APP_YOUTUBE}
        if payload:
            params["params"] = {"contentTarget": ep.YOUTUBE_CONTENT_TARGET.format(video=payload)}
        await self._tv.request(ep.AM_LAUNCH, params)

    async def _plex(self, command: str, payload: str):
        await self._tv.request(ep.LAUNCH, {"id": ep.APP_PLEX})

    # Pointer input
    async def _move(self, command: str, payload: str):
        data = self._parse_json(command, payload, require_object=True)
        if data is INVALID:
            return
        # Drags are moves with the drag flag set
        await self._pointer_event("move", {
            "dx": data.get("dx"),
            "dy": data.get("dy"),
            "drag": 1 if command == "drag" else 0,
        })

    async def _scroll(self, command: str, payload: str):
        data = self._parse_json(command, payload, require_object=True)
        if data is INVALID:
            return
        await self._pointer_event("scroll", {"dx": data.get("dx"), "dy": data.get("dy")})

    async def _click(self, command: str, payload: str):
        await self._pointer_event("click")

    async def _button(self, command: str, payload: str):
        # Known to work: MUTE, RED, GREEN, YELLOW, BLUE, HOME, MENU, VOLUMEUP,
        # VOLUMEDOWN, CC, BACK, UP, DOWN, LEFT, ENTER, DASH, 0-9, EXIT,
        # CHANNELUP, CHANNELDOWN
        await self._pointer_event("button", {"name": payload.upper()})

    async def _pointer_event(self, event_type: str, payload: Optional[dict] = None) -> bool:
        """Send one event over the pointer-input channel."""
        logger.info(
            f"lg > {ep.ssap_uri(ep.POINTER_INPUT_SOCKET)} | type: {event_type} | payload: {json.dumps(payload)}"
        )
        pointer = await self._tv.get_pointer_socket()
        if pointer is None:
            logger.warning(f"No pointer channel, dropping {event_type}")
            return False

        try:
            await pointer.send(event_type, payload)
        except Exception as e:
            logger.error(f"Pointer {event_type} failed: {e}")
            await self._tv.close_pointer_socket()
            return False
        return True

    async def _click_max(self, generation: int):
        """Sweep the cursor onto the player's maximize control and click it."""
        await asyncio.sleep(self.open_max_delay)
        if not self._tv.is_current(generation):
            logger.debug("tv connection changed, skipping open_max pointer sweep")
            return

        pointer = await self._tv.get_pointer_socket()
        if pointer is None:
            logger.warning("No pointer channel, skipping open_max pointer sweep")
            return

        move = {"dx": OPEN_MAX_DX, "dy": OPEN_MAX_DY, "down": 0}
        try:
            for _ in range(OPEN_MAX_MOVES):
                await pointer.send("move", move)
        except Exception as e:
            logger.error(f"open_max pointer sweep failed: {e}")
            await self._tv.close_pointer_socket()
            return

        await asyncio.sleep(self.open_max_click_delay)
        if not self._tv.is_current(generation):
            logger.debug("tv connection changed, skipping open_max click")
            return
        await self._pointer_event("click")

    # Generic passthrough
    async def _forward(self, path: str, payload: str):
        params = None
        if payload:
            params = self._parse_json(path, payload)
            if params is INVALID:
                return
        await self._tv.request(path, params)
