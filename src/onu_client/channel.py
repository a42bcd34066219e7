"""Event channel to the game server"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional
from urllib.parse import urlsplit, urlunsplit

import socketio
from socketio import exceptions as sio_errors

from .errors import CallError, CallTimeout, ChannelError

logger = logging.getLogger(__name__)


@dataclass
class IncomingEvent:
    """A push event in arrival order."""
    name: str
    args: List[Any] = field(default_factory=list)
    # resolved with the acknowledgement when the server waits for one
    ack: Optional[asyncio.Future] = field(default=None, compare=False, repr=False)


def unwrap_reply(event: str, reply: Any) -> Any:
    """
    First acknowledgement argument of a call.

    Raises:
        CallError: If the reply carries an error reason
    """
    result = reply[0] if isinstance(reply, tuple) else reply
    if isinstance(result, dict) and result.get("error"):
        raise CallError(event, result["error"])
    return result


def event_data(args: tuple) -> Any:
    """python-socketio sends a tuple as several arguments and anything else as one."""
    if not args:
        return None
    if len(args) == 1:
        return args[0]
    return tuple(args)


def server_url(url: str) -> str:
    """ws(s) endpoints are given to the client as http(s)."""
    parts = urlsplit(url)
    scheme = {"ws": "http", "wss": "https"}.get(parts.scheme, parts.scheme)
    return urlunsplit((scheme, *parts[1:]))


class EventChannel(ABC):
    """Push events plus correlated calls over one ordered connection."""

    @abstractmethod
    async def connect(self) -> None:
        pass

    @abstractmethod
    async def close(self) -> None:
        pass

    @abstractmethod
    async def next_event(self) -> Optional[IncomingEvent]:
        """Next push event, or None once the connection is gone."""
        pass

    @abstractmethod
    async def emit(self, event: str, *args: Any) -> None:
        """Fire-and-forget send."""
        pass

    @abstractmethod
    async def call(self, event: str, *args: Any, timeout: Optional[float] = None) -> Any:
        """
        Send a request and wait for its single answer.

        No timeout applies unless the caller passes one.

        Raises:
            CallError: The server answered with an error reason
            CallTimeout: No answer arrived within timeout
            ChannelError: The connection closed first
        """
        pass

    @abstractmethod
    async def acknowledge(self, incoming: IncomingEvent, *args: Any) -> None:
        """Answer a push event that asked for an acknowledgement."""
        pass


class SocketIOChannel(EventChannel):
    """
    EventChannel on top of python-socketio's AsyncClient.

    Events named in acked_events hold their acknowledgement until the
    dispatcher calls acknowledge(); every other event is answered (if the
    server asked) as soon as it is queued.
    """

    def __init__(self, url: str, acked_events: Iterable[str] = (), client=None):
        self.url = url
        self.acked_events = set(acked_events)
        self._sio = client or socketio.AsyncClient(reconnection=False, logger=False, engineio_logger=False)
        self._sio.on("*", self._on_event)
        self._sio.on("connect", self._on_connect)
        self._sio.on("disconnect", self._on_disconnect)
        self._events: Optional[asyncio.Queue] = None
        self._ended: Optional[asyncio.Future] = None
        self._waiter: Optional[asyncio.Task] = None

    async def connect(self) -> None:
        self._events = asyncio.Queue()
        self._ended = asyncio.get_running_loop().create_future()
        try:
            await self._sio.connect(server_url(self.url))
        except sio_errors.ConnectionError as e:
            self._end()
            raise ChannelError(f"Could not connect to {self.url}: {e}")
        self._waiter = asyncio.create_task(self._wait_for_end())

    async def close(self) -> None:
        if self._sio.connected:
            await self._sio.disconnect()
        if self._waiter is not None:
            self._waiter.cancel()
        self._end()

    async def next_event(self) -> Optional[IncomingEvent]:
        event = await self._events.get()
        if event is None:
            # keep the end marker for later readers
            self._events.put_nowait(None)
        return event

    async def emit(self, event: str, *args: Any) -> None:
        logger.debug(f"emit {event} {args}")
        try:
            await self._sio.emit(event, event_data(args))
        except sio_errors.SocketIOError as e:
            raise ChannelError(f"Could not send {event}: {e}")

    async def call(self, event: str, *args: Any, timeout: Optional[float] = None) -> Any:
        logger.debug(f"call {event} {args}")
        pending = asyncio.ensure_future(self._sio.call(event, event_data(args), timeout=timeout))
        done, _ = await asyncio.wait({pending, self._ended}, return_when=asyncio.FIRST_COMPLETED)
        if pending not in done:
            pending.cancel()
            raise ChannelError(f"Connection closed while waiting for {event}")
        try:
            reply = pending.result()
        except sio_errors.TimeoutError:
            raise CallTimeout(event, timeout)
        except sio_errors.SocketIOError as e:
            raise ChannelError(f"Could not send {event}: {e}")
        return unwrap_reply(event, reply)

    async def acknowledge(self, incoming: IncomingEvent, *args: Any) -> None:
        if incoming.ack is not None and not incoming.ack.done():
            incoming.ack.set_result(event_data(args))

    async def _on_event(self, event: str, *args: Any):
        incoming = IncomingEvent(event, list(args))
        if event in self.acked_events:
            incoming.ack = asyncio.get_running_loop().create_future()
        self._events.put_nowait(incoming)
        if incoming.ack is not None:
            return await incoming.ack
        return None

    async def _on_connect(self) -> None:
        logger.info(f"Connected to {self.url}")

    async def _on_disconnect(self, *args) -> None:
        logger.warning(f"Disconnected from {self.url}")

    async def _wait_for_end(self) -> None:
        await self._sio.wait()
        logger.info("Connection ended")
        self._end()

    def _end(self) -> None:
        if self._ended is not None and not self._ended.done():
            self._ended.set_result(None)
            self._events.put_nowait(None)
