"""WebSocket transport for viewers and the external actor.

Deliveries happen while the session lock is held, possibly from a worker
thread, so they never await the socket. Each connection gets a FIFO queue
fed through the event loop and a pump task that writes the frames.
"""

import asyncio
import logging
import uuid
from typing import Any, Optional

from fastapi import WebSocket, WebSocketDisconnect

from models.broadcaster import ViewerChannel
from models.errors import ChannelClosedError, MalformedInputError

logger = logging.getLogger(__name__)

# Queue marker telling the pump to stop
_CLOSE = None


class WebSocketChannel(ViewerChannel):
    """A viewer channel backed by a FastAPI WebSocket.

    Must be created on the event loop that serves the socket.

    Args:
        websocket: The accepted WebSocket connection.
        loop: Event loop the socket runs on; defaults to the running loop.
    """

    def __init__(self, websocket: WebSocket, loop: Optional[asyncio.AbstractEventLoop] = None):
        self.channel_id = str(uuid.uuid4())
        self.websocket = websocket
        self._loop = loop or asyncio.get_running_loop()
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def deliver(self, message: dict[str, Any]) -> None:
        """Queue a message for the pump. Safe to call from any thread.

        Raises:
            ChannelClosedError: If the channel was closed or the socket failed.
        """
        if self._closed:
            raise ChannelClosedError(f"Channel {self.channel_id} is closed")
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, message)
        except RuntimeError as e:
            # Event loop already closed
            self._closed = True
            raise ChannelClosedError(f"Channel {self.channel_id} is closed") from e

    async def pump(self) -> None:
        """Write queued messages to the socket until closed or the send fails."""
        while True:
            message = await self._queue.get()
            if message is _CLOSE:
                return
            try:
                await self.websocket.send_json(message)
            except (WebSocketDisconnect, RuntimeError, OSError) as e:
                logger.warning(f"Send to channel {self.channel_id} failed, closing it: {e}")
                self._closed = True
                return

    def close(self) -> None:
        """Stop accepting messages and let the pump finish what is queued."""
        if self._closed:
            return
        self._closed = True
        try:
            self._loop.call_soon_threadsafe(self._queue.put_nowait, _CLOSE)
        except RuntimeError:
            logger.debug(f"Event loop for channel {self.channel_id} is already closed")


def frame_text(frame: dict[str, Any]) -> str:
    """Extract the text of a received ASGI websocket frame.

    Raises:
        MalformedInputError: If the frame is binary.
    """
    text = frame.get("text")
    if text is None:
        raise MalformedInputError("Binary frames are not supported")
    return text
