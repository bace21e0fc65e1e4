"""Fan-out of transcript events to connected viewers.

The central ordering rule: an event is appended to the transcript before it
is delivered to any channel, and a join (transcript snapshot plus channel
registration) happens under the same lock as publishing. A viewer therefore
gets every event exactly once, either inside its transfer-state replay or
live, never both and never neither.
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import Any

from models.errors import ChannelClosedError
from models.messages import TransferStateMessage, TranscriptEvent
from models.transcript import Transcript

logger = logging.getLogger(__name__)


class ViewerChannel(ABC):
    """A connected viewer that can receive wire messages.

    Attributes:
        channel_id: Unique identifier for this connection.
    """

    channel_id: str

    @abstractmethod
    def deliver(self, message: dict[str, Any]) -> None:
        """Queue a wire message for this viewer without blocking.

        Raises:
            ChannelClosedError: If the channel can no longer accept messages.
        """
        pass


class Broadcaster:
    """Publishes transcript events to every connected viewer channel.

    Args:
        transcript: The session transcript events are recorded in.
        lock: The session lock; shared so a whole command can hold it.
    """

    def __init__(self, transcript: Transcript, lock=None):
        self.transcript = transcript
        self._lock = lock if lock is not None else threading.RLock()
        self._channels: dict[str, ViewerChannel] = {}

    @property
    def channel_count(self) -> int:
        """Number of currently connected channels."""
        return len(self._channels)

    def publish(self, event: TranscriptEvent) -> None:
        """Record an event, then deliver it to every connected channel.

        Channels that turn out to be closed are dropped; delivery to the
        remaining channels continues.
        """
        with self._lock:
            self.transcript.append(event)
            wire = event.to_wire()
            logger.debug(f"Publishing {wire} to {len(self._channels)} channel(s)")
            for channel in list(self._channels.values()):
                self._deliver(channel, wire)

    def join(self, channel: ViewerChannel) -> int:
        """Replay the transcript to a new channel and start delivering live events.

        Snapshot, replay and registration happen as one step with respect to
        publish().

        Returns:
            Number of events included in the replay.
        """
        with self._lock:
            snapshot = self.transcript.snapshot()
            transfer = TransferStateMessage(messages=list(snapshot))
            channel.deliver(transfer.to_wire())
            self._channels[channel.channel_id] = channel
            logger.info(
                f"Viewer {channel.channel_id} joined with {len(snapshot)} replayed events; "
                f"{len(self._channels)} connected"
            )
            return len(snapshot)

    def leave(self, channel: ViewerChannel) -> None:
        """Stop delivering to a channel. Safe to call more than once."""
        with self._lock:
            if self._channels.pop(channel.channel_id, None) is not None:
                logger.info(
                    f"Viewer {channel.channel_id} left; {len(self._channels)} connected"
                )

    def _deliver(self, channel: ViewerChannel, wire: dict[str, Any]) -> None:
        try:
            channel.deliver(wire)
        except ChannelClosedError:
            logger.debug(f"Dropping closed viewer channel {channel.channel_id}")
            self._channels.pop(channel.channel_id, None)
