"""Append-only transcript of everything printed to the shared terminal."""

from typing import Iterator

from models.messages import TranscriptEvent


class Transcript:
    """Ordered log of transcript events for the lifetime of the process.

    Events are never removed or reordered. Snapshots are immutable copies,
    so a replay in progress can't observe later appends.

    Args:
        events: Initial events, in order.
    """

    def __init__(self, events: list[TranscriptEvent] | None = None):
        self._events: list[TranscriptEvent] = list(events or [])

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self) -> Iterator[TranscriptEvent]:
        return iter(self.snapshot())

    def append(self, event: TranscriptEvent) -> None:
        """Record an event at the end of the transcript."""
        self._events.append(event)

    def snapshot(self) -> tuple[TranscriptEvent, ...]:
        """Return every event recorded so far, in order."""
        return tuple(self._events)

    def events_since(self, index: int) -> tuple[TranscriptEvent, ...]:
        """Return the events recorded at or after the given position."""
        return tuple(self._events[index:])
