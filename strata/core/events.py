"""
Change notification feeds.

The document pushes structural mutations and clicks into feeds; the
extractor subscribes to them rather than observing the document itself.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

from bs4 import Tag

EventT = TypeVar("EventT")


@dataclass
class MutationRecord:
    """A batch of structural changes to the document."""

    added: list[Tag] = field(default_factory=list)
    removed: list[Tag] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.added and not self.removed


@dataclass
class ClickEvent:
    """A click on the document. ``target`` is None for background clicks."""

    target: Tag | None = None


class ChangeFeed(Generic[EventT]):
    """Synchronous publish/subscribe channel for one kind of event."""

    def __init__(self) -> None:
        self._subscribers: list[Callable[[EventT], None]] = []

    def subscribe(self, callback: Callable[[EventT], None]) -> Callable[[], None]:
        """
        Register a callback.

        Returns:
            A function that removes the subscription. Calling it more than
            once is harmless.
        """
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def publish(self, event: EventT) -> None:
        """Deliver an event to every subscriber in registration order."""
        # Copy so a callback may unsubscribe while we iterate
        for callback in list(self._subscribers):
            callback(event)

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)
