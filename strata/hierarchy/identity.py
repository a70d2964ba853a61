"""
Synthetic identity cache.

Sections without an explicit or native id get a generated one. The id is
kept in a side-table keyed by element identity so that it survives
rescans for as long as the element stays in the document.
"""

from __future__ import annotations

import uuid
from collections.abc import Callable, Iterable

from bs4 import Tag


class IdentityCache:
    """
    Side-table mapping elements to their synthetic ids.

    Entries are keyed on ``id(element)`` and hold a reference to the
    element, so a key cannot be reused by a different object while the
    entry is alive. ``retain`` drops entries for elements that left the
    latest scan.
    """

    def __init__(self, id_factory: Callable[[], str] | None = None) -> None:
        self._id_factory = id_factory or IdentityCache.generate_id
        self._entries: dict[int, tuple[Tag, str]] = {}

    @staticmethod
    def generate_id() -> str:
        return f"sec-{uuid.uuid4().hex[:9]}"

    def get(self, element: Tag) -> str | None:
        """Cached id for ``element``, if one was assigned."""
        entry = self._entries.get(id(element))
        if entry is None or entry[0] is not element:
            return None
        return entry[1]

    def assign(self, element: Tag) -> str:
        """Return the cached id for ``element``, generating one if needed."""
        cached = self.get(element)
        if cached is not None:
            return cached

        node_id = self._id_factory()
        self._entries[id(element)] = (element, node_id)
        return node_id

    def retain(self, elements: Iterable[Tag]) -> int:
        """
        Evict every entry whose element is not in ``elements``.

        Returns:
            Number of evicted entries.
        """
        keep = {id(element) for element in elements}
        stale = [key for key in self._entries if key not in keep]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, element: object) -> bool:
        return isinstance(element, Tag) and self.get(element) is not None
