"""
Hierarchy tree data structures.

SectionNode is rebuilt from scratch on every scan and only lives long
enough to be serialized into a ``hierarchy-update`` message.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from typing import Any, Literal

SectionKind = Literal["section", "layout"]


@dataclass
class SectionNode:
    """
    A node in the inferred document outline.

    ``level`` is the heading rank used while assembling the tree; it is
    scan-local and never serialized. ``depth`` is the 1-based position in
    the emitted forest.
    """

    id: str
    label: str
    kind: SectionKind = "section"
    section_id: str | None = None
    children: list[SectionNode] = field(default_factory=list)
    depth: int = 0
    level: int = 1

    def add_child(self, child: SectionNode) -> None:
        """Append a child and derive its depth from this node."""
        child.depth = self.depth + 1
        self.children.append(child)

    @property
    def descendant_count(self) -> int:
        """Count all descendants (children, grandchildren, etc.)."""
        count = len(self.children)
        for child in self.children:
            count += child.descendant_count
        return count

    def get_all_descendants(self) -> list[SectionNode]:
        """Get all descendants as a flat list (DFS order)."""
        descendants = []
        for child in self.children:
            descendants.append(child)
            descendants.extend(child.get_all_descendants())
        return descendants

    def to_dict(self) -> dict[str, Any]:
        """Wire shape sent to the hierarchy viewer."""
        result: dict[str, Any] = {
            "id": self.id,
            "type": self.kind,
        }
        if self.section_id is not None:
            result["sectionId"] = self.section_id
        result["label"] = self.label
        result["children"] = [child.to_dict() for child in self.children]
        result["depth"] = self.depth
        return result


def iter_nodes(roots: Iterable[SectionNode]) -> Iterator[SectionNode]:
    """Walk a forest depth-first in document order."""
    for root in roots:
        yield root
        yield from root.get_all_descendants()


def max_depth(roots: Iterable[SectionNode]) -> int:
    return max((node.depth for node in iter_nodes(roots)), default=0)
