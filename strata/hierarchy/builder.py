"""
Hierarchy tree builder.

Builds a forest from the ordered, leveled list of sections produced by
level inference.
"""

from __future__ import annotations

from typing import Any

from strata.hierarchy.tree import SectionNode, iter_nodes


class HierarchyBuilder:
    """
    Builds section forests from flat node lists.

    Nesting is decided by ``level`` alone, not by where the elements sit
    in the DOM: heading rank is the only signal shared by every kind of
    content that can appear in a document.
    """

    @staticmethod
    def build(nodes: list[SectionNode]) -> list[SectionNode]:
        """Assemble a forest from nodes in document order.

        Strategy:
        1. Keep a stack holding the current ancestor chain
        2. Pop while the top's level is >= the node's level
        3. Empty stack: the node is a root at depth 1
        4. Otherwise the top of the stack is the parent
        5. Push the node as a potential parent for what follows

        Args:
            nodes: Sections with ``level`` set, in document order.

        Returns:
            Root nodes, in document order.
        """
        roots: list[SectionNode] = []
        stack: list[SectionNode] = []

        for node in nodes:
            # Equal levels are siblings, so only a strictly lower level may parent
            while stack and stack[-1].level >= node.level:
                stack.pop()

            if not stack:
                node.depth = 1
                roots.append(node)
            else:
                stack[-1].add_child(node)

            stack.append(node)

        return roots

    @staticmethod
    def flatten(roots: list[SectionNode]) -> list[dict[str, Any]]:
        """
        Flatten a forest to a list of rows for display.

        Each row includes the label path from the root.

        Returns:
            List of section dictionaries in document order
        """
        rows = []
        paths: dict[int, list[str]] = {}

        for node in iter_nodes(roots):
            parent_path = paths.get(node.depth - 1, []) if node.depth > 1 else []
            path = parent_path + [node.label]
            paths[node.depth] = path
            rows.append(
                {
                    "id": node.id,
                    "section_id": node.section_id,
                    "label": node.label,
                    "type": node.kind,
                    "depth": node.depth,
                    "hierarchy_path": " > ".join(path),
                    "child_count": len(node.children),
                    "descendant_count": node.descendant_count,
                }
            )

        return rows
