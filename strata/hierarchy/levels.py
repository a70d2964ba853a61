"""
Level inference for section candidates.

Each candidate gets a heading rank (its ``level``), a label and an id.
Headed candidates take the rank of their first heading. Headless ones
are demoted beneath the last heading seen earlier in document order,
whatever their actual position in the DOM.
"""

from __future__ import annotations

from bs4 import Tag

from strata.config import ExtractorConfig
from strata.hierarchy.identity import IdentityCache
from strata.hierarchy.tree import SectionKind, SectionNode

HEADING_TAGS = ["h1", "h2", "h3", "h4", "h5", "h6"]

DEFAULT_LABEL = "Section"
UNTITLED_LABEL = "Untitled Section"
ELLIPSIS = "..."


def find_heading(element: Tag) -> Tag | None:
    """First ``h1``-``h6`` descendant of ``element`` in document order."""
    return element.find(HEADING_TAGS)


def heading_rank(heading: Tag) -> int | None:
    """Rank 1-6 of a heading element, or None if it is not a heading."""
    name = (heading.name or "").lower()
    if name in HEADING_TAGS:
        return int(name[1])
    return None


def truncate(text: str, limit: int) -> str:
    """Cut ``text`` to ``limit`` characters, marking the cut with an ellipsis."""
    if len(text) > limit:
        return text[:limit] + ELLIPSIS
    return text


def heading_label(heading: Tag, limit: int = 30) -> str:
    text = heading.get_text().strip()
    if not text:
        return UNTITLED_LABEL
    return truncate(text, limit)


def fallback_label(element: Tag, config: ExtractorConfig) -> str:
    """
    Label for a section without a heading.

    Short explicit or native ids win, then the start of the text content,
    then the generic placeholder.
    """
    id_label = element.get(config.section_id_attribute) or element.get("id")
    if id_label and len(id_label) < config.fallback_label_limit:
        return id_label

    text = element.get_text().strip()
    if text:
        return truncate(text, config.fallback_label_limit)
    return DEFAULT_LABEL


def existing_node_id(
    element: Tag, config: ExtractorConfig, identity: IdentityCache
) -> str | None:
    """Node id already known for ``element``, without generating one."""
    return (
        element.get(config.section_id_attribute)
        or element.get("id")
        or identity.get(element)
    )


def resolve_node_id(element: Tag, config: ExtractorConfig, identity: IdentityCache) -> str:
    """
    Stable id for ``element``.

    Priority: explicit section id, native id, cached synthetic id, fresh
    synthetic id (which is cached for later scans).
    """
    return existing_node_id(element, config, identity) or identity.assign(element)


def section_kind(element: Tag, config: ExtractorConfig) -> SectionKind:
    if element.get(config.kind_attribute) == "layout":
        return "layout"
    return "section"


def infer_levels(
    candidates: list[Tag],
    config: ExtractorConfig,
    identity: IdentityCache,
) -> list[SectionNode]:
    """
    Turn candidates into leveled nodes, in document order.

    Args:
        candidates: Section elements in document order.
        config: Attribute names and label limits.
        identity: Synthetic id cache, updated in place.

    Returns:
        One SectionNode per candidate, with ``level`` set and no children.
    """
    nodes: list[SectionNode] = []
    last_header_level = 0  # 0 means no heading seen yet

    for element in candidates:
        heading = find_heading(element)
        rank = heading_rank(heading) if heading is not None else None

        if rank is not None:
            level = rank
            last_header_level = rank
            label = heading_label(heading, config.heading_label_limit)
        else:
            level = last_header_level + 1 if last_header_level > 0 else 1
            label = fallback_label(element, config)

        nodes.append(
            SectionNode(
                id=resolve_node_id(element, config, identity),
                label=label,
                kind=section_kind(element, config),
                section_id=element.get(config.section_id_attribute) or None,
                level=level,
            )
        )

    return nodes
