"""
Presentation collaborators for hover and selection highlighting.

The selection tracker never styles elements itself. It snapshots and
applies ``OutlineStyle`` values through a ``Presenter`` and reports each
visual change as a ``PresentationIntent``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from bs4 import Tag

logger = logging.getLogger(__name__)


class PresentationState(Enum):
    """Visual state of a section in the document."""

    NONE = "none"
    HOVERED = "hovered"
    SELECTED = "selected"


@dataclass(frozen=True)
class OutlineStyle:
    """The outline declarations a highlight touches."""

    outline: str = ""
    offset: str = ""


NEUTRAL_STYLE = OutlineStyle()
SELECTED_STYLE = OutlineStyle(outline="3px solid #0D7377", offset="4px")
HOVER_STYLE = OutlineStyle(outline="2px dashed #14B8A6", offset="2px")


@dataclass(frozen=True)
class PresentationIntent:
    """Request to show a section in a given state."""

    node_id: str
    state: PresentationState

    def to_dict(self) -> dict[str, Any]:
        return {"nodeId": self.node_id, "state": self.state.value}


@runtime_checkable
class Presenter(Protocol):
    """Reads and writes the visual state of document elements."""

    def read(self, element: Tag) -> OutlineStyle: ...

    def write(self, element: Tag, style: OutlineStyle) -> None: ...

    def scroll_into_view(self, element: Tag) -> None: ...


def parse_style(value: str | None) -> dict[str, str]:
    """Split an inline ``style`` attribute into ordered declarations."""
    declarations: dict[str, str] = {}
    for part in (value or "").split(";"):
        name, sep, prop = part.partition(":")
        name = name.strip().lower()
        if sep and name:
            declarations[name] = prop.strip()
    return declarations


def format_style(declarations: dict[str, str]) -> str:
    return "; ".join(f"{name}: {value}" for name, value in declarations.items())


class InlineStylePresenter:
    """
    Presenter that writes ``outline`` declarations into inline styles.

    Other declarations in the ``style`` attribute are left untouched.
    Scroll requests are recorded in ``scroll_requests`` as
    ``(element, behavior, block)`` tuples for the rendering layer to act on.
    """

    def __init__(self, behavior: str = "smooth", block: str = "center") -> None:
        self.behavior = behavior
        self.block = block
        self.scroll_requests: list[tuple[Tag, str, str]] = []

    def read(self, element: Tag) -> OutlineStyle:
        declarations = parse_style(element.get("style"))
        return OutlineStyle(
            outline=declarations.get("outline", ""),
            offset=declarations.get("outline-offset", ""),
        )

    def write(self, element: Tag, style: OutlineStyle) -> None:
        declarations = parse_style(element.get("style"))
        for name, value in (("outline", style.outline), ("outline-offset", style.offset)):
            if value:
                declarations[name] = value
            else:
                declarations.pop(name, None)

        if declarations:
            element["style"] = format_style(declarations)
        elif element.has_attr("style"):
            del element["style"]

    def scroll_into_view(self, element: Tag) -> None:
        logger.debug("Scroll requested for <%s>", element.name)
        self.scroll_requests.append((element, self.behavior, self.block))
