"""
Selection and hover bookkeeping.

Selection always wins over hover: a selected element is never given the
hover treatment, and selecting an element drops its hover marking. Each
marked element keeps a snapshot of its style from before we touched it
so that clearing restores it exactly.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from bs4 import Tag

from strata.presentation import (
    HOVER_STYLE,
    NEUTRAL_STYLE,
    SELECTED_STYLE,
    InlineStylePresenter,
    OutlineStyle,
    PresentationIntent,
    PresentationState,
    Presenter,
)


@dataclass
class MarkedElement:
    """An element we have restyled, with its pre-highlight style."""

    element: Tag
    node_id: str
    snapshot: OutlineStyle


class SelectionTracker:
    """Tracks selected and hovered sections and drives the presenter."""

    def __init__(
        self,
        presenter: Presenter | None = None,
        on_intent: Callable[[PresentationIntent], None] | None = None,
        selected_style: OutlineStyle = SELECTED_STYLE,
        hover_style: OutlineStyle = HOVER_STYLE,
    ) -> None:
        self.presenter = presenter or InlineStylePresenter()
        self.selected_style = selected_style
        self.hover_style = hover_style
        self._on_intent = on_intent
        self._selected: dict[int, MarkedElement] = {}
        self._hovered: dict[int, MarkedElement] = {}

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_selected(self, element: Tag) -> bool:
        return id(element) in self._selected

    def is_hovered(self, element: Tag) -> bool:
        return id(element) in self._hovered

    @property
    def selected_ids(self) -> list[str]:
        return [mark.node_id for mark in self._selected.values()]

    @property
    def hovered_ids(self) -> list[str]:
        return [mark.node_id for mark in self._hovered.values()]

    # ------------------------------------------------------------------
    # Selection
    # ------------------------------------------------------------------

    def select(self, element: Tag, node_id: str) -> None:
        """Scroll ``element`` into view and mark it selected."""
        self.presenter.scroll_into_view(element)

        key = id(element)
        hovered = self._hovered.pop(key, None)
        if key not in self._selected:
            if hovered is not None:
                snapshot = hovered.snapshot
            else:
                current = self.presenter.read(element)
                # Never persist our own transient hover as the original style
                snapshot = NEUTRAL_STYLE if current == self.hover_style else current
            self._selected[key] = MarkedElement(element, node_id, snapshot)

        self.presenter.write(element, self.selected_style)
        self._emit(node_id, PresentationState.SELECTED)

    def clear_selection(self) -> int:
        """
        Restore every selected element to its snapshot.

        Returns:
            Number of elements that were selected.
        """
        marks = list(self._selected.values())
        self._selected.clear()
        for mark in marks:
            self.presenter.write(mark.element, mark.snapshot)
            self._emit(mark.node_id, PresentationState.NONE)
        return len(marks)

    # ------------------------------------------------------------------
    # Hover
    # ------------------------------------------------------------------

    def hover(self, element: Tag, node_id: str) -> bool:
        """
        Apply the hover treatment unless ``element`` is selected.

        Returns:
            True if the element is now shown as hovered.
        """
        key = id(element)
        if key in self._selected:
            return False

        if key not in self._hovered:
            self._hovered[key] = MarkedElement(element, node_id, self.presenter.read(element))

        self.presenter.write(element, self.hover_style)
        self._emit(node_id, PresentationState.HOVERED)
        return True

    def clear_hover(self) -> int:
        """Remove the hover treatment from every element that is not selected."""
        marks = [
            mark for key, mark in self._hovered.items() if key not in self._selected
        ]
        self._hovered.clear()
        for mark in marks:
            self.presenter.write(mark.element, mark.snapshot)
            self._emit(mark.node_id, PresentationState.NONE)
        return len(marks)

    def reset(self) -> None:
        """Restore all marked elements and forget them."""
        self.clear_hover()
        self.clear_selection()

    def _emit(self, node_id: str, state: PresentationState) -> None:
        if self._on_intent is not None:
            self._on_intent(PresentationIntent(node_id=node_id, state=state))
