"""
Hierarchy extractor.

Scans the live document for sections, assembles the outline and pushes
it to a listener. Also keeps the outline fresh (delayed initial scans
plus a debounced rescan on mutations) and answers selection and hover
commands from the hierarchy viewer.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from itertools import chain
from typing import Any

from bs4 import Tag

from strata.config import ExtractorConfig
from strata.core.document import HtmlDocument
from strata.core.events import ClickEvent, MutationRecord
from strata.hierarchy.builder import HierarchyBuilder
from strata.hierarchy.identity import IdentityCache
from strata.hierarchy.levels import existing_node_id, infer_levels
from strata.hierarchy.selection import SelectionTracker
from strata.hierarchy.tree import SectionNode
from strata.presentation import PresentationIntent, Presenter
from strata.protocol import (
    HierarchyUpdate,
    HighlightSection,
    OutboundMessage,
    RequestHierarchy,
    ScrollToSection,
    SectionSelected,
    SelectionCleared,
    parse_inbound,
)

logger = logging.getLogger(__name__)

Listener = Callable[[dict[str, Any]], None]


class HierarchyExtractor:
    """
    Infers a section outline from a live document.

    Usage::

        extractor = HierarchyExtractor(document, listener)
        extractor.mount()          # inside a running event loop
        extractor.handle_message({"type": "request-hierarchy"})
        extractor.unmount()

    All work runs on the event loop thread; nothing here blocks.
    """

    def __init__(
        self,
        document: HtmlDocument,
        listener: Listener,
        config: ExtractorConfig | None = None,
        presenter: Presenter | None = None,
        on_intent: Callable[[PresentationIntent], None] | None = None,
        identity: IdentityCache | None = None,
    ) -> None:
        self.document = document
        self.config = config or ExtractorConfig()
        self.identity = identity if identity is not None else IdentityCache()
        self.selection = SelectionTracker(presenter=presenter, on_intent=on_intent)
        self.scan_count = 0

        self._listener = listener
        self._loop: asyncio.AbstractEventLoop | None = None
        self._initial_timers: list[asyncio.TimerHandle] = []
        self._debounce_timer: asyncio.TimerHandle | None = None
        self._unsubscribers: list[Callable[[], None]] = []
        self._mounted = False

    # ------------------------------------------------------------------
    # Scanning
    # ------------------------------------------------------------------

    def candidates(self) -> list[Tag]:
        """Section-like elements in document order, minus ignored subtrees."""
        elements = self.document.select(self.config.candidate_selector)
        return [element for element in elements if not self._is_ignored(element)]

    def _is_ignored(self, element: Tag) -> bool:
        for node in chain([element], element.parents):
            if self.config.ignore_class in (node.get("class") or []):
                return True
            if node.has_attr(self.config.ignore_attribute):
                return True
        return False

    def scan(self) -> list[SectionNode]:
        """
        Rebuild the outline and emit ``hierarchy-update``.

        An empty document is a valid state and is reported as an empty
        hierarchy. Scans against a detached document are skipped.

        Returns:
            Root nodes of the outline.
        """
        if self.document.is_detached:
            logger.debug("Skipping scan of detached document")
            return []

        self.scan_count += 1
        candidates = self.candidates()

        if not candidates:
            self.identity.retain([])
            self._emit(HierarchyUpdate())
            return []

        nodes = infer_levels(candidates, self.config, self.identity)
        evicted = self.identity.retain(candidates)
        roots = HierarchyBuilder.build(nodes)

        logger.debug(
            "Scan %d: %d candidates, %d roots, %d cached ids evicted",
            self.scan_count,
            len(candidates),
            len(roots),
            evicted,
        )
        self._emit(HierarchyUpdate.from_roots(roots))
        return roots

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    @property
    def has_pending_scan(self) -> bool:
        return self._debounce_timer is not None

    def mount(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        """
        Schedule the initial scans and start listening to the document.

        Must be called from the loop thread; without ``loop`` the running
        loop is used.
        """
        if self._mounted:
            return

        self._loop = loop or asyncio.get_running_loop()
        self._initial_timers = [
            self._loop.call_later(delay, self._scheduled_scan)
            for delay in self.config.initial_delays
        ]
        self._unsubscribers = [
            self.document.mutations.subscribe(self._on_mutation),
            self.document.clicks.subscribe(self.handle_click),
        ]
        self._mounted = True
        logger.debug("Mounted with %d initial scans", len(self._initial_timers))

    def unmount(self) -> None:
        """
        Stop listening and cancel every pending timer.

        Outlines this extractor drew are restored first, since other
        extractors may keep presenting the same document.
        """
        self.selection.reset()

        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []

        for timer in self._initial_timers:
            timer.cancel()
        self._initial_timers = []

        if self._debounce_timer is not None:
            self._debounce_timer.cancel()
            self._debounce_timer = None

        self._mounted = False
        self._loop = None

    def attach(self, document: HtmlDocument) -> list[SectionNode]:
        """
        Switch to a replacement document and rescan it.

        A mounted extractor is remounted on the new document, so its
        initial scans are scheduled again.

        Returns:
            Root nodes of the new outline.
        """
        loop = self._loop
        was_mounted = self._mounted
        self.unmount()

        self.document = document
        if was_mounted:
            self.mount(loop)
        return self.scan()

    def _on_mutation(self, record: MutationRecord) -> None:
        if not self._mounted or self._loop is None or record.is_empty:
            return

        # Restart the quiet period; at most one scan is ever pending
        if self._debounce_timer is not None:
            self._debounce_timer.cancel()
        self._debounce_timer = self._loop.call_later(
            self.config.debounce_delay, self._debounced_scan
        )

    def _debounced_scan(self) -> None:
        self._debounce_timer = None
        self._scheduled_scan()

    def _scheduled_scan(self) -> None:
        if not self._mounted:
            logger.debug("Skipping scan after teardown")
            return
        self.scan()

    # ------------------------------------------------------------------
    # Inbound commands
    # ------------------------------------------------------------------

    def handle_message(self, data: Any) -> None:
        """Dispatch one message from the hierarchy viewer."""
        message = parse_inbound(data)
        if message is None:
            return

        if isinstance(message, RequestHierarchy):
            self.scan()
        elif isinstance(message, ScrollToSection):
            self.scroll_to_section(message.section_id)
        elif isinstance(message, HighlightSection):
            self.highlight_section(message.section_id, message.is_hovering)

    def find_section(self, section_id: str) -> Tag | None:
        """
        Element for a viewer-supplied identifier.

        Explicit section ids are matched first, then native and synthetic
        node ids of current candidates.
        """
        element = self.document.find_by_attribute(self.config.section_id_attribute, section_id)
        if element is not None:
            return element

        for candidate in self.candidates():
            if existing_node_id(candidate, self.config, self.identity) == section_id:
                return candidate
        return None

    def _node_id(self, element: Tag) -> str:
        return existing_node_id(element, self.config, self.identity) or ""

    def scroll_to_section(self, section_id: str | None) -> bool:
        """
        Clear the current selection, then select ``section_id``.

        Returns:
            True if a section was found and selected.
        """
        self.selection.clear_selection()
        if not section_id:
            return False

        element = self.find_section(section_id)
        if element is None:
            logger.debug("scroll-to-section: no section %r", section_id)
            return False

        self.selection.select(element, self._node_id(element))
        return True

    def highlight_section(self, section_id: str | None, is_hovering: bool) -> bool:
        """
        Move the hover treatment to ``section_id``.

        Returns:
            True if the section is now shown as hovered.
        """
        self.selection.clear_hover()
        if not is_hovering or not section_id:
            return False

        element = self.find_section(section_id)
        if element is None:
            return False
        return self.selection.hover(element, self._node_id(element))

    def handle_click(self, event: ClickEvent) -> None:
        """Clear the selection on clicks outside every section."""
        target = event.target
        if target is None or self._closest(target, self._is_section_like) is None:
            self.selection.clear_selection()
            self._emit(SelectionCleared())
            return

        if not self.config.report_section_clicks:
            return

        if self._closest(target, lambda node: node.name == "button") is not None:
            return

        attribute = self.config.section_id_attribute
        owner = self._closest(target, lambda node: node.has_attr(attribute))
        if owner is not None and owner.get(attribute):
            self._emit(SectionSelected(section_id=owner[attribute]))

    def _is_section_like(self, node: Tag) -> bool:
        return node.name == self.config.section_tag or node.has_attr(
            self.config.section_id_attribute
        )

    @staticmethod
    def _closest(element: Tag, predicate: Callable[[Tag], bool]) -> Tag | None:
        for node in chain([element], element.parents):
            if predicate(node):
                return node
        return None

    def _emit(self, message: OutboundMessage) -> None:
        self._listener(message.to_message())
