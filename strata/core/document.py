"""
Live HTML document backed by BeautifulSoup.

This is the query layer the hierarchy extractor reads from. Structural
edits go through ``append_html`` and ``remove`` so that subscribers on
``mutations`` hear about them; clicks are reported through ``click``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from bs4 import BeautifulSoup, Tag

from strata.core.events import ChangeFeed, ClickEvent, MutationRecord


class DocumentError(Exception):
    """Raised when a document cannot be loaded."""

    def __init__(self, message: str, source_path: Path | None = None, details: str | None = None):
        self.source_path = source_path
        self.details = details
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": str(self),
            "source_path": str(self.source_path) if self.source_path else None,
            "details": self.details,
        }


class HtmlDocument:
    """
    A mutable HTML document.

    Readers should check ``is_detached`` before querying: a detached
    document has been torn down and its contents are no longer live.
    """

    SUPPORTED_EXTENSIONS = [".html", ".htm"]

    def __init__(self, html: str = "", parser: str = "html.parser") -> None:
        self._parser = parser
        self.soup = BeautifulSoup(html, parser)
        self.mutations: ChangeFeed[MutationRecord] = ChangeFeed()
        self.clicks: ChangeFeed[ClickEvent] = ChangeFeed()
        self._detached = False

    @classmethod
    def from_path(cls, path: Path, parser: str = "html.parser") -> HtmlDocument:
        """Load a document from an HTML file on disk."""
        if not path.exists():
            raise DocumentError(f"File not found: {path}", source_path=path)

        if path.suffix.lower() not in cls.SUPPORTED_EXTENSIONS:
            raise DocumentError(
                f"Unsupported file type: {path.suffix}",
                source_path=path,
                details=f"Supported types: {', '.join(cls.SUPPORTED_EXTENSIONS)}",
            )

        try:
            html = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise DocumentError(
                f"Could not read {path.name}", source_path=path, details=str(exc)
            ) from exc

        return cls(html, parser=parser)

    @property
    def body(self) -> Tag:
        """The ``<body>`` element, or the whole tree for fragments."""
        return self.soup.body or self.soup

    @property
    def is_detached(self) -> bool:
        return self._detached

    def detach(self) -> None:
        """Mark the document as torn down."""
        self._detached = True

    def select(self, selector: str) -> list[Tag]:
        """All elements matching a CSS selector, in document order."""
        return self.soup.select(selector)

    def find_by_attribute(self, name: str, value: str) -> Tag | None:
        """First element whose attribute ``name`` equals ``value``."""
        return self.soup.find(attrs={name: value})

    def append_html(self, html: str, parent: Tag | None = None) -> list[Tag]:
        """
        Parse ``html`` and append it to ``parent`` (default: body).

        Returns:
            The top-level elements that were added.
        """
        fragment = BeautifulSoup(html, self._parser)
        target = parent if parent is not None else self.body

        added: list[Tag] = []
        for child in list(fragment.contents):
            node = child.extract()
            target.append(node)
            if isinstance(node, Tag):
                added.append(node)

        if added:
            self.mutations.publish(MutationRecord(added=added))
        return added

    def remove(self, element: Tag) -> None:
        """Detach ``element`` from the tree."""
        element.extract()
        self.mutations.publish(MutationRecord(removed=[element]))

    def click(self, target: Tag | None = None) -> None:
        """Report a click on ``target`` (None means the page background)."""
        self.clicks.publish(ClickEvent(target=target))

    def __str__(self) -> str:
        return str(self.soup)
