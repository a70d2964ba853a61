"""
Pytest configuration and fixtures for Strata tests.
"""

from __future__ import annotations

from typing import Any

import pytest

from strata.config import ExtractorConfig
from strata.core.document import HtmlDocument
from strata.hierarchy import HierarchyExtractor


class Recorder:
    """Listener that keeps every outbound message."""

    def __init__(self) -> None:
        self.messages: list[dict[str, Any]] = []

    def __call__(self, message: dict[str, Any]) -> None:
        self.messages.append(message)

    def of_type(self, message_type: str) -> list[dict[str, Any]]:
        return [m for m in self.messages if m["type"] == message_type]

    @property
    def last(self) -> dict[str, Any]:
        return self.messages[-1]


SAMPLE_HTML = """
<html>
  <body>
    <section data-section-id="intro"><h1>Introduction</h1><p>Welcome.</p></section>
    <section data-section-id="basics"><h2>Basics</h2><p>Some basics.</p></section>
    <section data-section-id="basics-body"><p>Body text under basics.</p></section>
    <section data-section-id="details"><h2>Details</h2></section>
    <section data-section-id="deep"><h3>Deep dive</h3></section>
    <section data-section-id="summary"><h1>Summary</h1></section>
  </body>
</html>
"""


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def sample_document() -> HtmlDocument:
    return HtmlDocument(SAMPLE_HTML)


@pytest.fixture
def make_extractor(recorder: Recorder):
    """Build an extractor over ``html`` that reports to ``recorder``."""

    def factory(html: str, **config_overrides: Any) -> HierarchyExtractor:
        config = ExtractorConfig(**config_overrides)
        return HierarchyExtractor(HtmlDocument(html), recorder, config=config)

    return factory
