"""Tests for the synthetic id side-table."""

from __future__ import annotations

import itertools

from bs4 import BeautifulSoup

from strata.hierarchy.identity import IdentityCache


def _elements(count: int):
    html = "".join("<section></section>" for _ in range(count))
    return BeautifulSoup(html, "html.parser").find_all("section")


class TestIdentityCache:
    """Tests for IdentityCache."""

    def test_generate_id_format(self):
        node_id = IdentityCache.generate_id()
        assert node_id.startswith("sec-")
        assert len(node_id) == len("sec-") + 9

    def test_generated_ids_unique(self):
        ids = {IdentityCache.generate_id() for _ in range(200)}
        assert len(ids) == 200

    def test_assign_is_stable(self):
        cache = IdentityCache()
        element = _elements(1)[0]
        assert cache.assign(element) == cache.assign(element)

    def test_get_unassigned(self):
        assert IdentityCache().get(_elements(1)[0]) is None

    def test_identical_markup_gets_distinct_ids(self):
        """Keys are element identity, not element content."""
        cache = IdentityCache()
        first, second = _elements(2)
        assert cache.assign(first) != cache.assign(second)

    def test_custom_factory(self):
        counter = itertools.count(1)
        cache = IdentityCache(id_factory=lambda: f"n{next(counter)}")
        first, second = _elements(2)
        assert cache.assign(first) == "n1"
        assert cache.assign(second) == "n2"

    def test_retain_evicts_missing(self):
        cache = IdentityCache()
        first, second, third = _elements(3)
        for element in (first, second, third):
            cache.assign(element)

        evicted = cache.retain([first, third])

        assert evicted == 1
        assert len(cache) == 2
        assert second not in cache
        assert first in cache

    def test_retain_empty_clears(self):
        cache = IdentityCache()
        for element in _elements(2):
            cache.assign(element)
        assert cache.retain([]) == 2
        assert len(cache) == 0

    def test_contains_rejects_non_tags(self):
        assert "sec-123" not in IdentityCache()

    def test_clear(self):
        cache = IdentityCache()
        first, second = _elements(2)
        cache.assign(first)
        cache.assign(second)
        cache.clear()
        assert len(cache) == 0
        assert cache.get(first) is None
