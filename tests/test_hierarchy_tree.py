"""Tests for SectionNode and forest helpers."""

from __future__ import annotations

from strata.hierarchy.tree import SectionNode, iter_nodes, max_depth


def _make_forest() -> list[SectionNode]:
    intro = SectionNode(id="intro", label="Intro", section_id="intro", depth=1)
    part = SectionNode(id="sec-abc", label="Part", depth=1)
    child = SectionNode(id="child", label="Child")
    grandchild = SectionNode(id="grand", label="Grand")
    intro.add_child(child)
    child.add_child(grandchild)
    return [intro, part]


class TestSectionNode:
    """Tests for the SectionNode data structure."""

    def test_add_child_sets_depth(self):
        parent = SectionNode(id="p", label="P", depth=2)
        child = SectionNode(id="c", label="C")
        parent.add_child(child)
        assert child.depth == 3
        assert parent.children == [child]

    def test_descendant_count(self):
        assert _make_forest()[0].descendant_count == 2

    def test_to_dict_wire_shape(self):
        data = _make_forest()[0].to_dict()
        assert list(data) == ["id", "type", "sectionId", "label", "children", "depth"]
        assert data["type"] == "section"
        assert data["sectionId"] == "intro"
        assert data["children"][0]["children"][0]["depth"] == 3

    def test_to_dict_omits_missing_section_id(self):
        data = _make_forest()[1].to_dict()
        assert "sectionId" not in data

    def test_to_dict_never_serializes_level(self):
        node = SectionNode(id="x", label="X", level=4, depth=1)
        assert "level" not in node.to_dict()

    def test_layout_kind(self):
        node = SectionNode(id="x", label="X", kind="layout", depth=1)
        assert node.to_dict()["type"] == "layout"


class TestForestHelpers:
    """Tests for walking and searching a forest."""

    def test_iter_nodes_document_order(self):
        ids = [n.id for n in iter_nodes(_make_forest())]
        assert ids == ["intro", "child", "grand", "sec-abc"]

    def test_max_depth(self):
        assert max_depth(_make_forest()) == 3
        assert max_depth([]) == 0
