"""
Hierarchy module - infers the section outline of a live document.

Level inference turns section candidates into leveled nodes, the builder
assembles them into a forest and the extractor keeps a viewer in sync.
"""

from strata.hierarchy.builder import HierarchyBuilder
from strata.hierarchy.extractor import HierarchyExtractor
from strata.hierarchy.identity import IdentityCache
from strata.hierarchy.selection import SelectionTracker
from strata.hierarchy.tree import SectionNode

__all__ = [
    "SectionNode",
    "HierarchyBuilder",
    "HierarchyExtractor",
    "IdentityCache",
    "SelectionTracker",
]
