"""
Strata - document hierarchy inference.

Scans a live HTML document for section-like regions, infers a nested
outline from heading ranks and keeps an external hierarchy viewer in
sync with selection and hover state.
"""

from strata.config import ExtractorConfig
from strata.hierarchy import HierarchyBuilder, HierarchyExtractor, SectionNode

__version__ = "0.1.0"

__all__ = [
    "ExtractorConfig",
    "HierarchyBuilder",
    "HierarchyExtractor",
    "SectionNode",
    "__version__",
]
