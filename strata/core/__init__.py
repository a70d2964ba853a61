"""Document query layer and change feeds."""

from strata.core.document import DocumentError, HtmlDocument
from strata.core.events import ChangeFeed, ClickEvent, MutationRecord

__all__ = [
    "ChangeFeed",
    "ClickEvent",
    "DocumentError",
    "HtmlDocument",
    "MutationRecord",
]
