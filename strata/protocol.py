"""
Messages exchanged with the hierarchy viewer.

Every message is a JSON object with a ``type`` field. Outbound models
serialize with camelCase aliases; inbound data is validated and anything
unrecognised is dropped.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

if TYPE_CHECKING:
    from strata.hierarchy.tree import SectionNode

logger = logging.getLogger(__name__)


class _Message(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_message(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


# ===================================================================
# Outbound
# ===================================================================


class HierarchyUpdate(_Message):
    """Full replacement outline, roots only."""

    type: Literal["hierarchy-update"] = "hierarchy-update"
    hierarchy: list[dict[str, Any]] = Field(default_factory=list)

    @classmethod
    def from_roots(cls, roots: list[SectionNode]) -> HierarchyUpdate:
        return cls(hierarchy=[root.to_dict() for root in roots])


class SelectionCleared(_Message):
    """The user clicked outside every tracked section."""

    type: Literal["selection-cleared"] = "selection-cleared"


class SectionSelected(_Message):
    """The user clicked inside an identified section."""

    type: Literal["section-selected"] = "section-selected"
    section_id: str = Field(alias="sectionId")


OutboundMessage = Union[HierarchyUpdate, SelectionCleared, SectionSelected]


# ===================================================================
# Inbound
# ===================================================================


class RequestHierarchy(_Message):
    type: Literal["request-hierarchy"]


class ScrollToSection(_Message):
    type: Literal["scroll-to-section"]
    section_id: str | None = Field(default=None, alias="sectionId")


class HighlightSection(_Message):
    type: Literal["highlight-section"]
    section_id: str | None = Field(default=None, alias="sectionId")
    is_hovering: bool = Field(default=False, alias="isHovering")


InboundMessage = Annotated[
    Union[RequestHierarchy, ScrollToSection, HighlightSection],
    Field(discriminator="type"),
]

_inbound_adapter: TypeAdapter[Any] = TypeAdapter(InboundMessage)


def parse_inbound(data: Any) -> RequestHierarchy | ScrollToSection | HighlightSection | None:
    """
    Validate an inbound message.

    Returns:
        The parsed message, or None for empty, unknown or malformed data.
    """
    if not data or not isinstance(data, dict):
        return None
    try:
        return _inbound_adapter.validate_python(data)
    except ValidationError as exc:
        logger.debug("Ignoring inbound message %r: %s", data.get("type"), exc)
        return None
