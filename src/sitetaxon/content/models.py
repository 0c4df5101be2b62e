"""
Record types exchanged with the content store.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


class ContentItem(BaseModel):
    """
    A page, vendor listing or forum category as persisted by the store.

    Attributes:
        id: Opaque identifier assigned by the store; never changes. Integer ids
            are accepted and stored as strings.
        title: Administrator-supplied free text.
        category_name: Name of the owning CategoryDescriptor.
        slug: Identifier derived from ``(category_name, title)``.
        order: Position among siblings in the same category; unset items sort last.
        is_hidden: Excluded from public listings, still visible to administrators.
        extra: Other persisted fields, resent unchanged on every whole-record write.
    """

    id: str
    title: str = ""
    category_name: str = ""
    slug: str = ""
    order: Optional[int] = None
    is_hidden: bool = False
    extra: Dict[str, Any] = Field(default_factory=dict)

    model_config = {
        "frozen": True,
        "extra": "forbid",
    }

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

    def with_order(self, order: Optional[int]) -> "ContentItem":
        return self.model_copy(update={"order": order})
