"""Wardrobe item data model and helpers."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict

from models.taxonomy import validate_category


@dataclass(frozen=True)
class WardrobeItem:
    """A garment the subject can try on.

    Items are immutable once created and identified by ``id``. ``url`` is
    either an inline ``data:`` image reference (uploads) or an HTTP(S) URL
    (catalog entries).
    """

    id: str
    name: str
    url: str
    category: str

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("WardrobeItem requires a non-empty id")
        object.__setattr__(self, "category", validate_category(self.category))


def from_raw_metadata(metadata: Dict[str, Any]) -> WardrobeItem:
    """Factory to build a :class:`WardrobeItem` from loose request metadata."""

    required_fields = ["id", "name", "url", "category"]
    missing = [field for field in required_fields if not metadata.get(field)]
    if missing:
        raise ValueError(f"Missing required fields for WardrobeItem: {missing}")

    return WardrobeItem(
        id=str(metadata["id"]),
        name=str(metadata["name"]),
        url=str(metadata["url"]),
        category=str(metadata["category"]),
    )


def new_custom_item(name: str, url: str, category: str, now: float | None = None) -> WardrobeItem:
    """Build the item for a garment the user uploaded themselves."""

    millis = int((time.time() if now is None else now) * 1000)
    return WardrobeItem(id=f"custom-{millis}", name=name, url=url, category=category)


__all__ = ["WardrobeItem", "from_raw_metadata", "new_custom_item"]
