"""Wardrobe catalog shown next to the canvas."""

from typing import Iterable, List, Optional

from models.taxonomy import validate_category
from models.wardrobe_item import WardrobeItem

# Users upload their own garments; the catalog starts empty.
DEFAULT_WARDROBE: List[WardrobeItem] = []


class Wardrobe:
    """Ordered garment catalog, deduplicated by item id."""

    def __init__(self, items: Iterable[WardrobeItem] | None = None) -> None:
        self._initial: List[WardrobeItem] = list(DEFAULT_WARDROBE if items is None else items)
        self._items: List[WardrobeItem] = []
        self.reset()

    @property
    def items(self) -> List[WardrobeItem]:
        return list(self._items)

    def get(self, item_id: str) -> Optional[WardrobeItem]:
        for item in self._items:
            if item.id == item_id:
                return item
        return None

    def add(self, item: WardrobeItem) -> bool:
        """Append ``item`` unless an item with the same id is present."""

        if self.get(item.id) is not None:
            return False
        self._items.append(item)
        return True

    def register(self, item: WardrobeItem) -> bool:
        """Add a catalog item that also survives ``reset``."""

        if all(existing.id != item.id for existing in self._initial):
            self._initial.append(item)
        return self.add(item)

    def by_category(self, category: str) -> List[WardrobeItem]:
        key = validate_category(category)
        return [item for item in self._items if item.category == key]

    def reset(self) -> None:
        """Drop uploaded garments and restore the starting catalog."""

        self._items = []
        for item in self._initial:
            self.add(item)

    def __len__(self) -> int:
        return len(self._items)


__all__ = ["DEFAULT_WARDROBE", "Wardrobe"]
