"""Model package exports."""

from models.taxonomy import *  # noqa: F401,F403
from models.outfit_layer import AppStateSnapshot, OutfitLayer
from models.wardrobe import Wardrobe
from models.wardrobe_item import WardrobeItem, from_raw_metadata

__all__ = ["AppStateSnapshot", "OutfitLayer", "Wardrobe", "WardrobeItem", "from_raw_metadata"]
