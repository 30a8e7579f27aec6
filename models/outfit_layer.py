"""Outfit layer and snapshot schemas.

Layers and snapshots are frozen and every helper below returns a new value,
so a snapshot sitting on the undo stack never observes later edits.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Tuple

from models.taxonomy import DEFAULT_MODIFIER, DEFAULT_POSE
from models.wardrobe_item import WardrobeItem

ImageRef = str


@dataclass(frozen=True)
class OutfitLayer:
    """One state of what the subject is wearing.

    ``pose_images`` always holds at least the variant generated when the layer
    was created. The modifier caches only hold (pose, modifier) results that
    were explicitly generated for the current base image.
    """

    garment: Optional[WardrobeItem]
    pose_images: Dict[str, ImageRef]
    background_images: Dict[str, ImageRef] = field(default_factory=dict)
    lighting_images: Dict[str, ImageRef] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.pose_images:
            raise ValueError("OutfitLayer requires at least one pose image")

    @property
    def garment_id(self) -> Optional[str]:
        return self.garment.id if self.garment else None


@dataclass(frozen=True)
class AppStateSnapshot:
    """The unit of undo/redo."""

    outfit_history: Tuple[OutfitLayer, ...] = ()
    current_outfit_index: int = 0
    current_pose_index: int = 0
    active_background: str = DEFAULT_MODIFIER
    active_lighting: str = DEFAULT_MODIFIER


def create_base_layer(image: ImageRef) -> OutfitLayer:
    return OutfitLayer(garment=None, pose_images={DEFAULT_POSE: image})


def create_garment_layer(garment: WardrobeItem, image: ImageRef) -> OutfitLayer:
    return OutfitLayer(garment=garment, pose_images={DEFAULT_POSE: image})


def with_pose_image(layer: OutfitLayer, pose: str, image: ImageRef) -> OutfitLayer:
    """Add or overwrite one pose variant; modifier caches of other poses stay valid."""

    return replace(
        layer,
        pose_images={**layer.pose_images, pose: image},
        background_images=dict(layer.background_images),
        lighting_images=dict(layer.lighting_images),
    )


def with_replaced_base(layer: OutfitLayer, image: ImageRef, pose: str) -> OutfitLayer:
    """Swap the base image, discarding every variant derived from the old one."""

    return replace(layer, pose_images={pose: image}, background_images={}, lighting_images={})


def with_background_image(layer: OutfitLayer, pose: str, image: ImageRef) -> OutfitLayer:
    return replace(
        layer,
        pose_images=dict(layer.pose_images),
        background_images={**layer.background_images, pose: image},
        lighting_images=dict(layer.lighting_images),
    )


def with_lighting_image(layer: OutfitLayer, pose: str, image: ImageRef) -> OutfitLayer:
    return replace(
        layer,
        pose_images=dict(layer.pose_images),
        background_images=dict(layer.background_images),
        lighting_images={**layer.lighting_images, pose: image},
    )


def first_pose_image(layer: OutfitLayer) -> ImageRef:
    """Return the earliest generated pose variant."""

    return next(iter(layer.pose_images.values()))


def default_pose_image(layer: OutfitLayer) -> ImageRef:
    return layer.pose_images.get(DEFAULT_POSE) or first_pose_image(layer)


__all__ = [
    "ImageRef",
    "OutfitLayer",
    "AppStateSnapshot",
    "create_base_layer",
    "create_garment_layer",
    "with_pose_image",
    "with_replaced_base",
    "with_background_image",
    "with_lighting_image",
    "first_pose_image",
    "default_pose_image",
]
