"""Projections and pure reducers over the outfit history.

Every reducer takes the previous :class:`AppStateSnapshot` and returns the
next one. They never touch the layers they were given, which is what lets
the undo stack keep earlier snapshots verbatim.
"""
from __future__ import annotations

from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from models.outfit_layer import (
    AppStateSnapshot,
    ImageRef,
    OutfitLayer,
    create_garment_layer,
    default_pose_image,
    first_pose_image,
    with_background_image,
    with_lighting_image,
    with_pose_image,
    with_replaced_base,
)
from models.taxonomy import DEFAULT_MODIFIER, DEFAULT_POSE, POSE_INSTRUCTIONS
from models.wardrobe_item import WardrobeItem


def active_layers(history: Sequence[OutfitLayer], current_index: int) -> List[OutfitLayer]:
    """Layers from the base up to and including the cursor."""

    return list(history[: current_index + 1])


def active_garment_ids(history: Sequence[OutfitLayer], current_index: int) -> List[str]:
    return [layer.garment.id for layer in active_layers(history, current_index) if layer.garment]


def current_layer(history: Sequence[OutfitLayer], current_index: int) -> Optional[OutfitLayer]:
    if 0 <= current_index < len(history):
        return history[current_index]
    return None


def available_pose_keys(history: Sequence[OutfitLayer], current_index: int) -> List[str]:
    layer = current_layer(history, current_index)
    return list(layer.pose_images) if layer else []


def display_image(
    history: Sequence[OutfitLayer],
    current_index: int,
    pose_index: int,
    active_background: str,
    active_lighting: str,
) -> Optional[ImageRef]:
    """Derive the image on the canvas.

    Lighting wins over background and both win over the plain pose variant.
    A pose that was never generated for the layer falls back to the first
    generated one.
    """

    if not history:
        return None
    layer = current_layer(history, current_index)
    if layer is None:
        return None

    pose = POSE_INSTRUCTIONS[pose_index]
    if active_lighting != DEFAULT_MODIFIER and pose in layer.lighting_images:
        return layer.lighting_images[pose]
    if active_background != DEFAULT_MODIFIER and pose in layer.background_images:
        return layer.background_images[pose]
    return layer.pose_images.get(pose) or first_pose_image(layer)


def snapshot_display_image(snapshot: AppStateSnapshot) -> Optional[ImageRef]:
    return display_image(
        snapshot.outfit_history,
        snapshot.current_outfit_index,
        snapshot.current_pose_index,
        snapshot.active_background,
        snapshot.active_lighting,
    )


def lookbook_images(snapshot: AppStateSnapshot) -> List[ImageRef]:
    """Default-pose image of every active layer, in stack order."""

    return [
        default_pose_image(layer)
        for layer in active_layers(snapshot.outfit_history, snapshot.current_outfit_index)
    ]


def dormant_layer_matches(snapshot: AppStateSnapshot, garment_id: str) -> bool:
    """True when the layer just ahead of the cursor was built from ``garment_id``."""

    next_index = snapshot.current_outfit_index + 1
    if next_index >= len(snapshot.outfit_history):
        return False
    return snapshot.outfit_history[next_index].garment_id == garment_id


def _reset_view(snapshot: AppStateSnapshot, **changes) -> AppStateSnapshot:
    return replace(
        snapshot,
        current_pose_index=0,
        active_background=DEFAULT_MODIFIER,
        active_lighting=DEFAULT_MODIFIER,
        **changes,
    )


def _replace_at(
    history: Tuple[OutfitLayer, ...], index: int, layer: OutfitLayer
) -> Tuple[OutfitLayer, ...]:
    return history[:index] + (layer,) + history[index + 1 :]


def advance_to_dormant_layer(snapshot: AppStateSnapshot) -> AppStateSnapshot:
    return _reset_view(snapshot, current_outfit_index=snapshot.current_outfit_index + 1)


def append_garment_layer(
    snapshot: AppStateSnapshot, garment: WardrobeItem, image: ImageRef
) -> AppStateSnapshot:
    """Drop any dormant layers and stack a freshly generated garment layer."""

    kept = snapshot.outfit_history[: snapshot.current_outfit_index + 1]
    return _reset_view(
        snapshot,
        outfit_history=kept + (create_garment_layer(garment, image),),
        current_outfit_index=len(kept),
    )


def revert_to_layer(snapshot: AppStateSnapshot, index: int) -> AppStateSnapshot:
    """Remove the layer at ``index`` and everything stacked on it."""

    return _reset_view(
        snapshot,
        outfit_history=snapshot.outfit_history[:index],
        current_outfit_index=index - 1,
    )


def switch_pose(snapshot: AppStateSnapshot, pose_index: int) -> AppStateSnapshot:
    return replace(
        snapshot,
        current_pose_index=pose_index,
        active_background=DEFAULT_MODIFIER,
        active_lighting=DEFAULT_MODIFIER,
    )


def store_pose_image(
    snapshot: AppStateSnapshot, pose_index: int, image: ImageRef
) -> AppStateSnapshot:
    index = snapshot.current_outfit_index
    layer = with_pose_image(snapshot.outfit_history[index], POSE_INSTRUCTIONS[pose_index], image)
    return switch_pose(
        replace(snapshot, outfit_history=_replace_at(snapshot.outfit_history, index, layer)),
        pose_index,
    )


def replace_layer_base(snapshot: AppStateSnapshot, index: int, image: ImageRef) -> AppStateSnapshot:
    """Rewrite layer ``index`` and discard every layer built on top of it."""

    edited = with_replaced_base(snapshot.outfit_history[index], image, DEFAULT_POSE)
    return _reset_view(
        snapshot,
        outfit_history=snapshot.outfit_history[:index] + (edited,),
        current_outfit_index=index,
    )


def crop_current_layer(snapshot: AppStateSnapshot, image: ImageRef) -> AppStateSnapshot:
    """Swap the current layer's visual in place, leaving later layers alone."""

    index = snapshot.current_outfit_index
    pose = POSE_INSTRUCTIONS[snapshot.current_pose_index]
    edited = with_replaced_base(snapshot.outfit_history[index], image, pose)
    return replace(
        snapshot,
        outfit_history=_replace_at(snapshot.outfit_history, index, edited),
        active_background=DEFAULT_MODIFIER,
        active_lighting=DEFAULT_MODIFIER,
    )


def store_background_image(
    snapshot: AppStateSnapshot, prompt: str, image: ImageRef
) -> AppStateSnapshot:
    index = snapshot.current_outfit_index
    pose = POSE_INSTRUCTIONS[snapshot.current_pose_index]
    layer = with_background_image(snapshot.outfit_history[index], pose, image)
    return replace(
        snapshot,
        outfit_history=_replace_at(snapshot.outfit_history, index, layer),
        active_background=prompt,
        active_lighting=DEFAULT_MODIFIER,
    )


def store_lighting_image(
    snapshot: AppStateSnapshot, prompt: str, image: ImageRef
) -> AppStateSnapshot:
    index = snapshot.current_outfit_index
    pose = POSE_INSTRUCTIONS[snapshot.current_pose_index]
    layer = with_lighting_image(snapshot.outfit_history[index], pose, image)
    return replace(
        snapshot,
        outfit_history=_replace_at(snapshot.outfit_history, index, layer),
        active_lighting=prompt,
        active_background=DEFAULT_MODIFIER,
    )


def reset_background(snapshot: AppStateSnapshot) -> AppStateSnapshot:
    return replace(snapshot, active_background=DEFAULT_MODIFIER)


def reset_lighting(snapshot: AppStateSnapshot) -> AppStateSnapshot:
    return replace(snapshot, active_lighting=DEFAULT_MODIFIER)


__all__ = [
    "active_layers",
    "active_garment_ids",
    "current_layer",
    "available_pose_keys",
    "display_image",
    "snapshot_display_image",
    "lookbook_images",
    "dormant_layer_matches",
    "advance_to_dormant_layer",
    "append_garment_layer",
    "revert_to_layer",
    "switch_pose",
    "store_pose_image",
    "replace_layer_base",
    "crop_current_layer",
    "store_background_image",
    "store_lighting_image",
    "reset_background",
    "reset_lighting",
]
