"""Edit orchestrator: every user action on the dressing room canvas.

Each mutating action checks the busy flag, looks for a cached result in the
outfit history, calls the image generator on a miss and folds the result back
through :class:`SnapshotHistory` so a single undo reverses it.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Any, Awaitable, Callable, Dict, Optional

from dressing_room.logging_config import get_logger, log_event, operation_context
from logic import outfit_history as oh
from logic.error_messages import get_friendly_error_message
from memory.undo_history import SnapshotHistory
from models.locales import translate
from models.outfit_layer import (
    AppStateSnapshot,
    ImageRef,
    create_base_layer,
    default_pose_image,
    first_pose_image,
)
from models.taxonomy import (
    BACKGROUND_OPTIONS,
    DEFAULT_MODIFIER,
    LIGHTING_OPTIONS,
    POSE_INSTRUCTIONS,
    background_instruction,
    lookbook_instruction,
    pose_key,
)
from models.wardrobe import Wardrobe
from models.wardrobe_item import WardrobeItem, new_custom_item
from tools.image_generator import GenerationError, ImageGenerator
from tools.image_io import (
    CropRect,
    GarmentFetchError,
    ImageReferenceError,
    crop_image,
    ensure_image_ref,
    load_image_ref,
)

LOGGER = get_logger(__name__)

ImageLoader = Callable[[str], ImageRef]


class PreconditionMissingError(Exception):
    """An exact-pose operation found no cached base image to work from."""


class EditOrchestrator:
    """Owns one user's session state and runs every edit against it.

    Only one generation can be in flight. While ``is_loading`` is set every
    other mutating request is ignored rather than queued, and there is no way
    to cancel the outstanding one.
    """

    def __init__(
        self,
        generator: ImageGenerator,
        language: str = "EN",
        wardrobe: Wardrobe | None = None,
        image_loader: ImageLoader | None = None,
    ) -> None:
        self.generator = generator
        self.language = language
        self.wardrobe = wardrobe if wardrobe is not None else Wardrobe()
        self.image_loader = image_loader or load_image_ref
        self.history = SnapshotHistory()
        self.is_loading = False
        self.loading_message = ""
        self.last_error: Optional[str] = None
        self.model_image: Optional[ImageRef] = None
        self.source_image: Optional[ImageRef] = None
        self.pending_model_image: Optional[ImageRef] = None
        self.lookbook_image: Optional[ImageRef] = None
        # Bumped by start_over; generations begun under an older session are discarded.
        self._session = 0

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------
    @property
    def snapshot(self) -> AppStateSnapshot:
        return self.history.current

    @property
    def display_image(self) -> Optional[ImageRef]:
        return oh.snapshot_display_image(self.snapshot)

    @property
    def active_garment_ids(self) -> list[str]:
        return oh.active_garment_ids(self.snapshot.outfit_history, self.snapshot.current_outfit_index)

    def _t(self, key: str) -> str:
        return translate(key, self.language)

    def _ignored_while_busy(self, operation: str) -> bool:
        if not self.is_loading:
            return False
        log_event(LOGGER, logging.INFO, "edit_ignored_busy", operation=operation)
        return True

    def _fail(self, operation: str, error_key: str, error: object) -> None:
        self.last_error = get_friendly_error_message(error, self._t(error_key), self.language)
        log_event(
            LOGGER,
            logging.WARNING,
            "edit_failed",
            operation=operation,
            error_type=type(error).__name__,
            error=str(error),
        )

    def _commit(self, operation: str, reducer, base: AppStateSnapshot | None = None) -> None:
        snapshot = self.history.update_with_history(reducer, base=base)
        log_event(
            LOGGER,
            logging.INFO,
            "edit_committed",
            operation=operation,
            outfit_index=snapshot.current_outfit_index,
            pose_index=snapshot.current_pose_index,
            layer_count=len(snapshot.outfit_history),
        )

    async def _run_generation(
        self,
        operation: str,
        label: str,
        error_key: str,
        call: Callable[[], Awaitable[ImageRef]],
    ) -> Optional[ImageRef]:
        """Run one generator call under the busy flag.

        Returns the generated image, or ``None`` after recording a friendly
        error. State is never touched here; callers commit on success. A
        result that arrives after :meth:`start_over` is dropped and leaves the
        new session's busy flag and error alone.
        """

        session = self._session
        self.last_error = None
        self.is_loading = True
        self.loading_message = label
        result: Optional[ImageRef] = None
        with operation_context(f"edit:{operation}"):
            try:
                result = await call()
            except (GenerationError, ImageReferenceError) as exc:
                if not self._is_stale(session):
                    self._fail(operation, error_key, exc)
            finally:
                if not self._is_stale(session):
                    self.is_loading = False
                    self.loading_message = ""
        if self._is_stale(session):
            log_event(LOGGER, logging.INFO, "edit_discarded_after_reset", operation=operation)
            return None
        return result

    def _is_stale(self, session: int) -> bool:
        return session != self._session

    # ------------------------------------------------------------------
    # Start screen
    # ------------------------------------------------------------------
    async def generate_model(self, source_image: ImageRef) -> Optional[ImageRef]:
        """Render the uploaded photo as a model; the user still has to confirm it."""

        if self._ignored_while_busy("generate_model"):
            return None
        try:
            ensure_image_ref(source_image)
        except ImageReferenceError:
            self.last_error = self._t("start.error.fileType")
            return None

        session = self._session
        self.source_image = source_image
        self.pending_model_image = None
        result = await self._run_generation(
            "generate_model",
            self._t("start.compare.generating"),
            "start.error.createModel",
            lambda: self.generator.generate_subject_model(source_image),
        )
        if self._is_stale(session):
            return None
        self.pending_model_image = result
        return result

    def finalize_model(self, image: ImageRef | None = None) -> bool:
        """Install the confirmed model as the base layer of a fresh history."""

        if self._ignored_while_busy("finalize_model"):
            return False
        model_image = image or self.pending_model_image
        if not model_image:
            return False
        self.model_image = model_image
        self.history.reset(AppStateSnapshot(outfit_history=(create_base_layer(model_image),)))
        log_event(LOGGER, logging.INFO, "model_finalized")
        return True

    def start_over(self) -> None:
        self._session += 1
        self.history.reset()
        self.wardrobe.reset()
        self.is_loading = False
        self.loading_message = ""
        self.last_error = None
        self.model_image = None
        self.source_image = None
        self.pending_model_image = None
        self.lookbook_image = None
        log_event(LOGGER, logging.INFO, "session_reset")

    # ------------------------------------------------------------------
    # Garments
    # ------------------------------------------------------------------
    async def apply_garment(self, garment_image: ImageRef, garment: WardrobeItem) -> bool:
        """Stack ``garment`` on the current look.

        Reselecting the garment of the dormant layer just ahead of the cursor
        replays that layer without a remote call. Any other garment discards
        the dormant branch.
        """

        snapshot = self.snapshot
        base_image = oh.snapshot_display_image(snapshot)
        if base_image is None or self._ignored_while_busy("apply_garment"):
            return False

        if oh.dormant_layer_matches(snapshot, garment.id):
            self.last_error = None
            self._commit("reselect_garment", oh.advance_to_dormant_layer)
            return True

        async def _try_on() -> ImageRef:
            ensure_image_ref(garment_image)
            return await self.generator.apply_garment(base_image, garment_image, garment)

        result = await self._run_generation(
            "apply_garment",
            f"{self._t('app.loading.adding')} {garment.name}...",
            "app.error.applyGarment",
            _try_on,
        )
        if result is None:
            return False
        self._commit("apply_garment", lambda prev: oh.append_garment_layer(prev, garment, result))
        self.wardrobe.add(garment)
        return True

    async def select_wardrobe_item(self, item: WardrobeItem) -> bool:
        """Load a catalog item's image and try it on."""

        if self._ignored_while_busy("select_wardrobe_item"):
            return False
        if item.id in self.active_garment_ids:
            self.last_error = self._t("wardrobe.error.alreadyWorn")
            log_event(LOGGER, logging.INFO, "wardrobe_item_already_active", item_id=item.id)
            return False
        self.last_error = None
        session = self._session
        try:
            garment_image = await asyncio.to_thread(self.image_loader, item.url)
        except (ImageReferenceError, GarmentFetchError) as exc:
            self.last_error = self._t("wardrobe.error.load")
            log_event(
                LOGGER,
                logging.WARNING,
                "edit_failed",
                operation="select_wardrobe_item",
                error_type=type(exc).__name__,
                error=str(exc),
            )
            return False
        if self._is_stale(session):
            return False
        return await self.apply_garment(garment_image, item)

    async def add_custom_garment(self, garment_image: ImageRef, name: str, category: str) -> bool:
        """Try on a garment the user uploaded; it joins the wardrobe on success."""

        if self._ignored_while_busy("add_custom_garment"):
            return False
        try:
            ensure_image_ref(garment_image)
        except ImageReferenceError:
            self.last_error = self._t("start.error.fileType")
            return False
        item = new_custom_item(name=name, url=garment_image, category=category)
        return await self.apply_garment(garment_image, item)

    def revert_to_layer(self, index: int) -> bool:
        """Remove the active layer at ``index`` and everything stacked on it."""

        if self._ignored_while_busy("revert_to_layer"):
            return False
        if not 1 <= index <= self.snapshot.current_outfit_index:
            log_event(LOGGER, logging.WARNING, "revert_out_of_range", index=index)
            return False
        self.last_error = None
        self._commit("revert_to_layer", lambda prev: oh.revert_to_layer(prev, index))
        return True

    # ------------------------------------------------------------------
    # Pose and modifiers
    # ------------------------------------------------------------------
    async def select_pose(self, new_index: int) -> bool:
        before = self.snapshot
        if self._ignored_while_busy("select_pose"):
            return False
        if not before.outfit_history or new_index == before.current_pose_index:
            return False
        pose = pose_key(new_index)
        layer = oh.current_layer(before.outfit_history, before.current_outfit_index)
        if layer is None:
            return False

        if pose in layer.pose_images:
            self.last_error = None
            self._commit("switch_pose", lambda prev: oh.switch_pose(prev, new_index))
            return True

        base_image = first_pose_image(layer)
        session = self._session
        # Optimistic: show the target pose while the variant renders.
        self.history.replace_current(replace(before, current_pose_index=new_index))
        result = await self._run_generation(
            "select_pose",
            self._t("app.loading.posing"),
            "app.error.changePose",
            lambda: self.generator.regenerate_pose(base_image, pose),
        )
        if self._is_stale(session):
            return False
        if result is None:
            self.history.replace_current(
                replace(self.history.current, current_pose_index=before.current_pose_index)
            )
            return False
        self._commit(
            "select_pose", lambda prev: oh.store_pose_image(prev, new_index, result), base=before
        )
        return True

    def _exact_pose_base(self) -> Optional[ImageRef]:
        snapshot = self.snapshot
        layer = oh.current_layer(snapshot.outfit_history, snapshot.current_outfit_index)
        if layer is None:
            return None
        return layer.pose_images.get(pose_key(snapshot.current_pose_index))

    async def change_background(self, prompt: str) -> bool:
        if self._ignored_while_busy("change_background"):
            return False
        if prompt == DEFAULT_MODIFIER:
            self.last_error = None
            self._commit("reset_background", oh.reset_background)
            return True

        base_image = self._exact_pose_base()
        if base_image is None:
            self._fail(
                "change_background",
                "app.error.changeBackground",
                PreconditionMissingError("Base image for pose not found."),
            )
            return False

        instruction = background_instruction(prompt)
        result = await self._run_generation(
            "change_background",
            self._t("app.loading.background"),
            "app.error.changeBackground",
            lambda: self.generator.replace_background(base_image, instruction),
        )
        if result is None:
            return False
        self._commit("change_background", lambda prev: oh.store_background_image(prev, prompt, result))
        return True

    async def change_lighting(self, prompt: str) -> bool:
        if self._ignored_while_busy("change_lighting"):
            return False
        if prompt == DEFAULT_MODIFIER:
            self.last_error = None
            self._commit("reset_lighting", oh.reset_lighting)
            return True

        base_image = self._exact_pose_base()
        if base_image is None:
            self._fail(
                "change_lighting",
                "app.error.changeLighting",
                PreconditionMissingError("Base image for pose not found."),
            )
            return False

        result = await self._run_generation(
            "change_lighting",
            self._t("app.loading.lighting"),
            "app.error.changeLighting",
            lambda: self.generator.relight(base_image, prompt),
        )
        if result is None:
            return False
        self._commit("change_lighting", lambda prev: oh.store_lighting_image(prev, prompt, result))
        return True

    # ------------------------------------------------------------------
    # Edits that rewrite a layer's base image
    # ------------------------------------------------------------------
    async def _rewrite_layer(
        self,
        operation: str,
        index: int,
        label: str,
        error_key: str,
        generate: Callable[[ImageRef], Awaitable[ImageRef]],
    ) -> bool:
        history = self.snapshot.outfit_history
        if self._ignored_while_busy(operation) or not 0 <= index < len(history):
            return False
        base_image = default_pose_image(history[index])
        result = await self._run_generation(operation, label, error_key, lambda: generate(base_image))
        if result is None:
            return False
        # Layers above ``index`` were derived from the old base and are dropped.
        self._commit(operation, lambda prev: oh.replace_layer_base(prev, index, result))
        return True

    async def change_garment_color(self, index: int, color: str) -> bool:
        return await self._rewrite_layer(
            "change_garment_color",
            index,
            f"{self._t('app.loading.coloring')} {color}...",
            "app.error.changeColor",
            lambda base: self.generator.recolor_garment(base, color),
        )

    async def magic_wand_edit(self, index: int, instruction: str) -> bool:
        instruction = instruction.strip()
        if not instruction:
            return False
        return await self._rewrite_layer(
            "magic_wand_edit",
            index,
            self._t("magicWand.label"),
            "magicWand.error",
            lambda base: self.generator.freeform_edit(base, instruction),
        )

    def crop(self, rect: CropRect) -> bool:
        """Replace the current layer's visual with a region of the displayed image."""

        if self._ignored_while_busy("crop"):
            return False
        image = self.display_image
        if image is None:
            return False
        self.last_error = None
        try:
            cropped = crop_image(image, rect)
        except ImageReferenceError as exc:
            self._fail("crop", "app.error.crop", exc)
            return False
        self._commit("crop", lambda prev: oh.crop_current_layer(prev, cropped))
        return True

    # ------------------------------------------------------------------
    # Lookbook and undo/redo
    # ------------------------------------------------------------------
    async def generate_lookbook(self, template: str) -> Optional[ImageRef]:
        """Compose the active looks into one page; the result is not an editable layer."""

        if self._ignored_while_busy("generate_lookbook"):
            return None
        layout = lookbook_instruction(template)
        snapshot = self.snapshot
        if len(oh.active_layers(snapshot.outfit_history, snapshot.current_outfit_index)) <= 1:
            self.last_error = self._t("app.error.lookbook.addGarment")
            return None

        images = oh.lookbook_images(snapshot)
        result = await self._run_generation(
            "generate_lookbook",
            self._t("app.loading.lookbook"),
            "app.error.lookbook.generate",
            lambda: self.generator.compose_lookbook(images, layout),
        )
        if result is not None:
            self.lookbook_image = result
        return result

    def close_lookbook(self) -> None:
        self.lookbook_image = None

    def undo(self) -> bool:
        if self._ignored_while_busy("undo"):
            return False
        changed = self.history.undo()
        if changed:
            log_event(LOGGER, logging.INFO, "undo", undo_depth=len(self.history.undo_stack))
        return changed

    def redo(self) -> bool:
        if self._ignored_while_busy("redo"):
            return False
        changed = self.history.redo()
        if changed:
            log_event(LOGGER, logging.INFO, "redo", redo_depth=len(self.history.redo_stack))
        return changed

    # ------------------------------------------------------------------
    # View
    # ------------------------------------------------------------------
    def state_view(self) -> Dict[str, Any]:
        """Everything a UI needs to render the current session."""

        snapshot = self.snapshot
        history = snapshot.outfit_history
        index = snapshot.current_outfit_index
        active_ids = set(self.active_garment_ids)
        layers = [
            {
                "index": position,
                "garment_id": layer.garment_id,
                "label": layer.garment.name if layer.garment else self._t("outfitStack.baseModel"),
                "category": layer.garment.category if layer.garment else None,
                "poses": list(layer.pose_images),
            }
            for position, layer in enumerate(oh.active_layers(history, index))
        ]
        return {
            "has_model": bool(history),
            "display_image": self.display_image,
            "is_loading": self.is_loading,
            "loading_message": self.loading_message,
            "error": self.last_error,
            "current_outfit_index": index,
            "current_pose_index": snapshot.current_pose_index,
            "available_poses": oh.available_pose_keys(history, index),
            "pose_options": [
                {"value": pose, "label": self._t(f"poses.{pose}")} for pose in POSE_INSTRUCTIONS
            ],
            "background_options": [
                {"value": option, "label": self._t(f"backgrounds.{option}")} for option in BACKGROUND_OPTIONS
            ],
            "lighting_options": [
                {"value": option, "label": self._t(f"lighting.{option}")} for option in LIGHTING_OPTIONS
            ],
            "active_background": snapshot.active_background,
            "active_lighting": snapshot.active_lighting,
            "can_undo": self.history.can_undo,
            "can_redo": self.history.can_redo,
            "layers": layers,
            "dormant_layer_count": max(len(history) - index - 1, 0),
            "active_garment_ids": self.active_garment_ids,
            "wardrobe": [
                {
                    "id": item.id,
                    "name": item.name,
                    "url": item.url,
                    "category": item.category,
                    "is_active": item.id in active_ids,
                }
                for item in self.wardrobe.items
            ],
            "pending_model_image": self.pending_model_image,
            "lookbook_image": self.lookbook_image,
        }


__all__ = ["EditOrchestrator", "PreconditionMissingError"]
