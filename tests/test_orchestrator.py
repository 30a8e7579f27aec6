"""Behavioural tests for the edit orchestrator running on the mock generator."""

import asyncio
from dataclasses import replace

import pytest

from agents.orchestrator import EditOrchestrator
from models.outfit_layer import AppStateSnapshot, create_base_layer, create_garment_layer
from models.taxonomy import DEFAULT_MODIFIER, POSE_INSTRUCTIONS, STUDIO_BACKGROUND_INSTRUCTION
from models.wardrobe import Wardrobe
from models.wardrobe_item import WardrobeItem
from tools.image_generator import GenerationBlockedError, MockImageGenerator, placeholder_image
from tools.image_io import CropRect, GarmentFetchError, image_size

MODEL = placeholder_image(1)
SHIRT_IMAGE = placeholder_image(2)
HAT_IMAGE = placeholder_image(3)

SHIRT = WardrobeItem(id="shirt", name="Shirt", url=SHIRT_IMAGE, category="top")
HAT = WardrobeItem(id="hat", name="Hat", url=HAT_IMAGE, category="accessory")


def _orchestrator(**kwargs) -> tuple:
    generator = MockImageGenerator()
    orchestrator = EditOrchestrator(generator=generator, **kwargs)
    orchestrator.finalize_model(MODEL)
    return orchestrator, generator


def _dress(orchestrator: EditOrchestrator, *garments: WardrobeItem) -> None:
    for garment in garments:
        assert asyncio.run(orchestrator.apply_garment(garment.url, garment))


def test_generate_and_finalize_model() -> None:
    generator = MockImageGenerator()
    orchestrator = EditOrchestrator(generator=generator)

    result = asyncio.run(orchestrator.generate_model(MODEL))

    assert result is not None
    assert orchestrator.pending_model_image == result
    assert orchestrator.display_image is None
    assert orchestrator.finalize_model()
    assert orchestrator.display_image == result
    assert len(orchestrator.snapshot.outfit_history) == 1
    assert not orchestrator.history.can_undo


def test_generate_model_rejects_non_images() -> None:
    generator = MockImageGenerator()
    orchestrator = EditOrchestrator(generator=generator)

    assert asyncio.run(orchestrator.generate_model("data:text/plain;base64,aGVsbG8=")) is None

    assert orchestrator.last_error == "Please select an image file."
    assert generator.calls == []


def test_apply_garment_stacks_layer_and_records_undo() -> None:
    orchestrator, generator = _orchestrator()
    before = orchestrator.snapshot

    _dress(orchestrator, SHIRT)

    assert generator.operations() == ["apply_garment"]
    assert generator.calls[0].images == [MODEL, SHIRT_IMAGE]
    assert orchestrator.active_garment_ids == ["shirt"]
    assert orchestrator.display_image == generator.calls[0].result
    assert orchestrator.wardrobe.get("shirt") == SHIRT
    assert orchestrator.undo()
    assert orchestrator.snapshot == before


def test_apply_garment_failure_surfaces_error_without_state_change() -> None:
    orchestrator, generator = _orchestrator()
    before = orchestrator.snapshot
    generator.fail_with = GenerationBlockedError("Request was blocked. Reason: SAFETY.")

    assert not asyncio.run(orchestrator.apply_garment(SHIRT_IMAGE, SHIRT))

    assert orchestrator.snapshot is before
    assert orchestrator.last_error == "Failed to apply garment. Request was blocked. Reason: SAFETY."
    assert not orchestrator.is_loading
    assert orchestrator.loading_message == ""
    assert len(orchestrator.wardrobe) == 0


def test_unsupported_garment_format_uses_file_format_message() -> None:
    orchestrator, generator = _orchestrator()

    assert not asyncio.run(orchestrator.apply_garment("data:application/pdf;base64,JVBERi0=", SHIRT))

    assert orchestrator.last_error == (
        "File format not supported. Please upload an image format like PNG, JPEG, or WEBP."
    )
    assert generator.calls == []


def test_busy_gate_ignores_concurrent_requests() -> None:
    orchestrator, generator = _orchestrator()

    async def scenario() -> None:
        generator.gate = asyncio.Event()
        pending = asyncio.create_task(orchestrator.apply_garment(SHIRT_IMAGE, SHIRT))
        await asyncio.sleep(0)

        assert orchestrator.is_loading
        assert orchestrator.loading_message == "Adding Shirt..."
        assert not await orchestrator.apply_garment(HAT_IMAGE, HAT)
        assert not await orchestrator.select_pose(1)
        assert not await orchestrator.change_background("A Parisian street cafe")
        assert not orchestrator.crop(CropRect(0, 0, 2, 2))
        assert not orchestrator.undo()

        generator.gate.set()
        assert await pending

    asyncio.run(scenario())

    assert generator.operations() == ["apply_garment"]
    assert not orchestrator.is_loading
    assert orchestrator.active_garment_ids == ["shirt"]


def test_reselecting_dormant_garment_skips_generation() -> None:
    orchestrator, generator = _orchestrator()
    history = (
        create_base_layer(MODEL),
        create_garment_layer(SHIRT, "B"),
        create_garment_layer(HAT, "C"),
    )
    orchestrator.history.replace_current(AppStateSnapshot(outfit_history=history, current_outfit_index=1))

    assert asyncio.run(orchestrator.apply_garment(HAT_IMAGE, HAT))

    assert generator.calls == []
    assert orchestrator.snapshot.current_outfit_index == 2
    assert orchestrator.display_image == "C"
    assert orchestrator.history.can_undo


def test_different_garment_discards_dormant_branch() -> None:
    orchestrator, generator = _orchestrator()
    scarf = WardrobeItem(id="scarf", name="Scarf", url=HAT_IMAGE, category="accessory")
    history = (
        create_base_layer(MODEL),
        create_garment_layer(SHIRT, SHIRT_IMAGE),
        create_garment_layer(HAT, HAT_IMAGE),
    )
    orchestrator.history.replace_current(AppStateSnapshot(outfit_history=history, current_outfit_index=1))

    assert asyncio.run(orchestrator.apply_garment(HAT_IMAGE, scarf))

    assert generator.operations() == ["apply_garment"]
    assert [layer.garment_id for layer in orchestrator.snapshot.outfit_history] == [None, "shirt", "scarf"]


def test_select_pose_generates_then_reuses_cache() -> None:
    orchestrator, generator = _orchestrator()
    _dress(orchestrator, SHIRT)
    garment_image = orchestrator.display_image

    assert asyncio.run(orchestrator.select_pose(1))
    assert generator.calls[-1].operation == "regenerate_pose"
    assert generator.calls[-1].images == [garment_image]
    assert generator.calls[-1].instruction == POSE_INSTRUCTIONS[1]

    assert asyncio.run(orchestrator.select_pose(0))
    assert asyncio.run(orchestrator.select_pose(1))
    assert generator.operations().count("regenerate_pose") == 1
    assert asyncio.run(orchestrator.select_pose(1)) is False


def test_select_pose_undo_restores_pre_optimistic_snapshot() -> None:
    orchestrator, _ = _orchestrator()
    _dress(orchestrator, SHIRT)
    before = orchestrator.snapshot

    asyncio.run(orchestrator.select_pose(3))

    assert orchestrator.history.undo_stack[-1] == before
    orchestrator.undo()
    assert orchestrator.snapshot == before


def test_select_pose_is_optimistic_and_rolls_back_on_failure() -> None:
    orchestrator, generator = _orchestrator()
    _dress(orchestrator, SHIRT)
    undo_depth = len(orchestrator.history.undo_stack)

    async def scenario() -> None:
        generator.gate = asyncio.Event()
        generator.fail_with = GenerationBlockedError("blocked")
        pending = asyncio.create_task(orchestrator.select_pose(2))
        await asyncio.sleep(0)
        assert orchestrator.snapshot.current_pose_index == 2
        assert orchestrator.loading_message == "Changing pose..."
        generator.gate.set()
        assert not await pending

    asyncio.run(scenario())

    assert orchestrator.snapshot.current_pose_index == 0
    assert orchestrator.last_error == "Failed to change pose. blocked"
    assert len(orchestrator.history.undo_stack) == undo_depth
    assert POSE_INSTRUCTIONS[2] not in orchestrator.snapshot.outfit_history[1].pose_images


def test_color_change_on_old_layer_truncates_newer_layers() -> None:
    orchestrator, generator = _orchestrator()
    _dress(orchestrator, SHIRT, HAT)
    shirt_layer_image = orchestrator.snapshot.outfit_history[1].pose_images[POSE_INSTRUCTIONS[0]]

    assert asyncio.run(orchestrator.change_garment_color(1, "#3B82F6"))

    snapshot = orchestrator.snapshot
    assert len(snapshot.outfit_history) == 2
    assert snapshot.current_outfit_index == 1
    assert generator.calls[-1].images == [shirt_layer_image]
    assert generator.calls[-1].instruction == "#3B82F6"
    assert orchestrator.display_image == generator.calls[-1].result
    assert orchestrator.active_garment_ids == ["shirt"]


def test_magic_wand_edit_truncates_and_ignores_blank_instructions() -> None:
    orchestrator, generator = _orchestrator()
    _dress(orchestrator, SHIRT, HAT)

    assert not asyncio.run(orchestrator.magic_wand_edit(1, "   "))
    assert not asyncio.run(orchestrator.magic_wand_edit(7, "add stripes"))
    assert generator.operations() == ["apply_garment", "apply_garment"]

    assert asyncio.run(orchestrator.magic_wand_edit(0, "add a belt"))
    assert len(orchestrator.snapshot.outfit_history) == 1
    assert generator.calls[-1].instruction == "add a belt"


def test_studio_background_uses_neutral_instruction() -> None:
    orchestrator, generator = _orchestrator()
    _dress(orchestrator, SHIRT)

    assert asyncio.run(orchestrator.change_background("Studio Background"))

    assert generator.calls[-1].instruction == STUDIO_BACKGROUND_INSTRUCTION
    assert orchestrator.snapshot.active_background == "Studio Background"
    assert orchestrator.display_image == generator.calls[-1].result

    assert asyncio.run(orchestrator.change_lighting("Dramatic, cinematic lighting"))
    assert orchestrator.snapshot.active_background == DEFAULT_MODIFIER
    assert orchestrator.snapshot.active_lighting == "Dramatic, cinematic lighting"


def test_default_modifier_is_a_pure_state_change() -> None:
    orchestrator, generator = _orchestrator()
    _dress(orchestrator, SHIRT)
    asyncio.run(orchestrator.change_lighting("Soft, diffused lighting"))
    calls = len(generator.calls)

    assert asyncio.run(orchestrator.change_background("Default"))
    assert orchestrator.snapshot.active_lighting == "Soft, diffused lighting"
    assert asyncio.run(orchestrator.change_lighting("Default"))
    assert orchestrator.snapshot.active_lighting == DEFAULT_MODIFIER
    assert len(generator.calls) == calls


def test_modifier_requires_exact_pose_base_image() -> None:
    orchestrator, generator = _orchestrator()
    _dress(orchestrator, SHIRT)
    orchestrator.history.replace_current(replace(orchestrator.snapshot, current_pose_index=4))

    assert not asyncio.run(orchestrator.change_lighting("Bright studio lighting"))

    assert orchestrator.last_error == "Failed to change lighting. Base image for pose not found."
    assert generator.operations() == ["apply_garment"]


def test_worked_example_pose_then_revert() -> None:
    orchestrator, generator = _orchestrator()
    _dress(orchestrator, SHIRT)
    garment_image = orchestrator.display_image

    asyncio.run(orchestrator.select_pose(1))
    layer = orchestrator.snapshot.outfit_history[1]
    assert layer.pose_images == {
        POSE_INSTRUCTIONS[0]: garment_image,
        POSE_INSTRUCTIONS[1]: generator.calls[-1].result,
    }
    assert orchestrator.snapshot.current_outfit_index == 1

    assert orchestrator.revert_to_layer(1)
    assert len(orchestrator.snapshot.outfit_history) == 1
    assert orchestrator.snapshot.current_outfit_index == 0
    assert orchestrator.display_image == MODEL


def test_revert_rejects_base_and_dormant_indexes() -> None:
    orchestrator, _ = _orchestrator()
    _dress(orchestrator, SHIRT)

    assert not orchestrator.revert_to_layer(0)
    assert not orchestrator.revert_to_layer(2)
    assert len(orchestrator.snapshot.outfit_history) == 2


def test_redo_is_cleared_by_a_new_edit() -> None:
    orchestrator, _ = _orchestrator()
    _dress(orchestrator, SHIRT)
    orchestrator.undo()
    assert orchestrator.history.can_redo

    _dress(orchestrator, HAT)

    assert not orchestrator.history.can_redo
    assert orchestrator.redo() is False


def test_crop_replaces_current_layer_without_generation() -> None:
    orchestrator, generator = _orchestrator()
    _dress(orchestrator, SHIRT)

    assert orchestrator.crop(CropRect(x=1, y=1, width=4, height=3))

    assert image_size(orchestrator.display_image) == (4, 3)
    assert len(orchestrator.snapshot.outfit_history) == 2
    assert generator.operations() == ["apply_garment"]
    assert orchestrator.undo()
    assert image_size(orchestrator.display_image) == (8, 8)


def test_crop_outside_image_reports_error() -> None:
    orchestrator, _ = _orchestrator()
    before = orchestrator.snapshot

    assert not orchestrator.crop(CropRect(x=4, y=4, width=10, height=10))

    assert orchestrator.snapshot is before
    assert orchestrator.last_error.startswith("Failed to crop image. ")


def test_lookbook_needs_a_garment_and_stays_out_of_history() -> None:
    orchestrator, generator = _orchestrator()

    assert asyncio.run(orchestrator.generate_lookbook("Film Strip")) is None
    assert orchestrator.last_error == "Add at least one garment to create a lookbook."

    _dress(orchestrator, SHIRT)
    undo_depth = len(orchestrator.history.undo_stack)
    result = asyncio.run(orchestrator.generate_lookbook("Film Strip"))

    assert result == orchestrator.lookbook_image
    assert generator.calls[-1].operation == "compose_lookbook"
    assert generator.calls[-1].images == [MODEL, generator.calls[0].result]
    assert len(orchestrator.history.undo_stack) == undo_depth
    assert orchestrator.last_error is None


def test_lookbook_rejects_unknown_template() -> None:
    orchestrator, _ = _orchestrator()

    with pytest.raises(ValueError):
        asyncio.run(orchestrator.generate_lookbook("Comic Strip"))


def test_select_wardrobe_item_loads_image_through_loader() -> None:
    loaded = []

    def loader(url: str) -> str:
        loaded.append(url)
        return SHIRT_IMAGE

    catalog = WardrobeItem(id="tee", name="Tee", url="https://example.com/tee.png", category="top")
    orchestrator, generator = _orchestrator(wardrobe=Wardrobe([catalog]), image_loader=loader)

    assert asyncio.run(orchestrator.select_wardrobe_item(catalog))
    assert loaded == ["https://example.com/tee.png"]
    assert generator.calls[0].images == [MODEL, SHIRT_IMAGE]

    assert not asyncio.run(orchestrator.select_wardrobe_item(catalog))
    assert len(generator.calls) == 1


def test_select_wardrobe_item_fetch_failure() -> None:
    def loader(url: str) -> str:
        raise GarmentFetchError(f"Failed to fetch {url}")

    catalog = WardrobeItem(id="tee", name="Tee", url="https://example.com/tee.png", category="top")
    orchestrator, generator = _orchestrator(image_loader=loader)

    assert not asyncio.run(orchestrator.select_wardrobe_item(catalog))

    assert orchestrator.last_error == "Failed to load wardrobe item. Check the logs for details."
    assert generator.calls == []


def test_custom_garment_joins_wardrobe_on_success() -> None:
    orchestrator, _ = _orchestrator()

    assert asyncio.run(orchestrator.add_custom_garment(SHIRT_IMAGE, "My Shirt", "top"))

    [item] = orchestrator.wardrobe.items
    assert item.id.startswith("custom-")
    assert item.name == "My Shirt"
    assert orchestrator.active_garment_ids == [item.id]


def test_localised_error_messages() -> None:
    orchestrator, generator = _orchestrator(language="中文")
    generator.fail_with = GenerationBlockedError("blocked")

    asyncio.run(orchestrator.apply_garment(SHIRT_IMAGE, SHIRT))

    assert orchestrator.last_error == "应用服装失败. blocked"


def test_start_over_clears_session() -> None:
    orchestrator, _ = _orchestrator()
    _dress(orchestrator, SHIRT)

    orchestrator.start_over()

    assert orchestrator.snapshot == AppStateSnapshot()
    assert orchestrator.display_image is None
    assert len(orchestrator.wardrobe) == 0
    assert not orchestrator.history.can_undo


def test_state_view_lists_active_layers() -> None:
    orchestrator, _ = _orchestrator(wardrobe=Wardrobe([HAT]))
    _dress(orchestrator, SHIRT)

    view = orchestrator.state_view()

    assert view["has_model"] is True
    assert [layer["label"] for layer in view["layers"]] == ["Base Model", "Shirt"]
    assert view["active_garment_ids"] == ["shirt"]
    assert {item["id"]: item["is_active"] for item in view["wardrobe"]} == {"hat": False, "shirt": True}
    assert view["available_poses"] == [POSE_INSTRUCTIONS[0]]
    assert view["can_undo"] is True
    assert view["pose_options"][1] == {"value": POSE_INSTRUCTIONS[1], "label": "3/4 View"}
    assert view["background_options"][1]["label"] == "Studio"


def _start_over_mid_generation(orchestrator: EditOrchestrator, generator: MockImageGenerator, start) -> bool:
    async def scenario() -> bool:
        generator.gate = asyncio.Event()
        pending = asyncio.create_task(start())
        await asyncio.sleep(0)
        assert orchestrator.is_loading
        orchestrator.start_over()
        assert not orchestrator.is_loading
        generator.gate.set()
        return await pending

    return asyncio.run(scenario())


def test_start_over_discards_background_still_rendering() -> None:
    orchestrator, generator = _orchestrator()
    _dress(orchestrator, SHIRT)

    finished = _start_over_mid_generation(
        orchestrator, generator, lambda: orchestrator.change_background("A Parisian street cafe")
    )

    assert not finished
    assert orchestrator.snapshot == AppStateSnapshot()
    assert not orchestrator.history.can_undo
    assert orchestrator.last_error is None


def test_start_over_discards_garment_still_rendering() -> None:
    orchestrator, generator = _orchestrator()

    finished = _start_over_mid_generation(
        orchestrator, generator, lambda: orchestrator.apply_garment(SHIRT_IMAGE, SHIRT)
    )

    assert not finished
    assert orchestrator.snapshot.outfit_history == ()
    assert orchestrator.wardrobe.get("shirt") is None
    assert not orchestrator.history.can_undo


def test_start_over_discards_pose_still_rendering() -> None:
    orchestrator, generator = _orchestrator()
    _dress(orchestrator, SHIRT)

    finished = _start_over_mid_generation(orchestrator, generator, lambda: orchestrator.select_pose(2))

    assert not finished
    assert orchestrator.snapshot == AppStateSnapshot()
    assert not orchestrator.history.can_undo


def test_start_over_hides_failure_of_discarded_generation() -> None:
    orchestrator, generator = _orchestrator()
    _dress(orchestrator, SHIRT)
    generator.fail_with = GenerationBlockedError("blocked")

    finished = _start_over_mid_generation(
        orchestrator, generator, lambda: orchestrator.change_lighting("Bright studio lighting")
    )

    assert not finished
    assert orchestrator.last_error is None
    assert orchestrator.snapshot == AppStateSnapshot()


def _no_setup(orchestrator: EditOrchestrator) -> None:
    return None


def _with_background(orchestrator: EditOrchestrator) -> None:
    assert asyncio.run(orchestrator.change_background("A lush botanical garden"))


def _with_lighting(orchestrator: EditOrchestrator) -> None:
    assert asyncio.run(orchestrator.change_lighting("Soft, diffused lighting"))


@pytest.mark.parametrize(
    ("setup", "action"),
    [
        (_no_setup, lambda o: asyncio.run(o.change_background("A serene beach at sunset"))),
        (_no_setup, lambda o: asyncio.run(o.change_lighting("Warm, golden hour lighting"))),
        (_no_setup, lambda o: asyncio.run(o.change_garment_color(1, "#F97316"))),
        (_no_setup, lambda o: asyncio.run(o.magic_wand_edit(2, "add a feather"))),
        (_no_setup, lambda o: o.revert_to_layer(2)),
        (_with_background, lambda o: asyncio.run(o.change_background(DEFAULT_MODIFIER))),
        (_with_lighting, lambda o: asyncio.run(o.change_lighting(DEFAULT_MODIFIER))),
    ],
    ids=["background", "lighting", "color", "magic_wand", "revert", "reset_background", "reset_lighting"],
)
def test_single_edit_undo_and_redo_restore_exact_snapshots(setup, action) -> None:
    orchestrator, _ = _orchestrator()
    _dress(orchestrator, SHIRT, HAT)
    setup(orchestrator)
    before = orchestrator.snapshot

    assert action(orchestrator)
    after = orchestrator.snapshot
    assert after != before

    assert orchestrator.undo()
    assert orchestrator.snapshot == before
    assert orchestrator.redo()
    assert orchestrator.snapshot == after
