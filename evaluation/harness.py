"""Lightweight evaluation harness replaying scripted sessions on the mock generator."""

from __future__ import annotations

import asyncio
from typing import Dict, List

from agents.orchestrator import EditOrchestrator
from dressing_room.config import DressingRoomConfig
from dressing_room.app import DressingRoomApp
from evaluation.scenarios import EvaluationScenario, SCENARIOS, Step
from models.wardrobe import Wardrobe
from models.wardrobe_item import from_raw_metadata
from tools.image_generator import GenerationBlockedError, MockImageGenerator, placeholder_image


def _seed_wardrobe(catalog: List[Dict[str, str]]) -> Wardrobe:
    items = []
    for position, entry in enumerate(catalog, start=1):
        items.append(from_raw_metadata({**entry, "url": placeholder_image(10_000 + position)}))
    return Wardrobe(items)


async def _run_step(orchestrator: EditOrchestrator, generator: MockImageGenerator, step: Step) -> None:
    action, *args = step
    if action == "model":
        await orchestrator.generate_model(placeholder_image(1))
        orchestrator.finalize_model()
    elif action == "wear":
        item = orchestrator.wardrobe.get(str(args[0]))
        if item is None:
            raise KeyError(f"Scenario references unknown wardrobe item {args[0]!r}")
        await orchestrator.select_wardrobe_item(item)
    elif action == "revert":
        orchestrator.revert_to_layer(int(args[0]))
    elif action == "color":
        await orchestrator.change_garment_color(int(args[0]), str(args[1]))
    elif action == "edit":
        await orchestrator.magic_wand_edit(int(args[0]), str(args[1]))
    elif action == "pose":
        await orchestrator.select_pose(int(args[0]))
    elif action == "background":
        await orchestrator.change_background(str(args[0]))
    elif action == "lighting":
        await orchestrator.change_lighting(str(args[0]))
    elif action == "lookbook":
        await orchestrator.generate_lookbook(str(args[0]))
    elif action == "undo":
        orchestrator.undo()
    elif action == "redo":
        orchestrator.redo()
    elif action == "fail_next":
        generator.fail_with = GenerationBlockedError("Request was blocked. Reason: SAFETY.")
    else:
        raise ValueError(f"Unknown scenario step {action!r}")


def _evaluate_expectations(
    expectations: Dict[str, object], orchestrator: EditOrchestrator, generator: MockImageGenerator
) -> Dict[str, bool]:
    snapshot = orchestrator.snapshot
    observed: Dict[str, object] = {
        "layer_count": len(snapshot.outfit_history),
        "outfit_index": snapshot.current_outfit_index,
        "pose_index": snapshot.current_pose_index,
        "background": snapshot.active_background,
        "lighting": snapshot.active_lighting,
        "active_garment_ids": orchestrator.active_garment_ids,
        "generator_calls": len(generator.calls),
        "error": orchestrator.last_error is not None,
        "can_undo": orchestrator.history.can_undo,
        "can_redo": orchestrator.history.can_redo,
        "undo_depth": len(orchestrator.history.undo_stack),
        "has_lookbook": orchestrator.lookbook_image is not None,
    }
    return {key: observed.get(key) == expected for key, expected in expectations.items()}


def run_scenario(scenario: EvaluationScenario) -> Dict[str, object]:
    generator = MockImageGenerator()
    studio = DressingRoomApp(
        config=DressingRoomConfig(generator_backend="mock"),
        generator=generator,
        wardrobe=_seed_wardrobe(scenario.catalog),
    )
    orchestrator = studio.orchestrator

    async def _replay() -> None:
        for step in scenario.steps:
            await _run_step(orchestrator, generator, step)

    asyncio.run(_replay())
    checks = _evaluate_expectations(scenario.expectations, orchestrator, generator)
    return {
        "scenario": scenario.name,
        "passed": all(checks.values()),
        "checks": checks,
        "generator_calls": generator.operations(),
        "state": studio.state_view(),
    }


def run_evaluation_suite() -> List[Dict[str, object]]:
    return [run_scenario(scenario) for scenario in SCENARIOS]


def run_smoke_checks() -> List[str]:
    results = run_evaluation_suite()
    return [f"{result['scenario']}: {'passed' if result['passed'] else 'failed'}" for result in results]


__all__ = ["run_evaluation_suite", "run_scenario", "run_smoke_checks"]
