"""Evaluation scenarios scripting typical dressing room sessions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

Step = Tuple[object, ...]


@dataclass
class EvaluationScenario:
    name: str
    description: str
    steps: List[Step]
    expectations: Dict[str, object]
    catalog: List[Dict[str, str]] = field(default_factory=list)


def _catalog() -> List[Dict[str, str]]:
    return [
        {"id": "linen-shirt", "name": "Linen Shirt", "category": "top"},
        {"id": "denim-jacket", "name": "Denim Jacket", "category": "top"},
        {"id": "straw-hat", "name": "Straw Hat", "category": "accessory"},
    ]


SCENARIOS: List[EvaluationScenario] = [
    EvaluationScenario(
        name="dress_up",
        description="Create a model and stack a top and an accessory.",
        steps=[("model",), ("wear", "linen-shirt"), ("wear", "straw-hat")],
        expectations={
            "layer_count": 3,
            "outfit_index": 2,
            "active_garment_ids": ["linen-shirt", "straw-hat"],
            "generator_calls": 3,
            "error": False,
        },
        catalog=_catalog(),
    ),
    EvaluationScenario(
        name="remove_garment",
        description="Reverting to the first garment layer strips everything above the model.",
        steps=[("model",), ("wear", "linen-shirt"), ("wear", "straw-hat"), ("revert", 1)],
        expectations={
            "layer_count": 1,
            "outfit_index": 0,
            "active_garment_ids": [],
            "can_undo": True,
        },
        catalog=_catalog(),
    ),
    EvaluationScenario(
        name="recolor_old_layer",
        description="Recolouring an older layer discards the garments stacked on it.",
        steps=[
            ("model",),
            ("wear", "linen-shirt"),
            ("wear", "denim-jacket"),
            ("color", 1, "#3B82F6"),
        ],
        expectations={
            "layer_count": 2,
            "outfit_index": 1,
            "active_garment_ids": ["linen-shirt"],
            "generator_calls": 4,
        },
        catalog=_catalog(),
    ),
    EvaluationScenario(
        name="modifier_exclusivity",
        description="Relighting after a background change resets the background.",
        steps=[
            ("model",),
            ("wear", "linen-shirt"),
            ("background", "Studio Background"),
            ("lighting", "Warm, golden hour lighting"),
        ],
        expectations={
            "background": "Default",
            "lighting": "Warm, golden hour lighting",
            "generator_calls": 4,
        },
        catalog=_catalog(),
    ),
    EvaluationScenario(
        name="pose_failure_rollback",
        description="A failed pose variation restores the previous pose and shows an error.",
        steps=[("model",), ("wear", "linen-shirt"), ("fail_next",), ("pose", 2)],
        expectations={
            "pose_index": 0,
            "error": True,
            "undo_depth": 1,
        },
        catalog=_catalog(),
    ),
    EvaluationScenario(
        name="cached_pose_undo_redo",
        description="Undo returns to the earlier pose; revisiting a cached pose needs no generation.",
        steps=[
            ("model",),
            ("wear", "linen-shirt"),
            ("pose", 1),
            ("undo",),
            ("redo",),
            ("pose", 0),
            ("pose", 1),
        ],
        expectations={
            "pose_index": 1,
            "generator_calls": 3,
            "can_redo": False,
        },
        catalog=_catalog(),
    ),
    EvaluationScenario(
        name="lookbook",
        description="Two worn looks are composed into a lookbook page.",
        steps=[("model",), ("wear", "linen-shirt"), ("lookbook", "Film Strip")],
        expectations={
            "has_lookbook": True,
            "layer_count": 2,
            "generator_calls": 3,
        },
        catalog=_catalog(),
    ),
]


__all__ = ["EvaluationScenario", "SCENARIOS", "Step"]
