"""Canonical closed sets for poses, modifiers, lookbook layouts and categories.

The history caches are keyed by pose instruction and the tie-break rules
compare against the ``DEFAULT_MODIFIER`` sentinel, so every value flowing
through the core is expected to belong to one of these sets.
"""

from typing import Dict, List, Tuple

POSE_INSTRUCTIONS: Tuple[str, ...] = (
    "Full frontal view, hands on hips",
    "Slightly turned, 3/4 view",
    "Side profile view",
    "Jumping in the air, mid-action shot",
    "Walking towards camera",
    "Leaning against a wall",
)
DEFAULT_POSE = POSE_INSTRUCTIONS[0]

DEFAULT_MODIFIER = "Default"
STUDIO_BACKGROUND = "Studio Background"
STUDIO_BACKGROUND_INSTRUCTION = "a clean, neutral studio backdrop (light gray, #f0f0f0)"

BACKGROUND_OPTIONS: Tuple[str, ...] = (
    DEFAULT_MODIFIER,
    STUDIO_BACKGROUND,
    "A Parisian street cafe",
    "A futuristic neon-lit alley",
    "A serene beach at sunset",
    "An elegant library with wooden shelves",
    "A lush botanical garden",
)

LIGHTING_OPTIONS: Tuple[str, ...] = (
    DEFAULT_MODIFIER,
    "Bright studio lighting",
    "Warm, golden hour lighting",
    "Dramatic, cinematic lighting",
    "Soft, diffused lighting",
)

LOOKBOOK_TEMPLATES: Dict[str, str] = {
    "Minimalist Grid": "A clean, minimalist grid layout with generous white space.",
    "Magazine Spread": "A dynamic, overlapping magazine-style spread with bold typography.",
    "Film Strip": "A vertical or horizontal film strip sequence.",
    "Polaroid Collage": "A scattered collage of polaroid-style photos.",
}

GARMENT_CATEGORIES: List[str] = ["top", "accessory"]

# Swatches offered next to each garment in the outfit stack.
STACK_COLORS: List[str] = [
    "#EF4444",
    "#3B82F6",
    "#22C55E",
    "#A855F7",
    "#EC4899",
    "#F97316",
    "#F5F5F5",
    "#18181B",
]


def _normalize_key(value: str) -> str:
    """Normalise a free-form string into a taxonomy key."""

    return value.strip().lower().replace(" ", "_")


def validate_category(value: str) -> str:
    """Validate and normalise a garment category.

    Raises a :class:`ValueError` if the category is not part of the canonical
    taxonomy.
    """

    key = _normalize_key(value)
    if key not in GARMENT_CATEGORIES:
        raise ValueError(f"Unsupported category '{value}'. Allowed: {GARMENT_CATEGORIES}")
    return key


def pose_key(pose_index: int) -> str:
    """Return the pose instruction for a pose index."""

    if not 0 <= pose_index < len(POSE_INSTRUCTIONS):
        raise ValueError(
            f"Pose index {pose_index} out of range. Allowed: 0..{len(POSE_INSTRUCTIONS) - 1}"
        )
    return POSE_INSTRUCTIONS[pose_index]


def background_instruction(prompt: str) -> str:
    """Map a background option to the instruction sent to the generator."""

    if prompt == STUDIO_BACKGROUND:
        return STUDIO_BACKGROUND_INSTRUCTION
    return prompt


def lookbook_instruction(template: str) -> str:
    """Resolve a lookbook template name into its layout instruction."""

    try:
        return LOOKBOOK_TEMPLATES[template]
    except KeyError:
        raise ValueError(
            f"Unsupported lookbook template '{template}'. Allowed: {sorted(LOOKBOOK_TEMPLATES)}"
        ) from None


__all__ = [
    "POSE_INSTRUCTIONS",
    "DEFAULT_POSE",
    "DEFAULT_MODIFIER",
    "STUDIO_BACKGROUND",
    "STUDIO_BACKGROUND_INSTRUCTION",
    "BACKGROUND_OPTIONS",
    "LIGHTING_OPTIONS",
    "LOOKBOOK_TEMPLATES",
    "GARMENT_CATEGORIES",
    "STACK_COLORS",
    "validate_category",
    "pose_key",
    "background_instruction",
    "lookbook_instruction",
]
