"""Centralised instructions sent with every image generation request."""

from __future__ import annotations

from typing import List

OUTPUT_RULE = "Return ONLY the final image. Do not include any text, descriptions, or commentary."

SUBJECT_MODEL_RULES: List[str] = [
    "**Centering:** The person MUST be perfectly centered within the frame of the final image.",
    "**Background Preservation:** The background from the original image MUST be preserved perfectly.",
    "**Model Transformation:** The person should have a neutral, professional model expression and "
    "be placed in a standard, relaxed standing model pose.",
    "**Identity Preservation:** Preserve the person's identity, unique facial features, and body type.",
    "**Photorealism:** The final image must be photorealistic.",
    f"**Output:** {OUTPUT_RULE}",
]

GARMENT_RULES: List[str] = [
    "**Analyze the Garment Image:** The 'garment image' may show the clothing item on a person, on a "
    "mannequin, or flat. Identify the primary clothing item and separate it from its original "
    "background or model.",
    "**Complete Garment Replacement:** REMOVE and REPLACE the corresponding clothing item worn by the "
    "person in the 'model image' with the new garment. No part of the original clothing should remain visible.",
    "**Preserve the Model:** The person's face, hair, body shape, and pose MUST remain unchanged.",
    "**Preserve the Background:** The entire background from the 'model image' MUST be preserved perfectly.",
    "**Apply the Garment:** Fit the new garment onto the person with natural folds, shadows, and "
    "lighting consistent with the original scene.",
    f"**Output:** {OUTPUT_RULE}",
]

ACCESSORY_RULES: List[str] = [
    "**Realistically ADD the Accessory:** Place the accessory naturally on the person. Do not replace "
    "their existing clothing unless necessary for placement.",
    "**Preserve the Model & Clothing:** The person's face, hair, body shape, pose, and existing clothing "
    "MUST remain unchanged as much as possible.",
    "**Preserve the Background:** The entire background from the 'model image' MUST be preserved perfectly.",
    "**Lighting and Shadows:** The added accessory must have lighting and shadows consistent with the scene.",
    f"**Output:** {OUTPUT_RULE}",
]

FREEFORM_RULES: List[str] = [
    "**Apply the Edit:** Precisely apply the requested edit to the primary clothing item.",
    "**Preserve Everything Else:** The person's face, body, pose, the background, and any other "
    "clothing or accessories MUST remain perfectly identical.",
    f"**Output:** {OUTPUT_RULE}",
]


def _numbered(rules: List[str]) -> str:
    return "\n".join(f"{index}. {rule}" for index, rule in enumerate(rules, start=1))


def subject_model_prompt() -> str:
    return (
        "You are an expert fashion photographer AI. Transform the person in the provided image into "
        "a full-body fashion model photo suitable for an e-commerce website. Follow these rules precisely:\n"
        f"{_numbered(SUBJECT_MODEL_RULES)}"
    )


def garment_prompt(garment_name: str, category: str) -> str:
    """Virtual try-on instruction; accessories are added, other garments replace clothing."""

    if category == "accessory":
        return (
            "You are an expert virtual try-on AI. You will be given a 'model image' and an 'accessory "
            f"image' ({garment_name}). Create a new photorealistic image where the person from the "
            "'model image' is wearing or holding the accessory.\n\n**Crucial Rules:**\n"
            f"{_numbered(ACCESSORY_RULES)}"
        )
    return (
        "You are an expert virtual try-on AI. You will be given a 'model image' and a 'garment image'. "
        "Create a new photorealistic image where the person from the 'model image' is wearing the "
        "clothing from the 'garment image'.\n\n**Crucial Rules:**\n"
        f"{_numbered(GARMENT_RULES)}"
    )


def pose_prompt(pose_instruction: str) -> str:
    return (
        "You are an expert fashion photographer AI. Take this image and regenerate it from a different "
        "perspective. The person, clothing, and background style must remain identical. The new "
        f'perspective should be: "{pose_instruction}". {OUTPUT_RULE}'
    )


def color_prompt(color: str) -> str:
    return (
        "You are an expert fashion photo editor. Change the color of the main clothing item the person "
        f"is wearing to {color}. The texture and material of the clothing should be preserved. The "
        "person, their pose, all other clothing items/accessories, and the background must remain "
        f"perfectly identical. Only alter the color of the specified garment. {OUTPUT_RULE}"
    )


def background_prompt(background_instruction: str) -> str:
    return (
        "You are an expert photo editor. Replace the background of this image with a new one "
        f'described as: "{background_instruction}". The person and their clothing/accessories must '
        "remain completely unchanged. The lighting and shadows on the person should be adjusted to "
        f"match the new background environment. {OUTPUT_RULE}"
    )


def lighting_prompt(lighting_instruction: str) -> str:
    return (
        "You are an expert lighting director AI. Relight this image to match the following style: "
        f'"{lighting_instruction}". Adjust shadows and highlights realistically. The person, their '
        f"clothing, and the background must remain perfectly identical. Only alter the lighting. {OUTPUT_RULE}"
    )


def lookbook_prompt(layout_instruction: str) -> str:
    return (
        "You are a professional graphic designer for a high-end fashion magazine. You will be given "
        "several images of a fashion model in different outfits. Arrange these images into a single, "
        "stylish lookbook page.\n"
        f"**Layout Style:** {layout_instruction}\n"
        "The final composition should look like a page from a premium fashion catalog. "
        "Return ONLY the final, single lookbook image."
    )


def freeform_prompt(instruction: str) -> str:
    return (
        "You are an expert fashion photo editor AI. You will be given an image and an instruction to "
        f'edit the main garment the person is wearing.\n**Instruction:** "{instruction}".\n\n'
        f"**Crucial Rules:**\n{_numbered(FREEFORM_RULES)}"
    )


__all__ = [
    "background_prompt",
    "color_prompt",
    "freeform_prompt",
    "garment_prompt",
    "lighting_prompt",
    "lookbook_prompt",
    "pose_prompt",
    "subject_model_prompt",
]
