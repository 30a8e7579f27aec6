"""Remote image generation providers.

The dressing room treats generation as an opaque remote function: one or more
image references plus an instruction in, one image reference out, or one of
the :class:`GenerationError` subclasses.
"""

from __future__ import annotations

import asyncio
import io
import logging
import zlib
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from PIL import Image
from PIL.PngImagePlugin import PngInfo

from dressing_room.config import DressingRoomConfig
from logic import prompts
from models.outfit_layer import ImageRef
from models.wardrobe_item import WardrobeItem
from tools.image_io import bytes_to_data_url, data_url_to_parts
from tools.observability import instrument_generation

LOGGER = logging.getLogger(__name__)


class GenerationError(Exception):
    """Base class for every generation failure surfaced to the user."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(self.message)


class GenerationBlockedError(GenerationError):
    """The request was refused by the provider's safety policy."""


class NoImageReturnedError(GenerationError):
    """The provider answered without image content."""


class GeneratorUnavailableError(GenerationError):
    """The provider could not be initialised or reached."""


class ImageGenerator(ABC):
    """Abstract generator interface used by the edit orchestrator."""

    @abstractmethod
    async def generate_subject_model(self, source_image: ImageRef) -> ImageRef:
        """Turn an uploaded photo into a full-body model rendering."""

    @abstractmethod
    async def apply_garment(
        self, subject_image: ImageRef, garment_image: ImageRef, garment: WardrobeItem
    ) -> ImageRef:
        """Dress the subject in the garment (or add the accessory)."""

    @abstractmethod
    async def regenerate_pose(self, base_image: ImageRef, pose_instruction: str) -> ImageRef:
        """Re-render the subject in another pose."""

    @abstractmethod
    async def recolor_garment(self, base_image: ImageRef, color: str) -> ImageRef:
        """Change the colour of the main garment."""

    @abstractmethod
    async def replace_background(self, base_image: ImageRef, background_instruction: str) -> ImageRef:
        """Swap the scene behind the subject."""

    @abstractmethod
    async def relight(self, base_image: ImageRef, lighting_instruction: str) -> ImageRef:
        """Relight the scene."""

    @abstractmethod
    async def compose_lookbook(self, images: Sequence[ImageRef], layout_instruction: str) -> ImageRef:
        """Lay several outfit images out on one page."""

    @abstractmethod
    async def freeform_edit(self, base_image: ImageRef, instruction: str) -> ImageRef:
        """Apply a free-form edit to the main garment."""


def _image_part(image_ref: ImageRef) -> types.Part:
    mime_type, data = data_url_to_parts(image_ref)
    return types.Part.from_bytes(data=data, mime_type=mime_type)


def extract_image(response: types.GenerateContentResponse) -> ImageRef:
    """Return the first inline image of a response or raise the matching error."""

    feedback = response.prompt_feedback
    if feedback is not None and feedback.block_reason:
        reason = getattr(feedback.block_reason, "value", feedback.block_reason)
        detail = feedback.block_reason_message or ""
        raise GenerationBlockedError(f"Request was blocked. Reason: {reason}. {detail}".strip())

    for candidate in response.candidates or []:
        parts = candidate.content.parts if candidate.content and candidate.content.parts else []
        for part in parts:
            if part.inline_data and part.inline_data.data:
                return bytes_to_data_url(part.inline_data.data, part.inline_data.mime_type or "image/png")

    finish_reason = response.candidates[0].finish_reason if response.candidates else None
    if finish_reason and finish_reason != types.FinishReason.STOP:
        reason = getattr(finish_reason, "value", finish_reason)
        raise NoImageReturnedError(
            f"Image generation stopped unexpectedly. Reason: {reason}. "
            "This often relates to safety settings."
        )

    text_parts = []
    for candidate in response.candidates or []:
        for part in (candidate.content.parts if candidate.content and candidate.content.parts else []):
            if part.text:
                text_parts.append(part.text)
    text_feedback = "".join(text_parts).strip()
    if text_feedback:
        raise NoImageReturnedError(
            f'The AI model did not return an image. The model responded with text: "{text_feedback}"'
        )
    raise NoImageReturnedError(
        "The AI model did not return an image. This can happen due to safety filters or if the "
        "request is too complex. Please try a different image."
    )


class GeminiImageGenerator(ImageGenerator):
    """Gemini image model provider.

    The client is created on first use so the app can start without a key; a
    failed initialisation is remembered and re-raised on every later call.
    """

    def __init__(self, config: DressingRoomConfig, client: genai.Client | None = None) -> None:
        self.config = config
        self._client = client
        self._init_error: Optional[str] = None

    def _get_client(self) -> genai.Client:
        if self._client is not None:
            return self._client
        if self._init_error:
            raise GeneratorUnavailableError(f"AI Service initialization failed: {self._init_error}")
        if not self.config.api_key:
            self._init_error = (
                "GEMINI_API_KEY environment variable not found. Please configure it in your deployment settings."
            )
            LOGGER.error("Gemini client initialisation failed", extra={"reason": "missing_api_key"})
            raise GeneratorUnavailableError(f"AI Service initialization failed: {self._init_error}")
        self._client = genai.Client(api_key=self.config.api_key)
        return self._client

    async def _generate(self, images: Sequence[ImageRef], prompt: str) -> ImageRef:
        client = self._get_client()
        contents = [_image_part(image) for image in images] + [types.Part.from_text(text=prompt)]
        try:
            response = await client.aio.models.generate_content(
                model=self.config.model,
                contents=contents,
                config=types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"]),
            )
        except (genai_errors.APIError, httpx.HTTPError) as exc:
            raise GeneratorUnavailableError(f"Image service request failed: {exc}") from exc
        return extract_image(response)

    @instrument_generation("generate_subject_model")
    async def generate_subject_model(self, source_image: ImageRef) -> ImageRef:
        return await self._generate([source_image], prompts.subject_model_prompt())

    @instrument_generation("apply_garment")
    async def apply_garment(
        self, subject_image: ImageRef, garment_image: ImageRef, garment: WardrobeItem
    ) -> ImageRef:
        prompt = prompts.garment_prompt(garment.name, garment.category)
        return await self._generate([subject_image, garment_image], prompt)

    @instrument_generation("regenerate_pose")
    async def regenerate_pose(self, base_image: ImageRef, pose_instruction: str) -> ImageRef:
        return await self._generate([base_image], prompts.pose_prompt(pose_instruction))

    @instrument_generation("recolor_garment")
    async def recolor_garment(self, base_image: ImageRef, color: str) -> ImageRef:
        return await self._generate([base_image], prompts.color_prompt(color))

    @instrument_generation("replace_background")
    async def replace_background(self, base_image: ImageRef, background_instruction: str) -> ImageRef:
        return await self._generate([base_image], prompts.background_prompt(background_instruction))

    @instrument_generation("relight")
    async def relight(self, base_image: ImageRef, lighting_instruction: str) -> ImageRef:
        return await self._generate([base_image], prompts.lighting_prompt(lighting_instruction))

    @instrument_generation("compose_lookbook")
    async def compose_lookbook(self, images: Sequence[ImageRef], layout_instruction: str) -> ImageRef:
        return await self._generate(list(images), prompts.lookbook_prompt(layout_instruction))

    @instrument_generation("freeform_edit")
    async def freeform_edit(self, base_image: ImageRef, instruction: str) -> ImageRef:
        return await self._generate([base_image], prompts.freeform_prompt(instruction))


@dataclass
class GenerationCall:
    """One request observed by :class:`MockImageGenerator`."""

    operation: str
    images: List[ImageRef]
    instruction: str
    result: Optional[ImageRef] = None


def placeholder_image(seed: int, size: int = 8) -> ImageRef:
    """Small solid PNG whose colour is derived from ``seed``."""

    color = (seed % 251, (seed * 7) % 253, (seed * 13) % 255)
    info = PngInfo()
    info.add_text("seed", str(seed))
    buffer = io.BytesIO()
    Image.new("RGB", (size, size), color).save(buffer, format="PNG", pnginfo=info)
    return bytes_to_data_url(buffer.getvalue(), "image/png")


@dataclass
class MockImageGenerator(ImageGenerator):
    """Offline deterministic generator for tests and local runs.

    Every result is a distinct placeholder PNG. ``fail_with`` makes the next
    call raise; ``gate`` keeps calls suspended until the event is set.
    """

    calls: List[GenerationCall] = field(default_factory=list)
    fail_with: Optional[Exception] = None
    gate: Optional[asyncio.Event] = None
    image_size: int = 8

    async def _record(self, operation: str, images: Sequence[ImageRef], instruction: str) -> ImageRef:
        call = GenerationCall(operation=operation, images=list(images), instruction=instruction)
        self.calls.append(call)
        LOGGER.info("Mock generation", extra={"operation": operation, "call_index": len(self.calls)})
        if self.gate is not None:
            await self.gate.wait()
        if self.fail_with is not None:
            error, self.fail_with = self.fail_with, None
            raise error
        seed = zlib.crc32(operation.encode("utf-8")) + len(self.calls) * 97
        call.result = placeholder_image(seed, size=self.image_size)
        return call.result

    def operations(self) -> List[str]:
        return [call.operation for call in self.calls]

    async def generate_subject_model(self, source_image: ImageRef) -> ImageRef:
        return await self._record("generate_subject_model", [source_image], "")

    async def apply_garment(
        self, subject_image: ImageRef, garment_image: ImageRef, garment: WardrobeItem
    ) -> ImageRef:
        instruction = prompts.garment_prompt(garment.name, garment.category)
        return await self._record("apply_garment", [subject_image, garment_image], instruction)

    async def regenerate_pose(self, base_image: ImageRef, pose_instruction: str) -> ImageRef:
        return await self._record("regenerate_pose", [base_image], pose_instruction)

    async def recolor_garment(self, base_image: ImageRef, color: str) -> ImageRef:
        return await self._record("recolor_garment", [base_image], color)

    async def replace_background(self, base_image: ImageRef, background_instruction: str) -> ImageRef:
        return await self._record("replace_background", [base_image], background_instruction)

    async def relight(self, base_image: ImageRef, lighting_instruction: str) -> ImageRef:
        return await self._record("relight", [base_image], lighting_instruction)

    async def compose_lookbook(self, images: Sequence[ImageRef], layout_instruction: str) -> ImageRef:
        return await self._record("compose_lookbook", images, layout_instruction)

    async def freeform_edit(self, base_image: ImageRef, instruction: str) -> ImageRef:
        return await self._record("freeform_edit", [base_image], instruction)


def build_generator(config: DressingRoomConfig) -> ImageGenerator:
    if config.generator_backend == "mock":
        return MockImageGenerator()
    return GeminiImageGenerator(config)


__all__ = [
    "GenerationError",
    "GenerationBlockedError",
    "NoImageReturnedError",
    "GeneratorUnavailableError",
    "ImageGenerator",
    "GeminiImageGenerator",
    "MockImageGenerator",
    "GenerationCall",
    "build_generator",
    "extract_image",
    "placeholder_image",
]
