"""Pydantic schemas for dressing room requests and the rendered session view."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from models.taxonomy import (
    BACKGROUND_OPTIONS,
    LIGHTING_OPTIONS,
    LOOKBOOK_TEMPLATES,
    POSE_INSTRUCTIONS,
    validate_category,
)


def _one_of(value: str, allowed, label: str) -> str:
    if value not in allowed:
        raise ValueError(f"Unsupported {label} '{value}'. Allowed: {list(allowed)}")
    return value


class ModelRequest(BaseModel):
    """Photo the subject model is generated from."""

    image: str = Field(min_length=1, description="data: URL of the uploaded photo")


class FinalizeModelRequest(BaseModel):
    """Confirms the pending model, or installs ``image`` directly."""

    image: Optional[str] = None


class GarmentUploadRequest(BaseModel):
    """A garment image the user uploaded."""

    image: str = Field(min_length=1)
    name: str = Field(min_length=1)
    category: str = "top"

    @field_validator("category")
    @classmethod
    def _validate_category(cls, value: str) -> str:
        return validate_category(value)


class PoseRequest(BaseModel):
    pose_index: int = Field(ge=0, lt=len(POSE_INSTRUCTIONS))


class BackgroundRequest(BaseModel):
    prompt: str

    @field_validator("prompt")
    @classmethod
    def _validate_prompt(cls, value: str) -> str:
        return _one_of(value, BACKGROUND_OPTIONS, "background")


class LightingRequest(BaseModel):
    prompt: str

    @field_validator("prompt")
    @classmethod
    def _validate_prompt(cls, value: str) -> str:
        return _one_of(value, LIGHTING_OPTIONS, "lighting")


class ColorRequest(BaseModel):
    color: str = Field(min_length=1)


class EditRequest(BaseModel):
    instruction: str = Field(min_length=1)


class CropRequest(BaseModel):
    """Crop rectangle in pixels of the displayed image."""

    x: int = Field(ge=0)
    y: int = Field(ge=0)
    width: int = Field(gt=0)
    height: int = Field(gt=0)


class LookbookRequest(BaseModel):
    template: str

    @field_validator("template")
    @classmethod
    def _validate_template(cls, value: str) -> str:
        return _one_of(value, LOOKBOOK_TEMPLATES, "lookbook template")


class OptionView(BaseModel):
    value: str
    label: str


class LayerView(BaseModel):
    index: int
    garment_id: Optional[str] = None
    label: str
    category: Optional[str] = None
    poses: List[str] = []


class WardrobeItemView(BaseModel):
    id: str
    name: str
    url: str
    category: str
    is_active: bool = False


class StudioStateView(BaseModel):
    """Structure returned by every state-changing endpoint."""

    has_model: bool
    display_image: Optional[str] = None
    is_loading: bool = False
    loading_message: str = ""
    error: Optional[str] = None
    current_outfit_index: int = 0
    current_pose_index: int = 0
    available_poses: List[str] = []
    pose_options: List[OptionView] = []
    background_options: List[OptionView] = []
    lighting_options: List[OptionView] = []
    active_background: str = "Default"
    active_lighting: str = "Default"
    can_undo: bool = False
    can_redo: bool = False
    layers: List[LayerView] = []
    dormant_layer_count: int = 0
    active_garment_ids: List[str] = []
    wardrobe: List[WardrobeItemView] = []
    pending_model_image: Optional[str] = None
    lookbook_image: Optional[str] = None


class ValidationResult(BaseModel):
    """Wrapper returned when a payload fails validation."""

    status: Literal["needs_review"] = "needs_review"
    message: str
    details: List[Dict[str, Any]]


def validation_failure(message: str, exc: ValidationError) -> Dict[str, Any]:
    """Translate Pydantic errors into a consistent review payload."""

    return ValidationResult(message=message, details=exc.errors(include_context=False)).model_dump()


__all__ = [
    "ModelRequest",
    "FinalizeModelRequest",
    "GarmentUploadRequest",
    "PoseRequest",
    "BackgroundRequest",
    "LightingRequest",
    "ColorRequest",
    "EditRequest",
    "CropRequest",
    "LookbookRequest",
    "OptionView",
    "LayerView",
    "WardrobeItemView",
    "StudioStateView",
    "ValidationResult",
    "validation_failure",
]
