"""FastAPI server exposing the dressing room session over HTTP."""

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field

from dressing_room.app import DressingRoomApp
from dressing_room.logging_config import configure_logging
from logic.validation import (
    BackgroundRequest,
    ColorRequest,
    CropRequest,
    EditRequest,
    FinalizeModelRequest,
    GarmentUploadRequest,
    LightingRequest,
    LookbookRequest,
    ModelRequest,
    PoseRequest,
    StudioStateView,
)
from models.locales import translate
from models.wardrobe_item import WardrobeItem
from tools.image_io import CropRect

configure_logging()


class CatalogItemRequest(BaseModel):
    """Registers a catalog garment in the wardrobe panel."""

    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    url: str = Field(..., min_length=1, description="HTTP(S) URL or data: URL of the garment image")
    category: str = "top"


class LanguageRequest(BaseModel):
    language: str


def create_app(studio: DressingRoomApp | None = None) -> FastAPI:
    """Build the API around one local session.

    The session lives in process memory; there is no per-user server state.
    """

    studio = studio or DressingRoomApp()
    orchestrator = studio.orchestrator
    api = FastAPI(title="Dressing Room", version="0.1.0")
    api.state.studio = studio

    def _require_layer(index: int) -> None:
        snapshot = orchestrator.snapshot
        if not snapshot.outfit_history or not 0 <= index <= snapshot.current_outfit_index:
            raise HTTPException(status_code=404, detail=f"No active layer at index {index}")

    def _view() -> dict:
        payload = studio.state_view()
        if payload.get("status") == "needs_review":
            raise HTTPException(status_code=500, detail=payload)
        return payload

    @api.get("/healthz")
    async def healthcheck() -> dict:
        """Lightweight readiness probe."""

        return {
            "status": "ok",
            "service": "dressing-room",
            "environment": studio.config.environment or "local",
            "model": studio.config.model,
            "backend": studio.config.generator_backend,
        }

    @api.get("/state", response_model=StudioStateView)
    async def get_state() -> dict:
        return _view()

    @api.post("/model", response_model=StudioStateView)
    async def generate_model(request: ModelRequest) -> dict:
        await orchestrator.generate_model(request.image)
        return _view()

    @api.post("/model/finalize", response_model=StudioStateView)
    async def finalize_model(request: FinalizeModelRequest) -> dict:
        if not request.image and not orchestrator.pending_model_image:
            raise HTTPException(status_code=400, detail="No generated model to confirm")
        orchestrator.finalize_model(request.image)
        return _view()

    @api.post("/garments", response_model=StudioStateView)
    async def add_custom_garment(request: GarmentUploadRequest) -> dict:
        await orchestrator.add_custom_garment(request.image, request.name, request.category)
        return _view()

    @api.post("/wardrobe", response_model=StudioStateView)
    async def register_catalog_item(request: CatalogItemRequest) -> dict:
        try:
            item = WardrobeItem(id=request.id, name=request.name, url=request.url, category=request.category)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        orchestrator.wardrobe.register(item)
        return _view()

    @api.post("/wardrobe/{item_id}/apply", response_model=StudioStateView)
    async def apply_wardrobe_item(item_id: str) -> dict:
        item = orchestrator.wardrobe.get(item_id)
        if item is None:
            raise HTTPException(status_code=404, detail=translate("wardrobe.error.unknown", studio.config.language))
        await orchestrator.select_wardrobe_item(item)
        return _view()

    @api.post("/layers/{index}/revert", response_model=StudioStateView)
    async def revert_layer(index: int) -> dict:
        _require_layer(index)
        if index == 0:
            raise HTTPException(status_code=400, detail="The base model layer cannot be removed")
        orchestrator.revert_to_layer(index)
        return _view()

    @api.post("/layers/{index}/color", response_model=StudioStateView)
    async def change_color(index: int, request: ColorRequest) -> dict:
        _require_layer(index)
        await orchestrator.change_garment_color(index, request.color)
        return _view()

    @api.post("/layers/{index}/edit", response_model=StudioStateView)
    async def magic_wand(index: int, request: EditRequest) -> dict:
        _require_layer(index)
        await orchestrator.magic_wand_edit(index, request.instruction)
        return _view()

    @api.post("/pose", response_model=StudioStateView)
    async def select_pose(request: PoseRequest) -> dict:
        await orchestrator.select_pose(request.pose_index)
        return _view()

    @api.post("/background", response_model=StudioStateView)
    async def change_background(request: BackgroundRequest) -> dict:
        await orchestrator.change_background(request.prompt)
        return _view()

    @api.post("/lighting", response_model=StudioStateView)
    async def change_lighting(request: LightingRequest) -> dict:
        await orchestrator.change_lighting(request.prompt)
        return _view()

    @api.post("/crop", response_model=StudioStateView)
    async def crop(request: CropRequest) -> dict:
        orchestrator.crop(CropRect(x=request.x, y=request.y, width=request.width, height=request.height))
        return _view()

    @api.post("/lookbook", response_model=StudioStateView)
    async def generate_lookbook(request: LookbookRequest) -> dict:
        await orchestrator.generate_lookbook(request.template)
        return _view()

    @api.post("/undo", response_model=StudioStateView)
    async def undo() -> dict:
        orchestrator.undo()
        return _view()

    @api.post("/redo", response_model=StudioStateView)
    async def redo() -> dict:
        orchestrator.redo()
        return _view()

    @api.post("/start-over", response_model=StudioStateView)
    async def start_over() -> dict:
        orchestrator.start_over()
        return _view()

    @api.post("/language", response_model=StudioStateView)
    async def set_language(request: LanguageRequest) -> dict:
        try:
            studio.set_language(request.language)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return _view()

    return api


app = create_app()


def get_app() -> FastAPI:
    """Expose the FastAPI instance for ASGI servers."""

    return app
