"""Dressing room app bootstrap."""

import logging
from functools import partial
from pathlib import Path

from pydantic import ValidationError

from agents.orchestrator import EditOrchestrator
from dressing_room.config import SUPPORTED_LANGUAGES, DressingRoomConfig
from dressing_room.logging_config import configure_logging, get_logger, log_event, operation_context
from logic.validation import StudioStateView, validation_failure
from models.wardrobe import Wardrobe
from tools.image_generator import ImageGenerator, build_generator
from tools.image_io import load_image_ref, save_image

LOGGER = get_logger(__name__)


class DressingRoomApp:
    """Wires together config, logging, the image generator and the orchestrator."""

    def __init__(
        self,
        config: DressingRoomConfig | None = None,
        generator: ImageGenerator | None = None,
        wardrobe: Wardrobe | None = None,
    ) -> None:
        self.config = config or DressingRoomConfig.from_env()
        configure_logging()

        self.generator = generator or build_generator(self.config)
        self.orchestrator = EditOrchestrator(
            generator=self.generator,
            language=self.config.language,
            wardrobe=wardrobe,
            image_loader=partial(load_image_ref, timeout=self.config.image_fetch_timeout),
        )
        log_event(
            LOGGER,
            level=logging.INFO,
            event="app_initialised",
            backend=self.config.generator_backend,
            model=self.config.model,
            language=self.config.language,
            environment=self.config.environment or "local",
        )

    def set_language(self, language: str) -> None:
        """Switch user-visible strings; only affects messages produced afterwards."""

        if language not in SUPPORTED_LANGUAGES:
            raise ValueError(f"Unsupported language '{language}'. Allowed: {list(SUPPORTED_LANGUAGES)}")
        self.config.language = language
        self.orchestrator.language = language

    def state_view(self) -> dict:
        """Validated snapshot of the session for rendering."""

        with operation_context("app:state_view") as correlation_id:
            payload = self.orchestrator.state_view()
            try:
                return StudioStateView.model_validate(payload).model_dump()
            except ValidationError as exc:
                log_event(
                    LOGGER,
                    level=logging.WARNING,
                    event="app_response_invalid",
                    method="state_view",
                    details=str(exc),
                    correlation_id=correlation_id,
                )
                return validation_failure("Studio state failed schema checks", exc)

    def download(self, path: str | Path, lookbook: bool = False) -> Path:
        """Write the displayed image, or the lookbook, to ``path``."""

        image = self.orchestrator.lookbook_image if lookbook else self.orchestrator.display_image
        if image is None:
            raise ValueError("Nothing to download yet.")
        target = save_image(image, path)
        log_event(LOGGER, level=logging.INFO, event="image_downloaded", lookbook=lookbook)
        return target


__all__ = ["DressingRoomApp"]
