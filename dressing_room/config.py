"""Configuration helpers for the Dressing Room app."""

from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional

DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image-preview"
SUPPORTED_LANGUAGES = ("EN", "中文")
SUPPORTED_BACKENDS = ("gemini", "mock")


@dataclass
class DressingRoomConfig:
    """Configuration values for the dressing room.

    Only the generator needs secrets; everything else has a local default so
    that the app can be started offline with the mock generator.
    """

    api_key: Optional[str] = None
    model: str = DEFAULT_IMAGE_MODEL
    language: str = "EN"
    generator_backend: str = "gemini"
    image_fetch_timeout: float = 10.0
    environment: str | None = None

    def __post_init__(self) -> None:
        if self.language not in SUPPORTED_LANGUAGES:
            raise ValueError(
                f"Unsupported language '{self.language}'. Allowed: {list(SUPPORTED_LANGUAGES)}"
            )
        self.generator_backend = self.generator_backend.strip().lower()
        if self.generator_backend not in SUPPORTED_BACKENDS:
            raise ValueError(
                f"Unsupported generator backend '{self.generator_backend}'. "
                f"Allowed: {list(SUPPORTED_BACKENDS)}"
            )

    @classmethod
    def from_env(cls) -> "DressingRoomConfig":
        """Build a config from environment variables or an environment YAML file.

        Environment specific YAML lives in ``config/environments/<env>.yaml`` by
        default and is merged with environment variables so that the Gemini key
        can be injected by the runtime environment instead of a file.
        """

        env_name = os.getenv("APP_ENV")
        config_path = os.getenv("APP_CONFIG_PATH")
        config_dir = Path(os.getenv("DRESSING_ROOM_CONFIG_DIR", "config/environments"))
        yaml_config: dict = {}

        if config_path:
            path = Path(config_path)
        elif env_name:
            path = config_dir / f"{env_name}.yaml"
        else:
            path = None

        if path and path.exists():
            yaml_config = cls._load_yaml_config(path)

        def get_value(key: str, default: Optional[str] = None) -> Optional[str]:
            env_key = key.upper()
            return os.getenv(env_key, yaml_config.get(key, default))

        api_key = get_value("gemini_api_key")
        model = get_value("model", DEFAULT_IMAGE_MODEL)
        language = get_value("language", "EN")
        backend = get_value("generator_backend", "gemini")
        timeout = get_value("image_fetch_timeout", "10")

        return cls(
            api_key=api_key,
            model=str(model or DEFAULT_IMAGE_MODEL),
            language=str(language or "EN"),
            generator_backend=str(backend or "gemini"),
            image_fetch_timeout=float(timeout or 10.0),
            environment=env_name,
        )

    @staticmethod
    def _load_yaml_config(path: Path) -> dict:
        """Parse a flat ``key: value`` config file."""

        config: dict[str, str] = {}
        for line in path.read_text(encoding="utf-8").splitlines():
            stripped = line.strip()
            if not stripped or stripped.startswith("#"):
                continue
            if ":" not in stripped:
                continue
            key, raw_value = stripped.split(":", 1)
            value = raw_value.strip()
            if (value.startswith("\"") and value.endswith("\"")) or (
                value.startswith("'") and value.endswith("'")
            ):
                value = value[1:-1]
            config[key.strip()] = value
        return config
