"""Image references: encoding, loading, cropping and saving.

Every image in the dressing room is an opaque ``data:<mime>;base64,...``
reference. References are never mutated; each transformation returns a new
one.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import mimetypes
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple
from urllib.parse import urlparse

import requests
from PIL import Image, UnidentifiedImageError

logger = logging.getLogger(__name__)

_DATA_URL_HEADER = re.compile(r"^data:(?P<mime>[^;,]+);base64$")


class ImageReferenceError(ValueError):
    """Raised when a value cannot be used as an image reference."""


class InvalidCropError(ImageReferenceError):
    """Raised when a crop rectangle does not fit inside the image."""


class GarmentFetchError(RuntimeError):
    """Raised when a catalog garment image cannot be retrieved."""


@dataclass(frozen=True)
class CropRect:
    """Pixel rectangle in the coordinate space of the source image."""

    x: int
    y: int
    width: int
    height: int

    @property
    def box(self) -> Tuple[int, int, int, int]:
        return (self.x, self.y, self.x + self.width, self.y + self.height)


def bytes_to_data_url(data: bytes, mime_type: str) -> str:
    if not mime_type.startswith("image/"):
        raise ImageReferenceError(f"Unsupported MIME type: {mime_type}")
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def data_url_to_parts(image_ref: str) -> Tuple[str, bytes]:
    """Split a data URL into its MIME type and decoded payload."""

    header, sep, payload = image_ref.partition(",")
    if not sep:
        raise ImageReferenceError("Invalid data URL")
    match = _DATA_URL_HEADER.match(header)
    if not match:
        raise ImageReferenceError("Could not parse MIME type from data URL")
    try:
        data = base64.b64decode(payload, validate=True)
    except binascii.Error as exc:
        raise ImageReferenceError("Invalid base64 payload in data URL") from exc
    return match.group("mime"), data


def ensure_image_ref(image_ref: str) -> str:
    """Validate that ``image_ref`` is a data URL carrying an image."""

    mime_type, _ = data_url_to_parts(image_ref)
    if not mime_type.startswith("image/"):
        raise ImageReferenceError(f"Unsupported MIME type: {mime_type}")
    return image_ref


def file_to_data_url(path: str | Path) -> str:
    file_path = Path(path)
    mime_type, _ = mimetypes.guess_type(file_path.name)
    if not mime_type or not mime_type.startswith("image/"):
        raise ImageReferenceError(f"Unsupported MIME type: {mime_type or 'unknown'}")
    return bytes_to_data_url(file_path.read_bytes(), mime_type)


def fetch_image(url: str, timeout: Optional[float] = 10.0) -> str:
    """Download an HTTP(S) image and return it as a data URL.

    Raises:
        ImageReferenceError: If the URL is not HTTP/HTTPS or the body is not an image.
        GarmentFetchError: For network issues or non-2xx responses.
    """

    parsed = urlparse(url)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ImageReferenceError(f"Unsupported or invalid URL: {url}")

    logger.info("Fetching garment image", extra={"url": url})
    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as exc:
        logger.error("Network error fetching garment image", extra={"url": url, "error": str(exc)})
        raise GarmentFetchError(f"Network error fetching {url}: {exc}") from exc

    if not 200 <= response.status_code < 300:
        logger.warning(
            "Non-success status when fetching garment image",
            extra={"url": url, "status_code": response.status_code},
        )
        raise GarmentFetchError(f"Failed to fetch {url}: HTTP {response.status_code}")

    mime_type = response.headers.get("Content-Type", "").split(";")[0].strip()
    if not mime_type.startswith("image/"):
        mime_type = mimetypes.guess_type(parsed.path)[0] or mime_type
    return bytes_to_data_url(response.content, mime_type)


def load_image_ref(source: str, timeout: Optional[float] = 10.0) -> str:
    """Turn a data URL, HTTP(S) URL or local path into an image reference."""

    if source.startswith("data:"):
        return ensure_image_ref(source)
    if source.startswith(("http://", "https://")):
        return fetch_image(source, timeout=timeout)
    return file_to_data_url(source)


def crop_image(image_ref: str, rect: CropRect) -> str:
    """Extract ``rect`` from the image and return it as a PNG reference."""

    _, data = data_url_to_parts(image_ref)
    try:
        with Image.open(io.BytesIO(data)) as source:
            width, height = source.size
            if rect.width <= 0 or rect.height <= 0:
                raise InvalidCropError("Crop rectangle must have a positive size")
            if rect.x < 0 or rect.y < 0 or rect.x + rect.width > width or rect.y + rect.height > height:
                raise InvalidCropError(
                    f"Crop rectangle {rect.box} exceeds image bounds {(width, height)}"
                )
            cropped = source.crop(rect.box)
            buffer = io.BytesIO()
            cropped.save(buffer, format="PNG")
    except UnidentifiedImageError as exc:
        raise ImageReferenceError("Image payload could not be decoded") from exc
    return bytes_to_data_url(buffer.getvalue(), "image/png")


def image_size(image_ref: str) -> Tuple[int, int]:
    _, data = data_url_to_parts(image_ref)
    with Image.open(io.BytesIO(data)) as source:
        return source.size


def save_image(image_ref: str, path: str | Path) -> Path:
    """Write the decoded payload to ``path`` (the download action)."""

    _, data = data_url_to_parts(image_ref)
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(data)
    return target


__all__ = [
    "CropRect",
    "GarmentFetchError",
    "ImageReferenceError",
    "InvalidCropError",
    "bytes_to_data_url",
    "crop_image",
    "data_url_to_parts",
    "ensure_image_ref",
    "fetch_image",
    "file_to_data_url",
    "image_size",
    "load_image_ref",
    "save_image",
]
