"""Tests for image reference helpers."""

from pathlib import Path
from types import SimpleNamespace

import pytest
import requests

from tools import image_io
from tools.image_generator import placeholder_image
from tools.image_io import (
    CropRect,
    GarmentFetchError,
    ImageReferenceError,
    InvalidCropError,
    bytes_to_data_url,
    crop_image,
    data_url_to_parts,
    ensure_image_ref,
    fetch_image,
    file_to_data_url,
    image_size,
    load_image_ref,
    save_image,
)


def test_data_url_parts() -> None:
    ref = bytes_to_data_url(b"\x89PNG", "image/png")

    assert ref.startswith("data:image/png;base64,")
    assert data_url_to_parts(ref) == ("image/png", b"\x89PNG")


@pytest.mark.parametrize(
    "value",
    ["not a url", "data:image/png,abc", "data:image/png;base64,@@@"],
)
def test_malformed_references_are_rejected(value: str) -> None:
    with pytest.raises(ImageReferenceError):
        ensure_image_ref(value)


def test_non_image_mime_type_is_reported() -> None:
    with pytest.raises(ImageReferenceError, match="Unsupported MIME type: text/plain"):
        bytes_to_data_url(b"hello", "text/plain")


def test_crop_image_returns_png_region() -> None:
    source = placeholder_image(5, size=10)

    cropped = crop_image(source, CropRect(x=2, y=3, width=5, height=4))

    assert cropped.startswith("data:image/png;base64,")
    assert image_size(cropped) == (5, 4)
    assert image_size(source) == (10, 10)


@pytest.mark.parametrize(
    "rect",
    [CropRect(0, 0, 0, 4), CropRect(8, 0, 4, 4), CropRect(-1, 0, 2, 2)],
)
def test_crop_rejects_invalid_rectangles(rect: CropRect) -> None:
    with pytest.raises(InvalidCropError):
        crop_image(placeholder_image(5, size=10), rect)


def test_crop_rejects_undecodable_payload() -> None:
    with pytest.raises(ImageReferenceError):
        crop_image(bytes_to_data_url(b"not really a png", "image/png"), CropRect(0, 0, 1, 1))


def test_file_round_trip(tmp_path: Path) -> None:
    ref = placeholder_image(9)
    target = save_image(ref, tmp_path / "out" / "look.png")

    assert target.exists()
    assert file_to_data_url(target) == ref
    assert load_image_ref(str(target)) == ref

    text_file = tmp_path / "notes.txt"
    text_file.write_text("hi", encoding="utf-8")
    with pytest.raises(ImageReferenceError):
        file_to_data_url(text_file)


def test_fetch_image_uses_response_content_type(monkeypatch: pytest.MonkeyPatch) -> None:
    captured = {}

    def fake_get(url, timeout):
        captured["url"] = url
        captured["timeout"] = timeout
        return SimpleNamespace(status_code=200, headers={"Content-Type": "image/jpeg; charset=binary"}, content=b"jpg")

    monkeypatch.setattr(image_io.requests, "get", fake_get)

    ref = load_image_ref("https://cdn.example.com/shirt", timeout=3.0)

    assert ref == bytes_to_data_url(b"jpg", "image/jpeg")
    assert captured == {"url": "https://cdn.example.com/shirt", "timeout": 3.0}


def test_fetch_image_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        image_io.requests,
        "get",
        lambda url, timeout: SimpleNamespace(status_code=404, headers={}, content=b""),
    )
    with pytest.raises(GarmentFetchError, match="HTTP 404"):
        fetch_image("https://cdn.example.com/missing.png")

    def raise_timeout(url, timeout):
        raise requests.Timeout("slow")

    monkeypatch.setattr(image_io.requests, "get", raise_timeout)
    with pytest.raises(GarmentFetchError):
        fetch_image("https://cdn.example.com/slow.png")

    with pytest.raises(ImageReferenceError):
        fetch_image("ftp://example.com/shirt.png")
