"""Translate failures into the single message shown in the error banner."""

from __future__ import annotations

from models.locales import translate


def get_friendly_error_message(error: object, context: str, language: str = "EN") -> str:
    """Prefix ``context`` to the failure detail.

    Unsupported image formats get a fixed, actionable message instead of the
    raw provider text.
    """

    if isinstance(error, BaseException):
        raw_message = getattr(error, "message", None) or str(error)
    elif isinstance(error, str):
        raw_message = error
    elif error:
        raw_message = str(error)
    else:
        raw_message = ""
    raw_message = raw_message or translate("app.error.unknown", language)

    if "Unsupported MIME type" in raw_message:
        return translate("app.error.fileFormat", language)
    return f"{context}. {raw_message}"


__all__ = ["get_friendly_error_message"]
