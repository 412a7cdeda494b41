"""Blob decoding — turn API payloads into text without failing on encoding noise."""

from __future__ import annotations

import base64
import binascii

from loc_viewer.domain.entities import BlobPayload
from loc_viewer.domain.exceptions import DecodeError


def decode_text(data: bytes) -> str:
    """Decode *data* as UTF-8, replacing invalid sequences with U+FFFD."""
    return data.decode("utf-8", errors="replace")


def decode_base64(content: str, path: str = "") -> bytes:
    """Decode base64 *content*, ignoring the line breaks the API embeds."""
    compact = "".join(content.split())
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(path, f"invalid base64 content: {exc}") from exc


def decode_blob(payload: BlobPayload, path: str = "") -> str:
    """Return the text of a git blob payload."""
    encoding = payload.encoding.lower()
    if encoding == "base64":
        return decode_text(decode_base64(payload.content, path))
    if encoding in ("utf-8", "utf8"):
        return payload.content
    raise DecodeError(path or payload.sha, f"unsupported blob encoding {payload.encoding!r}")
