"""Turn stored file bytes into text for chunking."""

from __future__ import annotations

import codecs

from vector_agent.core.errors import ProcessingError

# Binary formats are accepted at upload time but only ever decoded as plain text.
BINARY_CONTENT_TYPES = frozenset(
    {
        "application/pdf",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/msword",
    }
)


def decode_text(raw: bytes, content_type: str | None = None) -> str:
    """Decode bytes as UTF-8, honouring a BOM and replacing invalid sequences."""
    if raw.startswith(codecs.BOM_UTF16_LE) or raw.startswith(codecs.BOM_UTF16_BE):
        encoding = "utf-16"
    else:
        encoding = "utf-8-sig"
    text = raw.decode(encoding, errors="replace")
    if "\x00" in text:
        raise ProcessingError(f"{content_type or 'file'} does not contain decodable text")
    return text


def is_binary_content_type(content_type: str | None) -> bool:
    if not content_type:
        return False
    return content_type.split(";", 1)[0].strip().lower() in BINARY_CONTENT_TYPES


__all__ = ["decode_text", "is_binary_content_type", "BINARY_CONTENT_TYPES"]
