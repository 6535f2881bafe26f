"""Chunking utilities."""

from __future__ import annotations

import re
from typing import Iterator

_PARAGRAPH_RE = re.compile(r"\n\s*\n")
PARAGRAPH_SEPARATOR = "\n\n"

# Approximate tokens-per-word ratio used to turn an overlap budget into words.
TOKENS_PER_OVERLAP_WORD = 5


def chunk_text(text: str, max_chunk_size: int = 1000, chunk_overlap: int = 200) -> list[str]:
    """Split text into paragraph-granular chunks with a trailing-word overlap.

    Paragraphs are packed into a buffer, joined by a blank line, until
    appending the next one (separator included) would push the buffer past
    ``max_chunk_size`` characters. The finished buffer is emitted
    and the next one is seeded with the last ``chunk_overlap // 5`` words of
    it, so a seeded chunk may exceed the budget by the overlap. A paragraph
    larger than the budget is emitted whole.
    """
    chunks: list[str] = []
    current = ""
    overlap_words = chunk_overlap // TOKENS_PER_OVERLAP_WORD

    for paragraph in _iter_paragraphs(text):
        if current and len(current) + len(PARAGRAPH_SEPARATOR) + len(paragraph) > max_chunk_size:
            chunks.append(current)
            current = _seed_with_overlap(current, paragraph, overlap_words)
        else:
            current = f"{current}{PARAGRAPH_SEPARATOR}{paragraph}" if current else paragraph

    if current.strip():
        chunks.append(current)
    return chunks


def count_tokens(text: str) -> int:
    """Approximate token count as the number of whitespace-delimited words."""
    return len(text.split())


def _iter_paragraphs(text: str) -> Iterator[str]:
    for paragraph in _PARAGRAPH_RE.split(text):
        paragraph = paragraph.strip()
        if paragraph:
            yield paragraph


def _seed_with_overlap(previous: str, paragraph: str, overlap_words: int) -> str:
    if overlap_words <= 0:
        return paragraph
    tail = previous.split()[-overlap_words:]
    return " ".join([*tail, paragraph])


__all__ = ["chunk_text", "count_tokens", "TOKENS_PER_OVERLAP_WORD"]
