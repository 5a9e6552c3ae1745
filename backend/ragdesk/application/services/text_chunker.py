"""Text chunking for embedding and retrieval.

Two strategies:

* ``chunk_fixed`` — overlapping fixed-size character windows.
* ``chunk_by_paragraph`` — greedy packing of blank-line separated
  paragraphs under a size cap.

Both are pure and deterministic.
"""

import math
import re
from dataclasses import dataclass
from typing import Any

from ragdesk.domain.exceptions import ValidationError

# ── Chunking constants ──────────────────────────────────────────────
DEFAULT_CHUNK_SIZE = 1000
DEFAULT_CHUNK_OVERLAP = 200
_PARAGRAPH_BREAK = re.compile(r"\n\n+")
_PARAGRAPH_JOINER = "\n\n"


@dataclass(frozen=True)
class ChunkingOptions:
    """Validated chunking configuration.

    ``max_chunks=None`` means no cap.
    """

    chunk_size: int = DEFAULT_CHUNK_SIZE
    overlap: int = DEFAULT_CHUNK_OVERLAP
    max_chunks: int | None = None

    def __post_init__(self) -> None:
        if self.chunk_size <= 0:
            raise ValidationError("Chunk size must be positive", field="chunk_size")
        if self.overlap < 0:
            raise ValidationError("Overlap must not be negative", field="overlap")
        if self.overlap >= self.chunk_size:
            raise ValidationError("Overlap must be less than chunk size", field="overlap")
        if self.max_chunks is not None and self.max_chunks <= 0:
            raise ValidationError("Max chunks must be positive", field="max_chunks")

    @property
    def step(self) -> int:
        """Distance between window starts; always >= 1."""
        return self.chunk_size - self.overlap

    def offset_of(self, chunk_index: int) -> int:
        """Character offset where window ``chunk_index`` starts."""
        return chunk_index * self.step


def chunk_fixed(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
    max_chunks: int | None = None,
) -> list[str]:
    """Split text into overlapping windows of at most ``chunk_size`` characters.

    Windows start at multiples of ``chunk_size - overlap``. The first window
    that reaches the end of the text is the last one, so the tail is never
    emitted twice. ``chunks[0] + "".join(c[overlap:] for c in chunks[1:])``
    reproduces ``text`` when no cap is hit.

    Raises:
        ValidationError: ``chunk_size <= 0``, ``overlap >= chunk_size`` or a
            non-positive ``max_chunks``.
    """
    options = ChunkingOptions(chunk_size=chunk_size, overlap=overlap, max_chunks=max_chunks)
    return list(_windows(text, options))


def chunk_with_options(text: str, options: ChunkingOptions) -> list[str]:
    """``chunk_fixed`` driven by a pre-validated ``ChunkingOptions``."""
    return list(_windows(text, options))


def _windows(text: str, options: ChunkingOptions):
    limit = options.max_chunks if options.max_chunks is not None else math.inf
    start = 0
    emitted = 0
    while start < len(text) and emitted < limit:
        end = min(start + options.chunk_size, len(text))
        yield text[start:end]
        emitted += 1
        if end >= len(text):
            return
        # step >= 1 is guaranteed by ChunkingOptions, so this always advances
        start += options.step


def chunk_by_paragraph(text: str, max_chunk_size: int = DEFAULT_CHUNK_SIZE) -> list[str]:
    """Pack consecutive paragraphs into chunks of at most ``max_chunk_size``.

    Paragraphs are separated by one or more blank lines and re-joined with a
    single blank line. A paragraph longer than ``max_chunk_size`` is emitted
    on its own as an oversized chunk; it is never split mid-paragraph.
    """
    if max_chunk_size <= 0:
        raise ValidationError("Max chunk size must be positive", field="max_chunk_size")

    paragraphs = [p for p in _PARAGRAPH_BREAK.split(text) if p.strip()]

    chunks: list[str] = []
    current = ""
    for paragraph in paragraphs:
        candidate_length = len(current) + len(_PARAGRAPH_JOINER) + len(paragraph)
        if current and candidate_length > max_chunk_size:
            chunks.append(current.strip())
            current = paragraph
        else:
            current = f"{current}{_PARAGRAPH_JOINER}{paragraph}" if current else paragraph

    if current:
        chunks.append(current.strip())
    return chunks


def estimate_token_count(text: str) -> int:
    """Rough token estimate (~4 characters per token)."""
    return math.ceil(len(text) / 4)


_HEADING = re.compile(r"^#+\s+(.+)$", re.MULTILINE)
_FIRST_HEADING = re.compile(r"^#\s+(.+)$", re.MULTILINE)
_FIRST_LINE = re.compile(r"^(.+)$", re.MULTILINE)
_CODE = re.compile(r"```[\s\S]*?```|`[^`]+`")


def extract_text_metadata(text: str) -> dict[str, Any]:
    """Cheap structural metadata: title, word count, code presence, headings."""
    metadata: dict[str, Any] = {}

    title_match = _FIRST_HEADING.search(text) or _FIRST_LINE.search(text)
    if title_match:
        metadata["title"] = title_match.group(1).strip()

    metadata["word_count"] = len(text.split())
    metadata["has_code"] = bool(_CODE.search(text))

    headers = _HEADING.findall(text)
    if headers:
        metadata["headers"] = [h.strip() for h in headers]
    return metadata
