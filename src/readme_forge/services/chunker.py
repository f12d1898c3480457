"""Line-aligned content chunking."""

from __future__ import annotations


def chunk_content(content: str, max_chunk_size: int = 3000) -> list[str]:
    """Split *content* into chunks of at most *max_chunk_size* characters.

    Whole lines are accumulated greedily; a line is never split, so a single
    line longer than the limit becomes its own chunk.  Line endings are kept,
    which makes ``"".join(chunks) == content``.
    """
    if len(content) <= max_chunk_size:
        return [content]

    chunks: list[str] = []
    current: list[str] = []
    current_len = 0

    for line in content.splitlines(keepends=True):
        if current and current_len + len(line) > max_chunk_size:
            chunks.append("".join(current))
            current = []
            current_len = 0
        current.append(line)
        current_len += len(line)

    if current:
        chunks.append("".join(current))

    return chunks
