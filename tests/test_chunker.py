"""Tests for readme_forge.services.chunker."""

from __future__ import annotations

import pytest

from readme_forge.services.chunker import chunk_content


def test_short_content_is_a_single_chunk() -> None:
    assert chunk_content("print('hi')\n", 100) == ["print('hi')\n"]
    assert chunk_content("", 100) == [""]


def test_chunks_respect_size_and_reassemble() -> None:
    content = "".join(f"line number {i}\n" for i in range(500))

    chunks = chunk_content(content, 300)

    assert len(chunks) > 1
    assert "".join(chunks) == content
    assert all(len(chunk) <= 300 for chunk in chunks)


def test_lines_are_never_split() -> None:
    content = "".join(f"{i:04d}-abcdefghij\n" for i in range(200))

    for chunk in chunk_content(content, 250):
        assert chunk.endswith("\n")
        for line in chunk.splitlines():
            assert len(line) == 15


def test_oversized_line_becomes_its_own_chunk() -> None:
    long_line = "x" * 50 + "\n"
    content = "a\n" + long_line + "b\n"

    chunks = chunk_content(content, 20)

    assert chunks == ["a\n", long_line, "b\n"]


@pytest.mark.parametrize("size", [10, 64, 1000])
def test_trimmed_join_matches_trimmed_input(size: int) -> None:
    content = "\n\nfirst\n  indented line\n\nlast line without newline"

    chunks = chunk_content(content, size)

    assert "".join(chunks).strip() == content.strip()
