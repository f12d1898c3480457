"""Adaptive processing limits by repository size.

Bounds the total analysis work (files × calls × latency) to a near-constant
ceiling: the bigger the repository, the fewer files get deep analysis and
the smaller each analysis payload becomes.
"""

from __future__ import annotations

from readme_forge.domain.entities import ProcessingStrategy

# (min files exclusive, min bytes exclusive, strategy); first match wins.
_TIERS: list[tuple[int, int, ProcessingStrategy]] = [
    (1000, 10_000_000, ProcessingStrategy(max_files=15, max_chunk_size=2000, max_concurrent=3, use_chunking=True)),
    (500, 5_000_000, ProcessingStrategy(max_files=25, max_chunk_size=2500, max_concurrent=4, use_chunking=True)),
    (100, 1_000_000, ProcessingStrategy(max_files=30, max_chunk_size=3000, max_concurrent=5, use_chunking=False)),
]

SMALL_STRATEGY = ProcessingStrategy(max_files=40, max_chunk_size=4000, max_concurrent=6, use_chunking=False)


def select_strategy(file_count: int, total_bytes: int) -> ProcessingStrategy:
    """Return the strategy for a repository with *file_count* files of *total_bytes*."""
    for count_limit, byte_limit, strategy in _TIERS:
        if file_count > count_limit or total_bytes > byte_limit:
            return strategy
    return SMALL_STRATEGY
