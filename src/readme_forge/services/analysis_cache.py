"""In-memory memoization of per-file analysis results."""

from __future__ import annotations

from readme_forge.domain.entities import PerFileSignal

CacheKey = tuple[str, int]


class AnalysisCache:
    """Maps ``(path, content byte length)`` to the signal extracted from it.

    Purely an optimisation: the same key always yields an equivalent
    signal, so concurrent writes simply overwrite each other.  Entries live
    as long as the cache object; there is no invalidation.
    """

    def __init__(self) -> None:
        self._entries: dict[CacheKey, PerFileSignal] = {}
        self.hits = 0
        self.misses = 0

    @staticmethod
    def key(path: str, byte_size: int) -> CacheKey:
        return (path, byte_size)

    def get(self, key: CacheKey) -> PerFileSignal | None:
        signal = self._entries.get(key)
        if signal is None:
            self.misses += 1
        else:
            self.hits += 1
        return signal

    def put(self, key: CacheKey, signal: PerFileSignal) -> None:
        self._entries[key] = signal

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)
