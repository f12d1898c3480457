"""Per-file signal extraction with chunking and memoization."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable

from readme_forge.domain.entities import (
    FileAnalysis,
    FileCategory,
    PerFileSignal,
    ProcessingStrategy,
)
from readme_forge.domain.exceptions import ExtractionError, LlmError
from readme_forge.domain.ports.llm_gateway import LlmGateway
from readme_forge.services.analysis_cache import AnalysisCache
from readme_forge.services.chunker import chunk_content
from readme_forge.services.response_parsing import (
    ChunkSignalPayload,
    FileSignalPayload,
    parse_model,
)

logger = logging.getLogger(__name__)

# ── Prompt templates ────────────────────────────────────────────────────────

FILE_SYSTEM_PROMPT = """\
You are a code analyst extracting facts that help write a project README. \
Only report what the file content actually shows.

Return **only** valid JSON with exactly these keys:

{
  "file_type": "config|source|documentation|build|other",
  "dependencies": ["<package or module the project depends on>"],
  "scripts": ["<script or command defined or documented>"],
  "entry_points": ["<main files or executables>"],
  "features": ["<user-facing feature>"],
  "description": "<one sentence on what this file does>",
  "importance": <1-10, how useful this file is for understanding the project>
}
"""

CHUNK_SYSTEM_PROMPT = """\
You are a code analyst.  You will see one chunk of a larger file.  Report \
only what this chunk shows.

Return **only** valid JSON with exactly these keys:

{
  "dependencies": ["<dependencies found>"],
  "scripts": ["<scripts or commands found>"],
  "entry_points": ["<entry points found>"],
  "features": ["<features mentioned>"],
  "description": "<brief description of this chunk>"
}
"""


def _dedupe(groups: Iterable[Iterable[str]]) -> tuple[str, ...]:
    seen: dict[str, None] = {}
    for group in groups:
        for item in group:
            seen.setdefault(item, None)
    return tuple(seen)


def _clamp_importance(value: int) -> int:
    return max(1, min(10, value))


class FileAnalyzer:
    """Turns one :class:`FileAnalysis` into a :class:`PerFileSignal`.

    Parameters
    ----------
    llm_gateway:
        Adapter used for the extraction calls.
    cache:
        Memo table keyed by ``(path, byte length)``; pass a fresh one per test.
    content_cap:
        Characters of an unchunked file sent to the model.
    """

    def __init__(
        self,
        llm_gateway: LlmGateway,
        cache: AnalysisCache | None = None,
        content_cap: int = 3000,
    ) -> None:
        self._llm = llm_gateway
        self._cache = cache if cache is not None else AnalysisCache()
        self._content_cap = content_cap

    @property
    def cache(self) -> AnalysisCache:
        return self._cache

    async def analyze(
        self, file: FileAnalysis, strategy: ProcessingStrategy
    ) -> PerFileSignal | None:
        """Return the signal for *file*, or ``None`` if extraction failed."""
        key = AnalysisCache.key(file.path, file.byte_size)
        cached = self._cache.get(key)
        if cached is not None:
            logger.debug("Using cached analysis for %s", file.path)
            return cached

        if strategy.use_chunking and len(file.content) > strategy.max_chunk_size:
            chunked = file.with_chunks(tuple(chunk_content(file.content, strategy.max_chunk_size)))
            signal = await self._analyze_chunked(chunked, strategy)
        else:
            signal = await self._analyze_whole(file)

        if signal is not None:
            self._cache.put(key, signal)
        return signal

    # ── Whole-file analysis ─────────────────────────────────────────────

    async def _analyze_whole(self, file: FileAnalysis) -> PerFileSignal | None:
        content = file.content[: self._content_cap]
        if len(file.content) > self._content_cap:
            content += "\n..."

        try:
            raw = await self._llm.complete(
                FILE_SYSTEM_PROMPT,
                f"File: {file.path}\n\nContent:\n{content}",
                temperature=0.1,
            )
            payload = parse_model(raw, FileSignalPayload)
        except (LlmError, ExtractionError) as exc:
            logger.warning("Analysis of %s failed: %s", file.path, exc)
            return None

        try:
            category = FileCategory(payload.file_type) if payload.file_type else file.category
        except ValueError:
            category = file.category

        importance = payload.importance if payload.importance is not None else file.importance_score
        return PerFileSignal(
            path=file.path,
            category=category,
            dependencies=_dedupe([payload.dependencies]),
            scripts=_dedupe([payload.scripts]),
            entry_points=_dedupe([payload.entry_points]),
            features=_dedupe([payload.features]),
            description=payload.description,
            importance=_clamp_importance(importance),
        )

    # ── Chunked analysis ────────────────────────────────────────────────

    async def _analyze_chunked(
        self, file: FileAnalysis, strategy: ProcessingStrategy
    ) -> PerFileSignal | None:
        chunks = file.chunks or ()
        if len(chunks) <= 1:
            return await self._analyze_whole(file)

        logger.info("Analysing %s in %d chunks", file.path, len(chunks))
        sem = asyncio.Semaphore(strategy.max_concurrent)

        async def _one(index: int, chunk: str) -> ChunkSignalPayload | None:
            if not chunk.strip():
                return ChunkSignalPayload()
            async with sem:
                return await self._analyze_chunk(file.path, chunk, index, len(chunks))

        results = await asyncio.gather(*(_one(i, c) for i, c in enumerate(chunks)))
        payloads = [r for r in results if r is not None]
        if not payloads:
            logger.warning("Every chunk of %s failed; leaving it uncached", file.path)
            return None

        # Chunk descriptions are discarded; the file keeps its own classification.
        return PerFileSignal(
            path=file.path,
            category=file.category,
            dependencies=_dedupe(p.dependencies for p in payloads),
            scripts=_dedupe(p.scripts for p in payloads),
            entry_points=_dedupe(p.entry_points for p in payloads),
            features=_dedupe(p.features for p in payloads),
            description="",
            importance=_clamp_importance(file.importance_score),
        )

    async def _analyze_chunk(
        self, path: str, chunk: str, index: int, total: int
    ) -> ChunkSignalPayload | None:
        try:
            raw = await self._llm.complete(
                CHUNK_SYSTEM_PROMPT,
                f"Chunk {index + 1}/{total} of file: {path}\n\nContent:\n{chunk.strip()}",
                temperature=0.1,
            )
            return parse_model(raw, ChunkSignalPayload)
        except (LlmError, ExtractionError) as exc:
            logger.warning("Analysis of chunk %d/%d of %s failed: %s", index + 1, total, path, exc)
            return None
