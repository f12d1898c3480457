"""Batched, paced execution of the file analyzer."""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Sequence

from readme_forge.domain.entities import FileAnalysis, PerFileSignal, ProcessingStrategy
from readme_forge.services.file_analyzer import FileAnalyzer
from readme_forge.services.processing_strategy import select_strategy

logger = logging.getLogger(__name__)


class AnalysisScheduler:
    """Runs analyses ``max_concurrent`` at a time with a pause between batches."""

    def __init__(
        self,
        analyzer: FileAnalyzer,
        batch_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._analyzer = analyzer
        self._batch_delay = batch_delay
        self._sleep = sleep

    async def analyze_all(
        self,
        files: Sequence[FileAnalysis],
        strategy: ProcessingStrategy | None = None,
    ) -> list[PerFileSignal]:
        """Analyse *files* in input order, dropping failures."""
        if strategy is None:
            strategy = select_strategy(len(files), sum(f.byte_size for f in files))

        batch_size = strategy.max_concurrent
        signals: list[PerFileSignal] = []

        for start in range(0, len(files), batch_size):
            batch = files[start : start + batch_size]
            results = await asyncio.gather(
                *(self._analyzer.analyze(f, strategy) for f in batch),
                return_exceptions=True,
            )
            for file, result in zip(batch, results):
                if isinstance(result, BaseException):
                    logger.warning("Analysis of %s raised: %s", file.path, result)
                elif result is None:
                    logger.debug("No signal for %s", file.path)
                else:
                    signals.append(result)

            if start + batch_size < len(files):
                await self._sleep(self._batch_delay)

        logger.info("Completed analysis of %d/%d files", len(signals), len(files))
        return signals
