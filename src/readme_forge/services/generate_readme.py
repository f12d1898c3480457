"""Generate-README use case — the main orchestration pipeline.

This is the single entry point for the business logic.  It depends only on
the two ports (:class:`RepoFetcher` and :class:`LlmGateway`, the latter
through the analyzer, summarizer and generator) and the pure service
modules.  The interface layer injects concrete adapters at runtime.

One run moves through ``fetching → selecting → analyzing → summarizing →
generating → done``.  Only the fetching stage can fail the run; every later
stage degrades to smaller or heuristic results instead.
"""

from __future__ import annotations

import logging
from typing import Callable

from readme_forge.domain.entities import (
    PipelineResult,
    PipelineStage,
    ReadmeCustomization,
    RepoMetadata,
    TreeEntry,
)
from readme_forge.domain.exceptions import ReadmeForgeError
from readme_forge.domain.ports.repo_fetcher import RepoFetcher
from readme_forge.domain.value_objects import RepoRef
from readme_forge.services.analysis_scheduler import AnalysisScheduler
from readme_forge.services.file_filter import select_paths_to_fetch
from readme_forge.services.file_prioritizer import prioritize_files
from readme_forge.services.readme_generator import ReadmeGenerator
from readme_forge.services.summarizer import RepositorySummarizer

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[PipelineStage], None]


class GenerateReadmeUseCase:
    """Orchestrates the full repo → summary → README pipeline.

    Parameters
    ----------
    repo_fetcher:
        Adapter that fetches metadata, tree and file content from GitHub.
    scheduler:
        Batched runner around the per-file analyzer.
    summarizer:
        Aggregates per-file signals into a repository summary.
    generator:
        Turns the summary into README markdown.
    max_files_to_fetch:
        Maximum number of individual files to download.
    """

    def __init__(
        self,
        repo_fetcher: RepoFetcher,
        scheduler: AnalysisScheduler,
        summarizer: RepositorySummarizer,
        generator: ReadmeGenerator,
        max_files_to_fetch: int = 30,
    ) -> None:
        self._fetcher = repo_fetcher
        self._scheduler = scheduler
        self._summarizer = summarizer
        self._generator = generator
        self._max_files = max_files_to_fetch

    # ── Public entry points ─────────────────────────────────────────────

    async def execute(
        self,
        repository: str,
        customization: ReadmeCustomization | None = None,
        progress: ProgressCallback | None = None,
    ) -> PipelineResult:
        """Run the full pipeline and return the summary plus README markdown."""
        result = await self._run(repository, progress)

        self._report(progress, PipelineStage.GENERATING)
        readme = await self._generator.generate(result.summary, result.metadata, customization)

        self._report(progress, PipelineStage.DONE)
        return PipelineResult(
            metadata=result.metadata,
            tree=result.tree,
            files=result.files,
            outcome=result.outcome,
            strategy=result.strategy,
            analyzed_files=result.analyzed_files,
            readme=readme,
            signals=result.signals,
        )

    async def analyze(
        self,
        repository: str,
        progress: ProgressCallback | None = None,
    ) -> PipelineResult:
        """Run the pipeline up to the summary, without README generation."""
        result = await self._run(repository, progress)
        self._report(progress, PipelineStage.DONE)
        return result

    # ── Stages ──────────────────────────────────────────────────────────

    async def _run(self, repository: str, progress: ProgressCallback | None) -> PipelineResult:
        ref = RepoRef.from_string(repository)
        logger.info("Generating README data for %s", ref.full_name)

        self._report(progress, PipelineStage.FETCHING)
        try:
            metadata, tree, files = await self._fetch(ref)
        except ReadmeForgeError as exc:
            logger.warning("Pipeline for %s failed while fetching: %s", ref.full_name, exc)
            self._report(progress, PipelineStage.FAILED)
            raise

        self._report(progress, PipelineStage.SELECTING)
        prioritized, strategy = prioritize_files(files)
        logger.info("Prioritized %d of %d fetched files", len(prioritized), len(files))

        self._report(progress, PipelineStage.ANALYZING)
        signals = await self._scheduler.analyze_all(prioritized, strategy)

        self._report(progress, PipelineStage.SUMMARIZING)
        outcome = await self._summarizer.summarize(metadata, signals, tree, files)

        return PipelineResult(
            metadata=metadata,
            tree=tree,
            files=files,
            outcome=outcome,
            strategy=strategy,
            analyzed_files=len(signals),
            signals=signals,
        )

    async def _fetch(
        self, ref: RepoRef
    ) -> tuple[RepoMetadata, list[TreeEntry], dict[str, str]]:
        metadata = await self._fetcher.get_repository(ref.owner, ref.name)
        tree = await self._fetcher.get_repository_tree(
            ref.owner, ref.name, metadata.default_branch
        )
        logger.info("Found %d entries in %s", len(tree), ref.full_name)

        paths = select_paths_to_fetch(tree, limit=self._max_files)
        logger.info("Fetching %d files from %s", len(paths), ref.full_name)
        files = await self._fetcher.get_multiple_files(ref.owner, ref.name, paths)
        return metadata, tree, files

    @staticmethod
    def _report(progress: ProgressCallback | None, stage: PipelineStage) -> None:
        logger.debug("Pipeline stage: %s", stage.value)
        if progress is not None:
            progress(stage)
