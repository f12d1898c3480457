"""Repository summarizer — enrich via the LLM, fall back to heuristics."""

from __future__ import annotations

import logging
from typing import Callable, Mapping, Sequence

from readme_forge.domain.entities import (
    Enriched,
    Fallback,
    PerFileSignal,
    ProjectType,
    RepoMetadata,
    RepositorySummary,
    SummaryOutcome,
    TreeEntry,
)
from readme_forge.domain.exceptions import ExtractionError, LlmError, SummaryEnrichmentError
from readme_forge.domain.ports.llm_gateway import LlmGateway
from readme_forge.services.detectors import build_fallback_summary
from readme_forge.services.response_parsing import SummaryPayload, parse_model
from readme_forge.services.signal_digest import build_digest

logger = logging.getLogger(__name__)

DigestBuilder = Callable[..., str]

SUMMARY_SYSTEM_PROMPT = """\
You are an expert software developer analysing a GitHub repository in \
order to write its README.  You receive repository metadata, per-file \
analysis results and the directory structure.

Return **only** valid JSON with exactly these keys:

{
  "project_type": "containerized-app|web-app|cli-tool|library",
  "main_language": "<primary language>",
  "dependencies": ["<main dependencies>"],
  "entry_points": ["<main entry files>"],
  "features": ["<key features based on the analysis>"],
  "installation_commands": ["<installation commands>"],
  "usage_examples": ["<basic usage commands or snippets>"],
  "project_description": "<2-3 sentence description of what the project does>",
  "tech_stack": ["<technologies and frameworks>"],
  "architecture": "<brief architecture overview based on the file structure>",
  "development_setup": "<development setup instructions>"
}

Guidelines:
- Use commands native to the project's ecosystem: "go mod" / "go install" \
for Go, "pip" for Python, "npm" for Node.js, "cargo" for Rust, Maven or \
Gradle for Java, "composer" for PHP.  Never suggest npm for a non-Node project.
- Only mention technologies you see evidence of.
"""


class RepositorySummarizer:
    """Produces the :class:`RepositorySummary` for one pipeline run."""

    def __init__(
        self,
        llm_gateway: LlmGateway,
        max_digest_tokens: int = 6000,
        digest_builder: DigestBuilder = build_digest,
    ) -> None:
        self._llm = llm_gateway
        self._max_digest_tokens = max_digest_tokens
        self._build_digest = digest_builder

    async def summarize(
        self,
        metadata: RepoMetadata,
        signals: Sequence[PerFileSignal],
        tree: Sequence[TreeEntry],
        files: Mapping[str, str],
    ) -> SummaryOutcome:
        """Return ``Enriched`` on a usable LLM reply, otherwise ``Fallback``.

        Never raises: the fallback is built from heuristics alone.
        """
        baseline = build_fallback_summary(metadata, tree, files)

        try:
            summary = await self._enrich(metadata, signals, tree, baseline)
        except SummaryEnrichmentError as exc:
            logger.warning("Summary enrichment failed, using heuristics: %s", exc)
            return Fallback(summary=baseline, reason=str(exc))
        except Exception as exc:
            logger.exception("Unexpected error during summary enrichment")
            return Fallback(summary=baseline, reason=f"unexpected error: {exc}")

        return Enriched(summary=summary)

    async def _enrich(
        self,
        metadata: RepoMetadata,
        signals: Sequence[PerFileSignal],
        tree: Sequence[TreeEntry],
        baseline: RepositorySummary,
    ) -> RepositorySummary:
        digest = self._build_digest(
            metadata,
            signals,
            tree,
            baseline.main_language,
            max_tokens=self._max_digest_tokens,
        )
        user_prompt = (
            f"{digest}\n\n"
            f"Detected project type: {baseline.project_type.value}\n"
            f"Detected main language: {baseline.main_language}\n"
            f"Use installation and usage commands appropriate for {baseline.main_language}."
        )

        try:
            raw = await self._llm.complete(SUMMARY_SYSTEM_PROMPT, user_prompt)
            payload = parse_model(raw, SummaryPayload)
        except (LlmError, ExtractionError) as exc:
            raise SummaryEnrichmentError(str(exc)) from exc

        return merge_summary(payload, baseline)


def merge_summary(payload: SummaryPayload, baseline: RepositorySummary) -> RepositorySummary:
    """Overlay the LLM *payload* on *baseline*; missing fields keep the heuristic value."""
    try:
        project_type = ProjectType(payload.project_type) if payload.project_type else baseline.project_type
    except ValueError:
        project_type = baseline.project_type

    def _tuple(value: list[str] | None, default: tuple[str, ...]) -> tuple[str, ...]:
        return tuple(value) if value else default

    return RepositorySummary(
        project_type=project_type,
        main_language=payload.main_language or baseline.main_language,
        dependencies=_tuple(payload.dependencies, baseline.dependencies),
        entry_points=_tuple(payload.entry_points, baseline.entry_points),
        features=_tuple(payload.features, baseline.features),
        installation_commands=_tuple(payload.installation_commands, baseline.installation_commands),
        usage_examples=_tuple(payload.usage_examples, baseline.usage_examples),
        project_description=payload.project_description or baseline.project_description,
        tech_stack=_tuple(payload.tech_stack, baseline.tech_stack),
        architecture=payload.architecture or baseline.architecture,
        development_setup=payload.development_setup or baseline.development_setup,
    )
