"""Builds the textual digest the summary prompt is made of."""

from __future__ import annotations

from typing import Sequence

from readme_forge.domain.entities import PerFileSignal, RepoMetadata, TreeEntry
from readme_forge.services.token_budget import BudgetedPrompt, allocate

_HEADERS = {
    "repository": "## Repository",
    "signals": "## File Analysis Summary",
    "tree": "## Directory Structure",
}

_MAX_TREE_LINES = 200


def _join(items: Sequence[str]) -> str:
    return ", ".join(items) if items else "None"


def describe_signal(signal: PerFileSignal) -> str:
    lines = [
        f"{signal.category.value.upper()}: {signal.path} — "
        f"{signal.description or 'No description'} (importance {signal.importance})",
        f"- Dependencies: {_join(signal.dependencies)}",
        f"- Scripts: {_join(signal.scripts)}",
        f"- Entry points: {_join(signal.entry_points)}",
        f"- Features: {_join(signal.features)}",
    ]
    return "\n".join(lines)


def describe_repository(
    metadata: RepoMetadata, language: str, total_files: int, analyzed: int
) -> str:
    return "\n".join(
        [
            f"- Name: {metadata.name}",
            f"- Description: {metadata.description or 'No description provided'}",
            f"- Language: {metadata.language or language}",
            f"- Total files: {total_files}",
            f"- Analyzed files: {analyzed}",
        ]
    )


def render_tree(tree: Sequence[TreeEntry]) -> str:
    lines = [f"{e.path}/" if not e.is_blob else e.path for e in tree]
    if len(lines) > _MAX_TREE_LINES:
        extra = len(lines) - _MAX_TREE_LINES
        lines = lines[:_MAX_TREE_LINES] + [f"… and {extra} more entries"]
    return "\n".join(lines)


def build_digest(
    metadata: RepoMetadata,
    signals: Sequence[PerFileSignal],
    tree: Sequence[TreeEntry],
    language: str,
    max_tokens: int = 6000,
) -> str:
    """Return the token-capped digest of metadata, signals and tree."""
    budget: BudgetedPrompt = allocate(
        {
            "repository": describe_repository(
                metadata, language, sum(1 for e in tree if e.is_blob), len(signals)
            ),
            "signals": "\n\n".join(describe_signal(s) for s in signals),
            "tree": render_tree(tree),
        },
        total_budget=max_tokens,
    )

    parts = [
        f"{_HEADERS[section.name]}\n\n{section.content}"
        for section in budget.sections
        if section.content
    ]
    return "\n\n---\n\n".join(parts)
