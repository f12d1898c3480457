"""README generation from a repository summary plus user customization."""

from __future__ import annotations

import json
import logging
from typing import Callable

from readme_forge.domain.entities import (
    ReadmeCustomization,
    RepoMetadata,
    RepositorySummary,
)
from readme_forge.domain.exceptions import LlmError
from readme_forge.domain.ports.llm_gateway import LlmGateway
from readme_forge.services.response_parsing import strip_outer_fence

logger = logging.getLogger(__name__)

README_SYSTEM_PROMPT = """\
You write professional README.md files for open-source projects.  Use the \
analysis and repository info you are given; honour the user's customization \
(title, description, section order, tags, license) when provided.  Use \
installation and usage commands that match the project's main language.

Return only the markdown content: no JSON wrapper and no surrounding code fence.
"""


# ── Deterministic template ──────────────────────────────────────────────────


def _code_block(lines: tuple[str, ...], lang: str = "bash") -> str:
    return f"```{lang}\n" + "\n".join(lines) + "\n```"


def _section_basic(summary: RepositorySummary, meta: RepoMetadata, custom: ReadmeCustomization) -> str:
    title = custom.title or meta.name
    description = custom.description or summary.project_description
    lines = [f"# {title}", ""]
    if custom.tags:
        lines += [" ".join(f"`{tag}`" for tag in custom.tags), ""]
    lines.append(description)
    if summary.tech_stack:
        lines += ["", "**Tech stack:** " + ", ".join(summary.tech_stack)]
    return "\n".join(lines)


def _section_installation(summary: RepositorySummary, meta: RepoMetadata, custom: ReadmeCustomization) -> str:
    clone = f"git clone {meta.html_url or f'https://github.com/{meta.full_name}'}.git"
    commands = (clone, f"cd {meta.name}", *summary.installation_commands)
    return "## Installation\n\n" + _code_block(commands)


def _section_usage(summary: RepositorySummary, meta: RepoMetadata, custom: ReadmeCustomization) -> str:
    if not summary.usage_examples:
        return ""
    return "## Usage\n\n" + _code_block(summary.usage_examples)


def _section_features(summary: RepositorySummary, meta: RepoMetadata, custom: ReadmeCustomization) -> str:
    if not summary.features:
        return ""
    return "## Features\n\n" + "\n".join(f"- {f}" for f in summary.features)


def _section_development(summary: RepositorySummary, meta: RepoMetadata, custom: ReadmeCustomization) -> str:
    parts = ["## Development"]
    if summary.architecture:
        parts.append(summary.architecture)
    if summary.development_setup:
        parts.append(_code_block((summary.development_setup,)))
    if summary.dependencies:
        parts.append("**Dependencies:** " + ", ".join(summary.dependencies))
    return "\n\n".join(parts) if len(parts) > 1 else ""


def _section_contributing(summary: RepositorySummary, meta: RepoMetadata, custom: ReadmeCustomization) -> str:
    return (
        "## Contributing\n\n"
        "Contributions are welcome! Please open an issue or submit a pull request."
    )


def _section_license(summary: RepositorySummary, meta: RepoMetadata, custom: ReadmeCustomization) -> str:
    if not custom.license:
        return ""
    return f"## License\n\nThis project is licensed under the {custom.license} License."


def _section_support(summary: RepositorySummary, meta: RepoMetadata, custom: ReadmeCustomization) -> str:
    issues = f"{meta.html_url or f'https://github.com/{meta.full_name}'}/issues"
    return f"## Support\n\nIf you run into problems, please [open an issue]({issues})."


SectionRenderer = Callable[[RepositorySummary, RepoMetadata, ReadmeCustomization], str]

SECTION_RENDERERS: dict[str, SectionRenderer] = {
    "basic": _section_basic,
    "installation": _section_installation,
    "usage": _section_usage,
    "features": _section_features,
    "development": _section_development,
    "contributing": _section_contributing,
    "license": _section_license,
    "support": _section_support,
}


def render_readme(
    summary: RepositorySummary,
    metadata: RepoMetadata,
    customization: ReadmeCustomization | None = None,
) -> str:
    """Render a README from the template, following ``section_order``.

    Unknown section ids are ignored, a repeated id renders once at its first
    position and empty sections are left out.
    """
    custom = customization or ReadmeCustomization()
    order = dict.fromkeys(s for s in custom.section_order if s in SECTION_RENDERERS)
    rendered = [SECTION_RENDERERS[section](summary, metadata, custom) for section in order]
    return "\n\n".join(part for part in rendered if part).strip() + "\n"


# ── Generator ───────────────────────────────────────────────────────────────


class ReadmeGenerator:
    """Asks the LLM for the README; falls back to :func:`render_readme`."""

    def __init__(self, llm_gateway: LlmGateway) -> None:
        self._llm = llm_gateway

    async def generate(
        self,
        summary: RepositorySummary,
        metadata: RepoMetadata,
        customization: ReadmeCustomization | None = None,
    ) -> str:
        custom = customization or ReadmeCustomization()
        user_prompt = "\n\n".join(
            [
                "AI Analysis:\n" + json.dumps(summary.to_dict(), indent=2),
                "Repository Info:\n"
                f"- Name: {metadata.name}\n"
                f"- Description: {metadata.description or 'No description provided'}\n"
                f"- Language: {metadata.language or summary.main_language}",
                "User Customization:\n" + json.dumps(custom.to_dict(), indent=2),
                f"Use correct installation commands for {summary.main_language}.",
            ]
        )
        if custom.extra_instructions:
            user_prompt += f"\n\nAdditional instructions: {custom.extra_instructions}"

        try:
            raw = await self._llm.complete(
                README_SYSTEM_PROMPT, user_prompt, json_mode=False, temperature=0.3
            )
        except LlmError as exc:
            logger.warning("README generation failed, rendering template: %s", exc)
            return render_readme(summary, metadata, custom)

        markdown = strip_outer_fence(raw)
        if not markdown:
            logger.warning("README generation returned nothing, rendering template")
            return render_readme(summary, metadata, custom)
        return markdown + "\n"
