"""Tests for readme_forge.services.summarizer."""

from __future__ import annotations

import asyncio
import json

from readme_forge.domain.entities import (
    Enriched,
    Fallback,
    FileCategory,
    PerFileSignal,
    ProjectType,
    RepoMetadata,
    TreeEntry,
)
from readme_forge.domain.exceptions import LlmError
from readme_forge.services.detectors import build_fallback_summary
from readme_forge.services.summarizer import SUMMARY_SYSTEM_PROMPT, RepositorySummarizer

META = RepoMetadata(owner="octo", name="shipit", description="Deploy helper")
TREE = [TreeEntry(path="Dockerfile"), TreeEntry(path="main.go"), TreeEntry(path="go.mod")]
FILES = {"go.mod": "module x\n\nrequire github.com/spf13/cobra v1.8.0\n"}
SIGNALS = [
    PerFileSignal(path="go.mod", category=FileCategory.CONFIG, dependencies=("cobra",), importance=10)
]


def _digest(*args, **kwargs) -> str:
    return "## Repository\n\n- Name: shipit"


def _summarizer(llm) -> RepositorySummarizer:
    return RepositorySummarizer(llm, digest_builder=_digest)


def test_enrichment_failure_falls_back_to_heuristics(make_llm) -> None:
    outcome = asyncio.run(_summarizer(make_llm(LlmError("quota"))).summarize(META, SIGNALS, TREE, FILES))

    assert isinstance(outcome, Fallback)
    assert outcome.summary == build_fallback_summary(META, TREE, FILES)
    assert outcome.summary.project_type is ProjectType.CONTAINERIZED_APP
    assert outcome.summary.installation_commands == ("go mod download", "go install .")
    assert "quota" in outcome.reason


def test_unparseable_reply_falls_back(make_llm) -> None:
    outcome = asyncio.run(_summarizer(make_llm("Sorry, no.")).summarize(META, SIGNALS, TREE, FILES))

    assert isinstance(outcome, Fallback)
    assert outcome.summary.main_language == "Go"


def test_unexpected_error_still_falls_back(make_llm) -> None:
    def explode(system: str, user: str) -> str:
        raise RuntimeError("socket closed")

    outcome = asyncio.run(_summarizer(make_llm(explode)).summarize(META, SIGNALS, TREE, FILES))

    assert isinstance(outcome, Fallback)


def test_enriched_reply_is_merged_over_baseline(make_llm) -> None:
    reply = json.dumps(
        {
            "project_type": "cli-tool",
            "main_language": "Go",
            "features": ["Zero-downtime deploys"],
            "project_description": "Ship containers to any host.",
            "architecture": "cmd/ holds the CLI; internal/ the deploy engine.",
            "tech_stack": [],
        }
    )
    llm = make_llm(reply)

    outcome = asyncio.run(_summarizer(llm).summarize(META, SIGNALS, TREE, FILES))

    assert isinstance(outcome, Enriched)
    summary = outcome.summary
    assert summary.project_type is ProjectType.CLI_TOOL
    assert summary.features == ("Zero-downtime deploys",)
    assert summary.project_description == "Ship containers to any host."
    # Missing or empty fields keep the heuristic values.
    assert summary.installation_commands == ("go mod download", "go install .")
    assert summary.tech_stack == ("Go",)
    assert summary.dependencies == ("github.com/spf13/cobra",)

    call = llm.calls[0]
    assert call["system"] == SUMMARY_SYSTEM_PROMPT
    assert call["json_mode"] is True
    assert "Detected main language: Go" in str(call["user"])
    assert "- Name: shipit" in str(call["user"])


def test_invalid_project_type_keeps_detected_one(make_llm) -> None:
    llm = make_llm(json.dumps({"project_type": "microservice-mesh"}))

    outcome = asyncio.run(_summarizer(llm).summarize(META, SIGNALS, TREE, FILES))

    assert isinstance(outcome, Enriched)
    assert outcome.summary.project_type is ProjectType.CONTAINERIZED_APP


def test_digest_builder_receives_budget(make_llm) -> None:
    seen: dict[str, object] = {}

    def digest(metadata, signals, tree, language, max_tokens):
        seen.update(language=language, max_tokens=max_tokens, signals=list(signals))
        return "digest"

    summarizer = RepositorySummarizer(make_llm("{}"), max_digest_tokens=1234, digest_builder=digest)
    asyncio.run(summarizer.summarize(META, SIGNALS, TREE, FILES))

    assert seen == {"language": "Go", "max_tokens": 1234, "signals": SIGNALS}
