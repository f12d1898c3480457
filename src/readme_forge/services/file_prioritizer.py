"""File prioritisation — category + importance score for fetched files.

Classification is an ordered list of ``(predicate, category, base score)``
rules where the first match wins; score adjustments are independent
predicates that all stack on top of the base score.
"""

from __future__ import annotations

import logging
from typing import Callable, Mapping

from readme_forge.domain.entities import FileAnalysis, FileCategory, ProcessingStrategy
from readme_forge.services.processing_strategy import select_strategy

logger = logging.getLogger(__name__)

Predicate = Callable[[str], bool]

CONFIG_MANIFESTS: frozenset[str] = frozenset(
    {
        "package.json", "requirements.txt", "cargo.toml", "go.mod", "pom.xml",
        "build.gradle", "gemfile", "composer.json", "pyproject.toml",
        "setup.py", "setup.cfg", "pubspec.yaml",
    }
)

ENTRY_POINT_NAMES: frozenset[str] = frozenset(
    {
        "main.js", "main.ts", "main.py", "main.go", "main.rs", "main.dart",
        "index.js", "index.ts", "app.js", "app.ts", "app.py",
    }
)

DOC_NAMES: frozenset[str] = frozenset(
    {"readme.md", "readme.rst", "readme.txt", "readme", "contributing.md", "changelog.md"}
)
DOC_DIRS: tuple[str, ...] = ("docs/", "doc/", "documentation/")

BUILD_NAMES: frozenset[str] = frozenset(
    {"dockerfile", "docker-compose.yml", "docker-compose.yaml", "makefile", "cmakelists.txt", "build.sh"}
)

SOURCE_DIRS: tuple[str, ...] = ("src/", "lib/", "app/", "components/")

TEST_MARKERS: tuple[str, ...] = ("test", "spec", "__tests__")
GENERATED_DIRS: frozenset[str] = frozenset({"node_modules", "dist", "build"})


def _filename(path: str) -> str:
    return path.rsplit("/", maxsplit=1)[-1].lower()


def _under(prefixes: tuple[str, ...]) -> Predicate:
    def _match(path: str) -> bool:
        lower = path.lower()
        return lower.startswith(prefixes) or any(f"/{p}" in lower for p in prefixes)

    return _match


CATEGORY_RULES: list[tuple[Predicate, FileCategory, int]] = [
    (lambda p: _filename(p) in CONFIG_MANIFESTS, FileCategory.CONFIG, 10),
    (lambda p: _filename(p) in ENTRY_POINT_NAMES, FileCategory.SOURCE, 9),
    (lambda p: _filename(p) in DOC_NAMES or _under(DOC_DIRS)(p), FileCategory.DOCUMENTATION, 8),
    (lambda p: _filename(p) in BUILD_NAMES or _filename(p).startswith("dockerfile"), FileCategory.BUILD, 7),
    (_under(SOURCE_DIRS), FileCategory.SOURCE, 6),
]

SCORE_ADJUSTMENTS: list[tuple[Predicate, int]] = [
    (lambda p: "/" not in p, 2),
    (lambda p: any(m in p.lower() for m in TEST_MARKERS), -3),
    (lambda p: any(part in GENERATED_DIRS for part in p.lower().split("/")[:-1]), -5),
]


def classify(path: str) -> tuple[FileCategory, int]:
    """Return ``(category, final score)`` for *path*; the score is at least 1."""
    category, score = FileCategory.OTHER, 1
    for predicate, rule_category, base in CATEGORY_RULES:
        if predicate(path):
            category, score = rule_category, base
            break

    for predicate, delta in SCORE_ADJUSTMENTS:
        if predicate(path):
            score += delta

    return category, max(1, score)


def prioritize_files(
    files: Mapping[str, str],
) -> tuple[list[FileAnalysis], ProcessingStrategy]:
    """Score fetched *files* and keep the top ``strategy.max_files``.

    Files with empty content are dropped before scoring.  The sort is stable,
    so equally scored files keep their fetch order.
    """
    analyses: list[FileAnalysis] = []
    total_bytes = 0
    for path, content in files.items():
        if not content:
            continue
        category, score = classify(path)
        size = len(content.encode("utf-8"))
        total_bytes += size
        analyses.append(
            FileAnalysis(
                path=path,
                content=content,
                category=category,
                importance_score=score,
                byte_size=size,
            )
        )

    strategy = select_strategy(len(analyses), total_bytes)
    logger.info(
        "Processing strategy for %d files (%d bytes): %s",
        len(analyses),
        total_bytes,
        strategy,
    )

    analyses.sort(key=lambda f: f.importance_score, reverse=True)
    return analyses[: strategy.max_files], strategy
