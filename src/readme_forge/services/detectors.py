"""Heuristic detectors and the deterministic summary fallback.

Everything here is pure and never raises on odd input: it is what the
summarizer falls back to when enrichment is unavailable.
"""

from __future__ import annotations

import json
import re
import tomllib
from dataclasses import dataclass
from typing import Callable, Mapping, Sequence

from readme_forge.domain.entities import (
    ProjectType,
    RepoMetadata,
    RepositorySummary,
    TreeEntry,
)

MAX_DEPENDENCIES = 10
MAX_ENTRY_POINTS = 10
MAX_FEATURES = 5


@dataclass(frozen=True, slots=True)
class RepoSnapshot:
    """Precomputed views of the tree and fetched files for rule predicates."""

    paths: tuple[str, ...]
    filenames: frozenset[str]
    extensions: frozenset[str]
    fetched: Mapping[str, str]

    @classmethod
    def build(cls, tree: Sequence[TreeEntry], files: Mapping[str, str]) -> RepoSnapshot:
        blob_paths = tuple(e.path for e in tree if e.is_blob)
        known = set(blob_paths)
        paths = blob_paths + tuple(p for p in files if p not in known)
        filenames = frozenset(p.rsplit("/", maxsplit=1)[-1].lower() for p in paths)
        extensions = frozenset(
            name.rsplit(".", maxsplit=1)[-1] for name in filenames if "." in name
        )
        return cls(paths=paths, filenames=filenames, extensions=extensions, fetched=files)

    def has_extension(self, *exts: str) -> bool:
        return any(ext in self.extensions for ext in exts)

    def has_file(self, *names: str) -> bool:
        return any(name in self.filenames for name in names)


SnapshotPredicate = Callable[[RepoSnapshot], bool]

# ── Language & project type ─────────────────────────────────────────────────

LANGUAGE_RULES: list[tuple[SnapshotPredicate, str]] = [
    (lambda s: s.has_extension("go") or s.has_file("go.mod"), "Go"),
    (
        lambda s: s.has_extension("py")
        or s.has_file("requirements.txt", "pyproject.toml", "setup.py"),
        "Python",
    ),
    (
        lambda s: s.has_extension("js", "ts", "jsx", "tsx", "mjs", "cjs")
        or s.has_file("package.json"),
        "JavaScript",
    ),
    (lambda s: s.has_extension("rs") or s.has_file("cargo.toml"), "Rust"),
    (lambda s: s.has_extension("java") or s.has_file("pom.xml"), "Java"),
    (lambda s: s.has_extension("php") or s.has_file("composer.json"), "PHP"),
]

PROJECT_TYPE_RULES: list[tuple[SnapshotPredicate, ProjectType]] = [
    (
        lambda s: any(name.startswith("dockerfile") for name in s.filenames),
        ProjectType.CONTAINERIZED_APP,
    ),
    (lambda s: s.has_file("index.html", "app.js"), ProjectType.WEB_APP),
    (lambda s: s.has_file("main.go", "main.py"), ProjectType.CLI_TOOL),
]


def detect_language(snapshot: RepoSnapshot) -> str:
    for predicate, language in LANGUAGE_RULES:
        if predicate(snapshot):
            return language
    return "Unknown"


def detect_project_type(snapshot: RepoSnapshot) -> ProjectType:
    for predicate, project_type in PROJECT_TYPE_RULES:
        if predicate(snapshot):
            return project_type
    return ProjectType.LIBRARY


# ── Command templates ───────────────────────────────────────────────────────

INSTALL_COMMANDS: dict[str, tuple[str, ...]] = {
    "go": ("go mod download", "go install ."),
    "python": ("pip install -r requirements.txt",),
    "javascript": ("npm install",),
    "rust": ("cargo build",),
    "java": ("./mvnw install",),
    "php": ("composer install",),
}

USAGE_EXAMPLES: dict[str, tuple[str, ...]] = {
    "go": ("go run main.go", "go build && ./app"),
    "python": ("python main.py", "python -m app"),
    "javascript": ("npm start", "node index.js"),
    "rust": ("cargo run", "cargo test"),
    "java": ("./mvnw spring-boot:run",),
    "php": ("php index.php",),
}

DEVELOPMENT_SETUP: dict[str, str] = {
    "go": "go mod download && go run main.go",
    "python": "pip install -r requirements.txt && python main.py",
    "javascript": "npm install && npm run dev",
    "rust": "cargo build && cargo run",
    "java": "./mvnw install && ./mvnw test",
    "php": "composer install && php -S localhost:8000",
}


def installation_commands(language: str) -> tuple[str, ...]:
    return INSTALL_COMMANDS.get(
        language.lower(),
        ("# Installation commands will be generated based on project type",),
    )


def usage_examples(language: str) -> tuple[str, ...]:
    return USAGE_EXAMPLES.get(
        language.lower(),
        ("# Usage examples will be generated based on project type",),
    )


def development_setup(language: str) -> str:
    return DEVELOPMENT_SETUP.get(
        language.lower(),
        "# Development setup will be generated based on project type",
    )


# ── Textual extraction ──────────────────────────────────────────────────────

_GO_REQUIRE_LINE_RE = re.compile(r"^require\s+([^\s(]+)", re.MULTILINE)
_GO_REQUIRE_BLOCK_RE = re.compile(r"^require\s*\((.*?)^\)", re.MULTILINE | re.DOTALL)
_REQUIREMENT_NAME_RE = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._\-]*)")
_BULLET_RE = re.compile(r"^\s*[-*+]\s+(.+)$")


def _go_dependencies(content: str) -> list[str]:
    deps = _GO_REQUIRE_LINE_RE.findall(content)
    for block in _GO_REQUIRE_BLOCK_RE.findall(content):
        for line in block.splitlines():
            line = line.strip()
            if line and not line.startswith("//"):
                deps.append(line.split()[0])
    return deps


def _npm_dependencies(content: str) -> list[str]:
    try:
        pkg = json.loads(content)
    except json.JSONDecodeError:
        return []
    if not isinstance(pkg, dict) or not isinstance(pkg.get("dependencies"), dict):
        return []
    return list(pkg["dependencies"])


def _requirement_names(lines: Sequence[str]) -> list[str]:
    names: list[str] = []
    for line in lines:
        stripped = line.strip()
        if not stripped or stripped.startswith(("#", "-")):
            continue
        match = _REQUIREMENT_NAME_RE.match(stripped)
        if match:
            names.append(match.group(1))
    return names


def _load_toml(content: str) -> dict[str, object]:
    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError:
        return {}


def _pyproject_dependencies(content: str) -> list[str]:
    project = _load_toml(content).get("project")
    if not isinstance(project, dict) or not isinstance(project.get("dependencies"), list):
        return []
    return _requirement_names([str(d) for d in project["dependencies"]])


def _cargo_dependencies(content: str) -> list[str]:
    deps = _load_toml(content).get("dependencies")
    return list(deps) if isinstance(deps, dict) else []


MANIFEST_PARSERS: list[tuple[str, Callable[[str], list[str]]]] = [
    ("go.mod", _go_dependencies),
    ("package.json", _npm_dependencies),
    ("requirements.txt", lambda c: _requirement_names(c.splitlines())),
    ("pyproject.toml", _pyproject_dependencies),
    ("cargo.toml", _cargo_dependencies),
]


def extract_dependencies(files: Mapping[str, str]) -> tuple[str, ...]:
    """Scan fetched manifests for dependency names (first 10, deduplicated)."""
    found: dict[str, None] = {}
    for path, content in files.items():
        name = path.rsplit("/", maxsplit=1)[-1].lower()
        for manifest, parser in MANIFEST_PARSERS:
            if name == manifest:
                for dep in parser(content):
                    found.setdefault(dep, None)
    return tuple(found)[:MAX_DEPENDENCIES]


ENTRY_POINT_FILES: frozenset[str] = frozenset({"main.go", "main.py", "index.js", "app.py"})


def extract_entry_points(tree: Sequence[TreeEntry]) -> tuple[str, ...]:
    points = [
        e.path
        for e in tree
        if e.is_blob and e.path.rsplit("/", maxsplit=1)[-1].lower() in ENTRY_POINT_FILES
    ]
    return tuple(points[:MAX_ENTRY_POINTS])


def extract_features(files: Mapping[str, str]) -> tuple[str, ...]:
    """Pull bullet-point lines longer than 10 characters out of READMEs."""
    features: list[str] = []
    for path, content in files.items():
        if not path.rsplit("/", maxsplit=1)[-1].lower().startswith("readme"):
            continue
        for line in content.splitlines():
            match = _BULLET_RE.match(line)
            if not match:
                continue
            feature = match.group(1).strip()
            if len(feature) > 10 and feature not in features:
                features.append(feature)
            if len(features) >= MAX_FEATURES:
                return tuple(features)
    return tuple(features)


def build_fallback_summary(
    metadata: RepoMetadata,
    tree: Sequence[TreeEntry],
    files: Mapping[str, str],
) -> RepositorySummary:
    """Deterministic summary from heuristics only."""
    snapshot = RepoSnapshot.build(tree, files)
    language = detect_language(snapshot)
    return RepositorySummary(
        project_type=detect_project_type(snapshot),
        main_language=language,
        dependencies=extract_dependencies(files),
        entry_points=extract_entry_points(tree),
        features=extract_features(files),
        installation_commands=installation_commands(language),
        usage_examples=usage_examples(language),
        project_description=metadata.description or f"A {language} project",
        tech_stack=(language,),
        architecture="",
        development_setup=development_setup(language),
    )
