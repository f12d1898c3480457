"""File filtering — decide which tree entries are worth fetching."""

from __future__ import annotations

from typing import Sequence

from readme_forge.domain.entities import TreeEntry

SKIP_DIRS: frozenset[str] = frozenset(
    {
        "node_modules",
        ".git",
        "dist",
        "build",
        "out",
        "venv",
        ".venv",
        "__pycache__",
        ".tox",
        ".mypy_cache",
        ".pytest_cache",
        "vendor",
        ".idea",
        ".vscode",
        ".next",
        ".nuxt",
        "coverage",
        "htmlcov",
        "target",           # Rust / Java
        "Pods",             # iOS
        ".gradle",
    }
)

SKIP_EXTENSIONS: frozenset[str] = frozenset(
    {
        ".pyc", ".so", ".o", ".a", ".dylib", ".dll", ".exe", ".bin",
        ".class", ".jar",
        ".png", ".jpg", ".jpeg", ".gif", ".bmp", ".svg", ".ico", ".webp",
        ".mp3", ".mp4", ".mov", ".wav",
        ".woff", ".woff2", ".ttf", ".eot", ".otf",
        ".zip", ".tar", ".gz", ".rar", ".7z", ".pdf",
        ".min.js", ".min.css", ".map",
    }
)

SKIP_FILENAMES: frozenset[str] = frozenset(
    {
        "yarn.lock",
        "package-lock.json",
        "pnpm-lock.yaml",
        "poetry.lock",
        "composer.lock",
        "gemfile.lock",
        "cargo.lock",
        "go.sum",
    }
)

SECRET_FILES: frozenset[str] = frozenset(
    {".env", ".env.local", ".env.production", ".env.development"}
)

# Fetched first, in this order.
IMPORTANT_FILES: tuple[str, ...] = (
    "readme.md",
    "package.json",
    "requirements.txt",
    "pyproject.toml",
    "setup.py",
    "cargo.toml",
    "go.mod",
    "pom.xml",
    "build.gradle",
    "gemfile",
    "composer.json",
    "pubspec.yaml",
    "dockerfile",
    "docker-compose.yml",
    "makefile",
    "cmakelists.txt",
    "main.py",
    "main.go",
    "main.ts",
    "main.js",
    "index.ts",
    "index.js",
    "app.py",
    "app.ts",
    "app.js",
    "main.dart",
    "build.sh",
    "run.sh",
    "start.sh",
)

IMPORTANT_EXTENSIONS: tuple[str, ...] = (
    ".md", ".json", ".toml", ".mod", ".xml", ".gradle", ".yml", ".yaml",
    ".py", ".js", ".ts", ".jsx", ".tsx", ".go", ".rs", ".java", ".kt",
    ".dart", ".swift", ".php", ".rb",
)

IMPORTANT_DIRS: tuple[str, ...] = ("src/", "lib/", "app/", "components/", "docs/")

_IMPORTANT_RANK = {name: rank for rank, name in enumerate(IMPORTANT_FILES)}


def _filename(path: str) -> str:
    return path.rsplit("/", maxsplit=1)[-1]


def _segment_in_skip_dirs(path: str) -> bool:
    """Return *True* if any directory segment belongs to ``SKIP_DIRS``."""
    return any(part in SKIP_DIRS for part in path.split("/")[:-1])


def should_skip(entry: TreeEntry) -> bool:
    """Return *True* if the entry can never be useful for analysis."""
    if not entry.is_blob:
        return True

    name = _filename(entry.path).lower()
    if name in SECRET_FILES or name in SKIP_FILENAMES:
        return True
    if _segment_in_skip_dirs(entry.path):
        return True
    return any(name.endswith(ext) for ext in SKIP_EXTENSIONS)


def is_important(path: str) -> bool:
    """Return *True* if the path matches the fetch allowlist."""
    name = _filename(path).lower()
    if name in _IMPORTANT_RANK:
        return True
    if path.startswith(IMPORTANT_DIRS):
        return True
    return name.endswith(IMPORTANT_EXTENSIONS)


def select_paths_to_fetch(tree: Sequence[TreeEntry], limit: int = 30) -> list[str]:
    """Return up to *limit* blob paths worth fetching, named files first.

    Named important files keep the order of :data:`IMPORTANT_FILES` (shallower
    paths first on ties); everything else keeps its tree order.
    """
    candidates = [e for e in tree if not should_skip(e) and is_important(e.path)]

    def _rank(item: tuple[int, TreeEntry]) -> tuple[int, int, int]:
        index, entry = item
        named = _IMPORTANT_RANK.get(_filename(entry.path).lower())
        if named is None:
            return (1, 0, index)
        return (0, named * 1000 + entry.path.count("/"), index)

    ordered = sorted(enumerate(candidates), key=_rank)
    return [entry.path for _, entry in ordered[:limit]]
