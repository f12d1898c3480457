"""Domain entities — pure data structures with no external dependencies."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum


class TreeEntryKind(str, Enum):
    """Kind of a node in the recursive tree listing."""

    BLOB = "blob"
    TREE = "tree"


class FileCategory(str, Enum):
    """Classification bucket for repository files."""

    CONFIG = "config"
    SOURCE = "source"
    DOCUMENTATION = "documentation"
    BUILD = "build"
    OTHER = "other"


class ProjectType(str, Enum):
    """Coarse project shape used to pick README wording."""

    CONTAINERIZED_APP = "containerized-app"
    WEB_APP = "web-app"
    CLI_TOOL = "cli-tool"
    LIBRARY = "library"


class PipelineStage(str, Enum):
    """Stages of one README pipeline run."""

    FETCHING = "fetching"
    SELECTING = "selecting"
    ANALYZING = "analyzing"
    SUMMARIZING = "summarizing"
    GENERATING = "generating"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class RepoMetadata:
    """High-level metadata about a GitHub repository."""

    owner: str
    name: str
    default_branch: str = "main"
    description: str = ""
    language: str | None = None
    html_url: str = ""

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


@dataclass(frozen=True, slots=True)
class TreeEntry:
    """A single node from the GitHub tree API (blob or sub-tree)."""

    path: str
    kind: TreeEntryKind = TreeEntryKind.BLOB
    size: int | None = None
    sha: str = ""

    @property
    def is_blob(self) -> bool:
        return self.kind is TreeEntryKind.BLOB


@dataclass(frozen=True, slots=True)
class FetchedFile:
    """A fetched file with its decoded content."""

    path: str
    content: str
    encoding: str = "base64"


@dataclass(frozen=True, slots=True)
class FileAnalysis:
    """A fetched file annotated with its category and importance score."""

    path: str
    content: str
    category: FileCategory
    importance_score: int
    byte_size: int
    chunks: tuple[str, ...] | None = None

    def with_chunks(self, chunks: tuple[str, ...]) -> FileAnalysis:
        return replace(self, chunks=chunks)


@dataclass(frozen=True, slots=True)
class ProcessingStrategy:
    """Operating limits chosen for a repository of a given size."""

    max_files: int
    max_chunk_size: int
    max_concurrent: int
    use_chunking: bool


@dataclass(frozen=True, slots=True)
class PerFileSignal:
    """Structured signals extracted from one file."""

    path: str
    category: FileCategory
    dependencies: tuple[str, ...] = ()
    scripts: tuple[str, ...] = ()
    entry_points: tuple[str, ...] = ()
    features: tuple[str, ...] = ()
    description: str = ""
    importance: int = 1


@dataclass(frozen=True, slots=True)
class RepositorySummary:
    """Aggregate analysis of a repository, consumed by README generation."""

    project_type: ProjectType
    main_language: str
    dependencies: tuple[str, ...]
    entry_points: tuple[str, ...]
    features: tuple[str, ...]
    installation_commands: tuple[str, ...]
    usage_examples: tuple[str, ...]
    project_description: str
    tech_stack: tuple[str, ...]
    architecture: str
    development_setup: str

    def to_dict(self) -> dict[str, object]:
        return {
            "project_type": self.project_type.value,
            "main_language": self.main_language,
            "dependencies": list(self.dependencies),
            "entry_points": list(self.entry_points),
            "features": list(self.features),
            "installation_commands": list(self.installation_commands),
            "usage_examples": list(self.usage_examples),
            "project_description": self.project_description,
            "tech_stack": list(self.tech_stack),
            "architecture": self.architecture,
            "development_setup": self.development_setup,
        }


@dataclass(frozen=True, slots=True)
class Enriched:
    """Summary produced by the generation service."""

    summary: RepositorySummary


@dataclass(frozen=True, slots=True)
class Fallback:
    """Summary produced purely from heuristics."""

    summary: RepositorySummary
    reason: str = ""


SummaryOutcome = Enriched | Fallback


DEFAULT_SECTION_ORDER: tuple[str, ...] = (
    "basic",
    "installation",
    "usage",
    "features",
    "development",
    "contributing",
    "license",
    "support",
)


@dataclass(frozen=True, slots=True)
class ReadmeCustomization:
    """User edits layered on top of the generated README."""

    title: str | None = None
    description: str | None = None
    tags: tuple[str, ...] = ()
    license: str | None = None
    section_order: tuple[str, ...] = DEFAULT_SECTION_ORDER
    extra_instructions: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {
            "title": self.title,
            "description": self.description,
            "tags": list(self.tags),
            "license": self.license,
            "section_order": list(self.section_order),
            "extra_instructions": self.extra_instructions,
        }


@dataclass(frozen=True, slots=True)
class PipelineResult:
    """Everything one pipeline run hands to the presentation layer."""

    metadata: RepoMetadata
    tree: list[TreeEntry]
    files: dict[str, str]
    outcome: SummaryOutcome
    strategy: ProcessingStrategy
    analyzed_files: int
    readme: str = ""
    signals: list[PerFileSignal] = field(default_factory=list)

    @property
    def summary(self) -> RepositorySummary:
        return self.outcome.summary

    @property
    def enriched(self) -> bool:
        return isinstance(self.outcome, Enriched)
