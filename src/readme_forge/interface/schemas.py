"""Pydantic request / response DTOs for the API boundary."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from readme_forge.domain.entities import (
    DEFAULT_SECTION_ORDER,
    ReadmeCustomization,
    RepositorySummary,
    TreeEntry,
)


class CustomizationIn(BaseModel):
    """User edits applied on top of the generated README."""

    title: str | None = None
    description: str | None = None
    tags: list[str] = Field(default_factory=list)
    license: str | None = None
    section_order: list[str] = Field(default_factory=lambda: list(DEFAULT_SECTION_ORDER))
    extra_instructions: str | None = None

    def to_domain(self) -> ReadmeCustomization:
        return ReadmeCustomization(
            title=self.title,
            description=self.description,
            tags=tuple(self.tags),
            license=self.license,
            section_order=tuple(self.section_order),
            extra_instructions=self.extra_instructions,
        )


class AnalyzeRequest(BaseModel):
    """Request body for ``POST /analyze``."""

    repository: str

    @field_validator("repository")
    @classmethod
    def _must_not_be_empty(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            msg = "repository must not be empty."
            raise ValueError(msg)
        return stripped


class ReadmeRequest(AnalyzeRequest):
    """Request body for ``POST /readme``."""

    customization: CustomizationIn | None = None


class SummaryOut(BaseModel):
    project_type: str
    main_language: str
    dependencies: list[str]
    entry_points: list[str]
    features: list[str]
    installation_commands: list[str]
    usage_examples: list[str]
    project_description: str
    tech_stack: list[str]
    architecture: str
    development_setup: str

    @classmethod
    def from_domain(cls, summary: RepositorySummary) -> SummaryOut:
        return cls.model_validate(summary.to_dict())


class TreeEntryOut(BaseModel):
    path: str
    type: str
    size: int | None = None

    @classmethod
    def from_domain(cls, entry: TreeEntry) -> TreeEntryOut:
        return cls(path=entry.path, type=entry.kind.value, size=entry.size)


class AnalyzeResponse(BaseModel):
    """Successful response from ``POST /analyze``.

    ``files`` holds the raw fetched contents by path and ``tree`` the full
    listing, so an editor can show them next to the summary.
    """

    repository: str
    summary: SummaryOut
    enriched: bool
    analyzed_files: int
    total_files: int
    files: dict[str, str]
    tree: list[TreeEntryOut]


class ReadmeResponse(AnalyzeResponse):
    """Successful response from ``POST /readme``."""

    readme: str


class ErrorResponse(BaseModel):
    """Standard error envelope returned on all failure paths."""

    status: str = "error"
    message: str
