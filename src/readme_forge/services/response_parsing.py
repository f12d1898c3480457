"""Defensive parsing of JSON replies from the generation service.

Model output is untrusted text: it may be wrapped in markdown fences or
surrounded by chatter.  :func:`extract_json_text` normalises it, and the
pydantic models below validate the shape before anything downstream sees it.
"""

from __future__ import annotations

import json
import re
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from readme_forge.domain.exceptions import ExtractionError

_FENCE_RE = re.compile(r"```[A-Za-z0-9_-]*\s*")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")

ModelT = TypeVar("ModelT", bound=BaseModel)


def extract_json_text(raw: str) -> str:
    """Strip code fences and return the outermost ``{...}`` block if needed."""
    text = _FENCE_RE.sub("", raw).strip()
    if not text.startswith("{"):
        match = _OBJECT_RE.search(text)
        if match:
            text = match.group(0)
    return text


def strip_outer_fence(raw: str) -> str:
    """Remove one markdown fence wrapping the whole reply, if present."""
    text = raw.strip()
    if text.startswith("```"):
        first_nl = text.find("\n")
        text = text[first_nl + 1 :] if first_nl != -1 else ""
        if text.rstrip().endswith("```"):
            text = text.rstrip()[:-3]
    return text.strip()


def parse_model(raw: str, model: type[ModelT]) -> ModelT:
    """Parse *raw* model output into *model*, raising ExtractionError on any failure."""
    text = extract_json_text(raw)
    try:
        data: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ExtractionError(f"LLM returned invalid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ExtractionError("LLM returned JSON that is not an object.")
    try:
        return model.model_validate(data)
    except ValidationError as exc:
        raise ExtractionError(f"LLM response failed validation: {exc}") from exc


def _string_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if not isinstance(value, list):
        raise ValueError("expected a list of strings")
    return [str(item).strip() for item in value if item is not None and str(item).strip()]


# ── Schemas ─────────────────────────────────────────────────────────────────


class ChunkSignalPayload(BaseModel):
    """Signals extracted from one chunk of a file."""

    model_config = ConfigDict(extra="ignore")

    dependencies: list[str] = Field(default_factory=list)
    scripts: list[str] = Field(default_factory=list)
    entry_points: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)
    description: str = ""

    @field_validator("dependencies", "scripts", "entry_points", "features", mode="before")
    @classmethod
    def _lists(cls, v: Any) -> list[str]:
        return _string_list(v)

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, v: Any) -> str:
        return "" if v is None else str(v).strip()


class FileSignalPayload(ChunkSignalPayload):
    """Signals extracted from a whole file."""

    file_type: str | None = None
    importance: int | None = None

    @field_validator("importance", mode="before")
    @classmethod
    def _importance(cls, v: Any) -> int | None:
        if v is None or v == "":
            return None
        return int(float(v))


class SummaryPayload(BaseModel):
    """Structured repository summary; missing fields are filled by the caller."""

    model_config = ConfigDict(extra="ignore")

    project_type: str | None = None
    main_language: str | None = None
    dependencies: list[str] | None = None
    entry_points: list[str] | None = None
    features: list[str] | None = None
    installation_commands: list[str] | None = None
    usage_examples: list[str] | None = None
    project_description: str | None = None
    tech_stack: list[str] | None = None
    architecture: str | None = None
    development_setup: str | None = None

    @field_validator(
        "dependencies",
        "entry_points",
        "features",
        "installation_commands",
        "usage_examples",
        "tech_stack",
        mode="before",
    )
    @classmethod
    def _lists(cls, v: Any) -> list[str] | None:
        return None if v is None else _string_list(v)

    @field_validator(
        "project_type",
        "main_language",
        "project_description",
        "architecture",
        "development_setup",
        mode="before",
    )
    @classmethod
    def _strings(cls, v: Any) -> str | None:
        if v is None:
            return None
        if isinstance(v, list):
            v = "\n".join(str(item) for item in v)
        text = str(v).strip()
        return text or None
