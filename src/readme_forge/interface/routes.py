"""API routes — thin controllers that delegate to the use case."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from readme_forge.domain.entities import PipelineResult
from readme_forge.interface.dependencies import get_use_case
from readme_forge.interface.schemas import (
    AnalyzeRequest,
    AnalyzeResponse,
    ErrorResponse,
    ReadmeRequest,
    ReadmeResponse,
    SummaryOut,
    TreeEntryOut,
)
from readme_forge.services.generate_readme import GenerateReadmeUseCase

router = APIRouter()

_ERROR_RESPONSES: dict[int | str, dict[str, object]] = {
    422: {"model": ErrorResponse, "description": "Invalid repository reference"},
    404: {"model": ErrorResponse, "description": "Repository not found or inaccessible"},
    429: {"model": ErrorResponse, "description": "GitHub API rate limit exceeded"},
    502: {"model": ErrorResponse, "description": "GitHub API or LLM error"},
}


def _common_fields(result: PipelineResult) -> dict[str, object]:
    return {
        "repository": result.metadata.full_name,
        "summary": SummaryOut.from_domain(result.summary),
        "enriched": result.enriched,
        "analyzed_files": result.analyzed_files,
        "total_files": sum(1 for e in result.tree if e.is_blob),
        "files": dict(result.files),
        "tree": [TreeEntryOut.from_domain(e) for e in result.tree],
    }


@router.post("/readme", response_model=ReadmeResponse, responses=_ERROR_RESPONSES)
async def generate_readme(
    body: ReadmeRequest,
    use_case: GenerateReadmeUseCase = Depends(get_use_case),
) -> ReadmeResponse:
    """Analyse a public GitHub repository and draft its README."""
    customization = body.customization.to_domain() if body.customization else None
    result = await use_case.execute(body.repository, customization)
    return ReadmeResponse(readme=result.readme, **_common_fields(result))


@router.post("/analyze", response_model=AnalyzeResponse, responses=_ERROR_RESPONSES)
async def analyze(
    body: AnalyzeRequest,
    use_case: GenerateReadmeUseCase = Depends(get_use_case),
) -> AnalyzeResponse:
    """Return the repository summary without generating a README."""
    result = await use_case.analyze(body.repository)
    return AnalyzeResponse(**_common_fields(result))
