"""Tests for the FastAPI interface layer."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from readme_forge.domain.entities import (
    Enriched,
    PipelineResult,
    ProjectType,
    ReadmeCustomization,
    RepoMetadata,
    RepositorySummary,
    TreeEntry,
    TreeEntryKind,
)
from readme_forge.domain.exceptions import (
    InvalidRepositoryError,
    LlmError,
    RateLimitedError,
    RemoteApiError,
    RepositoryNotFoundError,
)
from readme_forge.interface.app import create_app
from readme_forge.interface.dependencies import get_use_case
from readme_forge.services.processing_strategy import SMALL_STRATEGY

SUMMARY = RepositorySummary(
    project_type=ProjectType.LIBRARY,
    main_language="Python",
    dependencies=("httpx",),
    entry_points=(),
    features=("Async client",),
    installation_commands=("pip install -r requirements.txt",),
    usage_examples=("python -m demo",),
    project_description="A demo library.",
    tech_stack=("Python",),
    architecture="",
    development_setup="pip install -r requirements.txt && python main.py",
)

RESULT = PipelineResult(
    metadata=RepoMetadata(owner="octo", name="demo"),
    tree=[TreeEntry(path="src", kind=TreeEntryKind.TREE), TreeEntry(path="src/demo.py")],
    files={"src/demo.py": "print()"},
    outcome=Enriched(SUMMARY),
    strategy=SMALL_STRATEGY,
    analyzed_files=1,
    readme="# demo\n",
)


class _StubUseCase:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.received: dict[str, object] = {}

    async def execute(self, repository: str, customization: ReadmeCustomization | None = None):
        self.received = {"repository": repository, "customization": customization}
        if self.error is not None:
            raise self.error
        return RESULT

    async def analyze(self, repository: str):
        self.received = {"repository": repository}
        if self.error is not None:
            raise self.error
        return PipelineResult(
            metadata=RESULT.metadata,
            tree=RESULT.tree,
            files=RESULT.files,
            outcome=RESULT.outcome,
            strategy=RESULT.strategy,
            analyzed_files=RESULT.analyzed_files,
        )


def _client(use_case: _StubUseCase) -> TestClient:
    app = create_app()
    app.dependency_overrides[get_use_case] = lambda: use_case
    return TestClient(app, raise_server_exceptions=False)


def test_health() -> None:
    assert _client(_StubUseCase()).get("/health").json() == {"status": "ok"}


def test_readme_success_passes_customization() -> None:
    stub = _StubUseCase()

    resp = _client(stub).post(
        "/readme",
        json={
            "repository": " octo/demo ",
            "customization": {"title": "Demo", "tags": ["python"], "section_order": ["basic", "usage"]},
        },
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["readme"] == "# demo\n"
    assert body["repository"] == "octo/demo"
    assert body["enriched"] is True
    assert body["analyzed_files"] == 1
    assert body["total_files"] == 1
    assert body["summary"]["project_type"] == "library"
    assert body["summary"]["dependencies"] == ["httpx"]
    assert body["files"] == {"src/demo.py": "print()"}
    assert [e["path"] for e in body["tree"]] == ["src", "src/demo.py"]

    custom = stub.received["customization"]
    assert stub.received["repository"] == "octo/demo"
    assert isinstance(custom, ReadmeCustomization)
    assert custom.title == "Demo"
    assert custom.tags == ("python",)
    assert custom.section_order == ("basic", "usage")


def test_analyze_success() -> None:
    resp = _client(_StubUseCase()).post("/analyze", json={"repository": "octo/demo"})

    assert resp.status_code == 200
    body = resp.json()
    assert "readme" not in body
    assert body["summary"]["main_language"] == "Python"
    assert body["files"] == {"src/demo.py": "print()"}
    assert body["tree"] == [
        {"path": "src", "type": "tree", "size": None},
        {"path": "src/demo.py", "type": "blob", "size": None},
    ]
    assert body["total_files"] == 1


def test_empty_repository_is_rejected() -> None:
    resp = _client(_StubUseCase()).post("/readme", json={"repository": "   "})

    assert resp.status_code == 422
    assert resp.json()["status"] == "error"


@pytest.mark.parametrize(
    ("error", "status"),
    [
        (InvalidRepositoryError("bad reference"), 422),
        (RepositoryNotFoundError("not found"), 404),
        (RemoteApiError("upstream 500"), 502),
        (LlmError("model down"), 502),
        (RuntimeError("kaboom"), 500),
    ],
)
def test_errors_map_to_status_codes(error: Exception, status: int) -> None:
    resp = _client(_StubUseCase(error)).post("/readme", json={"repository": "octo/demo"})

    assert resp.status_code == status
    body = resp.json()
    assert body["status"] == "error"
    if status != 500:
        assert body["message"] == str(error)
    else:
        assert "kaboom" not in body["message"]


def test_rate_limit_sets_retry_after_header() -> None:
    stub = _StubUseCase(RateLimitedError("GitHub API rate limit exceeded.", retry_after=90.2))

    resp = _client(stub).post("/analyze", json={"repository": "octo/demo"})

    assert resp.status_code == 429
    assert resp.headers["Retry-After"] == "91"
    assert resp.json() == {"status": "error", "message": "GitHub API rate limit exceeded."}


def test_error_envelope_is_documented() -> None:
    schema = create_app().openapi()

    assert "ErrorResponse" in schema["components"]["schemas"]
    responses = schema["paths"]["/readme"]["post"]["responses"]
    assert responses["404"]["content"]["application/json"]["schema"]["$ref"].endswith("/ErrorResponse")
