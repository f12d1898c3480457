"""Tests for readme_forge.infrastructure.github_rest_adapter."""

from __future__ import annotations

import asyncio
import base64

import httpx
import pytest

from readme_forge.domain.entities import TreeEntryKind
from readme_forge.domain.exceptions import (
    RateLimitedError,
    RemoteApiError,
    RepositoryNotFoundError,
)
from readme_forge.infrastructure.github_rest_adapter import GitHubRestAdapter
from readme_forge.infrastructure.request_gate import RequestGate


def _contents(text: str) -> dict[str, str]:
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    # GitHub wraps base64 payloads at 60 columns.
    wrapped = "\n".join(encoded[i : i + 60] for i in range(0, len(encoded), 60))
    return {"type": "file", "encoding": "base64", "content": wrapped}


def test_get_repository_maps_metadata(make_github) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/repos/octo/demo"
        assert request.headers["User-Agent"] == "readme-forge/1.0"
        return httpx.Response(
            200,
            json={
                "name": "demo",
                "default_branch": "trunk",
                "description": None,
                "language": "Go",
                "html_url": "https://github.com/octo/demo",
            },
        )

    meta = asyncio.run(make_github(handler).get_repository("octo", "demo"))

    assert meta.full_name == "octo/demo"
    assert meta.default_branch == "trunk"
    assert meta.description == ""
    assert meta.language == "Go"


def test_get_repository_not_found(make_github) -> None:
    adapter = make_github(lambda request: httpx.Response(404, json={"message": "Not Found"}))

    with pytest.raises(RepositoryNotFoundError):
        asyncio.run(adapter.get_repository("octo", "missing"))


def test_get_repository_server_error(make_github) -> None:
    adapter = make_github(lambda request: httpx.Response(500))

    with pytest.raises(RemoteApiError):
        asyncio.run(adapter.get_repository("octo", "demo"))


def test_transport_error_becomes_remote_api_error(make_github) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RemoteApiError):
        asyncio.run(make_github(handler).get_repository("octo", "demo"))


def test_tree_falls_back_through_branches(make_github) -> None:
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        branch = request.url.path.rsplit("/", maxsplit=1)[-1]
        requested.append(branch)
        assert request.url.params["recursive"] == "1"
        if branch != "develop":
            return httpx.Response(404)
        return httpx.Response(
            200,
            json={
                "tree": [
                    {"path": "cmd", "type": "tree", "sha": "a1"},
                    {"path": "cmd/main.go", "type": "blob", "size": 120, "sha": "b2"},
                ],
                "truncated": False,
            },
        )

    tree = asyncio.run(make_github(handler).get_repository_tree("octo", "demo", "main"))

    assert requested == ["main", "master", "develop"]
    assert [e.kind for e in tree] == [TreeEntryKind.TREE, TreeEntryKind.BLOB]
    assert tree[1].size == 120


def test_tree_tries_default_branch_first(make_github) -> None:
    requested: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requested.append(request.url.path.rsplit("/", maxsplit=1)[-1])
        return httpx.Response(404)

    with pytest.raises(RepositoryNotFoundError):
        asyncio.run(make_github(handler).get_repository_tree("octo", "demo", "trunk"))

    assert requested == ["trunk", "main", "master", "develop", "dev"]


def test_fetch_file_decodes_base64(make_github) -> None:
    text = "module example.com/demo\n\ngo 1.22\n" * 5
    adapter = make_github(lambda request: httpx.Response(200, json=_contents(text)))

    fetched = asyncio.run(adapter.fetch_file("octo", "demo", "go.mod"))

    assert fetched is not None
    assert fetched.content == text
    assert fetched.encoding == "base64"


def test_fetch_file_ignores_directories_and_missing_files(make_github) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/src"):
            return httpx.Response(200, json=[{"name": "a.py"}])
        return httpx.Response(404)

    adapter = make_github(handler)

    assert asyncio.run(adapter.get_file_content("octo", "demo", "src")) is None
    assert asyncio.run(adapter.get_file_content("octo", "demo", "nope.md")) is None


def test_multiple_files_stop_at_rate_limit(make_github) -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        path = request.url.path.split("/contents/", maxsplit=1)[1]
        calls.append(path)
        if path == "b.md":
            return httpx.Response(
                403,
                headers={"x-ratelimit-remaining": "0", "x-ratelimit-reset": "4600"},
                json={"message": "API rate limit exceeded"},
            )
        return httpx.Response(200, json=_contents(f"# {path}"))

    adapter = make_github(handler)
    paths = ["a.md", "b.md", "c.md", "d.md", "e.md"]

    files = asyncio.run(adapter.get_multiple_files("octo", "demo", paths))

    assert files == {"a.md": "# a.md"}
    assert len(files) < len(paths)
    assert calls == ["a.md", "b.md"]


def test_exhausted_quota_fails_fast_without_request(make_github) -> None:
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.url.path)
        return httpx.Response(
            200,
            headers={"x-ratelimit-remaining": "0", "x-ratelimit-reset": "4600"},
            json={"name": "demo"},
        )

    gate = RequestGate(clock=lambda: 1_000.0, sleep=lambda s: asyncio.sleep(0))
    adapter = make_github(handler, gate=gate)

    asyncio.run(adapter.get_repository("octo", "demo"))
    with pytest.raises(RateLimitedError) as excinfo:
        asyncio.run(adapter.get_repository("octo", "demo"))

    assert len(calls) == 1
    assert excinfo.value.retry_after == pytest.approx(3600)


def test_plain_forbidden_is_access_denied(make_github) -> None:
    adapter = make_github(lambda request: httpx.Response(403, headers={"x-ratelimit-remaining": "42"}))

    with pytest.raises(RepositoryNotFoundError, match="Access denied"):
        asyncio.run(adapter.get_repository("octo", "private"))


def test_too_many_requests_carries_retry_after(make_github) -> None:
    adapter = make_github(lambda request: httpx.Response(429, headers={"retry-after": "120"}))

    with pytest.raises(RateLimitedError) as excinfo:
        asyncio.run(adapter.get_repository("octo", "demo"))

    assert excinfo.value.retry_after == 120


def test_token_is_sent_as_bearer(fast_gate) -> None:
    seen: dict[str, str] = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("Authorization", "")
        return httpx.Response(200, json={"name": "demo"})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    adapter = GitHubRestAdapter(client=client, gate=fast_gate, token="ghp_secret")
    asyncio.run(adapter.get_repository("octo", "demo"))

    assert seen["auth"] == "Bearer ghp_secret"


def test_custom_api_base_url(fast_gate) -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, json={"name": "demo"})

    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    adapter = GitHubRestAdapter(client=client, gate=fast_gate, base_url="https://ghe.example.com/api/v3/")
    asyncio.run(adapter.get_repository("octo", "demo"))

    assert seen == ["https://ghe.example.com/api/v3/repos/octo/demo"]


def test_file_path_is_percent_encoded(make_github) -> None:
    seen: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url.raw_path.decode("ascii"))
        return httpx.Response(200, json=_contents("notes"))

    adapter = make_github(handler)
    content = asyncio.run(adapter.get_file_content("octo", "demo", "docs/release #2?.md"))

    assert content == "notes"
    assert seen == ["/repos/octo/demo/contents/docs/release%20%232%3F.md"]
