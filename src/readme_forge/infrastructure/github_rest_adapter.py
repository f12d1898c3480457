"""GitHub REST API adapter — implements the RepoFetcher port."""

from __future__ import annotations

import base64
import binascii
import logging
from typing import Any, Sequence
from urllib.parse import quote

import httpx

from readme_forge.domain.entities import FetchedFile, RepoMetadata, TreeEntry, TreeEntryKind
from readme_forge.domain.exceptions import (
    RateLimitedError,
    RemoteApiError,
    RepositoryNotFoundError,
)
from readme_forge.infrastructure.request_gate import RequestGate, parse_retry_after

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"

FALLBACK_BRANCHES: tuple[str, ...] = ("main", "master", "develop", "dev")


class GitHubRestAdapter:
    """Concrete RepoFetcher backed by the GitHub v3 REST API.

    Every request goes through the injected :class:`RequestGate`, so
    consecutive calls are paced and an exhausted quota fails fast.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        gate: RequestGate | None = None,
        token: str | None = None,
        base_url: str = DEFAULT_API_URL,
    ) -> None:
        self._client = client
        self._base_url = base_url.rstrip("/")
        self._gate = gate or RequestGate()
        self._api_headers: dict[str, str] = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": "readme-forge/1.0",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        if token:
            self._api_headers["Authorization"] = f"Bearer {token}"

    async def get_repository(self, owner: str, name: str) -> RepoMetadata:
        """GET /repos/{owner}/{repo} → RepoMetadata."""
        resp = await self._api_get(f"/repos/{owner}/{name}")
        if resp.status_code == 404:
            raise RepositoryNotFoundError(
                f"Repository {owner}/{name} not found. "
                "Please check the owner and repository name."
            )
        self._raise_for_status(resp)

        data = resp.json()
        return RepoMetadata(
            owner=owner,
            name=data.get("name") or name,
            default_branch=data.get("default_branch") or "main",
            description=data.get("description") or "",
            language=data.get("language"),
            html_url=data.get("html_url") or f"https://github.com/{owner}/{name}",
        )

    async def get_repository_tree(
        self, owner: str, name: str, branch: str | None = None
    ) -> list[TreeEntry]:
        """GET /repos/{owner}/{repo}/git/trees/{branch}?recursive=1 → [TreeEntry].

        Tries *branch* first, then each of :data:`FALLBACK_BRANCHES`.
        """
        candidates: list[str] = []
        for candidate in (branch, *FALLBACK_BRANCHES):
            if candidate and candidate not in candidates:
                candidates.append(candidate)

        for candidate in candidates:
            resp = await self._api_get(
                f"/repos/{owner}/{name}/git/trees/{candidate}",
                params={"recursive": "1"},
            )
            if resp.status_code == 404:
                logger.info("Branch %s not found for %s/%s", candidate, owner, name)
                continue
            self._raise_for_status(resp)

            data = resp.json()
            if data.get("truncated"):
                logger.warning("Tree listing for %s/%s was truncated by GitHub", owner, name)
            return [_tree_entry(item) for item in data.get("tree", [])]

        raise RepositoryNotFoundError(
            f"Could not access the file tree of {owner}/{name}. "
            "The repository might be private or empty."
        )

    async def fetch_file(self, owner: str, name: str, path: str) -> FetchedFile | None:
        """GET /repos/{owner}/{repo}/contents/{path} → decoded FetchedFile."""
        resp = await self._api_get(f"/repos/{owner}/{name}/contents/{quote(path)}")
        if resp.status_code == 404:
            return None
        rate_limited = self._rate_limit_error(resp)
        if rate_limited is not None:
            raise rate_limited
        if resp.status_code != 200:
            logger.warning("Failed to fetch %s: HTTP %d", path, resp.status_code)
            return None

        data = resp.json()
        if not isinstance(data, dict):
            # A directory listing, not a file.
            return None
        encoding = data.get("encoding")
        raw = data.get("content")
        if encoding != "base64" or not raw:
            logger.debug("Skipping %s: unsupported encoding %r", path, encoding)
            return None

        try:
            content = base64.b64decode(raw).decode("utf-8", errors="replace")
        except (binascii.Error, ValueError):
            logger.warning("Could not decode %s", path)
            return None
        return FetchedFile(path=path, content=content, encoding=encoding)

    async def get_file_content(self, owner: str, name: str, path: str) -> str | None:
        fetched = await self.fetch_file(owner, name, path)
        return fetched.content if fetched else None

    async def get_multiple_files(
        self, owner: str, name: str, paths: Sequence[str]
    ) -> dict[str, str]:
        """Fetch *paths* one at a time; stop quietly once rate limited."""
        files: dict[str, str] = {}
        for path in paths:
            try:
                content = await self.get_file_content(owner, name, path)
            except RateLimitedError as exc:
                logger.warning(
                    "Rate limit hit after %d/%d files, stopping fetch: %s",
                    len(files),
                    len(paths),
                    exc,
                )
                break
            except RemoteApiError as exc:
                logger.warning("Failed to fetch %s: %s", path, exc)
                continue

            if content:
                files[path] = content
                logger.debug("Fetched %s (%d chars)", path, len(content))
        return files

    async def _api_get(
        self,
        endpoint: str,
        params: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Perform a paced GitHub API GET request; transport errors become RemoteApiError."""
        await self._gate.wait()
        url = f"{self._base_url}{endpoint}"
        try:
            resp = await self._client.get(url, headers=self._api_headers, params=params)
        except httpx.HTTPError as exc:
            raise RemoteApiError(f"Network error fetching {url}: {exc}") from exc

        self._gate.observe(resp.headers)
        return resp

    def _raise_for_status(self, resp: httpx.Response) -> None:
        """Translate non-200 responses (other than 404, handled by callers)."""
        if resp.status_code == 200:
            return

        rate_limited = self._rate_limit_error(resp)
        if rate_limited is not None:
            raise rate_limited

        if resp.status_code == 403:
            raise RepositoryNotFoundError(
                "Access denied. The repository may be private or inaccessible."
            )

        if resp.status_code == 404:
            raise RepositoryNotFoundError("Resource not found on GitHub.")

        raise RemoteApiError(
            f"GitHub API returned HTTP {resp.status_code} for {resp.request.url}"
        )

    def _rate_limit_error(self, resp: httpx.Response) -> RateLimitedError | None:
        """Return a RateLimitedError if *resp* signals quota exhaustion."""
        if resp.status_code not in (403, 429):
            return None
        if resp.status_code == 403 and resp.headers.get("x-ratelimit-remaining") != "0":
            return None

        retry_after = parse_retry_after(resp.headers, self._gate.now())
        hint = (
            f" Try again in {int(retry_after // 60) + 1} minute(s)."
            if retry_after is not None
            else ""
        )
        return RateLimitedError(
            "GitHub API rate limit exceeded." + hint
            + " Set the GITHUB_TOKEN environment variable to increase the limit.",
            retry_after=retry_after,
        )


def _tree_entry(item: dict[str, Any]) -> TreeEntry:
    kind = TreeEntryKind.TREE if item.get("type") == "tree" else TreeEntryKind.BLOB
    return TreeEntry(
        path=item["path"],
        kind=kind,
        size=item.get("size"),
        sha=item.get("sha", ""),
    )
