"""Port: repository fetcher — defined by the domain, implemented by infrastructure."""

from __future__ import annotations

from typing import Protocol, Sequence

from readme_forge.domain.entities import RepoMetadata, TreeEntry


class RepoFetcher(Protocol):
    """Abstract contract for fetching GitHub repository data."""

    async def get_repository(self, owner: str, name: str) -> RepoMetadata:
        """Return high-level repository metadata."""
        ...

    async def get_repository_tree(
        self, owner: str, name: str, branch: str | None = None
    ) -> list[TreeEntry]:
        """Return the recursive file tree, falling back across common branches."""
        ...

    async def get_file_content(self, owner: str, name: str, path: str) -> str | None:
        """Return the decoded text of one file, or ``None`` if it is absent."""
        ...

    async def get_multiple_files(
        self, owner: str, name: str, paths: Sequence[str]
    ) -> dict[str, str]:
        """Fetch files one at a time, stopping early once rate limited."""
        ...
