"""Value objects — self-validating domain primitives."""

from __future__ import annotations

import re
from dataclasses import dataclass

from readme_forge.domain.exceptions import InvalidRepositoryError

_GITHUB_URL_RE = re.compile(
    r"^(?:https?://)?(?:www\.)?github\.com/(?P<owner>[A-Za-z0-9\-_.]+)/"
    r"(?P<repo>[A-Za-z0-9\-_.]+?)(?:\.git)?/?$"
)
_SHORT_REF_RE = re.compile(r"^(?P<owner>[A-Za-z0-9\-_.]+)/(?P<repo>[A-Za-z0-9\-_.]+)$")


@dataclass(frozen=True, slots=True)
class RepoRef:
    """Validated reference to a GitHub repository.

    Accepts ``https://github.com/psf/requests``, ``github.com/psf/requests.git``
    or the short ``psf/requests`` form.
    """

    owner: str
    name: str

    @classmethod
    def from_string(cls, value: str) -> RepoRef:
        """Parse and validate a raw reference string."""
        value = value.strip()
        match = _GITHUB_URL_RE.match(value) or _SHORT_REF_RE.match(value)
        if not match:
            raise InvalidRepositoryError(
                f"Invalid repository reference: '{value}'. "
                "Expected https://github.com/<owner>/<repo> or <owner>/<repo>"
            )
        return cls(owner=match["owner"], name=match["repo"])

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"
