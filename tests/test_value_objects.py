"""Tests for readme_forge.domain.value_objects."""

from __future__ import annotations

import pytest

from readme_forge.domain.exceptions import InvalidRepositoryError
from readme_forge.domain.value_objects import RepoRef


@pytest.mark.parametrize(
    "value",
    [
        "https://github.com/psf/requests",
        "http://github.com/psf/requests/",
        "https://www.github.com/psf/requests.git",
        "github.com/psf/requests",
        "psf/requests",
        "  psf/requests  ",
    ],
)
def test_from_string_accepts_supported_forms(value: str) -> None:
    ref = RepoRef.from_string(value)

    assert ref.owner == "psf"
    assert ref.name == "requests"
    assert ref.full_name == "psf/requests"


@pytest.mark.parametrize(
    "value",
    [
        "",
        "requests",
        "https://gitlab.com/psf/requests",
        "https://github.com/psf",
        "psf/requests/tree/main",
        "psf requests",
    ],
)
def test_from_string_rejects_other_input(value: str) -> None:
    with pytest.raises(InvalidRepositoryError):
        RepoRef.from_string(value)
