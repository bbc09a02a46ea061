import dataclasses

import pytest

from gitmarks.application.normalizer import display_description, normalize_record
from gitmarks.domain.entities import Row


def test_normalize_maps_github_fields():
    row = normalize_record({
        "name": "httpx",
        "owner": {"login": "encode"},
        "description": "A next generation HTTP client for Python.",
        "language": "Python",
        "stargazers_count": 13000,
        "html_url": "https://github.com/encode/httpx",
    })

    assert row == Row(
        owner="encode",
        repo="httpx",
        description="A next generation HTTP client for Python.",
        language="Python",
        stars=13000,
    )
    assert row.full_name == "encode/httpx"


def test_missing_description_and_language_are_kept_as_none():
    row = normalize_record({
        "name": "dotfiles",
        "owner": {"login": "someone"},
        "description": None,
        "language": None,
        "stargazers_count": 0,
    })

    assert row.description is None
    assert row.language is None
    assert display_description(row) == ""


def test_missing_owner_is_a_contract_violation():
    with pytest.raises(KeyError):
        normalize_record({"name": "orphan", "stargazers_count": 1})


def test_rows_are_immutable():
    row = normalize_record({"name": "r", "owner": {"login": "o"}, "stargazers_count": 3})
    with pytest.raises(dataclasses.FrozenInstanceError):
        row.stars = 4
