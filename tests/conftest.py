"""Shared fixtures: GitHub API payloads and RepoRecord builders."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from org_stats.models import RepoRecord


@pytest.fixture
def repo_payload():
    """Factory for ``/orgs/{org}/repos`` items."""

    def make(name: str = "repo", **overrides):
        payload = {
            "name": name,
            "full_name": f"acme/{name}",
            "fork": False,
            "stargazers_count": 1,
            "forks_count": 0,
            "watchers_count": 1,
            "license": {"key": "mit", "name": "MIT License"},
            "updated_at": "2023-01-02T00:00:00Z",
            "pushed_at": "2023-01-01T00:00:00Z",
            "open_issues_count": 0,
            "size": 10,
            "created_at": "2020-05-05T12:00:00Z",
            "archived": False,
        }
        payload.update(overrides)
        return payload

    return make


@pytest.fixture
def make_record():
    """Factory for RepoRecord with dates given as ``YYYY-MM-DD``."""

    def make(
        name: str = "repo",
        stars: int = 0,
        pushed: str = "2023-01-01",
        updated: str | None = None,
        archived: bool = False,
        **overrides,
    ) -> RepoRecord:
        pushed_at = datetime.fromisoformat(pushed).replace(tzinfo=timezone.utc)
        updated_at = (
            datetime.fromisoformat(updated).replace(tzinfo=timezone.utc)
            if updated
            else pushed_at
        )
        fields = dict(
            name=name,
            stars=stars,
            forks=0,
            watchers=0,
            license_name=None,
            updated_at=updated_at,
            pushed_at=pushed_at,
            open_issues=0,
            size=0,
            created_year=2020,
            archived=archived,
        )
        fields.update(overrides)
        return RepoRecord(**fields)

    return make
