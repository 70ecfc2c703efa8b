"""Data models for org-stats."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from .errors import FetchContractViolation

MIN_TIMESTAMP = datetime.min.replace(tzinfo=timezone.utc)


def parse_timestamp(value: str) -> datetime:
    """Parse a GitHub ISO 8601 timestamp (``2024-01-01T00:00:00Z``) as UTC."""
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _require(payload: dict[str, Any], key: str, context: str) -> Any:
    value = payload.get(key)
    if value is None:
        raise FetchContractViolation(key, context)
    return value


@dataclass(frozen=True)
class Organization:
    request_name: str
    display_name: str
    created_year: int

    @classmethod
    def from_api(cls, request_name: str, payload: dict[str, Any]) -> Organization:
        """Build from ``GET /orgs/{org}``. ``name`` is optional, ``created_at`` is not."""
        context = f"organization {request_name}"
        created_at = _require(payload, "created_at", context)
        try:
            created_year = parse_timestamp(created_at).year
        except (ValueError, TypeError, AttributeError) as exc:
            raise FetchContractViolation(
                "created_at", context, problem="unparseable field"
            ) from exc
        return cls(
            request_name=request_name,
            display_name=payload.get("name") or request_name,
            created_year=created_year,
        )


@dataclass(frozen=True)
class RepoRecord:
    name: str
    stars: int
    forks: int
    watchers: int
    license_name: str | None
    updated_at: datetime
    pushed_at: datetime
    open_issues: int
    size: int
    created_year: int
    archived: bool

    @classmethod
    def from_api(cls, payload: dict[str, Any]) -> RepoRecord:
        """Build from one item of ``GET /orgs/{org}/repos``.

        Only ``license`` may be absent; every other field raises
        FetchContractViolation when missing or null.
        """
        name = _require(payload, "name", "repository")
        context = f"repository {name}"
        license_info = payload.get("license") or {}
        return cls(
            name=name,
            stars=int(_require(payload, "stargazers_count", context)),
            forks=int(_require(payload, "forks_count", context)),
            watchers=int(_require(payload, "watchers_count", context)),
            license_name=license_info.get("name"),
            updated_at=parse_timestamp(_require(payload, "updated_at", context)),
            pushed_at=parse_timestamp(_require(payload, "pushed_at", context)),
            open_issues=int(_require(payload, "open_issues_count", context)),
            size=int(_require(payload, "size", context)),
            created_year=parse_timestamp(_require(payload, "created_at", context)).year,
            archived=bool(_require(payload, "archived", context)),
        )


@dataclass(frozen=True)
class AggregateStats:
    """Running sums and latest-activity maxima for one organization."""

    stars_sum: int = 0
    forks_sum: int = 0
    followers_sum: int = 0
    open_issues_sum: int = 0
    size_sum: int = 0
    updated_at_max: datetime = MIN_TIMESTAMP
    pushed_at_max: datetime = MIN_TIMESTAMP


@dataclass(frozen=True)
class OrgReport:
    org: Organization
    repos: list[RepoRecord]
    stats: AggregateStats
    total_repos: int = 0
    archived_repos: int = 0
    skipped_repos: list[str] = field(default_factory=list)
