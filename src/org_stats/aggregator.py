"""Data aggregation: fold selected repos into an OrgReport."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import replace
from functools import reduce

from .fetcher import fetch_organization
from .github.client import GitHubClient
from .models import AggregateStats, OrgReport, RepoRecord
from .selector import select_repos

logger = logging.getLogger(__name__)


def new_stats() -> AggregateStats:
    """Fresh statistics: zero sums, maxima at the minimum timestamp."""
    return AggregateStats()


def fold(stats: AggregateStats, record: RepoRecord) -> AggregateStats:
    """Return ``stats`` updated with one repository."""
    return replace(
        stats,
        stars_sum=stats.stars_sum + record.stars,
        forks_sum=stats.forks_sum + record.forks,
        followers_sum=stats.followers_sum + record.watchers,
        open_issues_sum=stats.open_issues_sum + record.open_issues,
        size_sum=stats.size_sum + record.size,
        updated_at_max=max(stats.updated_at_max, record.updated_at),
        pushed_at_max=max(stats.pushed_at_max, record.pushed_at),
    )


def accumulate(records: Iterable[RepoRecord]) -> AggregateStats:
    return reduce(fold, records, new_stats())


async def aggregate_org_report(
    client: GitHubClient,
    org: str,
    limit: int | None = None,
    include_forks: bool = False,
) -> OrgReport:
    """Fetch, select and aggregate one organization.

    Raises OrganizationNotFound when the org lookup returns 404.
    """
    organization, records, skipped = await fetch_organization(
        client, org, include_forks=include_forks
    )
    selected = select_repos(records, limit)
    stats = accumulate(selected)
    archived = sum(1 for r in records if r.archived)
    logger.info(
        "%s: %d of %d repo(s) selected (%d archived)",
        org,
        len(selected),
        len(records),
        archived,
    )
    return OrgReport(
        org=organization,
        repos=selected,
        stats=stats,
        total_repos=len(records),
        archived_repos=archived,
        skipped_repos=skipped,
    )
