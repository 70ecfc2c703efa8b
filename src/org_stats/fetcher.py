"""Resolve an organization and fetch its public repositories."""

from __future__ import annotations

import logging
from typing import NoReturn

import httpx

from .errors import (
    FetchContractViolation,
    OrganizationLookupFailed,
    OrganizationNotFound,
)
from .github.client import GitHubClient
from .models import Organization, RepoRecord

logger = logging.getLogger(__name__)

FATAL_STATUSES = frozenset({401})


def _raise_lookup_failure(org_name: str, exc: httpx.HTTPStatusError) -> NoReturn:
    """Bad credentials abort the run; any other status only skips this org."""
    if exc.response.status_code in FATAL_STATUSES:
        raise exc
    raise OrganizationLookupFailed(org_name, exc) from exc


def _to_records(
    payloads: list[dict], org_name: str
) -> tuple[list[RepoRecord], list[str]]:
    """Convert repo payloads, excluding (never zero-filling) malformed ones."""
    records: list[RepoRecord] = []
    skipped: list[str] = []
    for payload in payloads:
        try:
            records.append(RepoRecord.from_api(payload))
        except (FetchContractViolation, ValueError, TypeError) as exc:
            name = payload.get("name") or "<unnamed>"
            logger.warning("%s/%s: excluded from stats (%s)", org_name, name, exc)
            skipped.append(name)
    return records, skipped


async def fetch_organization(
    client: GitHubClient,
    request_name: str,
    include_forks: bool = False,
) -> tuple[Organization, list[RepoRecord], list[str]]:
    """Fetch org metadata and its full repository list.

    Returns the organization, its well-formed repository records in API order,
    and the names of repositories excluded for missing fields.
    """
    try:
        payload = await client.get_org(request_name)
    except httpx.HTTPStatusError as exc:
        if exc.response.status_code == 404:
            raise OrganizationNotFound(request_name, exc) from exc
        _raise_lookup_failure(request_name, exc)
    except httpx.TransportError as exc:
        raise OrganizationLookupFailed(request_name, exc) from exc
    org = Organization.from_api(request_name, payload)

    try:
        repos = await client.list_repos(request_name)
    except httpx.HTTPStatusError as exc:
        _raise_lookup_failure(request_name, exc)
    except httpx.TransportError as exc:
        raise OrganizationLookupFailed(request_name, exc) from exc
    if not include_forks:
        repos = [r for r in repos if not r.get("fork", False)]
    records, skipped = _to_records(repos, request_name)
    logger.info(
        "%s: fetched %d repo(s), %d excluded", request_name, len(records), len(skipped)
    )
    return org, records, skipped
