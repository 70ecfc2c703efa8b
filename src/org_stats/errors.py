"""Exception types raised while collecting organization stats."""

from __future__ import annotations

import httpx


def describe_cause(cause: object) -> str:
    """One-line description of an underlying failure."""
    if isinstance(cause, httpx.HTTPStatusError):
        response = cause.response
        return f"{response.status_code} {response.reason_phrase}".strip()
    lines = str(cause).strip().splitlines()
    if lines:
        return lines[0]
    return type(cause).__name__


class OrgStatsError(Exception):
    """Base class for org-stats errors."""


class OrganizationLookupError(OrgStatsError):
    """An organization could not be fetched; the run skips it and continues."""

    verb = "lookup failed"

    def __init__(self, request_name: str, cause: object) -> None:
        self.request_name = request_name
        self.cause = cause
        super().__init__(f"Organization {request_name} {self.verb}: {self.reason}")

    @property
    def reason(self) -> str:
        return describe_cause(self.cause)


class OrganizationNotFound(OrganizationLookupError):
    """Raised when the organization lookup returns 404 for a requested name."""

    verb = "not found"


class OrganizationLookupFailed(OrganizationLookupError):
    """Raised on server errors or transport failures while fetching an organization."""


class FetchContractViolation(OrgStatsError):
    """Raised when an API payload is missing a field we depend on."""

    def __init__(
        self, field: str, context: str, problem: str = "missing required field"
    ) -> None:
        self.field = field
        self.context = context
        super().__init__(f"{context}: {problem} '{field}'")


class DurableOutputFailure(OrgStatsError):
    """Raised when the CSV report file cannot be created or written."""

    def __init__(self, path: str, cause: object) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Cannot write report to {path}: {cause}")
