"""Choose which repositories of an organization are reported."""

from __future__ import annotations

from collections.abc import Iterable

from .models import RepoRecord


def select_repos(
    records: Iterable[RepoRecord], limit: int | None = None
) -> list[RepoRecord]:
    """Drop archived repos, order by latest push, and keep the first ``limit``.

    The sort is stable: repos pushed at the same instant keep their API order.
    Archived repos never count against ``limit``. Because statistics are folded
    over this result, a limit smaller than the org yields partial sums.
    """
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be >= 0, got {limit}")
    active = [r for r in records if not r.archived]
    active.sort(key=lambda r: r.pushed_at, reverse=True)
    if limit is None:
        return active
    return active[:limit]
