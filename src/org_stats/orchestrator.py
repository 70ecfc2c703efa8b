"""Orchestrator: wires together client, aggregator, and renderer."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Sequence

from rich.console import Console
from rich.markup import escape

from .aggregator import aggregate_org_report
from .errors import FetchContractViolation, OrganizationLookupError
from .github.client import GitHubClient
from .models import OrgReport
from .renderer import CsvReportWriter, print_report, render

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT = "out/org_stats.csv"


async def run(
    orgs: Sequence[str],
    token: str | None = None,
    limit: int | None = None,
    output_file: str = DEFAULT_OUTPUT,
    include_forks: bool = False,
    parallel: bool = False,
    no_cache: bool = False,
    api_url: str | None = None,
    verify_ssl: bool = True,
    console: Console | None = None,
) -> int:
    """Process each org in order and return how many were written to the CSV.

    An organization that cannot be fetched is reported on one line and skipped. With ``parallel`` every
    org is fetched concurrently, but tables and CSV rows are still emitted in
    input order.
    """
    console = console or Console()
    written = 0
    async with GitHubClient(
        token=token, no_cache=no_cache, base_url=api_url, verify_ssl=verify_ssl
    ) as client:
        with CsvReportWriter(output_file) as writer:

            def fetch(org: str) -> Awaitable[OrgReport]:
                return aggregate_org_report(
                    client, org, limit=limit, include_forks=include_forks
                )

            if parallel:
                pending = [asyncio.ensure_future(fetch(org)) for org in orgs]
            else:
                pending = [fetch(org) for org in orgs]

            try:
                for org, job in zip(orgs, pending):
                    try:
                        report = await job
                    except OrganizationLookupError as exc:
                        logger.warning("Skipping %s: %s", org, exc.reason)
                        console.print(
                            escape(f"Organization {org} {exc.verb}: {exc.reason}"),
                            soft_wrap=True,
                        )
                        continue
                    except FetchContractViolation as exc:
                        logger.warning("Skipping %s: %s", org, exc)
                        console.print(
                            escape(f"Organization {org} skipped: {exc}"), soft_wrap=True
                        )
                        continue

                    table, row = render(report)
                    print_report(table, report, console=console)
                    writer.write_row(row)
                    written += 1
            finally:
                tasks = [job for job in pending if isinstance(job, asyncio.Future)]
                for job in pending:
                    if isinstance(job, asyncio.Future):
                        job.cancel()
                    else:
                        job.close()
                # collect every outcome so no task exception goes unretrieved
                await asyncio.gather(*tasks, return_exceptions=True)

    logger.info("Wrote %d of %d organization(s) to %s", written, len(orgs), output_file)
    return written
