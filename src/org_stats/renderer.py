"""Rich table and CSV rendering of an OrgReport.

Table cells and CSV fields are both projected from the same OrgReport
snapshot through ``format_timestamp``, so the numbers shown on screen and the
numbers persisted to disk are always the same strings.
"""

from __future__ import annotations

import csv
import io
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import IO

from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.text import Text

from .errors import DurableOutputFailure
from .models import AggregateStats, Organization, OrgReport, RepoRecord

logger = logging.getLogger(__name__)

COLUMN_LABELS = [
    "Repository",
    "Stars",
    "Forks",
    "License",
    "Followers",
    "Updated at",
    "Pushed at",
    "Open issues",
    "Size",
    "Created",
]

CSV_COLUMNS = [
    "real_org_name",
    "org_created_at",
    "stars",
    "forks",
    "followers",
    "updated_at",
    "pushed_at",
    "open_issues_count",
    "size",
]

_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S UTC"


def format_timestamp(ts: datetime) -> str:
    """Format as ``YYYY-MM-DD HH:MM:SS UTC`` (year always four digits)."""
    ts = ts.astimezone(timezone.utc)
    return f"{ts.year:04d}-{ts:%m-%d %H:%M:%S} UTC"


def parse_formatted_timestamp(text: str) -> datetime:
    return datetime.strptime(text, _TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)


def summary_cells(org: Organization, stats: AggregateStats) -> list[str]:
    """Header cells: org title, then one aggregate per column."""
    return [
        f"{org.display_name} [{org.created_year}]",
        f"Sum: {stats.stars_sum}",
        f"Sum: {stats.forks_sum}",
        "",
        f"Sum: {stats.followers_sum}",
        f"Latest: {format_timestamp(stats.updated_at_max)}",
        f"Latest: {format_timestamp(stats.pushed_at_max)}",
        f"Sum: {stats.open_issues_sum}",
        f"Sum: {stats.size_sum}",
        "",
    ]


def repo_cells(repo: RepoRecord) -> list[str]:
    return [
        repo.name,
        str(repo.stars),
        str(repo.forks),
        repo.license_name or "",
        str(repo.watchers),
        format_timestamp(repo.updated_at),
        format_timestamp(repo.pushed_at),
        str(repo.open_issues),
        str(repo.size),
        f"{repo.created_year:04d}",
    ]


def csv_fields(org: Organization, stats: AggregateStats) -> list[str]:
    return [
        org.display_name,
        str(org.created_year),
        str(stats.stars_sum),
        str(stats.forks_sum),
        str(stats.followers_sum),
        format_timestamp(stats.updated_at_max),
        format_timestamp(stats.pushed_at_max),
        str(stats.open_issues_sum),
        str(stats.size_sum),
    ]


def _csv_line(fields: list[str]) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(fields)
    return output.getvalue()


CSV_HEADER = _csv_line(CSV_COLUMNS)


def csv_row(org: Organization, stats: AggregateStats) -> str:
    """One newline-terminated CSV line with the org's aggregates."""
    return _csv_line(csv_fields(org, stats))


def parse_csv_row(line: str) -> tuple[str, int, AggregateStats]:
    """Inverse of :func:`csv_row`: recover (display name, created year, stats)."""
    fields = next(csv.reader([line.rstrip("\n")]))
    if len(fields) != len(CSV_COLUMNS):
        raise ValueError(
            f"expected {len(CSV_COLUMNS)} columns, got {len(fields)}: {line!r}"
        )
    name, year, stars, forks, followers, updated, pushed, issues, size = fields
    stats = AggregateStats(
        stars_sum=int(stars),
        forks_sum=int(forks),
        followers_sum=int(followers),
        open_issues_sum=int(issues),
        size_sum=int(size),
        updated_at_max=parse_formatted_timestamp(updated),
        pushed_at_max=parse_formatted_timestamp(pushed),
    )
    return name, int(year), stats


def build_table(report: OrgReport) -> Table:
    """Summary cells as the header, then the column labels, then one row per repo."""
    table = Table(show_header=True, header_style="bold")
    for i, cell in enumerate(summary_cells(report.org, report.stats)):
        header = Text(cell, style="green") if i == 0 else Text(cell)
        justify = "left" if i in (0, 3) else "right"
        table.add_column(header, justify=justify)
    table.add_row(*(Text(label, style="green") for label in COLUMN_LABELS))
    for repo in report.repos:
        # Text() so repo names are never parsed as rich markup
        table.add_row(*(Text(cell) for cell in repo_cells(repo)))
    return table


def render(report: OrgReport) -> tuple[Table, str]:
    """Both views of one report: the terminal table and its CSV line."""
    return build_table(report), csv_row(report.org, report.stats)


def print_report(table: Table, report: OrgReport, console: Console | None = None) -> None:
    console = console or Console()
    if report.skipped_repos:
        console.print(
            f"[bold yellow]Warning:[/bold yellow] {report.org.request_name}: "
            f"excluded {len(report.skipped_repos)} malformed repo(s): "
            f"{escape(', '.join(report.skipped_repos))}"
        )
    console.print(table)


class CsvReportWriter:
    """Owns the CSV report file for the duration of a run.

    On enter the file is created (parents included), truncated and given the
    header line. Any I/O failure surfaces as DurableOutputFailure.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._file: IO[str] | None = None
        self.rows_written = 0

    @property
    def path(self) -> Path:
        return self._path

    def __enter__(self) -> CsvReportWriter:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._file = open(self._path, "w", encoding="utf-8", newline="")
            self._file.write(CSV_HEADER)
            self._file.flush()
        except OSError as exc:
            self.close()
            raise DurableOutputFailure(str(self._path), exc) from exc
        logger.debug("Writing CSV report to %s", self._path)
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def write_row(self, row: str) -> None:
        if self._file is None:
            raise DurableOutputFailure(str(self._path), "file is not open")
        try:
            self._file.write(row)
            self._file.flush()
        except OSError as exc:
            raise DurableOutputFailure(str(self._path), exc) from exc
        self.rows_written += 1

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None
