"""Tests for the renderer module."""

from __future__ import annotations

import csv
import io
from datetime import datetime, timezone

import pytest
from rich.console import Console

from org_stats.aggregator import accumulate, new_stats
from org_stats.errors import DurableOutputFailure
from org_stats.models import AggregateStats, Organization, OrgReport
from org_stats.renderer import (
    COLUMN_LABELS,
    CSV_COLUMNS,
    CSV_HEADER,
    CsvReportWriter,
    build_table,
    csv_fields,
    csv_row,
    format_timestamp,
    parse_csv_row,
    print_report,
    render,
    repo_cells,
    summary_cells,
)

ORG = Organization(request_name="acme", display_name="Acme Corp", created_year=2010)


@pytest.fixture
def report(make_record):
    repos = [
        make_record(
            "rocket",
            stars=5,
            forks=2,
            watchers=5,
            open_issues=1,
            size=300,
            license_name="Apache License 2.0",
            pushed="2023-06-01",
            updated="2023-06-02",
            created_year=2019,
        ),
        make_record("anvil", stars=10, size=20, pushed="2023-01-01"),
    ]
    return OrgReport(org=ORG, repos=repos, stats=accumulate(repos), total_repos=2)


def _console() -> tuple[Console, io.StringIO]:
    buf = io.StringIO()
    return Console(file=buf, force_terminal=False, width=250), buf


def test_format_timestamp():
    ts = datetime(2023, 6, 1, 8, 5, 9, tzinfo=timezone.utc)
    assert format_timestamp(ts) == "2023-06-01 08:05:09 UTC"


def test_format_timestamp_min_is_four_digit_year():
    assert format_timestamp(new_stats().pushed_at_max) == "0001-01-01 00:00:00 UTC"


def test_summary_cells(report):
    cells = summary_cells(report.org, report.stats)
    assert len(cells) == len(COLUMN_LABELS)
    assert cells == [
        "Acme Corp [2010]",
        "Sum: 15",
        "Sum: 2",
        "",
        "Sum: 5",
        "Latest: 2023-06-02 00:00:00 UTC",
        "Latest: 2023-06-01 00:00:00 UTC",
        "Sum: 1",
        "Sum: 320",
        "",
    ]


def test_repo_cells(report):
    assert repo_cells(report.repos[0]) == [
        "rocket",
        "5",
        "2",
        "Apache License 2.0",
        "5",
        "2023-06-02 00:00:00 UTC",
        "2023-06-01 00:00:00 UTC",
        "1",
        "300",
        "2019",
    ]


def test_repo_cells_without_license(report):
    assert repo_cells(report.repos[1])[3] == ""


def test_csv_header_line():
    assert CSV_HEADER == (
        "real_org_name,org_created_at,stars,forks,followers,"
        "updated_at,pushed_at,open_issues_count,size\n"
    )


def test_csv_row(report):
    assert csv_row(report.org, report.stats) == (
        "Acme Corp,2010,15,2,5,2023-06-02 00:00:00 UTC,2023-06-01 00:00:00 UTC,1,320\n"
    )


def test_csv_and_table_share_values(report):
    cells = summary_cells(report.org, report.stats)
    fields = csv_fields(report.org, report.stats)
    assert cells[1] == f"Sum: {fields[2]}"
    assert cells[5] == f"Latest: {fields[5]}"
    assert cells[6] == f"Latest: {fields[6]}"


def test_csv_row_quotes_comma_in_name():
    org = Organization("x", "Foo, Inc.", 2001)
    line = csv_row(org, new_stats())
    assert line.startswith('"Foo, Inc.",2001,')
    assert len(next(csv.reader([line]))) == len(CSV_COLUMNS)


def test_csv_round_trip_reproduces_summary(report):
    line = csv_row(report.org, report.stats)
    name, year, stats = parse_csv_row(line)
    assert (name, year) == ("Acme Corp", 2010)
    assert stats == report.stats
    reparsed = Organization(request_name="acme", display_name=name, created_year=year)
    assert summary_cells(reparsed, stats) == summary_cells(report.org, report.stats)


def test_parse_csv_row_rejects_wrong_column_count():
    with pytest.raises(ValueError):
        parse_csv_row("acme,2010,1\n")


def test_build_table_layout(report):
    table = build_table(report)
    assert len(table.columns) == len(COLUMN_LABELS)
    # label row plus one row per repo
    assert table.row_count == 1 + len(report.repos)


def test_render_output(report):
    table, row = render(report)
    console, buf = _console()
    print_report(table, report, console=console)
    out = buf.getvalue()

    assert "Acme Corp [2010]" in out
    assert "Sum: 15" in out
    assert "Latest: 2023-06-01 00:00:00 UTC" in out
    assert "Open issues" in out
    assert out.index("rocket") < out.index("anvil")
    assert row == csv_row(report.org, report.stats)


def test_print_report_warns_about_skipped(report):
    skipped = OrgReport(
        org=report.org,
        repos=report.repos,
        stats=report.stats,
        skipped_repos=["broken-repo"],
    )
    table, _ = render(skipped)
    console, buf = _console()
    print_report(table, skipped, console=console)
    assert "broken-repo" in buf.getvalue()


def test_render_empty_report():
    empty = OrgReport(org=ORG, repos=[], stats=new_stats())
    table, row = render(empty)
    assert table.row_count == 1
    assert row == "Acme Corp,2010,0,0,0,0001-01-01 00:00:00 UTC,0001-01-01 00:00:00 UTC,0,0\n"


def test_csv_writer_writes_header_and_rows(tmp_path, report):
    path = tmp_path / "out" / "org_stats.csv"
    with CsvReportWriter(path) as writer:
        writer.write_row(csv_row(report.org, report.stats))
        writer.write_row(csv_row(report.org, AggregateStats()))
    assert writer.rows_written == 2

    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines[0] == CSV_HEADER.rstrip("\n")
    assert len(lines) == 3
    for parsed in csv.reader(lines):
        assert len(parsed) == 9


def test_csv_writer_truncates_existing_file(tmp_path):
    path = tmp_path / "org_stats.csv"
    path.write_text("stale,data\n")
    with CsvReportWriter(path):
        pass
    assert path.read_text(encoding="utf-8") == CSV_HEADER


def test_csv_writer_failure_to_open(tmp_path):
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")
    with pytest.raises(DurableOutputFailure) as excinfo:
        with CsvReportWriter(blocker / "org_stats.csv"):
            pass
    assert "not-a-dir" in str(excinfo.value)


def test_csv_writer_write_after_close(tmp_path):
    writer = CsvReportWriter(tmp_path / "org_stats.csv")
    with writer:
        pass
    with pytest.raises(DurableOutputFailure):
        writer.write_row("x\n")
