"""CLI entrypoint for org-stats."""

from __future__ import annotations

import asyncio
import logging
import sys

import click
import httpx
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .errors import DurableOutputFailure
from .orchestrator import DEFAULT_OUTPUT


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO; keep it out of normal output
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


@click.command()
@click.argument("orgs", nargs=-1, required=True)
@click.option(
    "--latest-n",
    "-n",
    "latest_n",
    type=click.IntRange(min=0),
    default=None,
    help=(
        "Take only the N most recently pushed (non-archived) repositories per org. "
        "Sums and latest dates then cover those N repositories only."
    ),
)
@click.option(
    "--token",
    envvar="GITHUB_TOKEN",
    default=None,
    show_envvar=True,
    help="GitHub personal access token (optional for public data)",
)
@click.option(
    "--output",
    "output_file",
    default=DEFAULT_OUTPUT,
    show_default=True,
    type=click.Path(dir_okay=False),
    help="CSV file to (re)create with one summary row per organization",
)
@click.option(
    "--include-forks", is_flag=True, default=False, help="Include forked repositories"
)
@click.option(
    "--parallel",
    is_flag=True,
    default=False,
    help="Fetch all organizations concurrently (output order is unchanged)",
)
@click.option("--no-cache", is_flag=True, default=False, help="Disable HTTP response caching")
@click.option(
    "--api-url",
    default=None,
    help="GitHub Enterprise API base URL",
)
@click.option(
    "--no-ssl-verify",
    is_flag=True,
    default=False,
    help="Disable SSL verification (self-signed certs)",
)
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
@click.version_option(version=__version__)
def main(
    orgs: tuple[str, ...],
    latest_n: int | None,
    token: str | None,
    output_file: str,
    include_forks: bool,
    parallel: bool,
    no_cache: bool,
    api_url: str | None,
    no_ssl_verify: bool,
    verbose: bool,
) -> None:
    """Summarize public repositories of GitHub organizations.

    \b
    Prints a table per organization and writes one CSV row per
    organization to --output.

    \b
    Examples:
      org-stats rust-lang tokio-rs
      org-stats rust-lang --latest-n 20 --output stats.csv
    """
    _configure_logging(verbose)

    from .orchestrator import run

    try:
        asyncio.run(
            run(
                orgs=list(orgs),
                token=token,
                limit=latest_n,
                output_file=output_file,
                include_forks=include_forks,
                parallel=parallel,
                no_cache=no_cache,
                api_url=api_url,
                verify_ssl=not no_ssl_verify,
            )
        )
    except DurableOutputFailure as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code
        if status in (401, 403):
            click.echo(
                "Error: Authentication failed or rate limited. "
                "Check your --token or $GITHUB_TOKEN.",
                err=True,
            )
        else:
            click.echo(f"Error: GitHub API returned {status}.", err=True)
        sys.exit(1)
    except (httpx.ConnectError, httpx.ConnectTimeout) as exc:
        click.echo(f"Error: Could not connect to GitHub API. {exc}", err=True)
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
