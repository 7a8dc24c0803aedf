"""CLI entrypoint for releasegen."""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .config import load_config
from .errors import ConfigError


def _configure_logging(verbose: bool, quiet: bool) -> None:
    """Send logs to stderr; stdout is reserved for the JSON report."""
    level = logging.DEBUG if verbose else logging.WARNING if quiet else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


@click.command()
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Config file (default: ./releasegen.yaml, ~/.config/releasegen.yaml, "
    "/etc/releasegen/releasegen.yaml)",
)
@click.option(
    "--token",
    envvar="RELEASEGEN_TOKEN",
    required=True,
    show_envvar=True,
    help="GitHub personal access token",
)
@click.option(
    "--output",
    "output_file",
    default=None,
    type=click.Path(),
    help="Save output to file instead of stdout",
)
@click.option(
    "--api-url",
    default=None,
    help="GitHub Enterprise API base URL",
)
@click.option("--verbose", is_flag=True, default=False, help="Enable debug logging")
@click.option("--quiet", is_flag=True, default=False, help="Only log warnings and errors")
@click.version_option(version=__version__, prog_name="releasegen")
def main(
    config_path: Path | None,
    token: str,
    output_file: str | None,
    api_url: str | None,
    verbose: bool,
    quiet: bool,
) -> None:
    """Enumerate releases and tags of team-owned repositories.

    \b
    Repositories are gathered from GitHub teams, Launchpad project groups
    and Gitea orgs as listed per team in releasegen.yaml, and the report is
    printed as JSON.

    \b
    Examples:
      RELEASEGEN_TOKEN=ghp_... releasegen
      releasegen --config teams.yaml --output report.json
    """
    _configure_logging(verbose, quiet)

    try:
        config = load_config(config_path)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    from .orchestrator import run

    try:
        asyncio.run(
            run(
                config,
                token=token,
                output_file=output_file,
                github_api_url=api_url,
                show_progress=sys.stderr.isatty() and not verbose,
            )
        )
    except Exception as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)


if __name__ == "__main__":  # pragma: no cover
    main()
