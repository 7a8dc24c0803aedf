"""Orchestrator: wires together clients, aggregation, and rendering."""

from __future__ import annotations

import logging

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from .aggregator import Clients, aggregate_team
from .config import Config
from .github.client import GitHubClient
from .launchpad.client import LaunchpadClient
from .models import TeamReport
from .renderer import render_json
from .stores import StoreClient

logger = logging.getLogger(__name__)


def make_clients(token: str, github_api_url: str | None = None) -> Clients:
    return Clients(
        github=GitHubClient(token=token, base_url=github_api_url),
        launchpad=LaunchpadClient(),
        store=StoreClient(),
    )


async def build_report(
    config: Config, clients: Clients, show_progress: bool = False
) -> list[TeamReport]:
    """Build one TeamReport per configured team, in config order.

    A team that fails is logged and reported with no repositories; it never
    stops the remaining teams.
    """
    reports: list[TeamReport] = []
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=Console(stderr=True),
        transient=True,
        disable=not show_progress,
    ) as progress:
        task = progress.add_task(
            f"Collecting releases for {len(config.teams)} teams...",
            total=len(config.teams),
        )
        for team in config.teams:
            try:
                report = await aggregate_team(team, clients)
            except Exception as exc:
                logger.error("error processing team '%s': %s", team.name, exc)
                report = TeamReport(name=team.name)
            reports.append(report)
            progress.advance(task)
    return reports


async def run(
    config: Config,
    token: str,
    output_file: str | None = None,
    github_api_url: str | None = None,
    show_progress: bool = False,
) -> None:
    """Main pipeline: fetch data, aggregate, render."""
    clients = make_clients(token, github_api_url)
    try:
        reports = await build_report(config, clients, show_progress=show_progress)
    finally:
        await clients.close()

    render_json(reports, output_file=output_file)
