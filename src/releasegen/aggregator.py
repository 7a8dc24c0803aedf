"""Per-team aggregation across every configured repository source."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from .config import TeamConfig
from .gitea.client import GiteaClient
from .gitea.source import GiteaOrgSource
from .github.client import GitHubClient
from .github.source import GitHubOrgSource
from .launchpad.client import LaunchpadClient
from .launchpad.source import LaunchpadGroupSource
from .models import RepositoryRecord, TeamReport
from .sources import NameRegistry, RepositorySource
from .stores import StoreClient

logger = logging.getLogger(__name__)


@dataclass
class Clients:
    """Backend clients shared by every team for one run."""

    github: GitHubClient
    launchpad: LaunchpadClient
    store: StoreClient
    gitea: dict[str, GiteaClient] = field(default_factory=dict)

    def gitea_for(self, base_url: str) -> GiteaClient:
        key = base_url.rstrip("/")
        if key not in self.gitea:
            self.gitea[key] = GiteaClient(key)
        return self.gitea[key]

    async def close(self) -> None:
        await self.github.close()
        await self.launchpad.close()
        await self.store.close()
        for client in self.gitea.values():
            await client.close()


def build_sources(team: TeamConfig, clients: Clients) -> list[RepositorySource]:
    """Sources for a team, in the order they are consulted."""
    sources: list[RepositorySource] = [
        GitHubOrgSource(clients.github, org, clients.store) for org in team.github
    ]
    sources.extend(
        LaunchpadGroupSource(
            clients.launchpad, group, clients.store, ignores=team.launchpad.ignores
        )
        for group in team.launchpad.project_groups
    )
    sources.extend(
        GiteaOrgSource(clients.gitea_for(org.url), org, clients.store)
        for org in team.gitea
    )
    return sources


def sort_repositories(repos: list[RepositoryRecord]) -> list[RepositoryRecord]:
    """Newest release first; repos without releases last, in insertion order."""
    return sorted(
        repos,
        key=lambda r: (
            r.latest_release_timestamp is None,
            -(r.latest_release_timestamp or 0),
        ),
    )


async def aggregate(name: str, sources: list[RepositorySource]) -> TeamReport:
    """Collect every source for a team, deduplicating repositories by name.

    A source that fails outright is logged and skipped; the team keeps the
    repositories the other sources produced.
    """
    registry = NameRegistry()
    repos: list[RepositoryRecord] = []
    for source in sources:
        logger.info("processing %s", source.label)
        try:
            repos.extend(await source.collect(registry))
        except Exception as exc:
            logger.warning("error populating repos from %s: %s", source.label, exc)
    return TeamReport(name=name, repos=sort_repositories(repos))


async def aggregate_team(team: TeamConfig, clients: Clients) -> TeamReport:
    logger.info("processing team: %s", team.name)
    return await aggregate(team.name, build_sources(team, clients))
