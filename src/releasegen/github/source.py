"""Repositories owned by GitHub teams within an org."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ..config import GithubOrgConfig
from ..markdown import render_release_body
from ..models import Commit, Release, RepositoryRecord
from ..sources import RepoRef, RepositorySource, iso_to_unix
from ..stores import StoreClient
from .client import GitHubClient

logger = logging.getLogger(__name__)

RELEASES_PER_REPO = 3


@dataclass
class GitHubRepoRef(RepoRef):
    team: str = ""


class GitHubOrgSource(RepositorySource):
    kind = "github"

    def __init__(
        self, client: GitHubClient, config: GithubOrgConfig, store: StoreClient
    ) -> None:
        super().__init__(store, config.ignores)
        self._client = client
        self.org = config.org
        self.teams = list(config.teams)

    @property
    def label(self) -> str:
        return f"github org {self.org}"

    async def discover(self) -> list[RepoRef]:
        """List public repos for each team slug; the first slug to list a repo wins."""
        refs: dict[str, RepoRef] = {}
        for team in self.teams:
            for repo in await self._client.list_team_repos(self.org, team):
                name = repo["name"]
                if repo.get("private") or name in refs:
                    continue
                refs[name] = GitHubRepoRef(
                    name=name,
                    url=repo.get("html_url", ""),
                    default_branch=repo.get("default_branch") or "",
                    team=team,
                )
        return list(refs.values())

    async def process(self, ref: RepoRef) -> RepositoryRecord | None:
        team = ref.team if isinstance(ref, GitHubRepoRef) else ""
        logger.info("processing github repo: %s/%s/%s", self.org, team, ref.name)

        metadata = await self._client.get_repo(self.org, ref.name)
        if metadata.get("archived"):
            logger.info("skipping archived github repo: %s/%s", self.org, ref.name)
            return None

        record = RepositoryRecord(
            name=ref.name,
            url=ref.url,
            default_branch=ref.default_branch or metadata.get("default_branch") or "",
        )

        releases = await self._client.list_releases(
            self.org, ref.name, limit=RELEASES_PER_REPO
        )
        record.releases = [self._release(r, record) for r in releases]

        if record.releases:
            comparison = await self._client.compare_commits(
                self.org, ref.name, record.releases[0].version, record.default_branch
            )
            record.new_commits_since_last_release = int(
                comparison.get("total_commits", 0)
            )
        else:
            commits = await self._client.list_commits(
                self.org, ref.name, sha=record.default_branch, limit=RELEASES_PER_REPO
            )
            record.commits = [self._commit(c) for c in commits]

        await self.attach_readme(
            record,
            self._client.get_readme(self.org, ref.name, ref=record.default_branch or None),
        )
        return record

    @staticmethod
    def _release(data: dict[str, Any], record: RepositoryRecord) -> Release:
        tag = data.get("tag_name", "")
        return Release(
            id=int(data.get("id", 0)),
            version=tag,
            timestamp=iso_to_unix(data.get("published_at") or data.get("created_at")),
            title=data.get("name") or "",
            body=render_release_body(data.get("body") or "", github_links=True),
            url=data.get("html_url", ""),
            compare_url=f"{record.url}/compare/{tag}...{record.default_branch}",
        )

    @staticmethod
    def _commit(data: dict[str, Any]) -> Commit:
        author = (data.get("commit") or {}).get("author") or {}
        return Commit(
            sha=data.get("sha", ""),
            author=author.get("name", ""),
            timestamp=iso_to_unix(author.get("date")),
            message=render_release_body(
                (data.get("commit") or {}).get("message", ""), github_links=True
            ),
            url=data.get("html_url", ""),
        )
