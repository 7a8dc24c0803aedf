"""Git projects belonging to a Launchpad project group."""

from __future__ import annotations

import logging

import httpx

from ..errors import ScrapeError, UnexpectedStatusError
from ..models import Release, RepositoryRecord
from ..sources import RepoRef, RepositorySource
from ..stores import StoreClient
from .client import LaunchpadClient
from .project import Project

logger = logging.getLogger(__name__)


class LaunchpadGroupSource(RepositorySource):
    kind = "launchpad"

    def __init__(
        self,
        client: LaunchpadClient,
        project_group: str,
        store: StoreClient,
        ignores: list[str] | None = None,
    ) -> None:
        super().__init__(store, ignores)
        self._client = client
        self.project_group = project_group

    @property
    def label(self) -> str:
        return f"launchpad project group {self.project_group}"

    async def discover(self) -> list[RepoRef]:
        names = await self._client.list_project_group(self.project_group)
        return [
            RepoRef(name=name, url=self._client.project_url(name))
            for name in dict.fromkeys(names)
        ]

    async def process(self, ref: RepoRef) -> RepositoryRecord | None:
        logger.info("processing launchpad repo: %s/%s", self.project_group, ref.name)
        project = Project(ref.name, self._client)
        record = RepositoryRecord(name=ref.name, url=ref.url)

        tags = await project.tags()
        if not tags:
            return record

        record.default_branch = await project.default_branch()
        try:
            record.new_commits_since_last_release = await project.new_commits()
        except (ScrapeError, UnexpectedStatusError, httpx.HTTPError) as exc:
            logger.warning("error counting new commits for repo '%s': %s", ref.name, exc)
        record.releases = [
            Release(
                id=tag.timestamp,
                version=tag.name,
                timestamp=tag.timestamp,
                title=tag.name,
                body="",
                url=f"{record.url}/tag/?h={tag.name}",
                compare_url=(
                    f"{record.url}/diff/?id={tag.commit}&id2={record.default_branch}"
                ),
            )
            for tag in tags
        ]

        await self.attach_readme(record, project.readme())
        return record
