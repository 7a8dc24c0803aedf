"""Repositories of a Gitea org, with monorepo folders split into sub-repositories.

Releases and commits of a monorepo sub-repository are read from the whole
parent repository; they are not filtered to the sub-repository's folder.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass
from typing import Any

import httpx

from ..config import GiteaOrgConfig
from ..errors import ReadmeFetchError
from ..markdown import render_release_body
from ..models import Commit, Release, RepositoryRecord
from ..sources import RepoRef, RepositorySource, iso_to_unix
from ..stores import StoreClient
from .client import GiteaClient

logger = logging.getLogger(__name__)

RELEASES_PER_REPO = 3
README_NAMES = ("README.md", "README.rst")


@dataclass
class GiteaRepoRef(RepoRef):
    repo: str = ""
    repo_url: str = ""
    folder: str = ""


class GiteaOrgSource(RepositorySource):
    kind = "gitea"

    def __init__(
        self, client: GiteaClient, config: GiteaOrgConfig, store: StoreClient
    ) -> None:
        super().__init__(store, config.ignores)
        self._client = client
        self.org = config.org
        self.includes = dict(config.includes)

    @property
    def label(self) -> str:
        return f"gitea org {self.org} at {self._client.base_url}"

    @staticmethod
    def _is_public(repo: dict[str, Any]) -> bool:
        return not repo.get("private") and not repo.get("archived")

    def _repo_ref(self, repo: dict[str, Any]) -> GiteaRepoRef:
        return GiteaRepoRef(
            name=repo["name"],
            url=repo.get("html_url", ""),
            default_branch=repo.get("default_branch") or "",
            repo=repo["name"],
            repo_url=repo.get("html_url", ""),
        )

    async def discover(self) -> list[RepoRef]:
        if not self.includes:
            repos = await self._client.list_user_repos(self.org)
            return [self._repo_ref(r) for r in repos if self._is_public(r)]

        refs: list[RepoRef] = []
        for name, repo_config in self.includes.items():
            try:
                repo = await self._client.get_repo(self.org, name)
            except httpx.HTTPError as exc:
                logger.warning("error fetching gitea repo '%s/%s': %s", self.org, name, exc)
                continue
            if not self._is_public(repo):
                continue
            if repo_config.monorepo_folders:
                refs.extend(await self._split_monorepo(repo, repo_config.monorepo_folders))
            else:
                refs.append(self._repo_ref(repo))
        return refs

    async def _split_monorepo(
        self, repo: dict[str, Any], folders: list[str]
    ) -> list[RepoRef]:
        """One sub-repository per directory directly below each monorepo folder."""
        parent = self._repo_ref(repo)
        try:
            tree = await self._client.get_tree(self.org, parent.repo, parent.default_branch)
        except httpx.HTTPError as exc:
            logger.warning("error listing monorepo '%s': %s", parent.repo, exc)
            return []

        refs: list[RepoRef] = []
        seen: set[str] = set()
        for folder in folders:
            folder = folder.strip("/")
            prefix = f"{folder}/"
            for entry in tree:
                path = entry.get("path", "")
                if not path.startswith(prefix):
                    continue
                parts = path[len(prefix):].split("/")
                child = parts[0]
                is_dir = len(parts) > 1 or entry.get("type") == "tree"
                if not child or not is_dir or child in seen:
                    continue
                seen.add(child)
                refs.append(
                    GiteaRepoRef(
                        name=child,
                        url=(
                            f"{parent.repo_url}/src/branch/"
                            f"{parent.default_branch}/{folder}/{child}"
                        ),
                        default_branch=parent.default_branch,
                        repo=parent.repo,
                        repo_url=parent.repo_url,
                        folder=f"{folder}/{child}",
                    )
                )
        return refs

    async def process(self, ref: RepoRef) -> RepositoryRecord | None:
        if not isinstance(ref, GiteaRepoRef):
            # a plain ref names a whole repository
            ref = GiteaRepoRef(
                name=ref.name,
                url=ref.url,
                default_branch=ref.default_branch,
                repo=ref.name,
                repo_url=ref.url,
            )
        logger.info("processing gitea repo: %s/%s", self.org, ref.name)
        record = RepositoryRecord(
            name=ref.name, url=ref.url, default_branch=ref.default_branch
        )

        releases = await self._client.list_releases(
            self.org, ref.repo, limit=RELEASES_PER_REPO
        )
        record.releases = [self._release(r, ref) for r in releases]

        if record.releases:
            _, head_total = await self._client.list_commits(
                self.org, ref.repo, sha=ref.default_branch, limit=1
            )
            _, tag_total = await self._client.list_commits(
                self.org, ref.repo, sha=record.releases[0].version, limit=1
            )
            record.new_commits_since_last_release = max(head_total - tag_total, 0)
        else:
            commits, _ = await self._client.list_commits(
                self.org, ref.repo, sha=ref.default_branch, limit=RELEASES_PER_REPO
            )
            record.commits = [self._commit(c) for c in commits]

        if record.is_active:
            await self.attach_readme(record, self._readme(ref))
        return record

    async def _readme(self, ref: GiteaRepoRef) -> str:
        for name in README_NAMES:
            path = posixpath.join(ref.folder, name) if ref.folder else name
            try:
                return await self._client.get_raw_file(
                    self.org, ref.repo, path, ref=ref.default_branch or None
                )
            except httpx.HTTPStatusError as exc:
                if exc.response.status_code == 404:
                    continue
                raise
        raise ReadmeFetchError(f"no README found for '{ref.repo}/{ref.folder}'")

    @staticmethod
    def _release(data: dict[str, Any], ref: GiteaRepoRef) -> Release:
        tag = data.get("tag_name", "")
        return Release(
            id=int(data.get("id", 0)),
            version=tag,
            timestamp=iso_to_unix(data.get("published_at") or data.get("created_at")),
            title=data.get("name") or "",
            body=render_release_body(data.get("body") or ""),
            url=data.get("html_url", ""),
            compare_url=f"{ref.repo_url}/compare/{tag}...{ref.default_branch}",
        )

    @staticmethod
    def _commit(data: dict[str, Any]) -> Commit:
        meta = data.get("commit") or {}
        # Commits pushed by unknown identities have no linked author.
        author = data.get("author") or {}
        return Commit(
            sha=data.get("sha", ""),
            author=author.get("full_name") or author.get("login") or "",
            timestamp=iso_to_unix(
                data.get("created") or (meta.get("author") or {}).get("date")
            ),
            message=render_release_body(meta.get("message", "")),
            url=data.get("html_url", ""),
        )
