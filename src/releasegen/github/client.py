"""GitHub REST API client."""

from __future__ import annotations

import asyncio
import base64
import binascii
import logging
from typing import Any

import httpx

from ..errors import ReadmeFetchError
from .rate_limit import RateLimitMonitor

logger = logging.getLogger(__name__)

BASE_URL = "https://api.github.com"
README_NAMES = ("README.md", "README.rst", "README")
# Releases are listed newest first; one page is enough to find three
# published (non-draft, non-prerelease) ones in practice.
RELEASE_SCAN_SIZE = 10


class GitHubClient:
    """Async GitHub REST API client with pagination and rate limit support."""

    def __init__(
        self,
        token: str,
        concurrency: int = 5,
        base_url: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        headers = {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {token}",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        self._client = httpx.AsyncClient(
            base_url=base_url or BASE_URL,
            headers=headers,
            timeout=timeout,
        )
        self._rate_limit = RateLimitMonitor()
        self._semaphore = asyncio.Semaphore(concurrency)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def _get(
        self, url: str, params: dict[str, Any] | None = None
    ) -> httpx.Response:
        async with self._semaphore:
            await self._rate_limit.wait_if_needed()
            response = await self._client.get(url, params=params)
            self._rate_limit.update(response)
            response.raise_for_status()
            return response

    async def _paginate(
        self, url: str, params: dict[str, Any] | None = None
    ) -> list[Any]:
        results: list[Any] = []
        params = dict(params or {})
        params.setdefault("per_page", 100)
        next_url: str | None = url

        while next_url is not None:
            response = await self._get(next_url, params)
            data = response.json()
            if isinstance(data, list):
                results.extend(data)
            else:
                results.append(data)

            # Follow Link header for next page
            next_url = None
            link_header = response.headers.get("Link", "")
            for part in link_header.split(","):
                if 'rel="next"' in part:
                    next_url = part.split(";")[0].strip().strip("<>")
                    params = {}  # URL already contains params
                    break

        return results

    async def list_team_repos(self, org: str, team_slug: str) -> list[dict[str, Any]]:
        """List the repositories a team within an org has access to."""
        return await self._paginate(f"/orgs/{org}/teams/{team_slug}/repos")

    async def get_repo(self, owner: str, repo: str) -> dict[str, Any]:
        response = await self._get(f"/repos/{owner}/{repo}")
        return response.json()

    async def list_releases(
        self, owner: str, repo: str, limit: int = 3
    ) -> list[dict[str, Any]]:
        """List the most recent published releases, newest first."""
        response = await self._get(
            f"/repos/{owner}/{repo}/releases",
            params={"per_page": max(limit, RELEASE_SCAN_SIZE)},
        )
        published = [
            r
            for r in response.json()
            if not r.get("draft") and not r.get("prerelease")
        ]
        return published[:limit]

    async def compare_commits(
        self, owner: str, repo: str, base: str, head: str
    ) -> dict[str, Any]:
        """Compare two refs; the result carries ``total_commits``."""
        response = await self._get(
            f"/repos/{owner}/{repo}/compare/{base}...{head}",
            params={"per_page": 1},
        )
        return response.json()

    async def list_commits(
        self, owner: str, repo: str, sha: str | None = None, limit: int = 3
    ) -> list[dict[str, Any]]:
        """List the most recent commits on a branch."""
        params: dict[str, Any] = {"per_page": limit}
        if sha:
            params["sha"] = sha
        try:
            response = await self._get(f"/repos/{owner}/{repo}/commits", params=params)
        except httpx.HTTPStatusError as exc:
            # 409 means the repository is empty
            if exc.response.status_code == 409:
                return []
            raise
        return response.json()[:limit]

    async def get_readme(
        self,
        owner: str,
        repo: str,
        ref: str | None = None,
        names: tuple[str, ...] = README_NAMES,
    ) -> str:
        """Fetch the first README found among ``names``, decoded to text."""
        params = {"ref": ref} if ref else None
        for name in names:
            try:
                response = await self._get(
                    f"/repos/{owner}/{repo}/contents/{name}", params=params
                )
            except httpx.HTTPStatusError as exc:
                if exc.response.status_code == 404:
                    continue
                raise ReadmeFetchError(
                    f"error getting README for repo '{owner}/{repo}': {exc}"
                ) from exc
            data = response.json()
            try:
                return base64.b64decode(data.get("content", "")).decode("utf-8")
            except (binascii.Error, UnicodeDecodeError) as exc:
                raise ReadmeFetchError(
                    f"error getting README content for repo '{owner}/{repo}'"
                ) from exc
        raise ReadmeFetchError(f"no README found for repo '{owner}/{repo}'")
