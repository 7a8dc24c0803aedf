"""Gitea REST API client."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)

PER_PAGE = 10
TREE_PAGE_SIZE = 1000


class GiteaClient:
    """Async client for a Gitea instance's ``/api/v1`` endpoints."""

    def __init__(self, base_url: str, timeout: float = 30.0) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=f"{self.base_url}/api/v1",
            headers={"Accept": "application/json"},
            timeout=timeout,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> GiteaClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def _get(
        self, url: str, params: dict[str, Any] | None = None
    ) -> httpx.Response:
        response = await self._client.get(url, params=params)
        response.raise_for_status()
        return response

    async def _paginate(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        page_size: int = PER_PAGE,
    ) -> list[Any]:
        """Collect every page of a list endpoint.

        Some servers keep advertising a next page past the end of the
        collection, so an empty or short page also ends the walk.
        """
        results: list[Any] = []
        page = 1
        while True:
            response = await self._get(
                url, params={**(params or {}), "page": page, "limit": page_size}
            )
            data = response.json()
            if not isinstance(data, list) or not data:
                break
            results.extend(data)
            logger.debug("fetched page %d of %s", page, url)
            if len(data) < page_size or 'rel="next"' not in response.headers.get(
                "Link", ""
            ):
                break
            page += 1
        return results

    async def list_user_repos(self, owner: str) -> list[dict[str, Any]]:
        return await self._paginate(f"/users/{owner}/repos")

    async def get_repo(self, owner: str, repo: str) -> dict[str, Any]:
        response = await self._get(f"/repos/{owner}/{repo}")
        return response.json()

    async def list_releases(
        self, owner: str, repo: str, limit: int = 3
    ) -> list[dict[str, Any]]:
        """The newest published releases; drafts and pre-releases are excluded."""
        response = await self._get(
            f"/repos/{owner}/{repo}/releases",
            params={"draft": "false", "pre-release": "false", "limit": limit},
        )
        return response.json()[:limit]

    async def list_commits(
        self, owner: str, repo: str, sha: str, limit: int = 3
    ) -> tuple[list[dict[str, Any]], int]:
        """Newest commits reachable from ``sha`` plus the total count."""
        response = await self._get(
            f"/repos/{owner}/{repo}/commits",
            params={
                "sha": sha,
                "limit": limit,
                "stat": "false",
                "verification": "false",
                "files": "false",
            },
        )
        commits = response.json()
        total = int(response.headers.get("X-Total-Count", len(commits)))
        return commits[:limit], total

    async def get_raw_file(
        self, owner: str, repo: str, path: str, ref: str | None = None
    ) -> str:
        params = {"ref": ref} if ref else None
        response = await self._get(
            f"/repos/{owner}/{repo}/raw/{quote(path)}", params=params
        )
        return response.text

    async def get_tree(
        self, owner: str, repo: str, ref: str, recursive: bool = True
    ) -> list[dict[str, Any]]:
        """Every entry of the tree at ``ref``; there is no subtree endpoint."""
        entries: list[dict[str, Any]] = []
        page = 1
        while True:
            response = await self._get(
                f"/repos/{owner}/{repo}/git/trees/{ref}",
                params={
                    "recursive": str(recursive).lower(),
                    "page": page,
                    "per_page": TREE_PAGE_SIZE,
                },
            )
            data = response.json()
            chunk = data.get("tree") or []
            entries.extend(chunk)
            if not data.get("truncated") or not chunk:
                break
            page += 1
        return entries
