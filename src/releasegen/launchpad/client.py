"""HTTP access to the Launchpad API and git.launchpad.net pages."""

from __future__ import annotations

import logging

import httpx
from bs4 import BeautifulSoup

from ..errors import UnexpectedStatusError

logger = logging.getLogger(__name__)

API_URL = "https://api.launchpad.net/devel"
GIT_URL = "https://git.launchpad.net"
REQUEST_TIMEOUT = 5.0


class LaunchpadClient:
    """Plain HTTP client; every request is bounded by a 5 second timeout."""

    def __init__(
        self,
        api_url: str = API_URL,
        git_url: str = GIT_URL,
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        self.api_url = api_url.rstrip("/")
        self.git_url = git_url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout, follow_redirects=True)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> LaunchpadClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def _get(self, url: str) -> httpx.Response:
        response = await self._client.get(url)
        if response.status_code != 200:
            raise UnexpectedStatusError(url, response.status_code)
        return response

    def project_url(self, project: str) -> str:
        return f"{self.git_url}/{project}"

    async def list_project_group(self, group: str) -> list[str]:
        """Names of the projects in a project group that use Git.

        Follows ``next_collection_link`` across collection pages.
        """
        names: list[str] = []
        next_url: str | None = f"{self.api_url}/{group}/projects"
        while next_url:
            data = (await self._get(next_url)).json()
            entries = data.get("entries") or []
            names.extend(
                e["name"] for e in entries if e.get("vcs") == "Git" and e.get("name")
            )
            next_url = data.get("next_collection_link")
        return names

    async def get_page(self, url: str) -> BeautifulSoup:
        """Fetch a page and parse it for scraping."""
        response = await self._get(url)
        return BeautifulSoup(response.text, "html.parser")

    async def get_readme(self, project: str) -> str:
        response = await self._get(f"{self.project_url(project)}/plain/README.md")
        return response.text
