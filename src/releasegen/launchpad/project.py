"""Scraping of cgit pages for a single Launchpad project."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from urllib.parse import parse_qs, urlsplit

from bs4 import BeautifulSoup, Tag as HtmlTag

from ..errors import DefaultBranchParseError, NewCommitsParseError, TagParseError
from .client import LaunchpadClient

logger = logging.getLogger(__name__)

# Text of the header row that precedes the tag listing on a project page.
TAG_TABLE_BANNER = "TagDownloadAuthorAge"
TAG_PREFIX = "rev"
TAG_TIME_FORMAT = "%Y-%m-%d %H:%M:%S %z"
TAGS_PER_PROJECT = 3


@dataclass
class Tag:
    name: str
    commit: str
    timestamp: int


def _squash(text: str) -> str:
    return "".join(text.split())


def parse_default_branch(page: BeautifulSoup) -> str:
    """The branch preselected in the branch switcher is the default branch."""
    option = page.select_one("option[selected]")
    branch = option.get_text(strip=True) if option is not None else ""
    if not branch:
        raise DefaultBranchParseError("error parsing default branch for repository")
    return branch


def _is_header_row(row: HtmlTag) -> bool:
    return "nohover" in (row.get("class") or [])


def _tag_name(href: str) -> str:
    values = parse_qs(urlsplit(href).query).get("h") or []
    return values[0] if values else ""


def parse_tag_names(page: BeautifulSoup, limit: int = TAGS_PER_PROJECT) -> list[str]:
    """Names of the newest ``rev*`` tags listed on a project page."""
    header = next(
        (
            row
            for row in page.select("tr.nohover")
            if _squash(row.get_text()) == TAG_TABLE_BANNER
        ),
        None,
    )
    if header is None:
        return []

    names: list[str] = []
    for row in header.find_next_siblings("tr"):
        if _is_header_row(row):
            break
        for link in row.find_all("a", href=True):
            name = _tag_name(link["href"])
            if not name.startswith(TAG_PREFIX) or name in names:
                continue
            names.append(name)
            if len(names) == limit:
                return names
    return names


def parse_tag_commit(page: BeautifulSoup) -> tuple[str, int]:
    """Commit hash and commit time from a cgit commit page."""
    table = page.select_one("table.commit-info")
    if table is None:
        raise TagParseError("commit page has no commit-info table")

    link = table.find("a")
    cell = table.select_one("td.right")
    if link is None or cell is None:
        raise TagParseError("commit-info table is missing the commit or its date")

    try:
        timestamp = datetime.strptime(cell.get_text(strip=True), TAG_TIME_FORMAT)
    except ValueError as exc:
        raise TagParseError(f"error parsing timestamp for tag: {exc}") from exc
    return link.get_text(strip=True), int(timestamp.timestamp())


def count_new_commits(page: BeautifulSoup) -> int:
    """Commits on the default branch since the most recent tag, from a log page.

    When the tag is older than the first log page, every row after the
    branch counts.
    """
    table = page.select_one("table.list")
    if table is None:
        raise NewCommitsParseError("log page has no commit table")

    branch_link = table.select_one("a.branch-deco")
    branch_row = branch_link.find_parent("tr") if branch_link is not None else None
    if branch_row is None:
        raise NewCommitsParseError("log page is missing the branch decoration")

    tag_link = table.select_one("a.tag-deco")
    tag_row = tag_link.find_parent("tr") if tag_link is not None else None
    if tag_row is not None and branch_row.get_text() == tag_row.get_text():
        return 0

    between = 0
    for row in branch_row.find_next_siblings("tr"):
        if row is tag_row:
            break
        between += 1
    return between + 1


class Project:
    """A Launchpad project; its landing page is fetched at most once."""

    def __init__(self, name: str, client: LaunchpadClient) -> None:
        self.name = name
        self._client = client
        self._page: BeautifulSoup | None = None
        self._default_branch = ""
        self._tags: list[Tag] | None = None

    @property
    def url(self) -> str:
        return self._client.project_url(self.name)

    async def _project_page(self) -> BeautifulSoup:
        if self._page is None:
            self._page = await self._client.get_page(self.url)
        return self._page

    async def default_branch(self) -> str:
        if not self._default_branch:
            self._default_branch = parse_default_branch(await self._project_page())
        return self._default_branch

    async def _fetch_tag(self, name: str) -> Tag:
        page = await self._client.get_page(f"{self.url}/commit/?h={name}")
        commit, timestamp = parse_tag_commit(page)
        return Tag(name=name, commit=commit, timestamp=timestamp)

    async def tags(self) -> list[Tag]:
        if self._tags is not None:
            return self._tags

        names = parse_tag_names(await self._project_page())
        results = await asyncio.gather(
            *(self._fetch_tag(name) for name in names), return_exceptions=True
        )
        tags: list[Tag] = []
        for name, result in zip(names, results):
            if isinstance(result, Exception):
                logger.warning("skipping tag %s of %s: %s", name, self.name, result)
                continue
            tags.append(result)
        self._tags = tags
        return tags

    async def new_commits(self) -> int:
        return count_new_commits(await self._client.get_page(f"{self.url}/log"))

    async def readme(self) -> str:
        return await self._client.get_readme(self.name)
