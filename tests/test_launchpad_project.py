"""Tests for cgit page scraping of Launchpad projects."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
from bs4 import BeautifulSoup

from releasegen.errors import (
    DefaultBranchParseError,
    NewCommitsParseError,
    TagParseError,
    UnexpectedStatusError,
)
from releasegen.launchpad.client import LaunchpadClient
from releasegen.launchpad.project import (
    Project,
    count_new_commits,
    parse_default_branch,
    parse_tag_commit,
    parse_tag_names,
)

SUMMARY_PAGE = """
<html><body>
<form><select name='h'>
  <option value='feature'>feature</option>
  <option value='main' selected='selected'>main</option>
</select></form>
<table summary='repository info' class='list nowrap'>
<tr class='nohover'><th class='left'>Branch</th><th class='left'>Commit message</th>
<th class='left'>Author</th><th class='left' colspan='2'>Age</th></tr>
<tr><td><a href='/proj/log/?h=main'>main</a></td><td>Fix</td><td>A</td><td>1d</td></tr>
<tr class='nohover'><td colspan='3'>&nbsp;</td></tr>
<tr class='nohover'><th class='left'>Tag</th><th class='left'>Download</th>
<th class='left'>Author</th><th class='left' colspan='2'>Age</th></tr>
<tr><td><a href='/proj/tag/?h=rev30'>rev30</a></td>
<td><a href='/proj/snapshot/proj-rev30.tar.gz'>proj-rev30.tar.gz</a></td><td>A</td><td>1d</td></tr>
<tr><td><a href='/proj/tag/?h=latest'>latest</a></td><td></td><td>A</td><td>2d</td></tr>
<tr><td><a href='/proj/tag/?h=rev29'>rev29</a></td><td></td><td>A</td><td>3d</td></tr>
<tr><td><a href='/proj/tag/?h=rev29'>rev29</a></td><td></td><td>A</td><td>3d</td></tr>
<tr><td><a href='/proj/tag/?h=rev28'>rev28</a></td><td></td><td>A</td><td>4d</td></tr>
<tr><td><a href='/proj/tag/?h=rev27'>rev27</a></td><td></td><td>A</td><td>5d</td></tr>
<tr class='nohover'><td colspan='3'>&nbsp;</td></tr>
<tr class='nohover'><th class='left'>Age</th><th class='left'>Commit message</th></tr>
<tr><td><a href='/proj/tag/?h=rev99'>not a tag row</a></td></tr>
</table>
</body></html>
"""

COMMIT_PAGE = """
<html><body>
<table summary='commit info' class='commit-info'>
<tr><th>author</th><td>Jane Doe</td><td class='right'>2023-11-14 22:13:20 +0000</td></tr>
<tr><th>committer</th><td>Jane Doe</td><td class='right'>2023-11-15 10:00:00 +0000</td></tr>
<tr><th>commit</th><td colspan='2' class='sha1'>
<a href='/proj/commit/?id=deadbeef'>deadbeef</a></td></tr>
</table>
</body></html>
"""


def _log_page(branch_row: int, tag_row: int, rows: int = 4) -> str:
    body = []
    for i in range(rows):
        decorations = ""
        if i == branch_row:
            decorations += "<a class='branch-deco' href='/proj/log/?h=main'>main</a>"
        if i == tag_row:
            decorations += "<a class='tag-deco' href='/proj/tag/?h=rev1'>rev1</a>"
        body.append(f"<tr><td>{i}h</td><td><a href='/c/{i}'>commit {i}</a>{decorations}</td></tr>")
    return (
        "<table class='list nowrap'>"
        "<tr class='nohover'><th>Age</th><th>Commit message</th></tr>"
        + "".join(body)
        + "</table>"
    )


def _soup(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def test_parse_default_branch():
    assert parse_default_branch(_soup(SUMMARY_PAGE)) == "main"


def test_parse_default_branch_missing():
    with pytest.raises(DefaultBranchParseError):
        parse_default_branch(_soup("<select><option>main</option></select>"))


def test_parse_tag_names_filters_and_limits():
    assert parse_tag_names(_soup(SUMMARY_PAGE)) == ["rev30", "rev29", "rev28"]


def test_parse_tag_names_stops_at_next_section():
    names = parse_tag_names(_soup(SUMMARY_PAGE), limit=10)
    assert names == ["rev30", "rev29", "rev28", "rev27"]
    assert "rev99" not in names


def test_parse_tag_names_without_tag_table():
    assert parse_tag_names(_soup("<table><tr class='nohover'><th>Branch</th></tr></table>")) == []


def test_parse_tag_commit():
    commit, timestamp = parse_tag_commit(_soup(COMMIT_PAGE))
    assert commit == "deadbeef"
    assert timestamp == 1700000000


def test_parse_tag_commit_missing_table():
    with pytest.raises(TagParseError):
        parse_tag_commit(_soup("<html></html>"))


def test_parse_tag_commit_bad_timestamp():
    page = COMMIT_PAGE.replace("2023-11-14 22:13:20 +0000", "yesterday")
    with pytest.raises(TagParseError):
        parse_tag_commit(_soup(page))


def test_count_new_commits_counts_rows_up_to_tag():
    # branch on the first row, one commit between, tag on the third
    assert count_new_commits(_soup(_log_page(branch_row=0, tag_row=2))) == 2


def test_count_new_commits_adjacent_rows():
    assert count_new_commits(_soup(_log_page(branch_row=0, tag_row=1))) == 1


def test_count_new_commits_same_row_is_zero():
    assert count_new_commits(_soup(_log_page(branch_row=0, tag_row=0))) == 0


def test_count_new_commits_tag_beyond_first_page():
    # every row after the branch counts when no tag is on the page
    assert count_new_commits(_soup(_log_page(branch_row=0, tag_row=-1, rows=50))) == 50


def test_count_new_commits_missing_branch_decoration():
    with pytest.raises(NewCommitsParseError):
        count_new_commits(_soup(_log_page(branch_row=-1, tag_row=1)))


def _mock_client(pages: dict[str, str]) -> AsyncMock:
    client = AsyncMock(spec=LaunchpadClient)
    client.project_url = MagicMock(side_effect=lambda name: f"https://git.launchpad.net/{name}")

    async def get_page(url):
        if url not in pages:
            raise UnexpectedStatusError(url, 404)
        return _soup(pages[url])

    client.get_page.side_effect = get_page
    return client


@pytest.mark.asyncio
async def test_project_tags_fetches_each_commit_page():
    base = "https://git.launchpad.net/proj"
    pages = {
        base: SUMMARY_PAGE,
        f"{base}/commit/?h=rev30": COMMIT_PAGE,
        f"{base}/commit/?h=rev29": COMMIT_PAGE.replace("deadbeef", "cafe"),
    }
    project = Project("proj", _mock_client(pages))

    tags = await project.tags()

    # rev28 has no commit page and is skipped
    assert [t.name for t in tags] == ["rev30", "rev29"]
    assert tags[1].commit == "cafe"
    assert await project.default_branch() == "main"
    assert project.url == base


@pytest.mark.asyncio
async def test_project_page_fetched_once():
    base = "https://git.launchpad.net/proj"
    client = _mock_client({base: SUMMARY_PAGE})
    project = Project("proj", client)

    await project.default_branch()
    await project.default_branch()
    await project.tags()

    fetched = [c.args[0] for c in client.get_page.call_args_list]
    assert fetched.count(base) == 1


@pytest.mark.asyncio
async def test_project_new_commits_reads_log():
    base = "https://git.launchpad.net/proj"
    project = Project("proj", _mock_client({f"{base}/log": _log_page(0, 3)}))
    assert await project.new_commits() == 3


@pytest.mark.asyncio
async def test_client_get_raises_on_unexpected_status():
    client = LaunchpadClient()
    resp = MagicMock(spec=httpx.Response)
    resp.status_code = 503
    client._client.get = AsyncMock(return_value=resp)

    with pytest.raises(UnexpectedStatusError) as exc_info:
        await client.get_page("https://git.launchpad.net/proj")
    assert exc_info.value.status_code == 503


@pytest.mark.asyncio
async def test_client_list_project_group_keeps_git_projects():
    client = LaunchpadClient()
    resp = MagicMock(spec=httpx.Response)
    resp.status_code = 200
    resp.json.return_value = {
        "entries": [
            {"name": "alpha", "vcs": "Git"},
            {"name": "beta", "vcs": "Bazaar"},
            {"name": "gamma", "vcs": None},
            {"name": "delta", "vcs": "Git"},
        ]
    }
    client._client.get = AsyncMock(return_value=resp)

    assert await client.list_project_group("my-group") == ["alpha", "delta"]
    assert client._client.get.call_args.args[0] == "https://api.launchpad.net/devel/my-group/projects"


@pytest.mark.asyncio
async def test_client_list_project_group_follows_collection_pages():
    client = LaunchpadClient()
    first = MagicMock(spec=httpx.Response)
    first.status_code = 200
    first.json.return_value = {
        "entries": [{"name": "alpha", "vcs": "Git"}],
        "next_collection_link": "https://api.launchpad.net/devel/my-group/projects?ws.start=75",
    }
    second = MagicMock(spec=httpx.Response)
    second.status_code = 200
    second.json.return_value = {"entries": [{"name": "omega", "vcs": "Git"}]}
    client._client.get = AsyncMock(side_effect=[first, second])

    assert await client.list_project_group("my-group") == ["alpha", "omega"]
    assert client._client.get.call_args.args[0].endswith("?ws.start=75")


def test_client_request_timeout():
    client = LaunchpadClient()
    assert client._client.timeout == httpx.Timeout(5.0)
    assert client._client.follow_redirects is True
