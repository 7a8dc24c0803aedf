"""Exception hierarchy for releasegen."""

from __future__ import annotations


class ReleasegenError(Exception):
    """Base class for all releasegen errors."""


class ConfigError(ReleasegenError):
    """The configuration document is missing or malformed."""


class ArtifactFetchError(ReleasegenError):
    """A snap or charm could not be fetched from the store."""


class ReadmeFetchError(ReleasegenError):
    """No README could be fetched for a repository."""


class UnexpectedStatusError(ReleasegenError):
    """A scraped page answered with a non-200 status."""

    def __init__(self, url: str, status_code: int) -> None:
        super().__init__(f"unexpected HTTP status {status_code} fetching {url}")
        self.url = url
        self.status_code = status_code


class ScrapeError(ReleasegenError):
    """An HTML page did not have the expected structure."""


class DefaultBranchParseError(ScrapeError):
    pass


class TagParseError(ScrapeError):
    pass


class NewCommitsParseError(ScrapeError):
    pass
