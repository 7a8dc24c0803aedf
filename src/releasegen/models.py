"""Data models for releasegen."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ArtifactKind(str, Enum):
    SNAP = "snap"
    CHARM = "charm"


@dataclass
class ArtifactRelease:
    track: str
    channel: str
    revision: int
    timestamp: int


@dataclass
class Artifact:
    """A snap or charm and its channel map.

    ``channels`` and ``tracks`` are always derived from ``releases``.
    """

    name: str
    url: str
    releases: list[ArtifactRelease] = field(default_factory=list)
    channels: list[str] = field(init=False)
    tracks: list[str] = field(init=False)

    def __post_init__(self) -> None:
        self.channels = list(dict.fromkeys(r.channel for r in self.releases))
        self.tracks = list(dict.fromkeys(r.track for r in self.releases))


@dataclass
class Release:
    id: int
    version: str
    timestamp: int
    title: str = ""
    body: str = ""
    url: str = ""
    compare_url: str = ""


@dataclass
class Commit:
    sha: str
    author: str
    timestamp: int
    message: str = ""
    url: str = ""


@dataclass
class RepositoryRecord:
    name: str
    url: str
    default_branch: str = ""
    new_commits_since_last_release: int = 0
    releases: list[Release] = field(default_factory=list)
    commits: list[Commit] = field(default_factory=list)
    ci_actions: list[str] = field(default_factory=list)
    charm: Artifact | None = None
    snap: Artifact | None = None

    @property
    def is_active(self) -> bool:
        return len(self.releases) > 0 or len(self.commits) > 0

    @property
    def latest_release_timestamp(self) -> int | None:
        if not self.releases:
            return None
        return self.releases[0].timestamp


@dataclass
class TeamReport:
    name: str
    repos: list[RepositoryRecord] = field(default_factory=list)
