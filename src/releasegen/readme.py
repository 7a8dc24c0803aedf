"""README badge analysis: CI workflows and linked snaps/charms."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

from .errors import ArtifactFetchError
from .models import Artifact, ArtifactKind
from .stores import StoreClient

logger = logging.getLogger(__name__)

_CI_BADGE_RE = re.compile(r"(https://github\.com/[\w\-./]+)/badge\.svg")
_SNAP_BADGE_RE = re.compile(r"https://snapcraft\.io/([\w-]+)/badge\.svg")
_CHARM_BADGE_RE = re.compile(r"https://charmhub\.io/([\w-]+)/badge\.svg")


@dataclass
class ReadmeInfo:
    ci_actions: list[str] = field(default_factory=list)
    snap_name: str = ""
    charm_name: str = ""


def _first_match(pattern: re.Pattern[str], text: str) -> str:
    match = pattern.search(text)
    return match.group(1) if match else ""


def analyze(readme: str) -> ReadmeInfo:
    """Extract CI badge URLs and linked snap/charm names from README text."""
    return ReadmeInfo(
        ci_actions=list(dict.fromkeys(_CI_BADGE_RE.findall(readme))),
        snap_name=_first_match(_SNAP_BADGE_RE, readme),
        charm_name=_first_match(_CHARM_BADGE_RE, readme),
    )


async def _resolve(
    store: StoreClient, kind: ArtifactKind, name: str
) -> Artifact | None:
    if not name:
        return None
    try:
        return await store.fetch_artifact(kind, name)
    except ArtifactFetchError as exc:
        logger.warning("failed to fetch %s information for %s: %s", kind.value, name, exc)
        return None


async def resolve_readme(
    readme: str, store: StoreClient
) -> tuple[list[str], Artifact | None, Artifact | None]:
    """Analyze a README and resolve any linked artifacts.

    Returns ``(ci_actions, snap, charm)``. Artifact lookups that fail are
    logged and come back as ``None``.
    """
    info = analyze(readme)
    snap = await _resolve(store, ArtifactKind.SNAP, info.snap_name)
    charm = await _resolve(store, ArtifactKind.CHARM, info.charm_name)
    return info.ci_actions, snap, charm
