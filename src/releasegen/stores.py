"""Snap Store and Charmhub channel-map lookups."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

import httpx

from .errors import ArtifactFetchError
from .models import Artifact, ArtifactKind, ArtifactRelease

logger = logging.getLogger(__name__)

BASE_URL = "https://api.snapcraft.io"

_INFO_PATHS = {
    ArtifactKind.SNAP: "/v2/snaps/info/{name}",
    ArtifactKind.CHARM: "/v2/charms/info/{name}",
}
_INFO_FIELDS = {
    ArtifactKind.SNAP: "channel-map,revision,store-url",
    ArtifactKind.CHARM: "channel-map,result.store-url",
}
_STORE_URLS = {
    ArtifactKind.SNAP: "https://snapcraft.io/{name}",
    ArtifactKind.CHARM: "https://charmhub.io/{name}",
}


def _parse_timestamp(value: Any) -> int:
    """Convert a store ``released-at`` value to unix seconds, 0 if unparseable."""
    if not isinstance(value, str) or not value:
        return 0
    try:
        return int(datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp())
    except ValueError:
        return 0


def _revision(entry: dict[str, Any], kind: ArtifactKind) -> int:
    revision = entry.get("revision")
    # Charm channel-map entries nest the number inside a revision object.
    if kind is ArtifactKind.CHARM and isinstance(revision, dict):
        revision = revision.get("revision")
    try:
        return int(revision or 0)
    except (TypeError, ValueError):
        return 0


def parse_channel_map(
    kind: ArtifactKind, name: str, data: dict[str, Any]
) -> Artifact:
    """Zip the channel-map columns of a store info response into an Artifact."""
    channel_map = data.get("channel-map") or []
    tracks = [(e.get("channel") or {}).get("track", "") for e in channel_map]
    channels = [(e.get("channel") or {}).get("risk", "") for e in channel_map]
    released = [
        _parse_timestamp((e.get("channel") or {}).get("released-at"))
        for e in channel_map
    ]
    revisions = [_revision(e, kind) for e in channel_map]

    releases = [
        ArtifactRelease(track=t, channel=c, revision=r, timestamp=ts)
        for t, c, r, ts in zip(tracks, channels, revisions, released)
    ]
    return Artifact(
        name=name,
        url=_STORE_URLS[kind].format(name=name),
        releases=releases,
    )


class StoreClient:
    """Async client for the Snap Store / Charmhub info API."""

    def __init__(self, base_url: str | None = None, timeout: float = 30.0) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url or BASE_URL,
            headers={"Snap-Device-Series": "16"},
            timeout=timeout,
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> StoreClient:
        return self

    async def __aexit__(self, *exc: object) -> None:
        await self.close()

    async def fetch_artifact(self, kind: ArtifactKind, name: str) -> Artifact:
        """Fetch the channel map for a snap or charm."""
        url = _INFO_PATHS[kind].format(name=name)
        try:
            response = await self._client.get(
                url, params={"fields": _INFO_FIELDS[kind]}
            )
        except httpx.HTTPError as exc:
            raise ArtifactFetchError(
                f"failed to contact the store api for {kind.value} '{name}': {exc}"
            ) from exc

        if response.status_code != 200:
            raise ArtifactFetchError(
                f"unexpected status code {response.status_code} "
                f"fetching {kind.value} '{name}'"
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise ArtifactFetchError(
                f"failed to read details about {kind.value} '{name}' from the store"
            ) from exc
        if not isinstance(data, dict):
            raise ArtifactFetchError(
                f"unexpected response shape for {kind.value} '{name}'"
            )

        logger.debug("fetched %s details: %s", kind.value, name)
        return parse_channel_map(kind, name, data)
