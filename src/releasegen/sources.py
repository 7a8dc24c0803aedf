"""Common repository source abstraction and concurrent collection."""

from __future__ import annotations

import abc
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Awaitable

import httpx

from .errors import ReadmeFetchError, UnexpectedStatusError
from .models import RepositoryRecord
from .readme import resolve_readme
from .stores import StoreClient

logger = logging.getLogger(__name__)


def iso_to_unix(value: str | None) -> int:
    """Convert an ISO 8601 timestamp from an API response to unix seconds."""
    if not value:
        return 0
    return int(datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp())


@dataclass
class RepoRef:
    """A repository discovered by a source, before it is processed."""

    name: str
    url: str
    default_branch: str = ""


class NameRegistry:
    """Repository names already claimed for a team.

    Claims are serialized with a lock so concurrent workers never both
    take the same name.
    """

    def __init__(self) -> None:
        self._names: set[str] = set()
        self._lock = asyncio.Lock()

    async def claim(self, name: str) -> bool:
        """Claim ``name``; False if it was already taken."""
        async with self._lock:
            if name in self._names:
                return False
            self._names.add(name)
            return True

    async def release(self, name: str) -> None:
        async with self._lock:
            self._names.discard(name)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)


class RepositorySource(abc.ABC):
    """One configured upstream (an org, a project group) for a team."""

    kind: str = ""

    def __init__(self, store: StoreClient, ignores: list[str] | None = None) -> None:
        self._store = store
        self.ignores = frozenset(ignores or [])

    @property
    @abc.abstractmethod
    def label(self) -> str:
        """Human readable name for logs."""

    @abc.abstractmethod
    async def discover(self) -> list[RepoRef]:
        """List the candidate repositories of this source."""

    @abc.abstractmethod
    async def process(self, ref: RepoRef) -> RepositoryRecord | None:
        """Build the record for one repository, or None to skip it."""

    async def attach_readme(
        self, record: RepositoryRecord, readme_fetch: Awaitable[str]
    ) -> None:
        """Populate README-derived fields; a missing README leaves them empty."""
        try:
            readme = await readme_fetch
        except (ReadmeFetchError, UnexpectedStatusError, httpx.HTTPError) as exc:
            logger.warning("error getting README for repo '%s': %s", record.name, exc)
            return
        record.ci_actions, record.snap, record.charm = await resolve_readme(
            readme, self._store
        )

    async def _process_claimed(
        self, ref: RepoRef, registry: NameRegistry
    ) -> RepositoryRecord | None:
        try:
            record = await self.process(ref)
        except Exception as exc:
            logger.warning(
                "error populating repo '%s' from %s: %s", ref.name, self.kind, exc
            )
            record = None
        if record is None or not record.is_active:
            await registry.release(ref.name)
            return None
        return record

    async def collect(self, registry: NameRegistry) -> list[RepositoryRecord]:
        """Discover, filter, and process every repository concurrently.

        Returns active records in discovery order once every worker has
        finished.
        """
        refs = await self.discover()
        claimed: list[RepoRef] = []
        for ref in refs:
            if ref.name in self.ignores:
                logger.debug("ignoring %s repo %s", self.kind, ref.name)
                continue
            if not await registry.claim(ref.name):
                logger.debug("skipping already processed repo %s", ref.name)
                continue
            claimed.append(ref)

        logger.info("processing %d %s repos from %s", len(claimed), self.kind, self.label)
        results = await asyncio.gather(
            *(self._process_claimed(ref, registry) for ref in claimed)
        )
        return [r for r in results if r is not None]
