"""In-memory history of exported animations."""

from __future__ import annotations

import logging
from typing import Iterator, Optional

from . import AnimationArtifact

logger = logging.getLogger(__name__)


class ArtifactHistory:
    """Append-only list of artifacts, newest first when iterated.

    Artifacts leave the history only through :meth:`remove` or, when a
    ``limit`` is set, by being the oldest entry once the limit is exceeded.
    """

    def __init__(self, limit: Optional[int] = None):
        if limit is not None and limit < 1:
            raise ValueError("History limit must be at least 1")
        self.limit = limit
        self._items: list[AnimationArtifact] = []

    def add(self, artifact: AnimationArtifact) -> None:
        self._items.append(artifact)
        if self.limit is not None and len(self._items) > self.limit:
            evicted = self._items.pop(0)
            logger.info("History full, dropped %s", evicted.name)

    def get(self, artifact_id: str) -> Optional[AnimationArtifact]:
        for artifact in self._items:
            if artifact.id == artifact_id:
                return artifact
        return None

    def remove(self, artifact_id: str) -> AnimationArtifact:
        for position, artifact in enumerate(self._items):
            if artifact.id == artifact_id:
                return self._items.pop(position)
        raise KeyError(artifact_id)

    def latest(self) -> Optional[AnimationArtifact]:
        return self._items[-1] if self._items else None

    def __iter__(self) -> Iterator[AnimationArtifact]:
        return iter(reversed(self._items))

    def __len__(self) -> int:
        return len(self._items)
