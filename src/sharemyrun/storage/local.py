from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from sharemyrun.errors import NotFound

from .utils import EXTENSION_PRIORITY, StoredArtifact, object_key

logger = logging.getLogger(__name__)


@dataclass
class LocalWorkoutStore:
    """Keeps artifacts as plain files under <root>/workouts/."""
    root: Path
    name: str = "local"

    def _path(self, workout_id: str, ext: str) -> Path:
        # ids come from URLs; refuse anything that could leave the workouts dir
        if not workout_id or "/" in workout_id or "\\" in workout_id or workout_id.startswith("."):
            raise NotFound(f"invalid workout id {workout_id!r}")
        return self.root / object_key(workout_id, ext)

    def put(self, workout_id: str, ext: str, data: bytes, content_type: str) -> None:
        path = self._path(workout_id, ext)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.info("Stored %s (%d bytes, %s)", path, len(data), content_type)

    def fetch(
        self,
        workout_id: str,
        extensions: Iterable[str] = EXTENSION_PRIORITY,
    ) -> StoredArtifact:
        for ext in extensions:
            path = self._path(workout_id, ext)
            if path.is_file():
                return StoredArtifact(data=path.read_bytes(), ext=ext)
            logger.debug("No %s", path)
        raise NotFound(workout_id)
