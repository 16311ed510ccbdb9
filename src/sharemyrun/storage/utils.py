from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Protocol

# JSON is looked up before FIT when an id could be either
EXTENSION_PRIORITY = ("json", "fit")

CONTENT_TYPES = {
    "json": "application/json",
    "fit": "application/vnd.ant.fit",
}


@dataclass(frozen=True)
class StoredArtifact:
    """Raw bytes of a shared workout plus the extension it was stored under."""
    data: bytes
    ext: str


def object_key(workout_id: str, ext: str) -> str:
    return f"workouts/{workout_id}.{ext}"


class WorkoutStore(Protocol):
    name: str

    def put(self, workout_id: str, ext: str, data: bytes, content_type: str) -> None:
        """Store `data` under workouts/<id>.<ext>, replacing anything already there."""
        ...

    def fetch(
        self,
        workout_id: str,
        extensions: Iterable[str] = EXTENSION_PRIORITY,
    ) -> StoredArtifact:
        """Return the first existing artifact in `extensions` order, or raise NotFound."""
        ...
