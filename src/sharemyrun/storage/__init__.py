from __future__ import annotations

from .local import LocalWorkoutStore
from .remote import HttpWorkoutStore
from .utils import CONTENT_TYPES, EXTENSION_PRIORITY, StoredArtifact, WorkoutStore, object_key

__all__ = [
    "CONTENT_TYPES",
    "EXTENSION_PRIORITY",
    "HttpWorkoutStore",
    "LocalWorkoutStore",
    "StoredArtifact",
    "WorkoutStore",
    "object_key",
]
