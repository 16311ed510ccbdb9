from __future__ import annotations

import copy
import json
import logging
import re
import uuid
from dataclasses import dataclass
from pathlib import PurePath

from sharemyrun.errors import NotFound, UnsupportedFormat, UploadRejected
from sharemyrun.storage import CONTENT_TYPES, EXTENSION_PRIORITY, WorkoutStore
from sharemyrun.workouts import CanonicalWorkout, WorkoutFormat, interpret

logger = logging.getLogger(__name__)

MAX_UPLOAD_BYTES = 5 * 1024 * 1024
MIN_FIT_BYTES = 14

EXTENSION_URL = (
    "https://chromewebstore.google.com/detail/share-your-garmin-connect/"
    "kdpolhnlnkengkmfncjdbfdehglepmff"
)

IMPORT_INSTRUCTIONS: dict[str, tuple[str, ...]] = {
    "json": (
        f"Install the Share Your Garmin Connect Workout extension ({EXTENSION_URL})",
        "Go to Garmin Connect → Training → Workouts",
        "Click the extension icon → Upload → select downloaded file",
    ),
    "fit": (
        "Connect your Garmin watch via USB",
        "Copy the .FIT file to /GARMIN/NewFiles/",
        "Safely eject and sync your watch",
    ),
}


@dataclass(frozen=True)
class WorkoutArtifact:
    workout_id: str
    data: bytes
    format: WorkoutFormat


@dataclass(frozen=True)
class SharedWorkout:
    """What the share page needs: the parsed workout and the file to download."""
    workout: CanonicalWorkout
    artifact: WorkoutArtifact

    @property
    def download_filename(self) -> str:
        slug = re.sub(r"\s+", "-", self.workout.name)
        return f"{slug}.{self.artifact.format}"

    @property
    def import_instructions(self) -> tuple[str, ...]:
        return IMPORT_INSTRUCTIONS[self.artifact.format]


def share_path(workout_id: str) -> str:
    return f"/w/{workout_id}"


def new_workout_id() -> str:
    return str(uuid.uuid4())[:8]


# -----------------------
# Upload
# -----------------------

def _check_document(document) -> None:
    if not isinstance(document, dict) or not (
        document.get("workoutName") or document.get("workoutSegments")
    ):
        raise UploadRejected("Invalid Garmin workout JSON")
    segments = document.get("workoutSegments")
    if segments is not None and not isinstance(segments, list):
        raise UploadRejected("workoutSegments must be an array")


def validate_upload(filename: str, data: bytes, max_bytes: int = MAX_UPLOAD_BYTES) -> WorkoutFormat:
    """
    Check a user-supplied file before it is stored and return its format.
    Only the extension decides the format; content checks are shallow.
    """
    ext = PurePath(filename.lower()).suffix
    if ext not in (".fit", ".json"):
        raise UploadRejected("Must be a .FIT or .JSON file")
    if len(data) > max_bytes:
        raise UploadRejected(f"File too large (max {max_bytes // (1024 * 1024)}MB)")

    if ext == ".json":
        try:
            document = json.loads(data.decode("utf-8-sig"))
        except (UnicodeDecodeError, ValueError) as e:
            raise UploadRejected("Invalid JSON file") from e
        _check_document(document)
        return "json"

    if len(data) < MIN_FIT_BYTES:
        raise UploadRejected("Invalid FIT file")
    return "fit"


def share_workout(
    store: WorkoutStore,
    filename: str,
    data: bytes,
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> tuple[str, str]:
    """Validate and store an uploaded file. Returns (workout_id, share path)."""
    fmt = validate_upload(filename, data, max_bytes=max_bytes)
    workout_id = new_workout_id()
    store.put(workout_id, fmt, data, CONTENT_TYPES[fmt])
    logger.info("Shared %s as %s.%s", filename, workout_id, fmt)
    return workout_id, share_path(workout_id)


def share_workout_document(
    store: WorkoutStore,
    document,
    max_bytes: int = MAX_UPLOAD_BYTES,
) -> tuple[str, str]:
    """Store a workout posted as JSON (the browser extension path)."""
    _check_document(document)
    content = json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")
    if len(content) > max_bytes:
        raise UploadRejected("Workout data too large")
    workout_id = new_workout_id()
    store.put(workout_id, "json", content, CONTENT_TYPES["json"])
    logger.info("Shared posted workout as %s.json", workout_id)
    return workout_id, share_path(workout_id)


# -----------------------
# View
# -----------------------

def open_shared_workout(store: WorkoutStore, workout_id: str) -> SharedWorkout:
    """
    Fetch and interpret a stored workout.

    Missing, unsupported and uninterpretable artifacts all raise NotFound.
    """
    artifact = store.fetch(workout_id, EXTENSION_PRIORITY)
    return shared_from_bytes(workout_id, artifact.data, artifact.ext)


def shared_from_bytes(workout_id: str, data: bytes, ext: str) -> SharedWorkout:
    """Interpret raw artifact bytes; raises NotFound when nothing renderable comes out."""
    try:
        result = interpret(data, ext)
    except UnsupportedFormat as e:
        logger.debug("%s.%s: %s", workout_id, ext, e)
        raise NotFound(workout_id) from e
    if not result.ok:
        # uninterpretable content is reported exactly like a missing id
        logger.warning("%s.%s not renderable: %s", workout_id, ext, result.reason)
        raise NotFound(workout_id)

    return SharedWorkout(
        workout=result.workout,
        artifact=WorkoutArtifact(workout_id=workout_id, data=data, format=result.format),
    )


# -----------------------
# Garmin Connect import
# -----------------------

_SERVER_FIELDS = ("workoutId", "ownerId", "createdDate", "updatedDate", "author", "consumer")
_STEP_ID_FIELDS = ("stepId", "workoutStepId")


def _clear_step_ids(node) -> None:
    if isinstance(node, list):
        for item in node:
            _clear_step_ids(item)
    elif isinstance(node, dict):
        for key in _STEP_ID_FIELDS:
            node.pop(key, None)
        for value in node.values():
            _clear_step_ids(value)


def prepare_for_import(document: dict) -> dict:
    """
    Return a copy of a shared Garmin workout that Connect will accept as a new workout:
    server-assigned ids and ownership dropped, step ids cleared, name suffixed.
    """
    clean = copy.deepcopy(document)
    for key in _SERVER_FIELDS:
        clean.pop(key, None)

    if clean.get("workoutName"):
        clean["workoutName"] = f"{clean['workoutName']} - shared"

    if clean.get("workoutSegments"):
        _clear_step_ids(clean["workoutSegments"])
    return clean
