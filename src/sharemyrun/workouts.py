from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from pathlib import PurePath
from typing import Literal, Union

from sharemyrun import fit_decoder
from sharemyrun.errors import CorruptInput, UnsupportedFormat

logger = logging.getLogger(__name__)

WorkoutFormat = Literal["fit", "json"]
Status = Literal["success", "absent", "structural_error"]

DEFAULT_NAME = "Untitled Workout"
DEFAULT_SPORT = "running"


@dataclass(frozen=True)
class WorkoutStep:
    kind: str
    duration_display: str | None = None
    target_display: str | None = None


@dataclass(frozen=True)
class CanonicalWorkout:
    name: str = DEFAULT_NAME
    sport: str = DEFAULT_SPORT
    description: str | None = None
    steps: tuple[WorkoutStep, ...] = ()

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "sport": self.sport,
            "description": self.description,
            "steps": [
                {"kind": s.kind, "duration": s.duration_display, "target": s.target_display}
                for s in self.steps
            ],
        }


@dataclass(frozen=True)
class Interpretation:
    """
    Outcome of reading one artifact.

    `absent` and `structural_error` look the same to end users (both end up as
    "not found"); `reason` keeps them apart for logs.
    """
    status: Status
    workout: CanonicalWorkout | None = None
    reason: str | None = None
    format: WorkoutFormat | None = None

    @property
    def ok(self) -> bool:
        return self.status == "success"


# -----------------------
# Formatting
# -----------------------

def format_clock(seconds: int) -> str:
    """65 -> '1:05', 60 -> '1:00', 330 -> '5:30'."""
    minutes, rem = divmod(int(seconds), 60)
    if rem == 0:
        return f"{minutes}:00"
    return f"{minutes}:{rem:02d}"


def format_km(km: float) -> str:
    return f"{km:.1f} km"


def _num(v):
    # JSON numbers arrive as floats; 3.0 renders as "3"
    return int(v) if isinstance(v, float) and v.is_integer() else v


# -----------------------
# FIT parser
# -----------------------

def _fit_duration(duration_type, value) -> str | None:
    """
    duration_value units depend on duration_type:
      time      milliseconds
      distance  1/100000 km (centimetres)
    Anything else (open, calories, repeat markers, ...) has no display.
    """
    if not value:
        return None
    dtype = str(duration_type or "").lower()
    if "time" in dtype:
        return format_clock(int(value) // 1000)
    if "distance" in dtype:
        return format_km(value / 100000)
    return None


def parse_fit_messages(decoded: fit_decoder.DecodedFit) -> CanonicalWorkout:
    """
    Build a CanonicalWorkout from decoded `workout` / `workout_step` messages.

    Every workout_step becomes one step, in file order. Repeat markers are kept as
    steps of their own rather than expanded.
    """
    workouts = decoded.group("workout")
    summary = workouts[0] if workouts else {}

    steps: list[WorkoutStep] = []
    for fields in decoded.group("workout_step"):
        target_value = fields.get("target_value")
        steps.append(
            WorkoutStep(
                kind=str(fields.get("intensity") or "active").lower(),
                duration_display=_fit_duration(
                    fields.get("duration_type"), fields.get("duration_value"),
                ),
                # FIT targets carry no zone semantics here; show the raw number
                target_display=f"Target: {_num(target_value)}" if target_value else None,
            ),
        )

    return CanonicalWorkout(
        name=summary.get("wkt_name") or DEFAULT_NAME,
        sport=str(summary.get("sport") or DEFAULT_SPORT).lower(),
        steps=tuple(steps),
    )


def normalize_fit(data: bytes) -> Interpretation:
    """
    Decode and normalize FIT bytes. Never raises on bad input: a missing signature
    is `absent`, a decode failure is `structural_error`.
    """
    if not fit_decoder.is_fit(data):
        return Interpretation("absent", reason="missing FIT signature")
    try:
        decoded = fit_decoder.decode(data)
        workout = parse_fit_messages(decoded)
    except CorruptInput as e:
        logger.debug("FIT decode failed: %s", e)
        return Interpretation("structural_error", reason=f"corrupt FIT: {e}")
    except (TypeError, ValueError) as e:
        logger.debug("FIT workout fields not usable: %s", e)
        return Interpretation("structural_error", reason=f"unreadable FIT fields: {e}")
    return Interpretation("success", workout=workout)


# -----------------------
# Garmin Connect JSON parser
# -----------------------

def _json_duration(condition, value) -> str | None:
    """endConditionValue is seconds for time, meters for distance."""
    if condition == "time" and value:
        return format_clock(int(value))
    if condition == "distance" and value:
        return format_km(value / 1000)
    if condition == "lap.button":
        return "Lap button"
    return None


def _json_target(target_type, one, two) -> str | None:
    # pace bounds are seconds per km
    if target_type == "pace.zone" and one and two:
        return f"{format_clock(int(one))}-{format_clock(int(two))}/km"
    if target_type == "heart.rate.zone" and one:
        return f"HR Zone {_num(one)}"
    if target_type == "power.zone" and one:
        return f"Power Zone {_num(one)}"
    return None


def parse_garmin_json(data: dict) -> CanonicalWorkout:
    """
    Parse a Garmin Connect workout document (as exported by the Connect web app).

    The caller has already checked that `workoutName` or `workoutSegments` is present.
    Steps of all segments are flattened in order; nested repeat groups are not expanded.
    Sport keeps its source casing.
    """
    steps: list[WorkoutStep] = []
    for segment in data.get("workoutSegments") or []:
        for step in segment.get("workoutSteps") or []:
            step_type = step.get("stepType") or {}
            end_condition = step.get("endCondition") or {}
            target_type = step.get("targetType") or {}
            steps.append(
                WorkoutStep(
                    kind=step_type.get("stepTypeKey") or "interval",
                    duration_display=_json_duration(
                        end_condition.get("conditionTypeKey"),
                        step.get("endConditionValue"),
                    ),
                    target_display=_json_target(
                        target_type.get("workoutTargetTypeKey"),
                        step.get("targetValueOne"),
                        step.get("targetValueTwo"),
                    ),
                ),
            )

    sport_type = data.get("sportType") or {}
    return CanonicalWorkout(
        name=data.get("workoutName") or DEFAULT_NAME,
        sport=sport_type.get("sportTypeKey") or DEFAULT_SPORT,
        description=data.get("description"),
        steps=tuple(steps),
    )


def looks_like_garmin_workout(document) -> bool:
    return isinstance(document, dict) and bool(
        document.get("workoutName") or document.get("workoutSegments"),
    )


# -----------------------
# Detection
# -----------------------

@dataclass(frozen=True)
class FitSource:
    data: bytes

    format: WorkoutFormat = "fit"


@dataclass(frozen=True)
class JsonSource:
    document: object

    format: WorkoutFormat = "json"


Source = Union[FitSource, JsonSource]


def _hint_ext(hint: str | None) -> str:
    if not hint:
        return ""
    h = hint.strip().lower()
    suffix = PurePath(h).suffix
    return (suffix or h).lstrip(".")


def _try_json(data: bytes) -> JsonSource | None:
    try:
        return JsonSource(json.loads(data.decode("utf-8-sig")))
    except (UnicodeDecodeError, ValueError):
        return None


def detect_format(data: bytes, hint: str | None = None) -> Source:
    """
    Classify raw bytes as FIT or JSON.

    The FIT check only looks at the header. JSON is parsed, since a successful parse is
    what makes it JSON. The extension hint only decides which check runs first.
    Raises UnsupportedFormat when neither matches.
    """
    if _hint_ext(hint) == "json":
        source = _try_json(data)
        if source is not None:
            return source
        if fit_decoder.is_fit(data):
            return FitSource(data)
    else:
        if fit_decoder.is_fit(data):
            return FitSource(data)
        source = _try_json(data)
        if source is not None:
            return source
    raise UnsupportedFormat(f"not a FIT or JSON workout (hint={hint!r}, {len(data)} bytes)")


# -----------------------
# Entry points
# -----------------------

def interpret(data: bytes, hint: str | None = None) -> Interpretation:
    """
    Detect -> decode -> normalize. Raises UnsupportedFormat only; every other problem
    with the content comes back as a non-success Interpretation.
    """
    source = detect_format(data, hint)
    if isinstance(source, FitSource):
        result = normalize_fit(source.data)
    elif not looks_like_garmin_workout(source.document):
        result = Interpretation(
            "structural_error", reason="JSON has neither workoutName nor workoutSegments",
        )
    else:
        try:
            result = Interpretation("success", workout=parse_garmin_json(source.document))
        except (AttributeError, TypeError, ValueError) as e:
            result = Interpretation("structural_error", reason=f"malformed workout JSON: {e}")

    if not result.ok:
        logger.debug("No workout in %s artifact: %s", source.format, result.reason)
    return replace(result, format=source.format)


def load_workout(data: bytes, hint: str | None = None) -> CanonicalWorkout | None:
    """Like interpret(), but `absent` and `structural_error` both come back as None."""
    return interpret(data, hint).workout
