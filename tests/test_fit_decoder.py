from __future__ import annotations

from types import SimpleNamespace

import pytest
from fitdata import build_workout_fit
from sharemyrun.errors import CorruptInput
from sharemyrun.fit_decoder import _fields_of, decode, is_fit


def _field(name, value, raw_value=None, parent=None):
    return SimpleNamespace(
        name=name,
        value=value,
        raw_value=value if raw_value is None else raw_value,
        parent_field=SimpleNamespace(name=parent) if parent else None,
    )


@pytest.mark.parametrize(
    ("data", "expected"),
    [
        (build_workout_fit("Easy", []), True),
        (b"\x0c\x10\x00\x00\x00\x00\x00\x00.FIT", True),
        (b"\x0e\x10\x00\x00\x00\x00\x00\x00.FIT\x00\x00", True),
        (b"\x0d\x10\x00\x00\x00\x00\x00\x00.FIT\x00", False),
        (b"\x0e\x10\x00\x00\x00\x00\x00\x00.TIF\x00\x00", False),
        (b".FIT", False),
        (b"", False),
        (b'{"workoutName": "Easy run"}', False),
    ],
)
def test_is_fit(data: bytes, expected: bool) -> None:
    assert is_fit(data) is expected


def test_fields_of_keeps_raw_parent_value() -> None:
    msg = [
        _field("duration_type", "time"),
        _field("duration_time", 65.0, raw_value=65000, parent="duration_value"),
        _field("intensity", "active"),
    ]
    assert _fields_of(msg) == {
        "duration_type": "time",
        "duration_time": 65.0,
        "duration_value": 65000,
        "intensity": "active",
    }


def test_decode_groups_messages_in_order() -> None:
    data = build_workout_fit(
        "Hill Repeats",
        [
            {"intensity": "warmup", "duration_type": "time", "duration_value": 300000},
            {"intensity": "active", "duration_type": "distance", "duration_value": 40000},
            {"intensity": "rest", "duration_type": "open"},
        ],
    )
    decoded = decode(data)

    (workout,) = decoded.group("workout")
    assert workout["wkt_name"] == "Hill Repeats"
    assert workout["sport"] == "running"

    steps = decoded.group("workout_step")
    assert [s["intensity"] for s in steps] == ["warmup", "active", "rest"]
    assert [s["duration_type"] for s in steps] == ["time", "distance", "open"]
    # native units survive next to fitparse's scaled sub-fields
    assert steps[0]["duration_value"] == 300000
    assert steps[0]["duration_time"] == pytest.approx(300.0)
    assert steps[1]["duration_value"] == 40000
    assert decoded.errors == []
    assert decoded.group("lap") == []


def test_decode_truncated_file_raises_corrupt_input() -> None:
    data = build_workout_fit("Easy", [{"duration_type": "time", "duration_value": 60000}])
    with pytest.raises(CorruptInput):
        decode(data[:-6])


def test_decode_bad_header_raises_corrupt_input() -> None:
    with pytest.raises(CorruptInput):
        decode(b"\x0e\x10\x00\x00\x00\x00\x00\x00.TIF\x00\x00")
