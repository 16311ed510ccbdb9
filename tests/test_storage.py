from __future__ import annotations

from pathlib import Path

import pytest
import requests
from sharemyrun.errors import NotFound
from sharemyrun.storage import HttpWorkoutStore, LocalWorkoutStore, object_key
from sharemyrun.storage import remote


class _Response:
    def __init__(self, status_code: int, content: bytes = b"") -> None:
        self.status_code = status_code
        self.content = content

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


def test_object_key() -> None:
    assert object_key("ab12cd34", "fit") == "workouts/ab12cd34.fit"


# -------- local --------
def test_local_prefers_json(tmp_path: Path) -> None:
    store = LocalWorkoutStore(root=tmp_path)
    store.put("ab12cd34", "fit", b"fit-bytes", "application/vnd.ant.fit")
    store.put("ab12cd34", "json", b"{}", "application/json")

    found = store.fetch("ab12cd34")
    assert (found.ext, found.data) == ("json", b"{}")

    found = store.fetch("ab12cd34", ("fit", "json"))
    assert (found.ext, found.data) == ("fit", b"fit-bytes")


def test_local_missing(tmp_path: Path) -> None:
    store = LocalWorkoutStore(root=tmp_path)
    with pytest.raises(NotFound):
        store.fetch("ab12cd34")


@pytest.mark.parametrize("workout_id", ["", "../etc", "a/b", ".hidden", "a\\b"])
def test_local_rejects_path_ids(tmp_path: Path, workout_id: str) -> None:
    store = LocalWorkoutStore(root=tmp_path)
    with pytest.raises(NotFound):
        store.fetch(workout_id)


# -------- http --------
def test_http_fetch_tries_next_extension_on_404(monkeypatch) -> None:
    calls: list[str] = []

    def fake_get(url, timeout):
        calls.append(url)
        if url.endswith(".json"):
            return _Response(404)
        return _Response(200, b"fit-bytes")

    monkeypatch.setattr(remote.requests, "get", fake_get)
    store = HttpWorkoutStore(base_url="https://blob.example.com/")

    found = store.fetch("ab12cd34")
    assert (found.ext, found.data) == ("fit", b"fit-bytes")
    assert calls == [
        "https://blob.example.com/workouts/ab12cd34.json",
        "https://blob.example.com/workouts/ab12cd34.fit",
    ]


def test_http_fetch_not_found(monkeypatch) -> None:
    monkeypatch.setattr(remote.requests, "get", lambda url, timeout: _Response(404))
    with pytest.raises(NotFound):
        HttpWorkoutStore(base_url="https://blob.example.com").fetch("ab12cd34")


def test_http_fetch_server_error_propagates(monkeypatch) -> None:
    monkeypatch.setattr(remote.requests, "get", lambda url, timeout: _Response(503))
    with pytest.raises(requests.HTTPError):
        HttpWorkoutStore(base_url="https://blob.example.com").fetch("ab12cd34")


def test_http_put(monkeypatch) -> None:
    seen = {}

    def fake_put(url, data, headers, timeout):
        seen.update(url=url, data=data, headers=headers, timeout=timeout)
        return _Response(200)

    monkeypatch.setattr(remote.requests, "put", fake_put)
    store = HttpWorkoutStore(base_url="https://blob.example.com", token="s3cret", timeout=5)
    store.put("ab12cd34", "json", b"{}", "application/json")

    assert seen == {
        "url": "https://blob.example.com/workouts/ab12cd34.json",
        "data": b"{}",
        "headers": {"Authorization": "Bearer s3cret", "Content-Type": "application/json"},
        "timeout": 5,
    }
