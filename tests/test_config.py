from __future__ import annotations

from pathlib import Path

import pytest
from sharemyrun.config import APP_DIR, Settings
from sharemyrun.sharing import MAX_UPLOAD_BYTES
from sharemyrun.storage import HttpWorkoutStore, LocalWorkoutStore


def test_missing_file_gives_defaults(tmp_path: Path) -> None:
    settings = Settings.load(tmp_path / "nope.ini")
    assert settings == Settings()
    assert settings.storage_root == APP_DIR
    assert settings.max_upload_bytes == MAX_UPLOAD_BYTES
    assert isinstance(settings.make_store(), LocalWorkoutStore)


def test_load_values(tmp_path: Path) -> None:
    cfg = tmp_path / "config.ini"
    cfg.write_text(
        "[storage]\n"
        "backend = HTTP\n"
        "base_url = https://blob.example.com\n"
        "token = abc\n"
        "timeout = 7.5\n"
        "[upload]\n"
        "max_bytes = 1024\n"
        "[server]\n"
        "public_url = https://share.example.com/\n",
        encoding="utf-8",
    )
    settings = Settings.load(cfg)
    assert settings.storage_backend == "http"
    assert settings.timeout == 7.5
    assert settings.max_upload_bytes == 1024
    assert settings.public_url == "https://share.example.com"

    store = settings.make_store()
    assert isinstance(store, HttpWorkoutStore)
    assert (store.base_url, store.token, store.timeout) == ("https://blob.example.com", "abc", 7.5)


def test_local_root(tmp_path: Path) -> None:
    cfg = tmp_path / "config.ini"
    cfg.write_text(f"[storage]\nroot = {tmp_path / 'blobs'}\n", encoding="utf-8")
    store = Settings.load(cfg).make_store()
    assert isinstance(store, LocalWorkoutStore)
    assert store.root == tmp_path / "blobs"


@pytest.mark.parametrize(
    "settings",
    [Settings(storage_backend="http"), Settings(storage_backend="s3")],
)
def test_bad_backend(settings: Settings) -> None:
    with pytest.raises(ValueError):
        settings.make_store()
