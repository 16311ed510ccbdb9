from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path

from sharemyrun.sharing import MAX_UPLOAD_BYTES
from sharemyrun.storage import HttpWorkoutStore, LocalWorkoutStore, WorkoutStore

APP_DIR = Path("~/.local/share/sharemyrun").expanduser()
DEFAULT_CONFIG = APP_DIR / "config.ini"


@dataclass(frozen=True)
class Settings:
    storage_backend: str = "local"
    storage_root: Path = APP_DIR
    base_url: str = ""
    token: str = ""
    timeout: float = 20.0
    max_upload_bytes: int = MAX_UPLOAD_BYTES
    public_url: str = ""

    @classmethod
    def load(cls, path: Path | None = None) -> Settings:
        """Read config.ini; a missing file or key falls back to the defaults."""
        path = path or DEFAULT_CONFIG
        cfg = ConfigParser()
        if path.exists():
            cfg.read(path)

        root = cfg.get("storage", "root", fallback="")
        return cls(
            storage_backend=cfg.get("storage", "backend", fallback="local").strip().lower(),
            storage_root=Path(root).expanduser() if root else APP_DIR,
            base_url=cfg.get("storage", "base_url", fallback=""),
            token=cfg.get("storage", "token", fallback=""),
            timeout=cfg.getfloat("storage", "timeout", fallback=20.0),
            max_upload_bytes=cfg.getint("upload", "max_bytes", fallback=MAX_UPLOAD_BYTES),
            public_url=cfg.get("server", "public_url", fallback="").rstrip("/"),
        )

    def make_store(self) -> WorkoutStore:
        if self.storage_backend == "http":
            if not self.base_url:
                raise ValueError("storage backend 'http' needs [storage] base_url")
            return HttpWorkoutStore(base_url=self.base_url, token=self.token, timeout=self.timeout)
        if self.storage_backend != "local":
            raise ValueError(f"unknown storage backend {self.storage_backend!r}")
        return LocalWorkoutStore(root=self.storage_root)
