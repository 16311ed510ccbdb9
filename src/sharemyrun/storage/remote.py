from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable

import requests

from sharemyrun.errors import NotFound

from .utils import EXTENSION_PRIORITY, StoredArtifact, object_key

logger = logging.getLogger(__name__)


@dataclass
class HttpWorkoutStore:
    """
    Client for a blob service that serves objects at <base_url>/<key>.

    Writes are authenticated with a bearer token; reads are public. A 404 means
    "try the next extension", any other HTTP error is raised to the caller.
    """
    base_url: str
    token: str = ""
    timeout: float = 20
    name: str = "http"

    def _url(self, workout_id: str, ext: str) -> str:
        return f"{self.base_url.rstrip('/')}/{object_key(workout_id, ext)}"

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def put(self, workout_id: str, ext: str, data: bytes, content_type: str) -> None:
        url = self._url(workout_id, ext)
        headers = {**self._headers(), "Content-Type": content_type}
        r = requests.put(url, data=data, headers=headers, timeout=self.timeout)
        r.raise_for_status()
        logger.info("Uploaded %s (%d bytes)", url, len(data))

    def fetch(
        self,
        workout_id: str,
        extensions: Iterable[str] = EXTENSION_PRIORITY,
    ) -> StoredArtifact:
        for ext in extensions:
            url = self._url(workout_id, ext)
            r = requests.get(url, timeout=self.timeout)
            if r.status_code == 404:
                logger.debug("No %s", url)
                continue
            r.raise_for_status()
            return StoredArtifact(data=r.content, ext=ext)
        raise NotFound(workout_id)
