from __future__ import annotations

import io
import logging
import time
from typing import Callable
from urllib.parse import urlsplit

import requests
from PIL import Image

from ..config import SETTINGS

LOGGER = logging.getLogger("retro-dither")

SessionFactory = Callable[[], requests.Session]


class SourceFetchError(RuntimeError):
    """Raised when a remote source image cannot be downloaded or decoded."""


def _validate_source_url(url: str) -> str:
    parts = urlsplit(url)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ValueError(f"Invalid source_url: {url}")
    return url


class SourceFetcher:
    def __init__(self, session_factory: SessionFactory | None = None, user_agent: str = "retro-dither/1.0") -> None:
        self._session_factory = session_factory or requests.Session
        self._user_agent = user_agent
        self._session = self._create_session()

    def _create_session(self) -> requests.Session:
        session = self._session_factory()
        session.headers.update({"User-Agent": self._user_agent})
        return session

    def fetch_image(self, url: str) -> Image.Image:
        target_url = _validate_source_url(url)
        attempts = SETTINGS.retries + 1
        last_exception: Exception | None = None
        for attempt in range(1, attempts + 1):
            try:
                response = self._session.get(target_url, timeout=SETTINGS.timeout)
                response.raise_for_status()
                img = Image.open(io.BytesIO(response.content))
                img.load()
                return img
            except (requests.RequestException, OSError) as exc:
                last_exception = exc
                LOGGER.warning("Fetching %s failed (attempt %d/%d): %s", target_url, attempt, attempts, exc)
                if attempt < attempts:
                    time.sleep(0.4 * attempt)
        raise SourceFetchError(f"Could not fetch {target_url}: {last_exception}")


FETCHER = SourceFetcher()
