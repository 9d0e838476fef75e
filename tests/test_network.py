"""Tests for the remote source fetcher."""

import io

import pytest


requests = pytest.importorskip("requests")

from PIL import Image

from retro_dither.config import SETTINGS
from retro_dither.infrastructure import network
from retro_dither.infrastructure.network import SourceFetchError, SourceFetcher


def png_bytes(color=(10, 20, 30)):
    buffer = io.BytesIO()
    Image.new("RGB", (3, 2), color=color).save(buffer, "PNG")
    return buffer.getvalue()


class FakeResponse:
    def __init__(self, content=b"", status_code=200):
        self.content = content
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, responses):
        self.headers = {}
        self.responses = list(responses)
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        return self.responses.pop(0)


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr(network.time, "sleep", lambda seconds: None)


def test_fetch_image_decodes_response_and_sets_user_agent():
    session = FakeSession([FakeResponse(png_bytes())])
    fetcher = SourceFetcher(session_factory=lambda: session)

    img = fetcher.fetch_image("http://example.com/photo.png")

    assert img.size == (3, 2)
    assert session.headers["User-Agent"].startswith("retro-dither/")
    assert session.calls == [("http://example.com/photo.png", SETTINGS.timeout)]


def test_fetch_image_retries_then_succeeds(monkeypatch):
    monkeypatch.setattr(SETTINGS, "retries", 2)
    session = FakeSession([FakeResponse(status_code=503), FakeResponse(png_bytes())])
    fetcher = SourceFetcher(session_factory=lambda: session)

    img = fetcher.fetch_image("https://example.com/photo.png")

    assert img.size == (3, 2)
    assert len(session.calls) == 2


def test_fetch_image_gives_up_after_retries(monkeypatch):
    monkeypatch.setattr(SETTINGS, "retries", 1)
    session = FakeSession([FakeResponse(b"not an image"), FakeResponse(status_code=404)])
    fetcher = SourceFetcher(session_factory=lambda: session)

    with pytest.raises(SourceFetchError):
        fetcher.fetch_image("http://example.com/photo.png")
    assert len(session.calls) == 2


@pytest.mark.parametrize("url", ["ftp://example.com/a.png", "not-a-url", "http:///a.png"])
def test_fetch_image_rejects_invalid_urls(url):
    fetcher = SourceFetcher(session_factory=lambda: FakeSession([]))

    with pytest.raises(ValueError):
        fetcher.fetch_image(url)
