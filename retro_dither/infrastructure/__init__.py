"""Infrastructure helpers for fetching sources and sending images."""

from .network import FETCHER, SourceFetchError, SourceFetcher
from .responses import download_name, send_png

__all__ = [
    "FETCHER",
    "SourceFetchError",
    "SourceFetcher",
    "download_name",
    "send_png",
]
