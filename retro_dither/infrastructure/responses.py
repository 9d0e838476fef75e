from __future__ import annotations

import io
import time

from flask import Response, send_file
from PIL import Image

from ..processing.pipeline import ProcessedStats


def download_name() -> str:
    return f"dithered-{int(time.time() * 1000)}.png"


def send_png(img: Image.Image, stats: ProcessedStats | None = None, download: bool = False) -> Response:
    buffer = io.BytesIO()
    img.save(buffer, "PNG", optimize=True)
    buffer.seek(0)
    response = send_file(
        buffer,
        mimetype="image/png",
        as_attachment=download,
        download_name=download_name() if download else None,
    )
    if stats is not None:
        response.headers["X-Dither-Width"] = str(stats.width)
        response.headers["X-Dither-Height"] = str(stats.height)
        response.headers["X-Process-Time-Ms"] = str(stats.process_time_ms)
    return response
