from __future__ import annotations

import math
from dataclasses import asdict, fields
from html import escape
from pathlib import Path
from string import Template

from flask import Flask, jsonify, request
from PIL import Image, UnidentifiedImageError

from .config import SETTINGS, DitherSettings, configure_logging
from .infrastructure.network import FETCHER, SourceFetchError
from .infrastructure.responses import send_png
from .processing.kernels import ALGORITHMS, Algorithm
from .processing.pipeline import process_image

APP_VERSION = "1.0.0"

TONE_RANGE = (-100.0, 100.0)
RESOLUTION_RANGE = (0.0, 1.0)

# (low, high, low_inclusive) for settings that /dither falls back to.
SETTING_RANGES = {
    "brightness": (*TONE_RANGE, True),
    "contrast": (*TONE_RANGE, True),
    "resolution_scale": (*RESOLUTION_RANGE, False),
    "max_upload_mb": (1, 1024, True),
}

# Bound once when the server starts.
READ_ONLY_SETTINGS = frozenset({"port"})


def _check_range(name: str, value: float, low: float, high: float, *, low_inclusive: bool = True) -> float:
    below = value < low if low_inclusive else value <= low
    if not math.isfinite(value) or below or value > high:
        opening = "[" if low_inclusive else "("
        raise ValueError(f"{name} must be within {opening}{low:g}, {high:g}], got {value:g}")
    return value


def _float_param(args, name: str, default: float, low: float, high: float, *, low_inclusive: bool = True) -> float:
    raw_value = args.get(name)
    if raw_value is None or raw_value == "":
        return float(default)
    try:
        value = float(raw_value)
    except (TypeError, ValueError):
        raise ValueError(f"{name} must be a number, got {raw_value!r}")
    return _check_range(name, value, low, high, low_inclusive=low_inclusive)


def _truthy(value: str | None) -> bool:
    return (value or "").lower() in ("1", "true", "yes", "on")


def _load_source(args):
    upload = request.files.get("image")
    if upload is not None and upload.filename:
        img = Image.open(upload.stream)
        img.load()
        return img
    source_url = args.get("source_url")
    if source_url:
        return FETCHER.fetch_image(source_url)
    raise ValueError("Provide an 'image' upload or a 'source_url' parameter")


def _algorithm_payload(algorithm: Algorithm) -> dict:
    spec = ALGORITHMS[algorithm]
    payload = {"name": algorithm.value, "mode": spec.mode.value}
    if spec.kernel is not None:
        payload.update(
            divisor=spec.kernel.divisor,
            taps=[list(tap) for tap in spec.kernel.taps],
            total_weight=str(spec.kernel.total_weight),
        )
    return payload


def create_app() -> Flask:
    logger = configure_logging()
    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = SETTINGS.max_upload_mb * 1024 * 1024

    @app.before_request
    def apply_upload_limit():
        app.config["MAX_CONTENT_LENGTH"] = SETTINGS.max_upload_mb * 1024 * 1024

    @app.route("/dither", methods=["GET", "POST"])
    def dither():
        args = request.values
        try:
            algorithm = Algorithm.from_name(args.get("algorithm") or SETTINGS.algorithm)
            brightness = _float_param(args, "brightness", SETTINGS.brightness, *TONE_RANGE)
            contrast = _float_param(args, "contrast", SETTINGS.contrast, *TONE_RANGE)
            resolution = _float_param(
                args, "resolution", SETTINGS.resolution_scale, *RESOLUTION_RANGE, low_inclusive=False
            )
            src = _load_source(args)
            out, stats = process_image(
                src,
                algorithm,
                brightness,
                contrast,
                resolution,
                settings=SETTINGS,
            )
        except SourceFetchError as exc:
            logger.warning("Source fetch failed: %s", exc)
            return (f"Source Error: {exc}", 502)
        except UnidentifiedImageError as exc:
            return (f"Unsupported image: {exc}", 400)
        except ValueError as exc:
            logger.warning("Rejected dither request: %s", exc)
            return (str(exc), 400)
        return send_png(out, stats=stats, download=_truthy(args.get("download")))

    @app.route("/algorithms")
    def algorithms():
        return jsonify(algorithms=[_algorithm_payload(algorithm) for algorithm in Algorithm])

    @app.route("/health")
    def health():
        return jsonify(ok=True, version=APP_VERSION, algorithm=SETTINGS.algorithm)

    @app.route("/settings", methods=["GET", "PATCH"])
    def settings_view():
        if request.method == "GET":
            return jsonify(asdict(SETTINGS))

        payload = request.get_json(silent=True)
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            return ("Settings payload must be a JSON object", 400)
        errors: dict[str, str] = {}
        applied: dict[str, object] = {}

        for field in fields(SETTINGS):
            if field.name not in payload:
                continue
            if field.name in READ_ONLY_SETTINGS:
                errors[field.name] = "Read-only setting"
                continue

            raw_value = payload[field.name]
            try:
                if field.type is int:
                    coerced = int(raw_value)
                elif field.type is float:
                    coerced = float(raw_value)
                else:
                    coerced = str(raw_value)
            except (TypeError, ValueError):
                errors[field.name] = f"Expected {field.type.__name__}"
                continue

            try:
                if field.name == "algorithm":
                    coerced = Algorithm.from_name(coerced).value
                elif field.name in SETTING_RANGES:
                    low, high, low_inclusive = SETTING_RANGES[field.name]
                    _check_range(field.name, coerced, low, high, low_inclusive=low_inclusive)
            except ValueError as exc:
                errors[field.name] = str(exc)
                continue

            setattr(SETTINGS, field.name, coerced)
            applied[field.name] = coerced

        status = 400 if errors else 200
        return (
            jsonify(updated=applied, errors=errors, settings=asdict(SETTINGS)),
            status,
        )

    @app.route("/settings/reset", methods=["POST"])
    def settings_reset():
        # Tone and resolution go back to the environment defaults; the chosen
        # algorithm stays.
        defaults = DitherSettings.from_env()
        for field in fields(SETTINGS):
            if field.name != "algorithm":
                setattr(SETTINGS, field.name, getattr(defaults, field.name))
        return jsonify(asdict(SETTINGS))

    @app.route("/")
    def index():
        algorithm_options = "".join(
            '<option value="{value}" {selected}>{label}</option>'.format(
                value=escape(algorithm.value),
                selected="selected" if algorithm.value == SETTINGS.algorithm else "",
                label=escape(algorithm.value),
            )
            for algorithm in Algorithm
        )

        template_path = Path(__file__).parent / "templates" / "index.html"
        try:
            with open(template_path, "r", encoding="utf-8") as f:
                tmpl_str = f.read()
        except OSError as e:
            return f"Error loading template: {e}", 500

        return Template(tmpl_str).substitute(
            APP_VERSION=APP_VERSION,
            algorithm_options=algorithm_options,
            brightness=escape(str(SETTINGS.brightness)),
            contrast=escape(str(SETTINGS.contrast)),
            resolution=escape(str(SETTINGS.resolution_scale)),
        )

    return app


# Module-level application for WSGI servers (``retro_dither.app:app``).
app = create_app()
application = app
