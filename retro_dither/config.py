import logging
import os
from dataclasses import dataclass


@dataclass
class DitherSettings:
    port: int
    log_level: str
    reference_short_side: int
    resolution_scale: float
    brightness: float
    contrast: float
    algorithm: str
    timeout: float
    retries: int
    max_upload_mb: int

    @classmethod
    def from_env(cls) -> "DitherSettings":
        return cls(
            port=int(os.getenv("PORT", "5500")),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            reference_short_side=int(os.getenv("REFERENCE_SHORT_SIDE", "384")),
            resolution_scale=float(os.getenv("RESOLUTION_SCALE", "1.0")),
            brightness=float(os.getenv("BRIGHTNESS", "0")),
            contrast=float(os.getenv("CONTRAST", "0")),
            algorithm=os.getenv("DITHER_ALGORITHM", "Atkinson"),
            timeout=float(os.getenv("SOURCE_TIMEOUT", "10.0")),
            retries=int(os.getenv("SOURCE_RETRIES", "2")),
            max_upload_mb=int(os.getenv("MAX_UPLOAD_MB", "16")),
        )


SETTINGS = DitherSettings.from_env()


def configure_logging() -> logging.Logger:
    logging.basicConfig(level=SETTINGS.log_level)
    return logging.getLogger("retro-dither")
