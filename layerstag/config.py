"""Library configuration."""

from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Editor settings."""

    # Blur
    BLUR_RADIUS: int = 6
    BLUR_SIGMA: float = 5.0
    BLUR_MODE: Literal["sequential", "weighted"] = "sequential"

    # History
    CLEAR_REDO_ON_APPLY: bool = False  # Drop redo entries when a new filter is applied

    # Codec
    MAX_IMAGE_PIXELS: int = 4096 * 4096  # Largest accepted upload (width * height)
    JPEG_QUALITY: int = 90
    DEFAULT_FORMAT: str = "image/png"

    model_config = {"env_prefix": "LAYERSTAG_"}


settings = Settings()
