"""Settings and logging setup for cl_batch_fit."""

import sys
from functools import lru_cache
from typing import ClassVar

from loguru import logger
from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from .common.schema_fit import FitMode, FitRequest


class BatchFitSettings(BaseSettings):
    """Settings loaded from CL_BATCH_FIT_* environment variables or a .env file."""

    # Default fit request
    default_width: int = Field(default=1080, gt=0)
    default_height: int = Field(default=1080, gt=0)
    default_fit_mode: FitMode = FitMode.COVER
    default_background_color: str = "#000000"
    default_quality: int = Field(default=92, ge=1, le=100)

    # Processing
    max_workers: int = Field(default=4, ge=1)
    max_canvas_pixels: int | None = Field(default=100_000_000, gt=0)

    # Dimension oracle
    gemini_api_key: SecretStr | None = None
    gemini_model: str = "gemini-2.5-flash"
    oracle_timeout: float = Field(default=30.0, gt=0)

    # Presentation
    locale: str = "es"
    archive_name: str = "batch_images.zip"
    log_level: str = "INFO"

    model_config: ClassVar[SettingsConfigDict] = SettingsConfigDict(
        env_prefix="CL_BATCH_FIT_",
        env_file=".env",
        extra="ignore",
    )

    def default_request(self) -> FitRequest:
        return FitRequest(
            target_width=self.default_width,
            target_height=self.default_height,
            fit_mode=self.default_fit_mode,
            background_color=self.default_background_color,
            quality=self.default_quality,
        )

    @property
    def oracle_language(self) -> str:
        return "Spanish" if self.locale == "es" else "English"


@lru_cache
def get_settings() -> BatchFitSettings:
    """Return cached settings instance."""
    return BatchFitSettings()


LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    + "<cyan>{name}:{function}</cyan> - <level>{message}</level>"
)


def setup_logging(level: str = "INFO") -> None:
    """Replace loguru's default sink with a stderr sink at the given level."""
    logger.remove()
    _ = logger.add(sys.stderr, format=LOG_FORMAT, level=level.upper(), colorize=True)
