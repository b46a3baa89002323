"""FastAPI application factory."""

from fastapi import FastAPI

from .common.dimension_oracle import DimensionOracle
from .config import BatchFitSettings, get_settings, setup_logging
from .plugins.image_fit.routes import create_router
from .utils.gemini_oracle import GeminiDimensionOracle
from .workspace import BatchWorkspace


def default_oracle(settings: BatchFitSettings) -> DimensionOracle | None:
    """Gemini oracle when an API key is configured, otherwise no oracle."""
    if settings.gemini_api_key is None:
        return None
    return GeminiDimensionOracle(
        settings.gemini_api_key.get_secret_value(),
        model=settings.gemini_model,
        timeout=settings.oracle_timeout,
        language=settings.oracle_language,
    )


def create_app(
    settings: BatchFitSettings | None = None,
    *,
    workspace: BatchWorkspace | None = None,
    configure_logging: bool = True,
) -> FastAPI:
    """Build the HTTP application around a single workspace.

    Example:
        uvicorn --factory cl_batch_fit.app:create_app
    """
    settings = settings if settings is not None else get_settings()
    if configure_logging:
        setup_logging(settings.log_level)

    if workspace is None:
        workspace = BatchWorkspace(settings=settings, oracle=default_oracle(settings))

    app = FastAPI(title="cl_batch_fit")
    app.state.workspace = workspace
    app.include_router(create_router(workspace))
    return app
