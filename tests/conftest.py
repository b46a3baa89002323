"""Test configuration and fixtures for cl_batch_fit.

This module provides:
- Image factories (synthetic images encoded in memory with PIL)
- Function-scoped fixtures (settings, registry, workspace)
- Mock services (dimension oracles)
- Integration fixtures (API client)
"""

from collections.abc import Callable
from io import BytesIO
from typing_extensions import override

import pytest
from fastapi.testclient import TestClient
from PIL import Image, ImageDraw

from cl_batch_fit.common.dimension_oracle import DimensionOracle, DimensionSuggestion
from cl_batch_fit.common.errors import DimensionOracleError
from cl_batch_fit.common.item_registry_impl import InMemoryItemRegistry
from cl_batch_fit.config import BatchFitSettings
from cl_batch_fit.workspace import BatchWorkspace

ImageFactory = Callable[..., bytes]


# ============================================================================
# Image Factories
# ============================================================================


def encode(img: Image.Image, fmt: str = "PNG", **save_kwargs: object) -> bytes:
    buffer = BytesIO()
    img.save(buffer, format=fmt, **save_kwargs)
    return buffer.getvalue()


def synthetic(width: int, height: int, mode: str = "RGB") -> Image.Image:
    """Grid with a centered ellipse, so resampling has real content."""
    background = (73, 109, 137, 255) if mode == "RGBA" else (73, 109, 137)
    img = Image.new("RGB" if mode != "RGBA" else "RGBA", (width, height), color=background)
    draw = ImageDraw.Draw(img)
    step = max(2, min(width, height) // 8)
    for x in range(0, width, step):
        draw.line([(x, 0), (x, height)], fill=(255, 255, 255), width=1)
    for y in range(0, height, step):
        draw.line([(0, y), (width, y)], fill=(255, 255, 255), width=1)
    draw.ellipse([width // 4, height // 4, 3 * width // 4, 3 * height // 4], fill=(200, 100, 100))
    if mode not in ("RGB", "RGBA"):
        img = img.convert(mode)
    return img


@pytest.fixture
def make_pil_image() -> Callable[..., Image.Image]:
    """Factory: make_pil_image(width, height, mode="RGB") -> PIL image."""
    return synthetic


@pytest.fixture
def make_image() -> ImageFactory:
    """Factory: make_image(width, height, fmt="PNG", mode="RGB") -> encoded bytes."""

    def factory(width: int, height: int, fmt: str = "PNG", mode: str = "RGB") -> bytes:
        return encode(synthetic(width, height, mode), fmt)

    return factory


@pytest.fixture
def landscape_jpeg(make_image: ImageFactory) -> bytes:
    return make_image(192, 108, "JPEG")


@pytest.fixture
def portrait_png(make_image: ImageFactory) -> bytes:
    return make_image(90, 160, "PNG")


@pytest.fixture
def transparent_png() -> bytes:
    """RGBA image whose left half is fully transparent."""
    img = Image.new("RGBA", (80, 40), (255, 0, 0, 255))
    img.paste((0, 0, 0, 0), (0, 0, 40, 40))
    return encode(img, "PNG")


@pytest.fixture
def corrupt_bytes() -> bytes:
    return b"\x89PNG\r\n\x1a\nthis is not really a png"


# ============================================================================
# Function-Scoped Fixtures
# ============================================================================


@pytest.fixture
def settings() -> BatchFitSettings:
    """Settings independent of the environment and any .env file."""
    return BatchFitSettings(
        _env_file=None,  # pyright: ignore[reportCallIssue]
        default_width=64,
        default_height=64,
        max_workers=2,
        locale="es",
    )


@pytest.fixture
def registry() -> InMemoryItemRegistry:
    return InMemoryItemRegistry()


@pytest.fixture
def workspace(settings: BatchFitSettings, registry: InMemoryItemRegistry) -> BatchWorkspace:
    return BatchWorkspace(settings=settings, registry=registry)


# ============================================================================
# Mock Service Fixtures
# ============================================================================


class FixedOracle(DimensionOracle):
    """Always suggests the same dimensions."""

    def __init__(self, width: int, height: int, reasoning: str = "fixed"):
        self.suggestion: DimensionSuggestion = DimensionSuggestion(
            width=width, height=height, reasoning=reasoning
        )
        self.queries: list[str] = []

    @override
    async def suggest_dimensions(self, query: str) -> DimensionSuggestion:
        self.queries.append(query)
        return self.suggestion


class FailingOracle(DimensionOracle):
    """Simulates an unreachable suggestion service."""

    def __init__(self) -> None:
        self.calls: int = 0

    @override
    async def suggest_dimensions(self, query: str) -> DimensionSuggestion:
        self.calls += 1
        raise DimensionOracleError("service unavailable")


@pytest.fixture
def fixed_oracle() -> FixedOracle:
    return FixedOracle(1080, 1920, "Instagram story")


@pytest.fixture
def failing_oracle() -> FailingOracle:
    return FailingOracle()


# ============================================================================
# Integration Fixtures
# ============================================================================


@pytest.fixture
def api_workspace(settings: BatchFitSettings, fixed_oracle: FixedOracle) -> BatchWorkspace:
    return BatchWorkspace(settings=settings, oracle=fixed_oracle)


@pytest.fixture
def api_client(settings: BatchFitSettings, api_workspace: BatchWorkspace) -> TestClient:
    """Provide FastAPI TestClient for route testing."""
    from cl_batch_fit.app import create_app

    app = create_app(settings, workspace=api_workspace, configure_logging=False)
    return TestClient(app)
