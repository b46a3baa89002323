"""DimensionOracle Protocol - external service suggesting target dimensions."""

from typing import ClassVar, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


class DimensionSuggestion(BaseModel):
    width: int = Field(..., gt=0, description="Suggested width in pixels")
    height: int = Field(..., gt=0, description="Suggested height in pixels")
    reasoning: str = Field(default="", description="Short explanation of the choice")

    model_config: ClassVar[ConfigDict] = ConfigDict(extra="ignore")


@runtime_checkable
class DimensionOracle(Protocol):
    """Capability to guess good canvas dimensions from a free-text query.

    e.g. "Instagram story" -> 1080x1920. The call is remote and fallible;
    implementations raise DimensionOracleError on any failure.
    """

    async def suggest_dimensions(self, query: str) -> DimensionSuggestion: ...
