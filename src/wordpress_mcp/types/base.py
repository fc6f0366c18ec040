"""Core MCP model base classes and protocol version constants."""

from typing import Annotated, Any, Final

from pydantic import BaseModel, ConfigDict, Field

LATEST_PROTOCOL_VERSION: Final[str] = "2025-11-25"

SUPPORTED_PROTOCOL_VERSIONS: Final[tuple[str, ...]] = (
    LATEST_PROTOCOL_VERSION,
    "2025-06-18",
    "2025-03-26",
    "2024-11-05",
)


class MCPModel(BaseModel):
    """Base class for all MCP domain types. Allows extra fields for forward compatibility."""

    model_config = ConfigDict(extra="allow", validate_by_name=True, validate_by_alias=True)

    def dump(self) -> dict[str, Any]:
        """Serialize the way the wire expects: camelCase aliases, no nulls."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")


class RequestParams(MCPModel):
    """Base class for MCP request parameters with _meta support."""

    meta: Annotated[dict[str, Any] | None, Field(alias="_meta")] = None


class Result(MCPModel):
    """Base class for MCP results with _meta support."""

    meta: Annotated[dict[str, Any] | None, Field(alias="_meta")] = None
