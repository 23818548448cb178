"""Handler response envelope."""

from typing import Any

from pydantic import BaseModel, Field


class ToolResult(BaseModel):
    """Result of one tool handler call.

    Errors are data too: ``data["error"]`` holds an actionable message and the
    remaining keys carry the context needed to retry.
    """

    data: dict[str, Any] = Field(default_factory=dict, description="Tool payload")
    input_tokens: int = Field(default=0, ge=0, description="Estimated tokens read")
    output_tokens: int = Field(default=0, ge=0, description="Estimated tokens returned")

    @property
    def is_error(self) -> bool:
        return "error" in self.data
