"""Result envelope returned by every public operation.

Callers get either ``{"success": true, "result": ...}`` or
``{"success": false, "error": {"code", "message", "details"}}``.
"""

from typing import Any, Literal

from pydantic import BaseModel


class ErrorDetail(BaseModel):
    """what went wrong, with a coarse per-operation code."""

    code: str
    message: str
    details: dict[str, Any] | None = None


class ToolSuccess(BaseModel):
    success: Literal[True] = True
    result: Any


class ToolError(BaseModel):
    success: Literal[False] = False
    error: ErrorDetail


ToolResponse = ToolSuccess | ToolError
