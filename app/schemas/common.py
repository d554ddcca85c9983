# app/schemas/common.py
"""
Response envelopes shared by every endpoint.

Success: {"success": true, "message": "...", "data": ...}
Error:   {"success": false, "message": "...", "errors": {...}}
"""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Success envelope."""

    success: bool = True
    message: str
    data: T | None = None


class ErrorResponse(BaseModel):
    """Error envelope. `errors` maps field names to messages for validation failures."""

    success: bool = False
    message: str
    errors: dict[str, Any] | list[Any] = Field(default_factory=dict)
