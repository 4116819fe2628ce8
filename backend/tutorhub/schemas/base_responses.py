# backend/tutorhub/schemas/base_responses.py
"""
Base response schemas for standardized API responses.

``ActionResult`` is the shape the UI layer consumes for mutating actions:
either ``success`` with an optional message and payload, or ``error`` with a
machine-readable ``code``. It never carries both.
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class SuccessResponse(BaseModel):
    """Standard success response for operations."""

    success: bool = Field(default=True, description="Operation success status")
    message: str = Field(description="Human-readable success message")
    data: Optional[Dict[str, Any]] = Field(default=None, description="Optional additional data")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "message": "Operation completed successfully",
                "data": {"count": 3},
            }
        }
    )


class DeleteResponse(BaseModel):
    """Standard response for delete operations."""

    success: bool = Field(default=True, description="Deletion success status")
    message: str = Field(description="Human-readable deletion message")


class ErrorResponse(BaseModel):
    """Body of every domain error response, nested under ``detail``."""

    message: str
    code: str
    details: Dict[str, Any] = Field(default_factory=dict)


class ActionResult(BaseModel):
    """Outcome of a user action as consumed by the notification layer."""

    success: Optional[str] = Field(default=None, description="Success message, if the action succeeded")
    error: Optional[str] = Field(default=None, description="Error message, if the action failed")
    code: Optional[str] = Field(default=None, description="Machine-readable error code")
    payload: Dict[str, Any] = Field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.error is None

    def to_dict(self) -> Dict[str, Any]:
        """Flatten into ``{success?, error?, code?, ...payload}``."""
        result: Dict[str, Any] = dict(self.payload)
        if self.success is not None:
            result["success"] = self.success
        if self.error is not None:
            result["error"] = self.error
        if self.code is not None:
            result["code"] = self.code
        return result
