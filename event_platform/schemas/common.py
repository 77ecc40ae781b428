"""
Common schemas for API responses and error handling.
"""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema exchanging camelCase JSON while accepting snake_case input."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorDetail(BaseModel):
    """Schema for detailed error information."""

    error_code: str = Field(..., description="Error code for programmatic handling")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error context")
    suggestions: Optional[List[str]] = Field(None, description="Helpful suggestions for resolving the error")


class ErrorResponse(BaseModel):
    """Schema for API error responses."""

    error: ErrorDetail
    error_id: str
    timestamp: str

    model_config = ConfigDict(json_schema_extra={
        "examples": [
            {
                "error": {
                    "error_code": "SEAT_RESERVATION_FAILED",
                    "message": "Unable to reserve 2 seat(s) for event 1",
                    "details": {"event_id": 1, "requested": 2},
                    "suggestions": ["Try booking fewer tickets", "Try again later"]
                },
                "error_id": "5f0c3a52-2f4e-4d0f-9c4e-0f5b7a1d2c3e",
                "timestamp": "2024-01-01T00:00:00Z"
            }
        ]
    })


class FieldErrorResponse(BaseModel):
    """Schema for request validation failures (field -> message)."""

    status: int = 400
    errors: Dict[str, str]
