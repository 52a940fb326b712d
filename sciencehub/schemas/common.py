"""
Common schemas for API responses and error handling.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class ErrorResponse(BaseModel):
    """Schema for API error responses."""

    error: str = Field(..., description="Human-readable error message")
    error_code: Optional[str] = Field(None, description="Error code for programmatic handling")
    error_id: Optional[str] = Field(None, description="Identifier to quote when reporting the error")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error context")
    suggestions: Optional[List[str]] = Field(None, description="Helpful suggestions for resolving the error")

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": "Capacity exceeded: requested 3, available 1",
                    "error_code": "CAPACITY_EXCEEDED",
                    "error_id": "0b6c5c9e-3f0a-4d59-8a47-5d1f3b8f6a11",
                    "details": {"requested": 3, "available": 1},
                },
                {
                    "error": "Missing required field: eventId",
                    "error_code": "VALIDATION_ERROR",
                    "error_id": "7e1f2c0a-1d4b-4c9e-9a33-2f6b8d0c4e52",
                },
            ]
        }
    }


class SuccessResponse(BaseModel):
    """Schema for simple success responses."""

    success: bool = True


class HealthResponse(BaseModel):
    status: str = "healthy"
