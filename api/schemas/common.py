"""
Common schemas shared across API endpoints.
"""

from typing import Any, Dict, Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Envelope for list responses."""

    data: List[T]
    message: Optional[str] = None


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error message")
    details: Optional[Dict[str, Any]] = Field(None, description="Additional error details")


class MessageResponse(BaseModel):
    """Standard success response."""

    success: bool = True
    message: str
