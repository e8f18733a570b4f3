"""Common Pydantic schemas."""

from typing import Dict, Optional
from pydantic import BaseModel, Field


class Problem(BaseModel):
    """RFC 9457 Problem Details response."""

    type: Optional[str] = Field(None, description="Problem type URI")
    title: str = Field(..., description="Short human-readable summary")
    status: int = Field(..., description="HTTP status code")
    detail: Optional[str] = Field(None, description="Human-readable explanation")
    instance: Optional[str] = Field(None, description="URI reference for this occurrence")
    errors: Optional[Dict[str, str]] = Field(None, description="Validation message per offending field")


PROBLEM_RESPONSES = {
    400: {"model": Problem, "description": "Validation Error"},
    404: {"model": Problem, "description": "Resource Not Found"},
    409: {"model": Problem, "description": "Resource Conflict"},
}
