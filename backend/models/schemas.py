"""
Pydantic schemas for the search API.
"""

from typing import Any, Optional
from pydantic import BaseModel


# ---------------------------------------------------------------------------
# Search input
# ---------------------------------------------------------------------------

class SearchBody(BaseModel):
    """Request body for POST /search. Field names follow the upstream API."""

    textQuery: Optional[str] = None
    # Lenient: non-numeric values fall back to the default page size
    pageSize: Optional[Any] = None
    pageToken: Optional[str] = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class ErrorResponse(BaseModel):
    error: str
    details: Optional[Any] = None


class HealthResponse(BaseModel):
    status: str = "ok"
