"""
app/schemas/summary.py

Response schema for the establishment summary endpoint.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field


class SummaryResponse(BaseModel):
    """
    API response model for one establishment summary.
    """

    summary: str
    themes: list[str] = Field(default_factory=list, max_length=4)
    generated_at: datetime
    cached: bool
