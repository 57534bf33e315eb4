"""
Shoot - Pydantic Schemas
========================
Request/Response schemas for the API layer.
"""

from datetime import datetime

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    version: str
    database: str
    llm_configured: bool
    uptime_seconds: float


class AIStatusResponse(BaseModel):
    is_configured: bool
    model: str
    checked_at: datetime
