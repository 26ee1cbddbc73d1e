# This project was developed with assistance from AI tools.
"""Pydantic response schemas for audit trail endpoints."""

from datetime import datetime

from pydantic import BaseModel


class AuditEventItem(BaseModel):
    """Single audit event in a query response."""

    id: int
    timestamp: datetime
    event_type: str
    user_id: str | None = None
    user_role: str | None = None
    driver_id: str | None = None
    event_data: dict | str | None = None


class AuditByDriverResponse(BaseModel):
    """Response for audit trail query by driver ID."""

    driver_id: str
    count: int
    events: list[AuditEventItem]
