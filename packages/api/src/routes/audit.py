# This project was developed with assistance from AI tools.
"""Audit trail query endpoints for reviewers."""

from db import get_db
from db.enums import UserRole
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import require_roles
from ..schemas.audit import AuditByDriverResponse, AuditEventItem
from ..services.audit import get_events_for_driver

router = APIRouter()


def _to_item(evt) -> AuditEventItem:
    return AuditEventItem(
        id=evt.id,
        timestamp=evt.timestamp,
        event_type=evt.event_type,
        user_id=evt.user_id,
        user_role=evt.user_role,
        driver_id=evt.driver_id,
        event_data=evt.event_data,
    )


@router.get(
    "/driver/{driver_id}",
    response_model=AuditByDriverResponse,
    dependencies=[Depends(require_roles(UserRole.ADMIN))],
)
async def audit_by_driver(
    driver_id: str,
    session: AsyncSession = Depends(get_db),
) -> AuditByDriverResponse:
    """Query the KYC audit trail of a driver, oldest event first."""
    events = await get_events_for_driver(session, driver_id)
    return AuditByDriverResponse(
        driver_id=driver_id,
        count=len(events),
        events=[_to_item(e) for e in events],
    )
