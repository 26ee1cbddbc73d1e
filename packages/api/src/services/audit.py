# This project was developed with assistance from AI tools.
"""Audit event service.

Writes append-only audit trail entries for the KYC lifecycle. Events are
added to the caller's session so they commit (or roll back) together with
the ledger change they describe.
"""

import logging

from db import AuditEvent
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


async def write_audit_event(
    session: AsyncSession,
    *,
    event_type: str,
    driver_id: str | None = None,
    user_id: str | None = None,
    user_role: str | None = None,
    event_data: dict | None = None,
) -> AuditEvent:
    """Add a single audit event to the current unit of work.

    Args:
        session: Database session.
        event_type: Event category (e.g. 'document_submitted', 'kyc_verified').
        driver_id: Driver whose KYC the event concerns.
        user_id: Actor who triggered the event (driver or reviewer).
        user_role: Role of the actor at the time of the event.
        event_data: Arbitrary JSON-serializable event payload.

    Returns:
        The pending AuditEvent row.
    """
    audit = AuditEvent(
        event_type=event_type,
        driver_id=driver_id,
        user_id=user_id,
        user_role=user_role,
        event_data=event_data,
    )
    session.add(audit)
    await session.flush()
    return audit


async def get_events_for_driver(
    session: AsyncSession,
    driver_id: str,
) -> list[AuditEvent]:
    """Return all audit events for a driver, oldest first."""
    stmt = (
        select(AuditEvent)
        .where(AuditEvent.driver_id == driver_id)
        .order_by(AuditEvent.timestamp.asc(), AuditEvent.id.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())
