# This project was developed with assistance from AI tools.
"""Reviewer work queue over KYC aggregates."""

from db import KYCStatus, User
from db.enums import OverallStatus
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.kyc import ReviewQueueItem


async def list_review_queue(
    session: AsyncSession,
    *,
    overall_status: OverallStatus | None = OverallStatus.PENDING_REVIEW,
    offset: int = 0,
    limit: int = 20,
) -> tuple[list[ReviewQueueItem], int]:
    """Return aggregates in ``overall_status``, oldest submission first.

    ``overall_status=None`` lists every driver that has an aggregate.
    """
    count_stmt = select(func.count()).select_from(KYCStatus)
    stmt = (
        select(KYCStatus, User)
        .join(User, User.id == KYCStatus.user_id)
        .order_by(
            KYCStatus.submitted_at.asc().nulls_last(),
            KYCStatus.updated_at.asc(),
            KYCStatus.user_id.asc(),
        )
        .offset(offset)
        .limit(limit)
    )
    if overall_status is not None:
        count_stmt = count_stmt.where(KYCStatus.overall_status == overall_status)
        stmt = stmt.where(KYCStatus.overall_status == overall_status)

    total = (await session.execute(count_stmt)).scalar() or 0
    rows = (await session.execute(stmt)).all()

    items = [
        ReviewQueueItem(
            driver_id=kyc.user_id,
            full_name=user.full_name,
            phone=user.phone,
            overall_status=kyc.overall_status,
            completion_percentage=kyc.completion_percentage,
            identity_status=kyc.identity_status,
            address_status=kyc.address_status,
            selfie_status=kyc.selfie_status,
            references_status=kyc.references_status,
            submitted_at=kyc.submitted_at,
            updated_at=kyc.updated_at,
        )
        for kyc, user in rows
    ]
    return items, total
