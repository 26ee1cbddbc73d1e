# This project was developed with assistance from AI tools.
"""Explicit "submit for review" action."""

import logging

from db import KYCStatus
from db.enums import CategoryStatus, DocumentCategory, OverallStatus
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import ValidationError
from ..schemas.auth import UserContext
from .aggregate import get_category_status, lock_kyc_status, recompute, unit_of_work, utcnow
from .drivers import get_driver

logger = logging.getLogger(__name__)

_SUBMITTED = CategoryStatus.submitted()


def blocking_categories(kyc_status: KYCStatus) -> dict[str, str]:
    """Mandatory categories that are missing or rejected, keyed by name."""
    blocking = {}
    for category in DocumentCategory.mandatory():
        status = get_category_status(kyc_status, category)
        if status not in _SUBMITTED:
            blocking[category.value] = status.value
    return blocking


async def explicit_submit(
    session: AsyncSession,
    actor: UserContext,
    driver_id: str,
) -> KYCStatus:
    """Send a complete application to review.

    Every mandatory category must be pending or verified. An aggregate that
    is already verified is returned unchanged.
    """
    async with unit_of_work(session, "KYC submission"):
        await get_driver(session, driver_id)
        kyc_status = await lock_kyc_status(session, driver_id)

        blocking = blocking_categories(kyc_status)
        if blocking:
            details = ", ".join(f"{name} ({status})" for name, status in blocking.items())
            raise ValidationError(
                f"Cannot submit KYC: incomplete or rejected documents: {details}",
                fields=list(blocking),
            )

        now = utcnow()
        await recompute(session, kyc_status, actor=actor, now=now)
        if kyc_status.overall_status != OverallStatus.VERIFIED:
            kyc_status.overall_status = OverallStatus.PENDING_REVIEW
        if kyc_status.submitted_at is None:
            kyc_status.submitted_at = now

    logger.info(
        "Driver %s submitted KYC for review (overall=%s)",
        driver_id,
        kyc_status.overall_status.value,
    )
    return kyc_status
