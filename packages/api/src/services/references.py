# This project was developed with assistance from AI tools.
"""Personal references ledger.

References are optional: they are shown on the status view but never count
toward completion. The whole set is replaced on every submission.
"""

import logging
from dataclasses import dataclass

from db import KYCReference
from db.enums import ReferencesStatus, ReferenceStatus, ReviewDecision
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.errors import NotFoundError, ValidationError
from ..schemas.auth import UserContext
from .aggregate import lock_kyc_status, set_references_status, unit_of_work, utcnow
from .audit import write_audit_event
from .drivers import get_driver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferenceEntry:
    full_name: str
    phone: str
    relation: str


def derive_references_status(statuses: list[ReferenceStatus]) -> ReferencesStatus:
    """Fold per-reference verification outcomes into the category status."""
    if not statuses:
        return ReferencesStatus.SKIPPED
    if any(s == ReferenceStatus.FAILED for s in statuses):
        return ReferencesStatus.REJECTED
    if all(s == ReferenceStatus.VERIFIED for s in statuses):
        return ReferencesStatus.VERIFIED
    return ReferencesStatus.PENDING


def _validate_entries(entries: list[ReferenceEntry]) -> None:
    if len(entries) > settings.KYC_MAX_REFERENCES:
        raise ValidationError(
            f"At most {settings.KYC_MAX_REFERENCES} references may be provided, got {len(entries)}",
            fields=["references"],
        )
    for i, entry in enumerate(entries):
        missing = [
            name
            for name in ("full_name", "phone", "relation")
            if not getattr(entry, name, "").strip()
        ]
        if missing:
            raise ValidationError(
                f"Reference {i + 1} is missing {', '.join(missing)}",
                fields=[f"references[{i}].{name}" for name in missing],
            )


async def replace_references(
    session: AsyncSession,
    actor: UserContext,
    driver_id: str,
    entries: list[ReferenceEntry],
) -> list[KYCReference]:
    """Replace a driver's references with ``entries``.

    An empty list records that the driver skipped this optional step.
    """
    _validate_entries(entries)

    async with unit_of_work(session, "references update"):
        await get_driver(session, driver_id)
        kyc_status = await lock_kyc_status(session, driver_id)

        await session.execute(delete(KYCReference).where(KYCReference.user_id == driver_id))
        rows = [
            KYCReference(
                user_id=driver_id,
                full_name=entry.full_name.strip(),
                phone=entry.phone.strip(),
                relation=entry.relation.strip(),
                verification_status=ReferenceStatus.PENDING,
            )
            for entry in entries
        ]
        session.add_all(rows)
        await session.flush()

        new_status = ReferencesStatus.PENDING if rows else ReferencesStatus.SKIPPED
        await set_references_status(session, kyc_status, new_status, actor=actor)
        await write_audit_event(
            session,
            event_type="references_replaced",
            driver_id=driver_id,
            user_id=actor.user_id,
            user_role=actor.role.value,
            event_data={"count": len(rows), "references_status": new_status.value},
        )

    logger.info(
        "Driver %s replaced references (count=%d, status=%s)",
        driver_id,
        len(rows),
        new_status.value,
    )
    return rows


async def list_references(session: AsyncSession, driver_id: str) -> list[KYCReference]:
    """Return a driver's references in insertion order."""
    stmt = (
        select(KYCReference)
        .where(KYCReference.user_id == driver_id)
        .order_by(KYCReference.created_at.asc(), KYCReference.id.asc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_reference(session: AsyncSession, reference_id: int) -> KYCReference:
    result = await session.execute(
        select(KYCReference)
        .where(KYCReference.id == reference_id)
        .execution_options(populate_existing=True)
    )
    reference = result.scalar_one_or_none()
    if reference is None:
        raise NotFoundError(f"Reference {reference_id} not found")
    return reference


async def record_reference_decision(
    session: AsyncSession,
    reviewer: UserContext,
    reference_id: int,
    decision: ReviewDecision,
    notes: str | None = None,
) -> KYCReference:
    """Record the outcome of contacting a reference.

    A rejected reference is stored as ``failed``. The references category is
    re-derived from every entry the driver currently has.
    """
    async with unit_of_work(session, "reference review"):
        driver_id = (await get_reference(session, reference_id)).user_id
        kyc_status = await lock_kyc_status(session, driver_id)
        reference = await get_reference(session, reference_id)

        now = utcnow()
        reference.verification_status = (
            ReferenceStatus.VERIFIED
            if decision == ReviewDecision.VERIFIED
            else ReferenceStatus.FAILED
        )
        reference.verification_notes = notes
        reference.verified_at = now
        await session.flush()

        siblings = await list_references(session, driver_id)
        new_status = derive_references_status(
            [ReferenceStatus(r.verification_status) for r in siblings]
        )
        await set_references_status(session, kyc_status, new_status, actor=reviewer, now=now)
        await write_audit_event(
            session,
            event_type="reference_reviewed",
            driver_id=driver_id,
            user_id=reviewer.user_id,
            user_role=reviewer.role.value,
            event_data={
                "reference_id": reference.id,
                "decision": decision.value,
                "references_status": new_status.value,
            },
        )

    logger.info(
        "Reviewer %s marked reference %s (driver %s) as %s",
        reviewer.user_id,
        reference_id,
        driver_id,
        reference.verification_status.value,
    )
    return reference
