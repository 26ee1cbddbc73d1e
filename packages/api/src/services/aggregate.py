# This project was developed with assistance from AI tools.
"""KYC aggregate persistence.

One ``kyc_status`` row per driver, created lazily. Every mutating KYC
operation runs as a single unit of work:

1. ``lock_kyc_status`` takes a transaction-scoped PostgreSQL advisory lock
   keyed on the driver id, then gets-or-creates the aggregate row. Concurrent
   submissions for the same driver queue on the lock instead of overwriting
   each other's category status.
2. The caller mutates its ledger and calls ``set_category_status`` /
   ``set_references_status``, which recompute the aggregate and dispatch the
   resulting lifecycle events.
3. ``unit_of_work`` commits, or rolls everything back and raises a retryable
   StorageError on database failure.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

from db import KYCStatus
from db.enums import CategoryStatus, DocumentCategory, ReferencesStatus
from sqlalchemy import select, text
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.errors import StorageError
from ..schemas.auth import UserContext
from .audit import write_audit_event
from .completion import KYCEvent, apply_completion
from .drivers import set_capability

logger = logging.getLogger(__name__)

# Advisory lock namespace for per-driver KYC serialization (first key of the
# two-key form; the second key is hashtext(driver_id)).
KYC_LOCK_NAMESPACE = 900_101

_CATEGORY_COLUMNS: dict[DocumentCategory, str] = {
    DocumentCategory.IDENTITY: "identity_status",
    DocumentCategory.ADDRESS: "address_status",
    DocumentCategory.SELFIE: "selfie_status",
}


def utcnow() -> datetime:
    return datetime.now(UTC)


@asynccontextmanager
async def unit_of_work(session: AsyncSession, operation: str) -> AsyncIterator[None]:
    """Commit on success; roll back on any failure.

    Database errors surface as StorageError so callers never report success
    for a ledger write whose aggregate recompute did not persist.
    """
    try:
        yield
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("KYC %s failed, rolled back: %s", operation, exc)
        raise StorageError(f"Could not persist {operation}; please retry") from exc
    except Exception:
        await session.rollback()
        raise


async def ensure_kyc_status(session: AsyncSession, driver_id: str) -> KYCStatus:
    """Create the aggregate row if absent and return it (no lock taken)."""
    await session.execute(
        pg_insert(KYCStatus)
        .values(user_id=driver_id)
        .on_conflict_do_nothing(index_elements=[KYCStatus.user_id])
    )
    result = await session.execute(
        select(KYCStatus)
        .where(KYCStatus.user_id == driver_id)
        .execution_options(populate_existing=True)
    )
    return result.scalar_one()


async def find_kyc_status(session: AsyncSession, driver_id: str) -> KYCStatus | None:
    """Read the aggregate row without locking or creating it."""
    result = await session.execute(select(KYCStatus).where(KYCStatus.user_id == driver_id))
    return result.scalar_one_or_none()


async def lock_kyc_status(session: AsyncSession, driver_id: str) -> KYCStatus:
    """Serialize on the driver, then get-or-create the aggregate row.

    The lock is released automatically when the transaction ends.
    """
    await session.execute(
        text("SELECT pg_advisory_xact_lock(:namespace, hashtext(:driver_id))"),
        {"namespace": KYC_LOCK_NAMESPACE, "driver_id": driver_id},
    )
    return await ensure_kyc_status(session, driver_id)


def get_category_status(kyc_status: KYCStatus, category: DocumentCategory) -> CategoryStatus:
    return CategoryStatus(getattr(kyc_status, _CATEGORY_COLUMNS[category]))


def rejected_categories(kyc_status: KYCStatus) -> list[DocumentCategory]:
    return [
        category
        for category in DocumentCategory.mandatory()
        if get_category_status(kyc_status, category) == CategoryStatus.REJECTED
    ]


async def set_category_status(
    session: AsyncSession,
    kyc_status: KYCStatus,
    category: DocumentCategory,
    status: CategoryStatus,
    *,
    actor: UserContext | None = None,
    now: datetime | None = None,
) -> list[KYCEvent]:
    """Update one mandatory category and recompute the aggregate."""
    setattr(kyc_status, _CATEGORY_COLUMNS[category], status)
    return await recompute(session, kyc_status, actor=actor, now=now)


async def set_references_status(
    session: AsyncSession,
    kyc_status: KYCStatus,
    status: ReferencesStatus,
    *,
    actor: UserContext | None = None,
    now: datetime | None = None,
) -> list[KYCEvent]:
    """Update the references category and recompute the aggregate.

    The recompute runs for uniformity; references never move the overall
    status or percentage.
    """
    kyc_status.references_status = status
    return await recompute(session, kyc_status, actor=actor, now=now)


async def recompute(
    session: AsyncSession,
    kyc_status: KYCStatus,
    *,
    actor: UserContext | None = None,
    now: datetime | None = None,
) -> list[KYCEvent]:
    """Run the completion engine on ``kyc_status`` and dispatch its events."""
    events = apply_completion(kyc_status, now or utcnow())
    await dispatch_events(session, kyc_status, events, actor=actor)
    return events


async def dispatch_events(
    session: AsyncSession,
    kyc_status: KYCStatus,
    events: list[KYCEvent],
    *,
    actor: UserContext | None = None,
) -> None:
    """Apply downstream effects of lifecycle events.

    Reaching ``verified`` grants the capability flag. A later rejection does
    not revoke it; that stays a product decision.
    """
    for event in events:
        if event == KYCEvent.VERIFIED:
            await set_capability(session, kyc_status.user_id, True)
        logger.info(
            "KYC %s for driver %s (overall=%s, pct=%s)",
            event.value,
            kyc_status.user_id,
            kyc_status.overall_status.value,
            kyc_status.completion_percentage,
        )
        await write_audit_event(
            session,
            event_type=event.value,
            driver_id=kyc_status.user_id,
            user_id=actor.user_id if actor else None,
            user_role=actor.role.value if actor else None,
            event_data={
                "overall_status": kyc_status.overall_status.value,
                "completion_percentage": kyc_status.completion_percentage,
            },
        )
