# This project was developed with assistance from AI tools.
"""End-to-end KYC lifecycle against a real database."""

import asyncio

import pytest
from db import AuditEvent, KYCDocument, KYCStatus, User
from db.enums import (
    CategoryStatus,
    DocumentCategory,
    IdentityDocumentType,
    OverallStatus,
    ReviewDecision,
)
from sqlalchemy import func, select

from src.core.errors import ConflictError
from src.services.documents import record_document_decision, submit_document
from src.services.references import ReferenceEntry, replace_references
from src.services.status import get_kyc_status
from tests.factories import make_admin, make_user

pytestmark = pytest.mark.integration

_IDENTITY_TYPE = {DocumentCategory.IDENTITY: IdentityDocumentType.PASSPORT}


async def _submit(session_factory, storage, category):
    async with session_factory() as session:
        return await submit_document(
            session,
            storage,
            "driver-1",
            category,
            identity_type=_IDENTITY_TYPE.get(category),
            front_ref=f"kyc/{category.value}/front.jpg",
            file_size=1024,
            mime_type="image/jpeg",
            actor=make_user(),
        )


async def _decide(session_factory, document_id, decision, notes=None):
    async with session_factory() as session:
        return await record_document_decision(
            session, make_admin(), document_id, decision, notes
        )


async def _status(session_factory):
    async with session_factory() as session:
        return await get_kyc_status(session, "driver-1")


async def _scalar(session_factory, stmt):
    async with session_factory() as session:
        return (await session.execute(stmt)).scalar()


async def _all(session_factory, stmt):
    async with session_factory() as session:
        return list((await session.execute(stmt)).scalars().all())


async def test_full_lifecycle(session_factory, driver, storage):
    docs = {}
    for category in DocumentCategory.mandatory():
        docs[category] = await _submit(session_factory, storage, category)
    view = await _status(session_factory)
    assert (view.overall_status, view.completion_percentage) == (OverallStatus.PENDING_REVIEW, 0)
    assert view.dates.submitted_at is not None

    for doc in docs.values():
        await _decide(session_factory, doc.id, ReviewDecision.VERIFIED)
    view = await _status(session_factory)
    assert (view.overall_status, view.completion_percentage) == (OverallStatus.VERIFIED, 100)
    assert await _scalar(session_factory, select(User.driver_verified).where(User.id == "driver-1"))

    await _decide(
        session_factory, docs[DocumentCategory.IDENTITY].id, ReviewDecision.REJECTED, "Expired"
    )
    view = await _status(session_factory)
    assert (view.overall_status, view.completion_percentage) == (OverallStatus.REJECTED, 67)
    assert view.rejection_reason == "Expired"
    assert view.can_resubmit is True
    assert view.dates.verified_at is not None
    # Capability is not revoked by a later rejection
    assert await _scalar(session_factory, select(User.driver_verified).where(User.id == "driver-1"))

    event_types = set(
        await _all(
            session_factory,
            select(AuditEvent.event_type).where(AuditEvent.driver_id == "driver-1"),
        )
    )
    assert {
        "document_submitted",
        "document_reviewed",
        "kyc_submitted",
        "kyc_verified",
        "kyc_rejected",
    } <= event_types


async def test_rejection_reason_follows_remaining_rejected_category(
    session_factory, driver, storage
):
    docs = {c: await _submit(session_factory, storage, c) for c in DocumentCategory.mandatory()}

    await _decide(
        session_factory, docs[DocumentCategory.ADDRESS].id, ReviewDecision.REJECTED, "Bill expired"
    )
    await _decide(
        session_factory, docs[DocumentCategory.IDENTITY].id, ReviewDecision.REJECTED, "Photo blurry"
    )
    assert (await _status(session_factory)).rejection_reason == "Photo blurry"

    await _decide(session_factory, docs[DocumentCategory.IDENTITY].id, ReviewDecision.VERIFIED)

    view = await _status(session_factory)
    assert view.overall_status == OverallStatus.REJECTED
    assert view.identity.status == CategoryStatus.VERIFIED
    assert view.address.status == CategoryStatus.REJECTED
    assert view.rejection_reason == "Bill expired"


async def test_concurrent_submissions_do_not_lose_updates(session_factory, driver, storage):
    await asyncio.gather(
        *(_submit(session_factory, storage, c) for c in DocumentCategory.mandatory())
    )

    view = await _status(session_factory)
    assert view.identity.status == CategoryStatus.PENDING
    assert view.address.status == CategoryStatus.PENDING
    assert view.selfie.status == CategoryStatus.PENDING
    assert view.overall_status == OverallStatus.PENDING_REVIEW


async def test_concurrent_first_lookups_create_one_aggregate(session_factory, driver):
    await asyncio.gather(*(_status(session_factory) for _ in range(5)))

    count = await _scalar(session_factory, select(func.count()).select_from(KYCStatus))
    assert count == 1


async def test_resubmission_keeps_single_record(session_factory, driver, storage):
    first = await _submit(session_factory, storage, DocumentCategory.ADDRESS)
    await _decide(session_factory, first.id, ReviewDecision.REJECTED, "Unreadable")
    second = await _submit(session_factory, storage, DocumentCategory.ADDRESS)

    ids = await _all(
        session_factory,
        select(KYCDocument.id).where(KYCDocument.document_type == DocumentCategory.ADDRESS),
    )
    assert ids == [second.id]
    view = await _status(session_factory)
    assert view.address.status == CategoryStatus.PENDING
    assert view.rejection_reason is None


async def test_verified_category_conflict_rolls_back(session_factory, driver, storage):
    doc = await _submit(session_factory, storage, DocumentCategory.SELFIE)
    await _decide(session_factory, doc.id, ReviewDecision.VERIFIED)

    with pytest.raises(ConflictError):
        await _submit(session_factory, storage, DocumentCategory.SELFIE)

    ids = await _all(session_factory, select(KYCDocument.id))
    assert ids == [doc.id]


async def test_skipping_references_leaves_progress_unchanged(session_factory, driver, storage):
    await _submit(session_factory, storage, DocumentCategory.IDENTITY)
    before = await _status(session_factory)

    async with session_factory() as session:
        await replace_references(session, make_user(), "driver-1", [])
    after = await _status(session_factory)

    assert after.references.status.value == "skipped"
    assert (after.overall_status, after.completion_percentage) == (
        before.overall_status,
        before.completion_percentage,
    )

    async with session_factory() as session:
        await replace_references(
            session,
            make_user(),
            "driver-1",
            [ReferenceEntry(full_name="Moussa Ndiaye", phone="+221770000099", relation="employer")],
        )
    view = await _status(session_factory)
    assert view.references.count == 1
    assert view.references.status.value == "pending"
