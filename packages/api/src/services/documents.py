# This project was developed with assistance from AI tools.
"""KYC document ledger.

Records uploaded identity, address and selfie artifacts per driver and the
review decisions made on them. Each submission or decision updates exactly
one category on the KYC aggregate and recomputes it inside the same unit of
work (see ``services/aggregate.py``).

Artifact bytes are stored before the ledger write; the ledger keeps only the
object keys returned by the artifact store.
"""

import logging
import os
from dataclasses import dataclass

from db import KYCDocument, KYCStatus
from db.enums import (
    CategoryStatus,
    DocumentCategory,
    DocumentStatus,
    IdentityDocumentType,
    ReviewDecision,
)
from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from ..core.errors import ConflictError, NotFoundError, ValidationError
from ..schemas.auth import UserContext
from .aggregate import (
    find_kyc_status,
    get_category_status,
    rejected_categories,
    lock_kyc_status,
    set_category_status,
    unit_of_work,
    utcnow,
)
from .audit import write_audit_event
from .drivers import get_driver
from .storage import StorageService

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {
    "application/pdf",
    "image/jpeg",
    "image/jpg",
    "image/png",
}

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".pdf"}


@dataclass(frozen=True)
class UploadedFile:
    """Raw upload as received from the transport layer."""

    filename: str
    content_type: str
    data: bytes


def validate_upload(upload: UploadedFile) -> None:
    """Check type, extension and size of a raw upload."""
    if upload.content_type not in ALLOWED_CONTENT_TYPES:
        raise ValidationError(
            f"Unsupported file type: {upload.content_type}. "
            f"Allowed: {', '.join(sorted(ALLOWED_CONTENT_TYPES))}"
        )
    ext = os.path.splitext(upload.filename)[1].lower()
    if ext not in ALLOWED_EXTENSIONS:
        raise ValidationError(
            f"Invalid file extension: {ext or '(none)'}. "
            f"Allowed: {', '.join(sorted(ALLOWED_EXTENSIONS))}"
        )
    max_bytes = settings.UPLOAD_MAX_SIZE_MB * 1024 * 1024
    if not upload.data:
        raise ValidationError(f"File {upload.filename} is empty")
    if len(upload.data) > max_bytes:
        raise ValidationError(
            f"File size {len(upload.data)} exceeds maximum of {settings.UPLOAD_MAX_SIZE_MB}MB"
        )


def validate_submission(
    category: DocumentCategory,
    identity_type: IdentityDocumentType | None,
    *,
    has_front: bool,
    has_back: bool,
    mime_type: str,
) -> None:
    """Enforce the artifact shape of a document submission.

    Identity needs a sub-type; a CNI needs front and back; every other
    document carries exactly one artifact.
    """
    if not has_front:
        raise ValidationError("Front image is required", fields=["front_image"])

    if category == DocumentCategory.IDENTITY:
        if identity_type is None:
            raise ValidationError(
                "Identity document type is required (cni, passport or permit)",
                fields=["document_type"],
            )
        if identity_type.requires_back_image and not has_back:
            raise ValidationError(
                "CNI requires both front and back images", fields=["back_image"]
            )
        if not identity_type.requires_back_image and has_back:
            raise ValidationError(
                f"A {identity_type.value} takes a single image", fields=["back_image"]
            )
    else:
        if identity_type is not None:
            raise ValidationError(
                f"Document type only applies to identity documents, not {category.value}",
                fields=["document_type"],
            )
        if has_back:
            raise ValidationError(
                f"{category.value.capitalize()} proof takes exactly one file",
                fields=["back_image"],
            )

    if category == DocumentCategory.SELFIE and not mime_type.startswith("image/"):
        raise ValidationError("Invalid file type. Only images are allowed for selfie.")


def _reject_verified_resubmission(
    driver_id: str, category: DocumentCategory, current: CategoryStatus
) -> None:
    if current == CategoryStatus.VERIFIED:
        logger.warning(
            "Driver %s attempted to resubmit verified %s document", driver_id, category.value
        )
        raise ConflictError(
            f"{category.value.capitalize()} document is already verified and cannot be resubmitted"
        )


async def upload_document(
    session: AsyncSession,
    storage: StorageService,
    actor: UserContext,
    driver_id: str,
    category: DocumentCategory,
    front: UploadedFile,
    *,
    back: UploadedFile | None = None,
    identity_type: IdentityDocumentType | None = None,
) -> KYCDocument:
    """Validate raw uploads, store them, then record the submission.

    Shape checks and the verified-category check run before anything is
    stored so a rejected request leaves no orphan artifacts behind.
    """
    validate_submission(
        category,
        identity_type,
        has_front=True,
        has_back=back is not None,
        mime_type=front.content_type,
    )
    uploads = [front] if back is None else [front, back]
    for upload in uploads:
        validate_upload(upload)

    # Unlocked read; submit_document re-checks under the driver lock
    async with unit_of_work(session, "document pre-check"):
        kyc_status = await find_kyc_status(session, driver_id)
    if kyc_status is not None:
        current = get_category_status(kyc_status, category)
        _reject_verified_resubmission(driver_id, category, current)

    front_ref = await storage.store(front.data, category.value, front.filename, front.content_type)
    back_ref = None
    if back is not None:
        back_ref = await storage.store(back.data, category.value, back.filename, back.content_type)

    return await submit_document(
        session,
        storage,
        driver_id,
        category,
        front_ref=front_ref,
        back_ref=back_ref,
        identity_type=identity_type,
        file_size=sum(len(u.data) for u in uploads),
        mime_type=front.content_type,
        actor=actor,
    )


async def submit_document(
    session: AsyncSession,
    storage: StorageService,
    driver_id: str,
    category: DocumentCategory,
    *,
    front_ref: str,
    back_ref: str | None = None,
    identity_type: IdentityDocumentType | None = None,
    file_size: int,
    mime_type: str,
    actor: UserContext | None = None,
) -> KYCDocument:
    """Record an already-stored artifact set as a new pending document.

    Resubmitting a pending or rejected category replaces its previous
    record; a verified category cannot be resubmitted (ConflictError).
    """
    validate_submission(
        category,
        identity_type,
        has_front=bool(front_ref),
        has_back=bool(back_ref),
        mime_type=mime_type,
    )
    for ref in (front_ref, back_ref):
        if ref and not await storage.exists(ref):
            raise ValidationError(f"Uploaded artifact {ref} was not found in storage")

    async with unit_of_work(session, "document submission"):
        await get_driver(session, driver_id)
        kyc_status = await lock_kyc_status(session, driver_id)

        previous = get_category_status(kyc_status, category)
        _reject_verified_resubmission(driver_id, category, previous)

        # Resubmission cleanup: at most one live record per category
        await session.execute(
            delete(KYCDocument).where(
                KYCDocument.user_id == driver_id,
                KYCDocument.document_type == category,
            )
        )

        doc = KYCDocument(
            user_id=driver_id,
            document_type=category,
            identity_document_type=identity_type,
            front_image_path=front_ref,
            back_image_path=back_ref,
            file_size=file_size,
            mime_type=mime_type,
            status=DocumentStatus.PENDING,
        )
        session.add(doc)
        await session.flush()  # Assign doc.id

        await set_category_status(
            session, kyc_status, category, CategoryStatus.PENDING, actor=actor
        )
        await refresh_rejection_reason(session, kyc_status)
        await write_audit_event(
            session,
            event_type="document_submitted",
            driver_id=driver_id,
            user_id=actor.user_id if actor else None,
            user_role=actor.role.value if actor else None,
            event_data={
                "document_id": doc.id,
                "category": category.value,
                "identity_type": identity_type.value if identity_type else None,
                "resubmission": previous != CategoryStatus.NOT_SUBMITTED,
            },
        )

    logger.info(
        "Driver %s submitted %s document %s (previous status=%s)",
        driver_id,
        category.value,
        doc.id,
        previous.value,
    )
    await session.refresh(doc)
    return doc


async def get_document(session: AsyncSession, document_id: int) -> KYCDocument:
    """Return a document by id. Raises NotFoundError."""
    result = await session.execute(
        select(KYCDocument)
        .where(KYCDocument.id == document_id)
        .execution_options(populate_existing=True)
    )
    doc = result.scalar_one_or_none()
    if doc is None:
        raise NotFoundError(f"KYC document {document_id} not found")
    return doc


async def record_document_decision(
    session: AsyncSession,
    reviewer: UserContext,
    document_id: int,
    decision: ReviewDecision,
    notes: str | None = None,
) -> KYCDocument:
    """Apply a review decision to a document and recompute the aggregate.

    Rejection stores ``notes`` as the document's rejection reason. The
    aggregate reason is then re-read from whichever categories remain
    rejected.
    """
    async with unit_of_work(session, "document review"):
        driver_id = (await get_document(session, document_id)).user_id
        kyc_status = await lock_kyc_status(session, driver_id)
        # Re-read under the lock: a concurrent resubmission may have replaced it
        doc = await get_document(session, document_id)

        now = utcnow()
        doc.status = DocumentStatus(decision.value)
        doc.verification_notes = notes
        doc.verified_by = reviewer.user_id
        if decision == ReviewDecision.VERIFIED:
            doc.verified_at = now
            doc.rejected_at = None
            doc.rejection_reason = None
        else:
            doc.verified_at = None
            doc.rejected_at = now
            doc.rejection_reason = notes

        await set_category_status(
            session,
            kyc_status,
            DocumentCategory(doc.document_type),
            CategoryStatus(decision.value),
            actor=reviewer,
            now=now,
        )
        await refresh_rejection_reason(session, kyc_status)
        await write_audit_event(
            session,
            event_type="document_reviewed",
            driver_id=driver_id,
            user_id=reviewer.user_id,
            user_role=reviewer.role.value,
            event_data={
                "document_id": doc.id,
                "category": DocumentCategory(doc.document_type).value,
                "decision": decision.value,
                "notes": notes,
            },
        )

    logger.info(
        "Reviewer %s marked document %s (driver %s) as %s",
        reviewer.user_id,
        document_id,
        driver_id,
        decision.value,
    )
    return doc


async def refresh_rejection_reason(session: AsyncSession, kyc_status: KYCStatus) -> None:
    """Point the aggregate's rejection reason at a category that is still rejected.

    Takes the reason of the most recently rejected document among the
    categories currently in ``rejected``. Left to the completion engine
    (which clears it) when nothing is rejected.
    """
    categories = rejected_categories(kyc_status)
    if not categories:
        return
    stmt = (
        select(KYCDocument.rejection_reason)
        .where(
            KYCDocument.user_id == kyc_status.user_id,
            KYCDocument.document_type.in_(categories),
            KYCDocument.status == DocumentStatus.REJECTED,
        )
        .order_by(KYCDocument.rejected_at.desc(), KYCDocument.id.desc())
        .limit(1)
    )
    result = await session.execute(stmt)
    kyc_status.rejection_reason = result.scalar_one_or_none()


async def list_documents(session: AsyncSession, driver_id: str) -> list[KYCDocument]:
    """Return a driver's documents, most recent upload first."""
    stmt = (
        select(KYCDocument)
        .where(KYCDocument.user_id == driver_id)
        .order_by(KYCDocument.uploaded_at.desc(), KYCDocument.id.desc())
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def latest_document(
    session: AsyncSession,
    driver_id: str,
    category: DocumentCategory,
) -> KYCDocument | None:
    """Return the most recent document of ``category`` for a driver, if any."""
    stmt = (
        select(KYCDocument)
        .where(
            KYCDocument.user_id == driver_id,
            KYCDocument.document_type == category,
        )
        .order_by(KYCDocument.uploaded_at.desc(), KYCDocument.id.desc())
        .limit(1)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()
