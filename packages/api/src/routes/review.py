# This project was developed with assistance from AI tools.
"""Reviewer routes: work queue, driver status and review decisions."""

from db import get_db
from db.enums import OverallStatus, UserRole
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas import Pagination
from ..schemas.kyc import (
    DocumentContentResponse,
    DocumentDetailListResponse,
    DocumentDetailResponse,
    KYCStatusResponse,
    ReferenceResponse,
    ReviewDecisionRequest,
    ReviewQueueResponse,
)
from ..services import documents as doc_service
from ..services.references import record_reference_decision
from ..services.review import list_review_queue
from ..services.status import get_kyc_status
from ..services.storage import StorageService, get_storage_service

router = APIRouter(dependencies=[Depends(require_roles(UserRole.ADMIN))])


@router.get("/reviews", response_model=ReviewQueueResponse)
async def review_queue(
    session: AsyncSession = Depends(get_db),
    status: OverallStatus | None = Query(default=OverallStatus.PENDING_REVIEW),
    offset: int = Query(default=0, ge=0),
    limit: int = Query(default=20, ge=1, le=100),
) -> ReviewQueueResponse:
    """Drivers waiting on review, oldest submission first."""
    items, total = await list_review_queue(
        session, overall_status=status, offset=offset, limit=limit
    )
    return ReviewQueueResponse(
        data=items,
        pagination=Pagination(
            total=total,
            offset=offset,
            limit=limit,
            has_more=(offset + limit) < total,
        ),
    )


@router.get("/drivers/{driver_id}/status", response_model=KYCStatusResponse)
async def driver_status(
    driver_id: str,
    session: AsyncSession = Depends(get_db),
) -> KYCStatusResponse:
    """KYC status of any driver."""
    return await get_kyc_status(session, driver_id)


@router.get("/drivers/{driver_id}/documents", response_model=DocumentDetailListResponse)
async def driver_documents(
    driver_id: str,
    session: AsyncSession = Depends(get_db),
) -> DocumentDetailListResponse:
    """All KYC documents of a driver, newest first."""
    documents = await doc_service.list_documents(session, driver_id)
    items = [DocumentDetailResponse.model_validate(doc) for doc in documents]
    return DocumentDetailListResponse(data=items, count=len(items))


@router.get("/documents/{document_id}/content", response_model=DocumentContentResponse)
async def document_content(
    document_id: int,
    session: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
) -> DocumentContentResponse:
    """Short-lived download links for a document's artifacts."""
    doc = await doc_service.get_document(session, document_id)
    back_url = None
    if doc.back_image_path:
        back_url = await storage.get_download_url(doc.back_image_path)
    return DocumentContentResponse(
        front_url=await storage.get_download_url(doc.front_image_path),
        back_url=back_url,
    )


@router.post("/documents/{document_id}/decision", response_model=DocumentDetailResponse)
async def decide_document(
    document_id: int,
    body: ReviewDecisionRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> DocumentDetailResponse:
    """Verify or reject a KYC document."""
    doc = await doc_service.record_document_decision(
        session, user, document_id, body.decision, body.notes
    )
    return DocumentDetailResponse.model_validate(doc)


@router.post("/references/{reference_id}/decision", response_model=ReferenceResponse)
async def decide_reference(
    reference_id: int,
    body: ReviewDecisionRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ReferenceResponse:
    """Record the outcome of contacting a reference."""
    reference = await record_reference_decision(
        session, user, reference_id, body.decision, body.notes
    )
    return ReferenceResponse.model_validate(reference)
