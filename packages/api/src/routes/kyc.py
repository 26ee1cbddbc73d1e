# This project was developed with assistance from AI tools.
"""Driver-facing KYC routes: uploads, references, submission and status."""

import logging

from db import get_db
from db.enums import DocumentCategory, IdentityDocumentType, ReferencesStatus, UserRole
from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from ..middleware.auth import CurrentUser, require_roles
from ..schemas.kyc import (
    DocumentListResponse,
    DocumentResponse,
    KYCStatusResponse,
    ReferenceResponse,
    ReferencesRequest,
    ReferencesView,
    SubmitResponse,
)
from ..services import documents as doc_service
from ..services.documents import UploadedFile
from ..services.references import ReferenceEntry, replace_references
from ..services.status import get_kyc_status
from ..services.storage import StorageService, get_storage_service
from ..services.submission import explicit_submit

logger = logging.getLogger(__name__)

router = APIRouter()

_KYC_ROLES = (UserRole.DRIVER, UserRole.ADMIN)


async def _read_upload(file: UploadFile) -> UploadedFile:
    return UploadedFile(
        filename=file.filename or "upload",
        content_type=file.content_type or "",
        data=await file.read(),
    )


@router.post(
    "/identity",
    response_model=DocumentResponse,
    status_code=201,
    dependencies=[Depends(require_roles(*_KYC_ROLES))],
)
async def upload_identity(
    user: CurrentUser,
    document_type: IdentityDocumentType = Form(...),
    front_image: UploadFile = File(...),
    back_image: UploadFile | None = File(default=None),
    session: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
) -> DocumentResponse:
    """Upload an identity document (CNI front and back, or passport/permit)."""
    doc = await doc_service.upload_document(
        session,
        storage,
        user,
        user.user_id,
        DocumentCategory.IDENTITY,
        await _read_upload(front_image),
        back=await _read_upload(back_image) if back_image is not None else None,
        identity_type=document_type,
    )
    return DocumentResponse.model_validate(doc)


@router.post(
    "/address",
    response_model=DocumentResponse,
    status_code=201,
    dependencies=[Depends(require_roles(*_KYC_ROLES))],
)
async def upload_address(
    user: CurrentUser,
    file: UploadFile = File(...),
    session: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
) -> DocumentResponse:
    """Upload a proof of address."""
    doc = await doc_service.upload_document(
        session,
        storage,
        user,
        user.user_id,
        DocumentCategory.ADDRESS,
        await _read_upload(file),
    )
    return DocumentResponse.model_validate(doc)


@router.post(
    "/selfie",
    response_model=DocumentResponse,
    status_code=201,
    dependencies=[Depends(require_roles(*_KYC_ROLES))],
)
async def upload_selfie(
    user: CurrentUser,
    file: UploadFile = File(...),
    session: AsyncSession = Depends(get_db),
    storage: StorageService = Depends(get_storage_service),
) -> DocumentResponse:
    """Upload a selfie (images only)."""
    doc = await doc_service.upload_document(
        session,
        storage,
        user,
        user.user_id,
        DocumentCategory.SELFIE,
        await _read_upload(file),
    )
    return DocumentResponse.model_validate(doc)


@router.post(
    "/references",
    response_model=ReferencesView,
    dependencies=[Depends(require_roles(*_KYC_ROLES))],
)
async def submit_references(
    body: ReferencesRequest,
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> ReferencesView:
    """Replace personal references. Send an empty list to skip this step."""
    entries = [
        ReferenceEntry(full_name=r.full_name, phone=r.phone, relation=r.relation)
        for r in body.references
    ]
    rows = await replace_references(session, user, user.user_id, entries)
    return ReferencesView(
        status=ReferencesStatus.PENDING if rows else ReferencesStatus.SKIPPED,
        count=len(rows),
        entries=[ReferenceResponse.model_validate(r) for r in rows],
    )


@router.post(
    "/submit",
    response_model=SubmitResponse,
    dependencies=[Depends(require_roles(*_KYC_ROLES))],
)
async def submit_kyc(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> SubmitResponse:
    """Send the completed application for review."""
    kyc_status = await explicit_submit(session, user, user.user_id)
    return SubmitResponse(
        driver_id=kyc_status.user_id,
        overall_status=kyc_status.overall_status,
        completion_percentage=kyc_status.completion_percentage,
        submitted_at=kyc_status.submitted_at,
        message="KYC submitted for review",
    )


@router.get(
    "/status",
    response_model=KYCStatusResponse,
    dependencies=[Depends(require_roles(*_KYC_ROLES))],
)
async def get_status(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> KYCStatusResponse:
    """Current KYC status of the calling driver."""
    return await get_kyc_status(session, user.user_id)


@router.get(
    "/documents",
    response_model=DocumentListResponse,
    dependencies=[Depends(require_roles(*_KYC_ROLES))],
)
async def list_documents(
    user: CurrentUser,
    session: AsyncSession = Depends(get_db),
) -> DocumentListResponse:
    """List the calling driver's KYC documents, newest first."""
    documents = await doc_service.list_documents(session, user.user_id)
    items = [DocumentResponse.model_validate(doc) for doc in documents]
    return DocumentListResponse(data=items, count=len(items))
