# This project was developed with assistance from AI tools.
"""KYC request/response schemas."""

from datetime import datetime

from db.enums import (
    CategoryStatus,
    DocumentCategory,
    DocumentStatus,
    IdentityDocumentType,
    OverallStatus,
    ReferencesStatus,
    ReferenceStatus,
    ReviewDecision,
    UserRole,
)
from pydantic import BaseModel, ConfigDict, Field

from . import Pagination

# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


class DocumentResponse(BaseModel):
    """KYC document metadata."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: str
    document_type: DocumentCategory
    identity_document_type: IdentityDocumentType | None = None
    status: DocumentStatus
    file_size: int
    mime_type: str
    verification_notes: str | None = None
    rejection_reason: str | None = None
    verified_by: str | None = None
    uploaded_at: datetime
    verified_at: datetime | None = None
    rejected_at: datetime | None = None


class DocumentDetailResponse(DocumentResponse):
    """Document response including artifact keys (reviewers only)."""

    front_image_path: str
    back_image_path: str | None = None


class DocumentListResponse(BaseModel):
    data: list[DocumentResponse]
    count: int


class DocumentDetailListResponse(BaseModel):
    data: list[DocumentDetailResponse]
    count: int


class DocumentContentResponse(BaseModel):
    """Presigned download URLs for a document's artifacts."""

    front_url: str
    back_url: str | None = None


# ---------------------------------------------------------------------------
# References
# ---------------------------------------------------------------------------


class ReferenceIn(BaseModel):
    full_name: str = Field(min_length=1, max_length=255)
    phone: str = Field(min_length=1, max_length=32)
    relation: str = Field(min_length=1, max_length=100)


class ReferencesRequest(BaseModel):
    """Replace the driver's references. An empty list skips the step."""

    references: list[ReferenceIn] = Field(default_factory=list)


class ReferenceResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    phone: str
    relation: str
    verification_status: ReferenceStatus
    verification_notes: str | None = None
    verified_at: datetime | None = None
    created_at: datetime


class ReferencesView(BaseModel):
    """References category as shown on the status view."""

    status: ReferencesStatus
    count: int
    entries: list[ReferenceResponse]


# ---------------------------------------------------------------------------
# Review decisions
# ---------------------------------------------------------------------------


class ReviewDecisionRequest(BaseModel):
    """Outcome of a manual review."""

    decision: ReviewDecision
    notes: str | None = Field(default=None, max_length=2000)


# ---------------------------------------------------------------------------
# Status projection
# ---------------------------------------------------------------------------


class CategoryView(BaseModel):
    """One mandatory category with its latest document, if any."""

    status: CategoryStatus
    document_id: int | None = None
    identity_document_type: IdentityDocumentType | None = None
    uploaded_at: datetime | None = None
    verified_at: datetime | None = None
    rejected_at: datetime | None = None
    notes: str | None = None
    rejection_reason: str | None = None


class KYCDates(BaseModel):
    started_at: datetime | None = None
    submitted_at: datetime | None = None
    verified_at: datetime | None = None
    rejected_at: datetime | None = None


class KYCStatusResponse(BaseModel):
    """Read model of a driver's KYC aggregate."""

    driver_id: str
    overall_status: OverallStatus
    completion_percentage: int
    can_resubmit: bool
    rejection_reason: str | None = None
    identity: CategoryView
    address: CategoryView
    selfie: CategoryView
    references: ReferencesView
    dates: KYCDates


class SubmitResponse(BaseModel):
    driver_id: str
    overall_status: OverallStatus
    completion_percentage: int
    submitted_at: datetime | None = None
    message: str


# ---------------------------------------------------------------------------
# Review queue
# ---------------------------------------------------------------------------


class ReviewQueueItem(BaseModel):
    """One driver in the review queue."""

    driver_id: str
    full_name: str
    phone: str
    overall_status: OverallStatus
    completion_percentage: int
    identity_status: CategoryStatus
    address_status: CategoryStatus
    selfie_status: CategoryStatus
    references_status: ReferencesStatus
    submitted_at: datetime | None = None
    updated_at: datetime | None = None


class ReviewQueueResponse(BaseModel):
    data: list[ReviewQueueItem]
    pagination: Pagination


# ---------------------------------------------------------------------------
# Drivers
# ---------------------------------------------------------------------------


class DriverResponse(BaseModel):
    """Driver directory record including the verified-driver capability."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    phone: str
    full_name: str
    user_type: UserRole
    is_driver: bool
    driver_verified: bool
    created_at: datetime | None = None
