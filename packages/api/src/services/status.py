# This project was developed with assistance from AI tools.
"""KYC status projection.

Builds the read model shown to drivers and reviewers: the aggregate's
derived columns, each mandatory category with its latest document, and the
references category with its entries.
"""

import logging

from db import KYCDocument, KYCStatus
from db.enums import CategoryStatus, DocumentCategory, ReferencesStatus
from sqlalchemy.ext.asyncio import AsyncSession

from ..schemas.kyc import (
    CategoryView,
    KYCDates,
    KYCStatusResponse,
    ReferenceResponse,
    ReferencesView,
)
from .aggregate import ensure_kyc_status, get_category_status, unit_of_work
from .documents import latest_document
from .drivers import get_driver
from .references import list_references

logger = logging.getLogger(__name__)


def _category_view(status: CategoryStatus, doc: KYCDocument | None) -> CategoryView:
    if doc is None:
        return CategoryView(status=status)
    return CategoryView(
        status=status,
        document_id=doc.id,
        identity_document_type=doc.identity_document_type,
        uploaded_at=doc.uploaded_at,
        verified_at=doc.verified_at,
        rejected_at=doc.rejected_at,
        notes=doc.verification_notes,
        rejection_reason=doc.rejection_reason,
    )


async def get_kyc_status(session: AsyncSession, driver_id: str) -> KYCStatusResponse:
    """Return the KYC read model for a driver, creating the aggregate if absent.

    Raises NotFoundError if the driver does not exist.
    """
    async with unit_of_work(session, "status lookup"):
        await get_driver(session, driver_id)
        kyc_status: KYCStatus = await ensure_kyc_status(session, driver_id)

    categories: dict[DocumentCategory, CategoryView] = {}
    for category in DocumentCategory.mandatory():
        doc = await latest_document(session, driver_id, category)
        categories[category] = _category_view(get_category_status(kyc_status, category), doc)

    references = await list_references(session, driver_id)

    return KYCStatusResponse(
        driver_id=driver_id,
        overall_status=kyc_status.overall_status,
        completion_percentage=kyc_status.completion_percentage,
        can_resubmit=kyc_status.can_resubmit,
        rejection_reason=kyc_status.rejection_reason,
        identity=categories[DocumentCategory.IDENTITY],
        address=categories[DocumentCategory.ADDRESS],
        selfie=categories[DocumentCategory.SELFIE],
        references=ReferencesView(
            status=ReferencesStatus(kyc_status.references_status),
            count=len(references),
            entries=[ReferenceResponse.model_validate(r) for r in references],
        ),
        dates=KYCDates(
            started_at=kyc_status.started_at,
            submitted_at=kyc_status.submitted_at,
            verified_at=kyc_status.verified_at,
            rejected_at=kyc_status.rejected_at,
        ),
    )
