# This project was developed with assistance from AI tools.
"""
Domain enums for the driver KYC lifecycle.

Shared domain types used by both SQLAlchemy models (db package)
and Pydantic schemas (api package).
"""

import enum


class UserRole(str, enum.Enum):
    CLIENT = "client"
    DRIVER = "driver"
    ADMIN = "admin"


class DocumentCategory(str, enum.Enum):
    IDENTITY = "identity"
    ADDRESS = "address"
    SELFIE = "selfie"

    @classmethod
    def mandatory(cls) -> tuple["DocumentCategory", ...]:
        """Categories that drive overall status and completion percentage."""
        return (cls.IDENTITY, cls.ADDRESS, cls.SELFIE)


class IdentityDocumentType(str, enum.Enum):
    CNI = "cni"
    PASSPORT = "passport"
    PERMIT = "permit"

    @property
    def requires_back_image(self) -> bool:
        return self is IdentityDocumentType.CNI


class DocumentStatus(str, enum.Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"


class ReviewDecision(str, enum.Enum):
    """Outcome fed in by the external review process."""

    VERIFIED = "verified"
    REJECTED = "rejected"


class ReferenceStatus(str, enum.Enum):
    NOT_CONTACTED = "not_contacted"
    PENDING = "pending"
    VERIFIED = "verified"
    FAILED = "failed"


class CategoryStatus(str, enum.Enum):
    """Per-category status held on the KYC aggregate."""

    NOT_SUBMITTED = "not_submitted"
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"

    @classmethod
    def submitted(cls) -> frozenset["CategoryStatus"]:
        """Statuses that count as submitted and not rejected."""
        return frozenset({cls.PENDING, cls.VERIFIED})


class ReferencesStatus(str, enum.Enum):
    """Status of the optional references category (adds SKIPPED)."""

    NOT_SUBMITTED = "not_submitted"
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"
    SKIPPED = "skipped"


class OverallStatus(str, enum.Enum):
    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    PENDING_REVIEW = "pending_review"
    VERIFIED = "verified"
    REJECTED = "rejected"

