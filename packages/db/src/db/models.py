# This project was developed with assistance from AI tools.
"""
Courier KYC -- domain models

Driver onboarding models covering users, submitted KYC documents,
personal references, the per-driver KYC aggregate, and audit trail.
"""

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import relationship

from .database import Base
from .enums import (
    CategoryStatus,
    DocumentCategory,
    DocumentStatus,
    IdentityDocumentType,
    OverallStatus,
    ReferencesStatus,
    ReferenceStatus,
    UserRole,
)


def _enum(enum_cls, name: str) -> Enum:
    """Non-native enum column persisted by member value (e.g. "pending")."""
    return Enum(
        enum_cls,
        name=name,
        native_enum=False,
        values_callable=lambda members: [m.value for m in members],
    )


class User(Base):
    """Platform user; drivers carry the verified-driver capability flag."""

    __tablename__ = "users"

    id = Column(String(64), primary_key=True)
    phone = Column(String(32), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=False, default="")
    user_type = Column(
        _enum(UserRole, "user_type"),
        nullable=False,
        default=UserRole.CLIENT,
    )
    is_driver = Column(Boolean, nullable=False, default=False)
    driver_verified = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    kyc_status = relationship("KYCStatus", back_populates="user", uselist=False)
    kyc_documents = relationship(
        "KYCDocument", back_populates="user", cascade="all, delete-orphan",
    )
    kyc_references = relationship(
        "KYCReference", back_populates="user", cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<User(id={self.id}, type='{self.user_type}', verified={self.driver_verified})>"


class KYCDocument(Base):
    """Uploaded KYC artifact (identity, address proof or selfie)."""

    __tablename__ = "kyc_documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    document_type = Column(
        _enum(DocumentCategory, "kyc_document_type"),
        nullable=False,
    )
    identity_document_type = Column(
        _enum(IdentityDocumentType, "identity_document_type"),
        nullable=True,
    )
    front_image_path = Column(String(500), nullable=False)
    back_image_path = Column(String(500), nullable=True)
    file_size = Column(Integer, nullable=False)
    mime_type = Column(String(100), nullable=False)
    status = Column(
        _enum(DocumentStatus, "kyc_document_status"),
        nullable=False,
        default=DocumentStatus.PENDING,
    )
    verification_notes = Column(Text, nullable=True)
    rejection_reason = Column(Text, nullable=True)
    verified_by = Column(String(64), nullable=True)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="kyc_documents")

    def __repr__(self):
        return f"<KYCDocument(id={self.id}, type='{self.document_type}', status='{self.status}')>"


class KYCReference(Base):
    """Personal reference vouching for a driver."""

    __tablename__ = "kyc_references"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(
        String(64), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True,
    )
    full_name = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False)
    relation = Column(String(100), nullable=False)
    verification_status = Column(
        _enum(ReferenceStatus, "kyc_reference_status"),
        nullable=False,
        default=ReferenceStatus.PENDING,
    )
    verification_notes = Column(Text, nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    user = relationship("User", back_populates="kyc_references")

    def __repr__(self):
        return f"<KYCReference(id={self.id}, user_id={self.user_id}, status='{self.verification_status}')>"


class KYCStatus(Base):
    """Per-driver KYC aggregate. Derived columns are written only by the completion engine."""

    __tablename__ = "kyc_status"

    user_id = Column(
        String(64), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True,
    )
    identity_status = Column(
        _enum(CategoryStatus, "kyc_category_status"),
        nullable=False,
        default=CategoryStatus.NOT_SUBMITTED,
    )
    address_status = Column(
        _enum(CategoryStatus, "kyc_category_status"),
        nullable=False,
        default=CategoryStatus.NOT_SUBMITTED,
    )
    selfie_status = Column(
        _enum(CategoryStatus, "kyc_category_status"),
        nullable=False,
        default=CategoryStatus.NOT_SUBMITTED,
    )
    references_status = Column(
        _enum(ReferencesStatus, "kyc_references_status"),
        nullable=False,
        default=ReferencesStatus.NOT_SUBMITTED,
    )
    overall_status = Column(
        _enum(OverallStatus, "kyc_overall_status"),
        nullable=False,
        default=OverallStatus.NOT_STARTED,
    )
    completion_percentage = Column(Integer, nullable=False, default=0)
    rejection_reason = Column(Text, nullable=True)
    can_resubmit = Column(Boolean, nullable=False, default=False)
    started_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    verified_at = Column(DateTime(timezone=True), nullable=True)
    rejected_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="kyc_status")

    def __repr__(self):
        return (
            f"<KYCStatus(user_id={self.user_id}, overall='{self.overall_status}', "
            f"pct={self.completion_percentage})>"
        )


class AuditEvent(Base):
    """Append-only audit trail of KYC lifecycle events."""

    __tablename__ = "audit_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    user_id = Column(String(64), nullable=True)
    user_role = Column(String(50), nullable=True)
    event_type = Column(String(100), nullable=False, index=True)
    driver_id = Column(String(64), nullable=True, index=True)
    event_data = Column(JSON, nullable=True)

    def __repr__(self):
        return f"<AuditEvent(id={self.id}, type='{self.event_type}')>"
