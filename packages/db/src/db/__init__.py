# This project was developed with assistance from AI tools.
__version__ = "0.1.0"

from .database import Base, DatabaseService, get_db, get_db_service
from .enums import (
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
from .models import (
    AuditEvent,
    KYCDocument,
    KYCReference,
    KYCStatus,
    User,
)

__all__ = [
    "Base",
    "DatabaseService",
    "get_db",
    "get_db_service",
    "__version__",
    # Enums
    "UserRole",
    "DocumentCategory",
    "IdentityDocumentType",
    "DocumentStatus",
    "ReviewDecision",
    "ReferenceStatus",
    "CategoryStatus",
    "ReferencesStatus",
    "OverallStatus",
    # Models
    "AuditEvent",
    "KYCDocument",
    "KYCReference",
    "KYCStatus",
    "User",
]
