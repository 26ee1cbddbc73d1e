# This project was developed with assistance from AI tools.
"""
SQLAdmin configuration for database administration UI

Access the admin panel at: http://localhost:8000/admin

When AUTH_DISABLED=false, requires admin credentials via login form.
When AUTH_DISABLED=true, admin panel is open (dev mode).

Every view is read-only: KYC state changes go through the API so the
aggregate is always recomputed.
"""

from db import AuditEvent, KYCDocument, KYCReference, KYCStatus, User
from sqladmin import Admin, ModelView
from sqladmin.authentication import AuthenticationBackend
from sqlalchemy import create_engine
from starlette.requests import Request
from starlette.responses import Response

from .core.config import settings

# SQLAdmin requires a sync engine; derive from the async DATABASE_URL
_sync_url = settings.DATABASE_URL.replace("+asyncpg", "")
engine = create_engine(_sync_url, echo=False)


class AdminAuth(AuthenticationBackend):
    """Session-based auth gate for SQLAdmin.

    When AUTH_DISABLED=true, authenticate() always returns True (dev mode).
    Otherwise, requires login with credentials from SQLADMIN_USER / SQLADMIN_PASSWORD env vars.
    """

    async def login(self, request: Request) -> bool:
        form = await request.form()
        username = form.get("username")
        password = form.get("password")
        if username == settings.SQLADMIN_USER and password == settings.SQLADMIN_PASSWORD:
            request.session.update({"admin_authenticated": True})
            return True
        return False

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> Response | bool:
        if settings.AUTH_DISABLED:
            return True
        return request.session.get("admin_authenticated", False)


class _ReadOnlyView(ModelView):
    can_create = False
    can_edit = False
    can_delete = False


class UserAdmin(_ReadOnlyView, model=User):
    column_list = [
        User.id,
        User.full_name,
        User.phone,
        User.user_type,
        User.is_driver,
        User.driver_verified,
        User.created_at,
    ]
    column_searchable_list = [User.full_name, User.phone]
    column_sortable_list = [User.id, User.driver_verified, User.created_at]
    column_default_sort = [(User.created_at, True)]
    name = "User"
    name_plural = "Users"
    icon = "fa-solid fa-user"


class KYCStatusAdmin(_ReadOnlyView, model=KYCStatus):
    column_list = [
        KYCStatus.user_id,
        KYCStatus.overall_status,
        KYCStatus.completion_percentage,
        KYCStatus.identity_status,
        KYCStatus.address_status,
        KYCStatus.selfie_status,
        KYCStatus.references_status,
        KYCStatus.submitted_at,
        KYCStatus.updated_at,
    ]
    column_searchable_list = [KYCStatus.user_id]
    column_sortable_list = [KYCStatus.overall_status, KYCStatus.submitted_at, KYCStatus.updated_at]
    column_default_sort = [(KYCStatus.updated_at, True)]
    name = "KYC Status"
    name_plural = "KYC Statuses"
    icon = "fa-solid fa-id-card"


class KYCDocumentAdmin(_ReadOnlyView, model=KYCDocument):
    column_list = [
        KYCDocument.id,
        KYCDocument.user_id,
        KYCDocument.document_type,
        KYCDocument.identity_document_type,
        KYCDocument.status,
        KYCDocument.verified_by,
        KYCDocument.uploaded_at,
    ]
    column_searchable_list = [KYCDocument.user_id]
    column_sortable_list = [KYCDocument.id, KYCDocument.document_type, KYCDocument.status]
    column_default_sort = [(KYCDocument.uploaded_at, True)]
    name = "KYC Document"
    name_plural = "KYC Documents"
    icon = "fa-solid fa-file-upload"


class KYCReferenceAdmin(_ReadOnlyView, model=KYCReference):
    column_list = [
        KYCReference.id,
        KYCReference.user_id,
        KYCReference.full_name,
        KYCReference.relation,
        KYCReference.verification_status,
        KYCReference.created_at,
    ]
    column_searchable_list = [KYCReference.user_id, KYCReference.full_name]
    column_default_sort = [(KYCReference.created_at, True)]
    name = "Reference"
    name_plural = "References"
    icon = "fa-solid fa-address-book"


class AuditEventAdmin(_ReadOnlyView, model=AuditEvent):
    column_list = [
        AuditEvent.id,
        AuditEvent.timestamp,
        AuditEvent.event_type,
        AuditEvent.user_id,
        AuditEvent.user_role,
        AuditEvent.driver_id,
    ]
    column_sortable_list = [AuditEvent.id, AuditEvent.timestamp, AuditEvent.event_type]
    column_default_sort = [(AuditEvent.timestamp, True)]
    name = "Audit Event"
    name_plural = "Audit Events"
    icon = "fa-solid fa-shield-alt"


def setup_admin(app):
    """Set up SQLAdmin and mount it to the FastAPI app."""
    auth_backend = AdminAuth(
        secret_key=settings.SQLADMIN_SECRET_KEY,
    )
    admin = Admin(app, engine, title="Courier KYC Admin", authentication_backend=auth_backend)

    admin.add_view(UserAdmin)
    admin.add_view(KYCStatusAdmin)
    admin.add_view(KYCDocumentAdmin)
    admin.add_view(KYCReferenceAdmin)
    admin.add_view(AuditEventAdmin)

    return admin
