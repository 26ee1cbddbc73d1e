# This project was developed with assistance from AI tools.
"""Tests for driver-facing KYC routes and error mapping."""

from unittest.mock import AsyncMock, patch

from db.enums import (
    CategoryStatus,
    DocumentCategory,
    IdentityDocumentType,
    OverallStatus,
    ReferencesStatus,
    UserRole,
)

from src.core.errors import ConflictError, StorageError, ValidationError
from src.schemas.kyc import CategoryView, KYCDates, KYCStatusResponse, ReferencesView
from tests.factories import (
    NOW,
    make_document,
    make_driver_record,
    make_kyc_status,
    make_reference,
    make_user,
)

JPEG = ("front.jpg", b"\xff\xd8jpeg", "image/jpeg")


def _status_view(**overrides):
    fields = {
        "driver_id": "driver-1",
        "overall_status": OverallStatus.IN_PROGRESS,
        "completion_percentage": 33,
        "can_resubmit": False,
        "identity": CategoryView(status=CategoryStatus.VERIFIED, document_id=1),
        "address": CategoryView(status=CategoryStatus.PENDING, document_id=2),
        "selfie": CategoryView(status=CategoryStatus.NOT_SUBMITTED),
        "references": ReferencesView(status=ReferencesStatus.SKIPPED, count=0, entries=[]),
        "dates": KYCDates(started_at=NOW),
    }
    fields.update(overrides)
    return KYCStatusResponse(**fields)


# ---------------------------------------------------------------------------
# Uploads
# ---------------------------------------------------------------------------


class TestIdentityUpload:
    """POST /api/kyc/identity"""

    @patch("src.services.documents.upload_document", new_callable=AsyncMock)
    def test_cni_with_both_sides(self, mock_upload, client, mock_storage):
        mock_upload.return_value = make_document(
            category=DocumentCategory.IDENTITY,
            identity_document_type=IdentityDocumentType.CNI,
            back_image_path="kyc/identity/2-back.jpg",
        )

        resp = client.post(
            "/api/kyc/identity",
            data={"document_type": "cni"},
            files={"front_image": JPEG, "back_image": ("back.jpg", b"\xff\xd8back", "image/jpeg")},
        )

        assert resp.status_code == 201
        body = resp.json()
        assert body["document_type"] == "identity"
        assert body["identity_document_type"] == "cni"
        assert body["status"] == "pending"
        assert "front_image_path" not in body

        args, kwargs = mock_upload.await_args
        assert args[1] is mock_storage
        assert args[3] == "driver-1"
        assert args[4] == DocumentCategory.IDENTITY
        assert args[5].filename == "front.jpg"
        assert kwargs["back"].data == b"\xff\xd8back"
        assert kwargs["identity_type"] == IdentityDocumentType.CNI

    @patch("src.services.documents.upload_document", new_callable=AsyncMock)
    def test_passport_without_back(self, mock_upload, client):
        mock_upload.return_value = make_document(
            category=DocumentCategory.IDENTITY,
            identity_document_type=IdentityDocumentType.PASSPORT,
        )

        resp = client.post(
            "/api/kyc/identity",
            data={"document_type": "passport"},
            files={"front_image": JPEG},
        )

        assert resp.status_code == 201
        assert mock_upload.await_args.kwargs["back"] is None

    def test_unknown_document_type_is_422(self, client):
        resp = client.post(
            "/api/kyc/identity",
            data={"document_type": "driving_license"},
            files={"front_image": JPEG},
        )
        assert resp.status_code == 422

    def test_missing_front_image_is_422(self, client):
        resp = client.post("/api/kyc/identity", data={"document_type": "cni"})
        assert resp.status_code == 422


class TestSingleFileUploads:
    @patch("src.services.documents.upload_document", new_callable=AsyncMock)
    def test_address_upload(self, mock_upload, client):
        mock_upload.return_value = make_document(category=DocumentCategory.ADDRESS)
        resp = client.post(
            "/api/kyc/address",
            files={"file": ("bill.pdf", b"%PDF-1.7", "application/pdf")},
        )
        assert resp.status_code == 201
        assert mock_upload.await_args.args[4] == DocumentCategory.ADDRESS

    @patch("src.services.documents.upload_document", new_callable=AsyncMock)
    def test_selfie_upload(self, mock_upload, client):
        mock_upload.return_value = make_document(category=DocumentCategory.SELFIE)
        resp = client.post("/api/kyc/selfie", files={"file": ("me.png", b"png", "image/png")})
        assert resp.status_code == 201
        assert resp.json()["document_type"] == "selfie"


# ---------------------------------------------------------------------------
# Domain error mapping
# ---------------------------------------------------------------------------


class TestErrorMapping:
    @patch("src.services.documents.upload_document", new_callable=AsyncMock)
    def test_validation_error_is_400_problem(self, mock_upload, client):
        mock_upload.side_effect = ValidationError(
            "CNI requires both front and back images", fields=["back_image"]
        )
        resp = client.post(
            "/api/kyc/identity", data={"document_type": "cni"}, files={"front_image": JPEG}
        )
        assert resp.status_code == 400
        body = resp.json()
        assert body["title"] == "Bad Request"
        assert body["detail"] == "CNI requires both front and back images"
        assert body["fields"] == ["back_image"]
        assert body["retryable"] is False

    @patch("src.services.documents.upload_document", new_callable=AsyncMock)
    def test_conflict_is_409(self, mock_upload, client):
        mock_upload.side_effect = ConflictError("Selfie document is already verified")
        resp = client.post("/api/kyc/selfie", files={"file": ("me.png", b"png", "image/png")})
        assert resp.status_code == 409
        assert resp.json()["title"] == "Conflict"

    @patch("src.services.documents.upload_document", new_callable=AsyncMock)
    def test_storage_error_is_retryable_503(self, mock_upload, client):
        mock_upload.side_effect = StorageError("Could not persist document submission; please retry")
        resp = client.post("/api/kyc/selfie", files={"file": ("me.png", b"png", "image/png")})
        assert resp.status_code == 503
        body = resp.json()
        assert body["retryable"] is True
        assert body["title"] == "Service Unavailable"

    @patch("src.services.documents.upload_document", new_callable=AsyncMock)
    def test_request_id_is_echoed(self, mock_upload, client):
        mock_upload.side_effect = ConflictError("already verified")
        resp = client.post(
            "/api/kyc/selfie",
            files={"file": ("me.png", b"png", "image/png")},
            headers={"x-request-id": "req-123"},
        )
        assert resp.json()["request_id"] == "req-123"


# ---------------------------------------------------------------------------
# References, submission, status
# ---------------------------------------------------------------------------


class TestReferences:
    """POST /api/kyc/references"""

    @patch("src.routes.kyc.replace_references", new_callable=AsyncMock)
    def test_replace_references(self, mock_replace, client):
        mock_replace.return_value = [make_reference(id=1), make_reference(id=2)]
        body = {
            "references": [
                {"full_name": "Moussa Ndiaye", "phone": "+221770000099", "relation": "employer"},
                {"full_name": "Fatou Sow", "phone": "+221770000098", "relation": "neighbour"},
            ]
        }

        resp = client.post("/api/kyc/references", json=body)

        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "pending"
        assert data["count"] == 2
        entries = mock_replace.await_args.args[3]
        assert [e.full_name for e in entries] == ["Moussa Ndiaye", "Fatou Sow"]

    @patch("src.routes.kyc.replace_references", new_callable=AsyncMock)
    def test_empty_body_skips(self, mock_replace, client):
        mock_replace.return_value = []
        resp = client.post("/api/kyc/references", json={})
        assert resp.status_code == 200
        assert resp.json()["status"] == "skipped"
        assert mock_replace.await_args.args[3] == []

    @patch("src.routes.kyc.replace_references", new_callable=AsyncMock)
    def test_too_many_references_is_400(self, mock_replace, client):
        mock_replace.side_effect = ValidationError("At most 3 references may be provided, got 4")
        ref = {"full_name": "A", "phone": "1", "relation": "friend"}
        resp = client.post("/api/kyc/references", json={"references": [ref] * 4})
        assert resp.status_code == 400


class TestSubmit:
    @patch("src.routes.kyc.explicit_submit", new_callable=AsyncMock)
    def test_submit(self, mock_submit, client):
        mock_submit.return_value = make_kyc_status(
            identity=CategoryStatus.PENDING,
            address=CategoryStatus.PENDING,
            selfie=CategoryStatus.PENDING,
            overall=OverallStatus.PENDING_REVIEW,
            submitted_at=NOW,
        )
        resp = client.post("/api/kyc/submit")
        assert resp.status_code == 200
        body = resp.json()
        assert body["overall_status"] == "pending_review"
        assert body["submitted_at"] is not None

    @patch("src.routes.kyc.explicit_submit", new_callable=AsyncMock)
    def test_incomplete_submit_is_400(self, mock_submit, client):
        mock_submit.side_effect = ValidationError(
            "Cannot submit KYC: incomplete or rejected documents: selfie (not_submitted)",
            fields=["selfie"],
        )
        resp = client.post("/api/kyc/submit")
        assert resp.status_code == 400
        assert resp.json()["fields"] == ["selfie"]


class TestStatusAndDocuments:
    @patch("src.routes.kyc.get_kyc_status", new_callable=AsyncMock)
    def test_status(self, mock_status, client):
        mock_status.return_value = _status_view()
        resp = client.get("/api/kyc/status")
        assert resp.status_code == 200
        body = resp.json()
        assert body["overall_status"] == "in_progress"
        assert body["completion_percentage"] == 33
        assert body["identity"]["status"] == "verified"
        assert body["references"]["status"] == "skipped"
        mock_status.assert_awaited_once()
        assert mock_status.await_args.args[1] == "driver-1"

    @patch("src.services.documents.list_documents", new_callable=AsyncMock)
    def test_list_documents(self, mock_list, client):
        mock_list.return_value = [make_document(id=2), make_document(id=1)]
        resp = client.get("/api/kyc/documents")
        assert resp.status_code == 200
        body = resp.json()
        assert body["count"] == 2
        assert [d["id"] for d in body["data"]] == [2, 1]


# ---------------------------------------------------------------------------
# RBAC and driver directory
# ---------------------------------------------------------------------------


def test_client_role_cannot_use_kyc_routes(make_client):
    client = make_client(make_user(UserRole.CLIENT, user_id="client-1"))
    resp = client.get("/api/kyc/status")
    assert resp.status_code == 403
    assert resp.json()["title"] == "Forbidden"


@patch("src.routes.drivers.get_driver", new_callable=AsyncMock)
def test_drivers_me_reports_capability(mock_get, client):
    mock_get.return_value = make_driver_record(verified=True)
    resp = client.get("/api/drivers/me")
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == "driver-1"
    assert body["driver_verified"] is True
    assert body["is_driver"] is True
