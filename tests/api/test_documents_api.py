import logging
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from docsync.api.deps import get_sync_service
from docsync.api.main import create_app
from docsync.core.exceptions import (
    DocumentNotFoundError,
    InvalidTransitionError,
    RegistryError,
    RemoteAuthError,
    RemoteTransientError,
)
from docsync.models.document import DocumentResponse, DocumentStats
from docsync.models.pipeline import SyncResult

HEADERS = {"X-User-Id": "user-1", "X-Drive-Access-Token": "token-abc"}


def make_document(document_id: int = 1, status: str = "pending") -> DocumentResponse:
    now = datetime(2024, 3, 1, tzinfo=timezone.utc)
    return DocumentResponse(
        id=document_id,
        user_id="user-1",
        remote_file_id=f"remote-{document_id}",
        file_name="report.pdf",
        file_path="report.pdf",
        mime_type="application/pdf",
        processing_status=status,
        processed=status == "completed",
        created_at=now,
        updated_at=now,
    )


@pytest.fixture
def mock_sync_service():
    return AsyncMock()


@pytest.fixture
def client(mock_sync_service):
    app = create_app()
    app.dependency_overrides[get_sync_service] = lambda: mock_sync_service
    return TestClient(app)


def test_sync_documents(client, mock_sync_service):
    mock_sync_service.sync_user_documents.return_value = SyncResult(
        total=3, new=2, updated=1, downloaded=3, skipped=0
    )

    response = client.post("/api/v1/documents/sync", headers=HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["new"] == 2
    assert data["errors"] == []
    credentials = mock_sync_service.sync_user_documents.call_args.args[0]
    assert credentials.user_id == "user-1"
    assert credentials.access_token == "token-abc"


def test_sync_documents_logs_with_module_prefix(client, mock_sync_service, caplog):
    mock_sync_service.sync_user_documents.return_value = SyncResult(total=0)
    caplog.set_level(logging.INFO, logger="docsync.api.routers.documents")

    client.post("/api/v1/documents/sync", headers=HEADERS)

    messages = [record.getMessage() for record in caplog.records]
    assert "docsync.api.routers.documents:sync_documents - Starting document sync" in messages


def test_sync_documents_requires_user_header(client, mock_sync_service):
    response = client.post("/api/v1/documents/sync", headers={"X-Drive-Access-Token": "t"})

    assert response.status_code == 401
    mock_sync_service.sync_user_documents.assert_not_called()


def test_sync_documents_requires_drive_token(client, mock_sync_service):
    response = client.post("/api/v1/documents/sync", headers={"X-User-Id": "user-1"})

    assert response.status_code == 401
    assert "X-Drive-Access-Token" in response.json()["detail"]


def test_sync_documents_rejected_token(client, mock_sync_service):
    mock_sync_service.sync_user_documents.side_effect = RemoteAuthError("token expired", status_code=401)

    response = client.post("/api/v1/documents/sync", headers=HEADERS)

    assert response.status_code == 401
    assert response.json()["detail"] == "token expired"


def test_sync_documents_drive_outage(client, mock_sync_service):
    mock_sync_service.sync_user_documents.side_effect = RemoteTransientError("Google Drive returned 503", status_code=503)

    response = client.post("/api/v1/documents/sync", headers=HEADERS)

    assert response.status_code == 502


def test_sync_documents_outage_is_logged_with_endpoint(client, mock_sync_service, caplog):
    mock_sync_service.sync_user_documents.side_effect = RemoteTransientError("Google Drive returned 503", status_code=503)
    caplog.set_level(logging.WARNING, logger="docsync.api.routers.error_handling")

    client.post("/api/v1/documents/sync", headers=HEADERS)

    messages = [record.getMessage() for record in caplog.records]
    assert "docsync.api.routers.error_handling:sync_documents - Upstream service failed" in messages


def test_sync_documents_registry_failure(client, mock_sync_service):
    mock_sync_service.sync_user_documents.side_effect = RegistryError("Failed to upsert documents")

    response = client.post("/api/v1/documents/sync", headers=HEADERS)

    assert response.status_code == 500


def test_list_documents(client, mock_sync_service):
    mock_sync_service.list_documents.return_value = ([make_document(2), make_document(1)], 2)

    response = client.get("/api/v1/documents?limit=10&offset=0", headers=HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert [doc["id"] for doc in data["documents"]] == [2, 1]
    mock_sync_service.list_documents.assert_called_once_with("user-1", limit=10, offset=0)


def test_list_documents_rejects_bad_limit(client):
    response = client.get("/api/v1/documents?limit=0", headers=HEADERS)

    assert response.status_code == 422


def test_list_unprocessed_documents(client, mock_sync_service):
    mock_sync_service.list_unprocessed.return_value = [make_document(1)]

    response = client.get("/api/v1/documents/unprocessed", headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["count"] == 1
    assert response.json()["documents"][0]["processing_status"] == "pending"


def test_document_stats(client, mock_sync_service):
    mock_sync_service.get_stats.return_value = DocumentStats(
        total=3, completed=1, pending=2, unprocessed=2, by_mime_type={"application/pdf": 3}
    )

    response = client.get("/api/v1/documents/stats", headers=HEADERS)

    assert response.status_code == 200
    assert response.json()["by_mime_type"] == {"application/pdf": 3}


def test_update_status(client, mock_sync_service):
    mock_sync_service.update_status.return_value = make_document(5, status="completed")

    response = client.post(
        "/api/v1/documents/5/status",
        json={"status": "completed"},
        headers=HEADERS,
    )

    assert response.status_code == 200
    assert response.json()["processed"] is True
    mock_sync_service.update_status.assert_called_once_with(5, "completed", error=None, user_id="user-1")


def test_update_status_unknown_value(client, mock_sync_service):
    response = client.post(
        "/api/v1/documents/5/status",
        json={"status": "archived"},
        headers=HEADERS,
    )

    assert response.status_code == 422
    mock_sync_service.update_status.assert_not_called()


def test_update_status_not_found(client, mock_sync_service):
    mock_sync_service.update_status.side_effect = DocumentNotFoundError(99)

    response = client.post(
        "/api/v1/documents/99/status",
        json={"status": "pending"},
        headers=HEADERS,
    )

    assert response.status_code == 404
    assert "not found" in response.json()["detail"].lower()


def test_update_status_failed_without_error(client, mock_sync_service):
    mock_sync_service.update_status.side_effect = InvalidTransitionError(
        "An error message is required when marking a document failed",
        document_id=5,
        target_status="failed",
    )

    response = client.post(
        "/api/v1/documents/5/status",
        json={"status": "failed"},
        headers=HEADERS,
    )

    assert response.status_code == 400


def test_delete_document(client, mock_sync_service):
    mock_sync_service.delete_document.return_value = True

    response = client.delete("/api/v1/documents/7", headers=HEADERS)

    assert response.status_code == 204
    mock_sync_service.delete_document.assert_called_once_with(7, user_id="user-1")


def test_delete_document_not_found(client, mock_sync_service):
    mock_sync_service.delete_document.side_effect = DocumentNotFoundError(7)

    response = client.delete("/api/v1/documents/7", headers=HEADERS)

    assert response.status_code == 404
