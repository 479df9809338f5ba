from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from docsync.api.deps import get_scheduler
from docsync.api.main import create_app
from docsync.core.exceptions import PipelineBusyError
from docsync.models.pipeline import BatchResult, SchedulerStatus


@pytest.fixture
def mock_scheduler():
    scheduler = MagicMock()
    scheduler.status.return_value = SchedulerStatus(is_running=True, pattern="every 300s")
    scheduler.trigger_now = AsyncMock()
    return scheduler


@pytest.fixture
def client(mock_scheduler):
    app = create_app()
    app.dependency_overrides[get_scheduler] = lambda: mock_scheduler
    return TestClient(app)


def test_scheduler_status(client):
    response = client.get("/api/v1/scheduler/status")

    assert response.status_code == 200
    data = response.json()
    assert data["is_running"] is True
    assert data["pattern"] == "every 300s"


def test_start_scheduler(client, mock_scheduler):
    mock_scheduler.start.return_value = True

    response = client.post("/api/v1/scheduler/start")

    assert response.status_code == 200
    assert response.json()["changed"] is True
    assert response.json()["message"] == "Scheduler started"


def test_start_scheduler_already_running(client, mock_scheduler):
    mock_scheduler.start.return_value = False

    response = client.post("/api/v1/scheduler/start")

    assert response.status_code == 200
    assert response.json()["changed"] is False
    assert response.json()["message"] == "Scheduler already running"


def test_stop_scheduler(client, mock_scheduler):
    mock_scheduler.stop.return_value = True
    mock_scheduler.status.return_value = SchedulerStatus(is_running=False, pattern="every 300s")

    response = client.post("/api/v1/scheduler/stop")

    assert response.status_code == 200
    assert response.json()["status"]["is_running"] is False


def test_trigger_processing(client, mock_scheduler):
    mock_scheduler.trigger_now.return_value = BatchResult(total=4, processed=3, failed=1)

    response = client.post("/api/v1/scheduler/trigger")

    assert response.status_code == 200
    assert response.json() == {"total": 4, "processed": 3, "failed": 1}


def test_trigger_processing_while_busy(client, mock_scheduler):
    mock_scheduler.trigger_now.side_effect = PipelineBusyError()

    response = client.post("/api/v1/scheduler/trigger")

    assert response.status_code == 409
    assert "already in progress" in response.json()["detail"]
