"""
tests/test_summary_jobs_api.py

HTTP contract of the summary endpoints with SQLite and a temp artifact root.
"""

from __future__ import annotations

import uuid
from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from app.main import create_app
from app.pipeline.summary_pipeline import SummaryPipeline
from app.services.summary_job_service import SummaryJobService, get_summary_job_service
from db.repositories.artifact_storage import LocalArtifactStore
from db.session import get_db

SALES_CSV = "Department Name,Number of Sales\nShoes,10\nShoes,5\nHats,20"


@pytest.fixture()
def client(tmp_path: Path, session_factory: sessionmaker[Session]) -> Generator[TestClient, None, None]:
    service = SummaryJobService(
        pipeline=SummaryPipeline(),
        artifact_store=LocalArtifactStore(tmp_path),
        session_factory=session_factory,
    )

    def _get_db() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    application = create_app(check_database=False)
    application.dependency_overrides[get_db] = _get_db
    application.dependency_overrides[get_summary_job_service] = lambda: service

    with TestClient(application) as test_client:
        yield test_client


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "OK"
    assert "timestamp" in body
    assert "environment" in body


def test_upload_returns_summary_and_download(client: TestClient) -> None:
    response = client.post("/upload", content=SALES_CSV, headers={"Content-Type": "text/plain"})

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "CSV processed successfully"
    assert body["results"] == [
        {"department": "Hats", "total_sales": 20},
        {"department": "Shoes", "total_sales": 15},
    ]
    assert body["summary"]["input_rows"] == 3
    assert body["summary"]["output_rows"] == 2
    assert body["summary"]["total_sales"] == 35
    assert body["summary"]["unique_departments"] == 2
    assert body["download_url"].endswith(f"/download/{body['job_id']}")

    download = client.get(f"/download/{body['job_id']}")
    assert download.status_code == 200
    assert download.headers["content-type"].startswith("text/csv")
    assert f"department-totals-{body['job_id']}.csv" in download.headers["content-disposition"]
    assert download.text == "Department Name,Total Number of Sales\nHats,20\nShoes,15\n"


def test_blank_upload_is_rejected_without_job(client: TestClient) -> None:
    response = client.post("/upload", content="   \n  ", headers={"Content-Type": "text/plain"})

    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "CSV data is required"
    assert client.get("/jobs").json()["total"] == 0


def test_header_failure_marks_job_failed(client: TestClient) -> None:
    response = client.post("/upload", content=",,\n1,2,3", headers={"Content-Type": "text/plain"})

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["message"] == "No valid headers found"

    job = client.get(f"/job/{detail['job_id']}").json()
    assert job["status"] == "failed"
    assert job["progress"] == 0
    assert job["error_message"] == "No valid headers found"
    assert job["download_url"] is None

    download = client.get(f"/download/{detail['job_id']}")
    assert download.status_code == 400
    assert download.json()["detail"] == "Job not completed"


def test_background_job_completes(client: TestClient) -> None:
    response = client.post(
        "/jobs",
        files={"file": ("sales.csv", SALES_CSV.encode("utf-8"), "text/csv")},
    )

    assert response.status_code == 202
    accepted = response.json()
    assert accepted["status"] == "processing"

    job = client.get(f"/job/{accepted['job_id']}").json()
    assert job["status"] == "completed"
    assert job["progress"] == 100
    assert job["summary"]["total_sales"] == 35
    assert job["completed_at"] is not None
    assert job["download_url"].endswith(f"/download/{accepted['job_id']}")


def test_background_job_rejects_non_csv(client: TestClient) -> None:
    response = client.post(
        "/jobs",
        files={"file": ("sales.txt", b"a,b", "text/plain")},
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Only CSV files are allowed."


def test_list_jobs(client: TestClient) -> None:
    for _ in range(3):
        client.post("/upload", content=SALES_CSV, headers={"Content-Type": "text/plain"})

    body = client.get("/jobs", params={"limit": 2}).json()

    assert body["total"] == 2
    assert all(job["status"] == "completed" for job in body["jobs"])


def test_unknown_job_returns_404(client: TestClient) -> None:
    missing = uuid.uuid4()

    assert client.get(f"/job/{missing}").status_code == 404
    assert client.get(f"/download/{missing}").status_code == 404
