"""Integration tests for the internal storage usage API

Tests the complete workflow:
- Internal token guard
- Synchronous recalculation and snapshot persistence
- Snapshot reads
- Error mapping (404 unknown studio, 504 deadline exceeded)
"""

import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from config import Settings
from dependencies import get_storage_usage_service
from models.storage_usage import StudioStorageUsage
from storage_usage.service import StorageUsageService
from fixtures.catalog import KB, build_wedding_catalog
from fixtures.fake_blob_store import FakeBlobStore, MB


class TestInternalToken:

    def test_missing_token_rejected(self, client: TestClient, test_studio):
        response = client.get(
            "/api/v1/storage/foto-lumen",
            headers={"X-Internal-Token": ""},
        )

        assert response.status_code == 401

    def test_wrong_token_rejected(self, client: TestClient, test_studio):
        response = client.post(
            "/api/v1/storage/foto-lumen/recalculate",
            headers={"X-Internal-Token": "guess"},
        )

        assert response.status_code == 401


class TestRecalculateEndpoint:

    def test_recalculate_returns_report(self, client: TestClient, db_session: Session, test_studio, blob_store):
        build_wedding_catalog(db_session, test_studio)
        blob_store.put("studios/foto-lumen/contacts/avatars/2024/a.jpg", 1 * MB)

        response = client.post("/api/v1/storage/foto-lumen/recalculate")

        assert response.status_code == 200
        data = response.json()
        assert data["studio_slug"] == "foto-lumen"
        assert data["total_bytes"] == 215 * KB + 1 * MB
        assert data["per_kind_bytes"]["CONTACT_AVATAR"] == 1 * MB
        assert data["sections"][0]["subtotal"] == 215 * KB
        assert data["is_degraded"] is False

        snapshot = db_session.query(StudioStorageUsage).filter(
            StudioStorageUsage.studio_id == test_studio.id
        ).first()
        assert snapshot.total_storage_bytes == data["total_bytes"]

    def test_degraded_run_reports_warnings(self, client: TestClient, test_studio, blob_store):
        blob_store.put("studios/foto-lumen/contacts/avatars/a.jpg", 1 * MB)
        blob_store.fail_listing("studios/foto-lumen/contacts/avatars")

        response = client.post("/api/v1/storage/foto-lumen/recalculate")

        assert response.status_code == 200
        assert response.json()["is_degraded"] is True
        assert response.json()["per_kind_bytes"]["CONTACT_AVATAR"] == 0

    def test_unknown_studio_returns_404(self, client: TestClient, db_session: Session):
        response = client.post("/api/v1/storage/nobody/recalculate")

        assert response.status_code == 404
        assert response.json()["error"] == "studio_not_found"

    def test_deadline_exceeded_returns_504(self, client: TestClient, db_session: Session, test_studio):
        from main import app

        slow_store = FakeBlobStore(list_delay=2.0)
        settings = Settings(STORAGE_RECALC_TIMEOUT_SECONDS=0.05)
        app.dependency_overrides[get_storage_usage_service] = lambda: StorageUsageService(
            db_session, slow_store, settings=settings
        )

        response = client.post("/api/v1/storage/foto-lumen/recalculate")

        assert response.status_code == 504
        assert response.json()["error"] == "recalculation_timeout"
        assert db_session.query(StudioStorageUsage).count() == 0

    def test_recalculation_runs_off_the_server_loop(self, client: TestClient, db_session: Session, test_studio, blob_store):
        from main import app

        loops = {}

        class LoopRecordingService(StorageUsageService):
            async def recompute(self, studio_slug, timeout_seconds=None):
                loops["recompute"] = asyncio.get_running_loop()
                return await super().recompute(studio_slug, timeout_seconds)

        async def recording_service():
            loops["server"] = asyncio.get_running_loop()
            return LoopRecordingService(db_session, blob_store)

        app.dependency_overrides[get_storage_usage_service] = recording_service

        response = client.post("/api/v1/storage/foto-lumen/recalculate")

        assert response.status_code == 200
        assert loops["recompute"] is not loops["server"]


class TestSnapshotEndpoint:

    def test_snapshot_missing_before_first_run(self, client: TestClient, test_studio):
        response = client.get("/api/v1/storage/foto-lumen")

        assert response.status_code == 404

    def test_unknown_studio_returns_404(self, client: TestClient, db_session: Session):
        response = client.get("/api/v1/storage/nobody")

        assert response.status_code == 404

    def test_snapshot_after_recalculation(self, client: TestClient, db_session: Session, test_studio):
        build_wedding_catalog(db_session, test_studio)
        client.post("/api/v1/storage/foto-lumen/recalculate")

        response = client.get("/api/v1/storage/foto-lumen")

        assert response.status_code == 200
        data = response.json()
        assert data["total_bytes"] == 215 * KB
        assert data["quota_limit_bytes"] == 10 * 1024 ** 3
        assert data["usage_percent"] == pytest.approx(round(215 * KB / (10 * 1024 ** 3) * 100, 2))
        assert data["last_calculated_at"] is not None


class TestObservabilityEndpoints:

    def test_metrics_exposed(self, client: TestClient):
        response = client.get("/metrics")

        assert response.status_code == 200
        assert "studio_storage_recalculations_total" in response.text

    def test_ready_with_database(self, client: TestClient):
        response = client.get("/ready")

        assert response.status_code == 200
        assert response.json()["status"] == "ready"

    def test_request_id_echoed(self, client: TestClient):
        response = client.get("/ready", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"
