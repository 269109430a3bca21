"""Tests for the review, jobs and media endpoints."""

import time
from types import SimpleNamespace
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient

from clip_curator.adapters.storage.local import LocalStorageProvider
from clip_curator.api import deps
from clip_curator.api.routes import jobs as jobs_routes
from clip_curator.domain.enums import ReviewPriority
from clip_curator.jobs import pipeline
from clip_curator.main import app
from tests.factories import make_job, make_pending


class FakeTask:
    """Stands in for a Celery task; records ``delay`` calls."""

    def __init__(self, task_id: str = "task-123") -> None:
        self.task_id = task_id
        self.calls: list[tuple[tuple, dict]] = []

    def delay(self, *args, **kwargs):
        self.calls.append((args, kwargs))
        return SimpleNamespace(id=self.task_id)


# =============================================================================
# Review
# =============================================================================


class TestReviewRoutes:
    def test_pending_queue(self, test_client: TestClient, session):
        make_pending(session, score=75, priority=ReviewPriority.NORMAL)
        top = make_pending(session, score=95)

        response = test_client.get("/api/v1/review/pending")

        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 2
        assert data["items"][0]["id"] == str(top.id)
        assert data["items"][0]["review_priority"] == "HIGH"

    def test_pending_filter_by_priority(self, test_client: TestClient, session):
        make_pending(session, score=75, priority=ReviewPriority.NORMAL)
        make_pending(session, score=95)

        response = test_client.get("/api/v1/review/pending", params={"priority": "NORMAL"})

        assert [i["quality_score"] for i in response.json()["items"]] == [75]

    def test_detail(self, test_client: TestClient, session):
        pending = make_pending(session)

        response = test_client.get(f"/api/v1/review/{pending.id}")

        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Python in a minute"
        assert data["video_url"].startswith("stub://ai-content/clips/v/1.mp4?ttl=")
        assert data["source_url"].startswith("https://www.youtube.com/watch?v=vid-")
        assert data["width"] == 1080
        assert data["localized_metadata"] == []

    def test_unknown_entry_is_404(self, test_client: TestClient):
        response = test_client.get(f"/api/v1/review/{uuid4()}")

        assert response.status_code == 404

    def test_approve_publishes(self, test_client: TestClient, session):
        pending = make_pending(session)

        response = test_client.post(
            f"/api/v1/review/{pending.id}/approve",
            json={"title": "Edited title", "tags": ["#python"]},
            headers={"X-Reviewer": "alice"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["changed"] is True
        assert data["job_status"] == "PUBLISHED"
        assert data["published_content_id"]

        history = test_client.get("/api/v1/review/history", params={"status": "published"}).json()
        assert history["items"][0]["title"] == "Edited title"
        assert history["items"][0]["tags"] == ["python"]
        assert history["items"][0]["reviewed_by"] == "alice"

    def test_approve_twice(self, test_client: TestClient, session):
        pending = make_pending(session)
        first = test_client.post(f"/api/v1/review/{pending.id}/approve").json()

        second = test_client.post(f"/api/v1/review/{pending.id}/approve").json()

        assert second["changed"] is False
        assert second["published_content_id"] == first["published_content_id"]

    def test_reject(self, test_client: TestClient, session):
        pending = make_pending(session)

        response = test_client.post(
            f"/api/v1/review/{pending.id}/reject",
            json={"reason": "POOR_AUDIO", "note": "background noise"},
        )

        assert response.status_code == 200
        assert response.json()["job_status"] == "REJECTED"
        history = test_client.get("/api/v1/review/history", params={"status": "rejected"}).json()
        assert history["items"][0]["rejection_reason"] == "POOR_AUDIO"
        assert history["items"][0]["reviewed_by"] == "admin"

    def test_reject_without_reason_is_400(self, test_client: TestClient, session):
        pending = make_pending(session)

        response = test_client.post(f"/api/v1/review/{pending.id}/reject", json={})

        assert response.status_code == 400

    def test_reject_unknown_reason_is_422(self, test_client: TestClient, session):
        pending = make_pending(session)

        response = test_client.post(f"/api/v1/review/{pending.id}/reject", json={"reason": "BORING"})

        assert response.status_code == 422

    def test_request_edit_after_reject_is_409(self, test_client: TestClient, session):
        pending = make_pending(session)
        test_client.post(f"/api/v1/review/{pending.id}/reject", json={"note": "no"})

        response = test_client.post(f"/api/v1/review/{pending.id}/request-edit")

        assert response.status_code == 409
        data = response.json()
        assert data["current"] == "REJECTED"
        assert data["requested"] == "EDIT_REQUESTED"

    def test_request_edit(self, test_client: TestClient, session):
        pending = make_pending(session)

        response = test_client.post(
            f"/api/v1/review/{pending.id}/request-edit", json={"note": "cut the intro"}
        )

        assert response.json()["job_status"] == "NEEDS_EDIT"
        assert test_client.get("/api/v1/review/pending").json()["total"] == 0

    def test_update_metadata(self, test_client: TestClient, session):
        pending = make_pending(session)

        response = test_client.patch(
            f"/api/v1/review/{pending.id}/metadata",
            json={"category": "SCIENCE", "difficulty": "ADVANCED"},
        )

        assert response.status_code == 200
        assert response.json()["category"] == "SCIENCE"
        assert response.json()["difficulty"] == "ADVANCED"

    def test_update_metadata_rejects_blank_title(self, test_client: TestClient, session):
        pending = make_pending(session)

        response = test_client.patch(f"/api/v1/review/{pending.id}/metadata", json={"title": ""})

        assert response.status_code == 422

    def test_publish_before_approval_is_409(self, test_client: TestClient, session):
        pending = make_pending(session)

        response = test_client.post(f"/api/v1/review/{pending.id}/publish")

        assert response.status_code == 409

    def test_stats(self, test_client: TestClient, session):
        make_pending(session, score=90)
        make_pending(session, score=80, priority=ReviewPriority.NORMAL)

        data = test_client.get("/api/v1/review/stats").json()

        assert data["pending_review"] == 2
        assert data["high_priority_count"] == 1
        assert data["average_quality_score"] == 85.0
        assert data["pending_by_category"] == {"PROGRAMMING": 2}


# =============================================================================
# Jobs
# =============================================================================


class TestJobRoutes:
    def test_list_and_filter(self, test_client: TestClient, session):
        make_job(session)
        make_job(session, status="FAILED", error_message="boom")

        all_jobs = test_client.get("/api/v1/jobs").json()
        failed = test_client.get("/api/v1/jobs", params={"status": "FAILED"}).json()

        assert all_jobs["total"] == 2
        assert failed["total"] == 1
        assert failed["items"][0]["error_message"] == "boom"

    def test_stats_lists_every_status(self, test_client: TestClient, session):
        make_job(session)

        data = test_client.get("/api/v1/jobs/stats").json()

        assert data["PENDING"] == 1
        assert data["PUBLISHED"] == 0
        assert "NEEDS_EDIT" in data

    def test_detail_shows_allowed_events(self, test_client: TestClient, session):
        job = make_job(session, status="TRANSCRIBED")

        data = test_client.get(f"/api/v1/jobs/{job.id}").json()

        assert data["status"] == "TRANSCRIBED"
        assert set(data["allowed_events"]) == {"ANALYZED", "FAILED"}
        assert data["retry_count"] == 0

    def test_discover_enqueues_task(self, test_client: TestClient, monkeypatch: pytest.MonkeyPatch):
        fake = FakeTask("disc-1")
        monkeypatch.setattr(jobs_routes, "discover_task", fake)

        response = test_client.post("/api/v1/jobs/discover", json={"max_new_jobs": 3})

        assert response.status_code == 202
        assert response.json()["task_id"] == "disc-1"
        assert fake.calls == [((), {"max_new_jobs": 3})]

    def test_stage_enqueues_task(self, test_client: TestClient, monkeypatch: pytest.MonkeyPatch):
        fake = FakeTask("dl-1")
        monkeypatch.setitem(pipeline.STAGE_TASKS, "download", fake)

        response = test_client.post("/api/v1/jobs/stages/download")

        assert response.status_code == 202
        assert response.json()["task_id"] == "dl-1"
        assert len(fake.calls) == 1

    def test_unknown_stage_is_404(self, test_client: TestClient):
        response = test_client.post("/api/v1/jobs/stages/upload")

        assert response.status_code == 404
        assert "download" in response.json()["detail"]

    def test_publish_requires_approved(self, test_client: TestClient, session, monkeypatch: pytest.MonkeyPatch):
        fake = FakeTask()
        monkeypatch.setattr(jobs_routes, "publish_task", fake)
        waiting = make_job(session, status="PENDING_APPROVAL")
        approved = make_job(session, status="APPROVED")

        assert test_client.post(f"/api/v1/jobs/{waiting.id}/publish").status_code == 409
        assert test_client.post(f"/api/v1/jobs/{approved.id}/publish").status_code == 202
        assert fake.calls == [((str(approved.id),), {})]

    def test_delete_hides_job(self, test_client: TestClient, session):
        job = make_job(session)

        response = test_client.delete(f"/api/v1/jobs/{job.id}")

        assert response.status_code == 204
        assert test_client.get(f"/api/v1/jobs/{job.id}").status_code == 404
        assert test_client.get("/api/v1/jobs").json()["total"] == 0


# =============================================================================
# Media
# =============================================================================


@pytest.fixture
def local_storage(tmp_path):
    storage = LocalStorageProvider(
        base_path=tmp_path,
        public_base_url="http://testserver/media",
        secret="media-secret",
    )
    app.dependency_overrides[deps.get_storage] = lambda: storage
    yield storage
    app.dependency_overrides.pop(deps.get_storage, None)


def _write(storage: LocalStorageProvider, key: str, data: bytes = b"video") -> None:
    path = storage.path_for(key)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


class TestMediaRoute:
    def test_signed_url(self, test_client: TestClient, local_storage):
        _write(local_storage, "clips/a.mp4", b"abc")

        url = local_storage.presign("clips/a.mp4", 60)
        response = test_client.get(url)

        assert response.status_code == 200
        assert response.content == b"abc"

    def test_expired_signature(self, test_client: TestClient, local_storage):
        from clip_curator.adapters.storage.local import sign

        _write(local_storage, "clips/a.mp4")
        expires = int(time.time()) - 10

        response = test_client.get(
            "/media/clips/a.mp4",
            params={"expires": expires, "signature": sign("clips/a.mp4", expires, "media-secret")},
        )

        assert response.status_code == 403

    def test_tampered_signature(self, test_client: TestClient, local_storage):
        _write(local_storage, "clips/a.mp4")

        url = local_storage.presign("clips/a.mp4", 60).replace("clips/a.mp4", "clips/b.mp4")
        response = test_client.get(url)

        assert response.status_code == 403

    def test_unsigned_only_after_publish(self, test_client: TestClient, session, local_storage):
        pending = make_pending(session, edited_video_key="clips/p.mp4", thumbnail_key="thumbs/p.jpg")
        _write(local_storage, "clips/p.mp4", b"clip")

        assert test_client.get("/media/clips/p.mp4").status_code == 403

        approved = test_client.post(f"/api/v1/review/{pending.id}/approve").json()
        assert approved["job_status"] == "PUBLISHED"

        response = test_client.get("/media/clips/p.mp4")
        assert response.status_code == 200
        assert response.content == b"clip"

    def test_missing_file(self, test_client: TestClient, local_storage):
        url = local_storage.presign("clips/missing.mp4", 60)

        assert test_client.get(url).status_code == 404

    def test_not_served_for_remote_storage(self, test_client: TestClient):
        assert test_client.get("/media/clips/a.mp4").status_code == 404
