# =============================================================================
# tests/test_tasks.py - Celery Task Tests
# =============================================================================
# Tasks are called directly (synchronously); the animation service is
# patched in and .delay is mocked so no broker is needed.
# =============================================================================

from unittest.mock import patch

import pytest

from workers import tasks


@pytest.fixture
def pending_row(fake_supabase, stored_photo):
    return fake_supabase.insert_animation({
        "photo_id": stored_photo["id"],
        "model_used": "v1.6",
        "fal_job_id": "req-old",
        "status": "pending",
    })


@pytest.fixture
def patched_service(animation_service):
    with patch("workers.tasks.get_service", return_value=animation_service):
        yield animation_service


class TestResumeTask:

    def test_still_pending(self, patched_service, pending_row):
        result = tasks.resume_animation(pending_row["id"])

        assert result == {
            "success": True,
            "animation_id": pending_row["id"],
            "status": "pending",
        }

    def test_completes(self, patched_service, fake_supabase, fal_provider, pending_row):
        fal_provider.complete_with()

        result = tasks.resume_animation(pending_row["id"])

        assert result["status"] == "completed"
        assert fake_supabase.animations[pending_row["id"]]["status"] == "completed"

    def test_provider_failed(self, patched_service, fake_supabase, fal_provider, pending_row):
        fal_provider.statuses = [{"status": "FAILED"}]

        result = tasks.resume_animation(pending_row["id"])

        assert result["success"] is False
        assert result["status"] == "failed"
        assert fake_supabase.animations[pending_row["id"]]["status"] == "failed"

    def test_already_failed_row(self, patched_service, fake_supabase, fal_provider, pending_row):
        fake_supabase.animations[pending_row["id"]].update(status="failed", error={"status": "FAILED"})

        result = tasks.resume_animation(pending_row["id"])

        assert result["status"] == "failed"
        assert fal_provider.status_requests == []

    def test_unknown_animation(self, patched_service):
        result = tasks.resume_animation("missing")

        assert result["success"] is False
        assert result["code"] == "ANIMATION_NOT_FOUND"


class TestSweepTask:

    def test_queues_each_pending_row(self, patched_service, fake_supabase, pending_row):
        fake_supabase.insert_animation({
            "photo_id": "photo-1",
            "model_used": "v1.6",
            "fal_job_id": "req-done",
            "video_path": "A1/photo-1-1.mp4",
            "status": "completed",
        })

        with patch("workers.tasks.resume_animation") as resume:
            result = tasks.sweep_pending_animations(limit=10)

        resume.delay.assert_called_once_with(pending_row["id"])
        assert result == {
            "success": True,
            "queued": 1,
            "animation_ids": [pending_row["id"]],
        }

    def test_nothing_pending(self, patched_service):
        with patch("workers.tasks.resume_animation") as resume:
            result = tasks.sweep_pending_animations()

        resume.delay.assert_not_called()
        assert result["queued"] == 0


def test_beat_schedule_targets_sweep():
    from workers.config import CeleryConfig

    entry = CeleryConfig.beat_schedule["sweep-pending-animations"]
    assert entry["task"] == "workers.tasks.sweep_pending_animations"
    assert entry["schedule"] == 60.0
