# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Background tasks that finish animation jobs the request handler left
# pending.
#
# Tasks:
# - resume_animation: one status poll for a pending row, materialize if done
# - sweep_pending_animations: periodic; queues resume_animation per pending row
# =============================================================================

import logging
from typing import Any

from celery import shared_task

from app.config import settings
from app.exceptions import AnimatorException, ProviderJobFailedError
from core.services.animation_service import AnimationService
from lib.clients import create_clients

logger = logging.getLogger(__name__)

# Built once per worker process (see workers.celery_app.init_worker_clients)
_service: AnimationService | None = None


def init_service() -> AnimationService:
    """Create this process's client bundle and animation service."""
    global _service
    _service = AnimationService.from_clients(create_clients(settings), settings)
    logger.info("Animation service initialized for worker process")
    return _service


def get_service() -> AnimationService:
    if _service is None:
        return init_service()
    return _service


# =============================================================================
# Resume Task
# =============================================================================

@shared_task(bind=True, name="workers.tasks.resume_animation")
def resume_animation(self, animation_id: str) -> dict[str, Any]:
    """
    Poll a pending animation once and store the video if it's ready.

    Args:
        animation_id: The animation UUID

    Returns:
        Dict with:
        - success: bool
        - animation_id: The animation UUID
        - status: pending / completed / failed (on success)
        - error, code: (on failure)
    """
    logger.info(f"Resuming animation {animation_id}")

    try:
        outcome = get_service().resume_animation(animation_id)

    except ProviderJobFailedError as e:
        logger.info(f"Provider job for animation {animation_id} failed")
        return {
            "success": False,
            "animation_id": animation_id,
            "status": "failed",
            "error": e.message,
            "code": e.code,
        }

    except AnimatorException as e:
        logger.exception(f"Resume failed for animation {animation_id}: {e.message}")
        return {
            "success": False,
            "animation_id": animation_id,
            "error": e.message,
            "code": e.code,
        }

    return {
        "success": True,
        "animation_id": animation_id,
        "status": outcome["status"],
    }


# =============================================================================
# Sweep Task
# =============================================================================

@shared_task(bind=True, name="workers.tasks.sweep_pending_animations")
def sweep_pending_animations(self, limit: int = 25) -> dict[str, Any]:
    """
    Queue a resume for every pending animation (oldest first).

    Scheduled by celery beat; see CeleryConfig.beat_schedule.
    """
    animation_ids = get_service().pending_animation_ids(limit)

    for animation_id in animation_ids:
        resume_animation.delay(animation_id)

    if animation_ids:
        logger.info(f"Queued {len(animation_ids)} pending animations for resume")

    return {
        "success": True,
        "queued": len(animation_ids),
        "animation_ids": animation_ids,
    }
