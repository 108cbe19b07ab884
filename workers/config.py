# =============================================================================
# workers/config.py - Celery Worker Configuration
# =============================================================================
# Settings specific to Celery workers.
# =============================================================================

from app.config import settings


class CeleryConfig:
    """
    Celery configuration settings.

    These are applied to the Celery app via app.config_from_object().
    """

    # -------------------------------------------------------------------------
    # Broker Settings (Redis)
    # -------------------------------------------------------------------------

    broker_url = settings.REDIS_URL
    result_backend = settings.REDIS_URL

    # -------------------------------------------------------------------------
    # Task Settings
    # -------------------------------------------------------------------------

    # Acknowledge tasks after they complete (not before)
    task_acks_late = True

    # Only prefetch one task at a time
    worker_prefetch_multiplier = 1

    # Task results expire after 1 hour
    result_expires = 3600

    # A resume pass is one status poll plus at most one video transfer
    task_time_limit = 300
    task_soft_time_limit = 240

    # -------------------------------------------------------------------------
    # Serialization
    # -------------------------------------------------------------------------

    task_serializer = "json"
    result_serializer = "json"
    accept_content = ["json"]

    # -------------------------------------------------------------------------
    # Task Routing
    # -------------------------------------------------------------------------

    task_routes = {
        "workers.tasks.resume_animation": {"queue": "animations"},
        "workers.tasks.sweep_pending_animations": {"queue": "default"},
    }

    task_default_queue = "default"

    # -------------------------------------------------------------------------
    # Periodic Tasks (celery beat)
    # -------------------------------------------------------------------------

    beat_schedule = {
        "sweep-pending-animations": {
            "task": "workers.tasks.sweep_pending_animations",
            "schedule": settings.SWEEP_INTERVAL_SECONDS,
            "kwargs": {"limit": settings.SWEEP_BATCH_SIZE},
        },
    }

    # -------------------------------------------------------------------------
    # Monitoring
    # -------------------------------------------------------------------------

    worker_send_task_events = True
    task_send_sent_event = True

    timezone = "UTC"
    enable_utc = True
