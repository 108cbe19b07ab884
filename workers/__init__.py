# =============================================================================
# workers/ - Celery Background Task Workers
# =============================================================================
# Finishes animation jobs that outlived the request's poll window.
#
# Components:
# - celery_app.py: Celery application configuration and lifecycle hooks
# - tasks.py: resume_animation, sweep_pending_animations
# - config.py: Worker settings and the beat schedule
#
# Usage:
#   celery -A workers.celery_app worker -Q default,animations --loglevel=info
#   celery -A workers.celery_app beat --loglevel=info
# =============================================================================

from .celery_app import celery_app
from . import tasks

__all__ = [
    "celery_app",
    "tasks",
]
