#!/usr/bin/env python3
# =============================================================================
# scripts/start_worker.py - Celery Worker Entry Point
# =============================================================================
# Starts a Celery worker that resumes pending animations, with an embedded
# beat scheduler for the periodic sweep.
#
# Usage:
#   python scripts/start_worker.py   (after `pip install -e .`)
#
#   # Or use Celery CLI directly
#   celery -A workers.celery_app worker -B -Q default,animations --loglevel=info
#
# Prerequisites:
#   - Redis must be running
#   - Environment variables must be set (.env file)
# =============================================================================

from workers.celery_app import celery_app


def main():
    """Start the Celery worker with embedded beat."""
    print("=" * 60)
    print("Photo Animator Celery Worker")
    print("=" * 60)
    print()
    print("Starting worker...")
    print("Press Ctrl+C to stop")
    print()

    celery_app.worker_main([
        "worker",
        "--beat",
        "--queues=default,animations",
        "--loglevel=info",
        "--concurrency=2",
    ])


if __name__ == "__main__":
    main()
