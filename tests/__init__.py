# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the photo animator API:
# - test_models.py: Pydantic models and row invariants
# - test_provider.py: fal.ai status decoding
# - test_fal_client.py: Provider HTTP calls (httpx.MockTransport)
# - test_supabase_client.py: Supabase wrapper query building
# - test_photo_service.py / test_animation_service.py: Business logic
# - test_api.py: HTTP surface through TestClient
# - test_tasks.py: Celery resume and sweep tasks
#
# Run tests with: pytest
# =============================================================================
