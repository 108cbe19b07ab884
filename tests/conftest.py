# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - In-memory stand-in for the Supabase wrapper (tables + storage)
# - fal.ai provider scripted through httpx.MockTransport
# =============================================================================

import json
import os
import uuid
from datetime import datetime, timezone

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("FAL_KEY", "test-fal-key")
os.environ.setdefault("POLL_INTERVAL_SECONDS", "0")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import httpx
import pytest

from lib.clients import AppClients
from lib.fal_client import FalClient
from lib.supabase_client import SupabaseClientError
from core.services.animation_service import AnimationService
from core.services.photo_service import PhotoService
from core.services.storage_service import StorageService

FIXED_MS = 1734891563000
SUBMIT_URL = "https://fal.test/fal-ai/kling-video/v1.6/pro/image-to-video"
STATUS_URL = SUBMIT_URL + "/status"
VIDEO_URL = "https://cdn.fal.test/output/video.mp4"


# =============================================================================
# Fakes
# =============================================================================

class FakeSupabase:
    """
    In-memory replacement for lib.supabase_client.SupabaseClient.

    Flip the `fail_*` attributes to make the matching call raise.
    """

    def __init__(self):
        self.photos: dict[str, dict] = {}
        self.animations: dict[str, dict] = {}
        self.objects: dict[tuple[str, str], bytes] = {}
        self.content_types: dict[tuple[str, str], str] = {}
        self.fail_upload = False
        self.fail_sign = False
        self.sign_returns_none = False
        self.fail_insert_photo = False
        self.fail_insert_animation = False

    @staticmethod
    def _now() -> str:
        return datetime.now(timezone.utc).isoformat()

    # photos
    def fetch_photo(self, photo_id, columns="*"):
        row = self.photos.get(str(photo_id))
        return dict(row) if row else None

    def insert_photo(self, data):
        if self.fail_insert_photo:
            raise SupabaseClientError("insert violates foreign key", code="INSERT_FAILED")
        row = {"id": str(uuid.uuid4()), "created_at": self._now(), **data}
        self.photos[row["id"]] = row
        return dict(row)

    # animations
    def fetch_animation(self, animation_id):
        row = self.animations.get(str(animation_id))
        return dict(row) if row else None

    def fetch_pending_animation_for_photo(self, photo_id):
        pending = [
            row for row in self.animations.values()
            if row["photo_id"] == photo_id and row["status"] == "pending"
        ]
        return dict(pending[-1]) if pending else None

    def fetch_pending_animations(self, limit=25):
        pending = [dict(r) for r in self.animations.values() if r["status"] == "pending"]
        return pending[:limit]

    def insert_animation(self, data):
        if self.fail_insert_animation:
            raise SupabaseClientError("duplicate key value", code="INSERT_FAILED")
        row = {
            "id": str(uuid.uuid4()),
            "video_path": None,
            "fal_job_id": None,
            "error": None,
            "created_at": self._now(),
            **data,
        }
        self.animations[row["id"]] = row
        return dict(row)

    def update_animation(self, animation_id, data, only_if_status=None):
        row = self.animations.get(str(animation_id))
        if row is not None and only_if_status is not None and row["status"] != only_if_status:
            return None
        if row is None:
            raise SupabaseClientError("Update matched no animation row", code="UPDATE_NO_DATA")
        row.update(data)
        return dict(row)

    # storage
    def upload_object(self, bucket, path, content, content_type):
        if self.fail_upload:
            raise SupabaseClientError("The resource already exists", code="UPLOAD_FAILED")
        self.objects[(bucket, path)] = content
        self.content_types[(bucket, path)] = content_type
        return path

    def remove_object(self, bucket, path):
        self.objects.pop((bucket, path), None)
        self.content_types.pop((bucket, path), None)

    def create_signed_url(self, bucket, path, expires_in):
        if self.fail_sign:
            raise SupabaseClientError("Object not found", code="SIGN_FAILED")
        if self.sign_returns_none:
            return None
        return f"https://signed.test/{bucket}/{path}?expires_in={expires_in}"

    def resolve_signed_url(self, url):
        """Bytes behind a URL produced by create_signed_url."""
        bucket, path = url.split("https://signed.test/", 1)[1].split("?", 1)[0].split("/", 1)
        return self.objects[(bucket, path)]

    def ping(self, bucket):
        return None


class FakeFalProvider:
    """
    Scripted fal.ai endpoints behind httpx.MockTransport.

    `statuses` is consumed one per poll; the last entry repeats.
    """

    def __init__(self):
        self.request_id = "req-123"
        self.submit_status_code = 200
        self.submit_body: dict | None = None
        self.statuses: list = [{"status": "IN_PROGRESS"}]
        self.video_bytes = b"\x00\x00\x00\x18ftypmp42fake-video"
        self.submissions: list[dict] = []
        self.status_requests: list[dict] = []
        self.headers: list[httpx.Headers] = []
        # called before each status response, e.g. to change a row mid-poll
        self.on_status = None

    def complete_with(self, url=VIDEO_URL):
        self.statuses = [{"status": "COMPLETED", "data": {"video": {"url": url}}}]

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.headers.append(request.headers)

        if request.method == "POST" and url == SUBMIT_URL:
            self.submissions.append(json.loads(request.content))
            body = self.submit_body if self.submit_body is not None else {"request_id": self.request_id}
            return httpx.Response(self.submit_status_code, json=body)

        if request.method == "POST" and url == STATUS_URL:
            self.status_requests.append(json.loads(request.content))
            if self.on_status is not None:
                self.on_status()
            current = self.statuses[0]
            if len(self.statuses) > 1:
                self.statuses.pop(0)
            return httpx.Response(200, json=current)

        if request.method == "GET" and url == VIDEO_URL:
            return httpx.Response(200, content=self.video_bytes)

        return httpx.Response(404, json={"detail": "not found"})


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def fake_supabase():
    return FakeSupabase()


@pytest.fixture
def fal_provider():
    return FakeFalProvider()


@pytest.fixture
def fal_client(fal_provider):
    http = httpx.Client(transport=httpx.MockTransport(fal_provider.handler))
    client = FalClient(
        http=http,
        api_key="test-fal-key",
        submit_url=SUBMIT_URL,
        status_url=STATUS_URL,
        prompt="Realistic old portrait animation",
        duration="5",
        aspect_ratio="16:9",
    )
    yield client
    client.close()


@pytest.fixture
def storage_service(fake_supabase):
    return StorageService(fake_supabase)


@pytest.fixture
def photo_service(fake_supabase, storage_service):
    return PhotoService(fake_supabase, storage_service, max_upload_bytes=1024 * 1024)


@pytest.fixture
def sleeps():
    """Records requested sleep durations instead of sleeping."""
    return []


@pytest.fixture
def animation_service(fake_supabase, fal_client, storage_service, sleeps):
    return AnimationService(
        supabase=fake_supabase,
        fal=fal_client,
        storage=storage_service,
        model_used="v1.6",
        poll_interval=4.0,
        poll_max_attempts=100,
        resume_max_attempts=1,
        sleep=sleeps.append,
        clock=lambda: FIXED_MS,
    )


@pytest.fixture
def stored_photo(fake_supabase):
    """A photo row plus its stored bytes."""
    row = {
        "id": "photo-1",
        "user_id": "U1",
        "file_path": "U1/1f1e2d3c.jpg",
        "album_id": "A1",
        "status": "uploaded",
        "created_at": "2025-12-22T18:19:23+00:00",
    }
    fake_supabase.photos[row["id"]] = row
    fake_supabase.objects[("user-uploads", row["file_path"])] = b"\xff\xd8\xff" + b"0" * 5000
    return row


@pytest.fixture
def clients(fake_supabase, fal_client):
    return AppClients(supabase=fake_supabase, fal=fal_client)


@pytest.fixture
def api(clients, animation_service):
    """TestClient wired to the fakes; the poll loop never sleeps."""
    from fastapi.testclient import TestClient

    from app.dependencies import get_animation_service
    from app.main import create_app

    app = create_app()
    app.state.clients = clients
    app.dependency_overrides[get_animation_service] = lambda: animation_service
    with TestClient(app) as client:
        yield client
