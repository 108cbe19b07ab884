# =============================================================================
# core/models/provider.py - fal.ai Job Status Variants
# =============================================================================
# The status endpoint returns loosely shaped JSON. Instead of poking at it
# with chained .get() calls everywhere, it is decoded once into one of four
# variants:
#
#   JobCompleted    status == "COMPLETED"      -> materialize the video
#   JobFailed       status == "FAILED"         -> stop, surface the payload
#   JobRunning      IN_QUEUE / IN_PROGRESS     -> keep polling
#   JobUnrecognized anything else, or garbage  -> keep polling
#
# Usage:
#   status = parse_status_response(request_id, response_json)
#   if isinstance(status, JobCompleted):
#       url = status.video_url
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class ProviderState(str, Enum):
    """Status strings the provider is known to send."""
    IN_QUEUE = "IN_QUEUE"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


RUNNING_STATES = {ProviderState.IN_QUEUE.value, ProviderState.IN_PROGRESS.value}


@dataclass(frozen=True)
class JobCompleted:
    request_id: str
    payload: dict[str, Any]

    @property
    def video_url(self) -> str | None:
        return extract_video_url(self.payload)


@dataclass(frozen=True)
class JobFailed:
    request_id: str
    payload: dict[str, Any]


@dataclass(frozen=True)
class JobRunning:
    request_id: str
    state: str
    payload: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class JobUnrecognized:
    request_id: str
    payload: Any = None


JobStatus = Union[JobCompleted, JobFailed, JobRunning, JobUnrecognized]


def _dig(payload: Any, *keys: str) -> Any:
    current = payload
    for key in keys:
        if not isinstance(current, dict):
            return None
        current = current.get(key)
    return current


def extract_video_url(payload: Any) -> str | None:
    """
    Find the generated video URL in a completed job payload.

    The status endpoint nests the model output under "data"; the raw model
    output (as returned by the result endpoint) has it at the top level.
    """
    for path in (("data", "video", "url"), ("video", "url")):
        url = _dig(payload, *path)
        if isinstance(url, str) and url.strip():
            return url.strip()
    return None


def parse_submit_response(payload: Any) -> str | None:
    """Return the request id from a submission response, if present."""
    request_id = _dig(payload, "request_id")
    if isinstance(request_id, (str, int)) and str(request_id).strip():
        return str(request_id).strip()
    return None


def parse_status_response(request_id: str, payload: Any) -> JobStatus:
    """Decode a status response into one of the JobStatus variants."""
    if not isinstance(payload, dict):
        return JobUnrecognized(request_id=request_id, payload=payload)

    state = payload.get("status")
    if not isinstance(state, str):
        return JobUnrecognized(request_id=request_id, payload=payload)

    state = state.strip().upper()
    if state == ProviderState.COMPLETED.value:
        return JobCompleted(request_id=request_id, payload=payload)
    if state == ProviderState.FAILED.value:
        return JobFailed(request_id=request_id, payload=payload)
    if state in RUNNING_STATES:
        return JobRunning(request_id=request_id, state=state, payload=payload)
    return JobUnrecognized(request_id=request_id, payload=payload)
