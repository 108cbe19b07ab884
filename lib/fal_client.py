# =============================================================================
# lib/fal_client.py - fal.ai Image-to-Video Client
# =============================================================================
# Thin httpx wrapper for the three provider calls the animation workflow
# makes:
# - submit(image_url): POST {base}/{model}            -> request_id
# - status(request_id): POST {base}/{model}/status    -> JobStatus variant
# - download(url): GET the finished video             -> bytes (buffered)
#
# The httpx.Client is injected so tests can swap in an httpx.MockTransport.
#
# Usage:
#   fal = FalClient.from_settings(settings)
#   request_id = fal.submit(signed_url)
#   status = fal.status(request_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

import httpx

from core.models.provider import JobStatus, parse_status_response, parse_submit_response

logger = logging.getLogger(__name__)


class FalClientError(Exception):
    """
    Error talking to fal.ai.

    `details` holds the response status and body when there was one.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


def _body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text


class FalClient:
    """
    Client for a single fal.ai image-to-video model.

    Job parameters (prompt, duration, aspect ratio) are fixed per client;
    only the image URL varies per submission.
    """

    def __init__(
        self,
        http: httpx.Client,
        api_key: str,
        submit_url: str,
        status_url: str,
        prompt: str,
        duration: str = "5",
        aspect_ratio: str = "16:9",
    ):
        self.http = http
        self.api_key = api_key
        self.submit_url = submit_url
        self.status_url = status_url
        self.prompt = prompt
        self.duration = duration
        self.aspect_ratio = aspect_ratio

    @classmethod
    def from_settings(
        cls,
        settings: Any,
        http: httpx.Client | None = None,
    ) -> "FalClient":
        """Build a client from application settings."""
        return cls(
            http=http or httpx.Client(timeout=settings.FAL_TIMEOUT_SECONDS),
            api_key=settings.FAL_KEY,
            submit_url=settings.fal_submit_url,
            status_url=settings.fal_status_url,
            prompt=settings.ANIMATION_PROMPT,
            duration=settings.ANIMATION_DURATION,
            aspect_ratio=settings.ANIMATION_ASPECT_RATIO,
        )

    @property
    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Key {self.api_key}",
            "Content-Type": "application/json",
        }

    def build_job_request(self, image_url: str) -> dict[str, Any]:
        """The JSON body sent on submission."""
        return {
            "prompt": self.prompt,
            "image_url": image_url,
            "duration": self.duration,
            "aspect_ratio": self.aspect_ratio,
        }

    def submit(self, image_url: str) -> str:
        """
        Submit an animation job.

        Returns:
            The provider's request id

        Raises:
            FalClientError: On transport errors, non-2xx responses, or a
                response without a request_id
        """
        try:
            response = self.http.post(
                self.submit_url,
                headers=self._headers,
                json=self.build_job_request(image_url),
            )
        except httpx.HTTPError as e:
            raise FalClientError(f"submit fail: {e}") from e

        if not response.is_success:
            raise FalClientError(
                "submit fail",
                details={"status_code": response.status_code, "body": _body(response)},
            )

        payload = _body(response)
        request_id = parse_submit_response(payload)
        if not request_id:
            raise FalClientError("missing request_id", details={"body": payload})

        logger.info(f"Submitted fal job {request_id}")
        return request_id

    def status(self, request_id: str) -> JobStatus:
        """
        Query job status once.

        Transport errors and non-JSON bodies decode to JobUnrecognized so a
        single bad poll doesn't end the loop.
        """
        try:
            response = self.http.post(
                self.status_url,
                headers=self._headers,
                json={"request_id": request_id, "logs": False},
            )
        except httpx.HTTPError as e:
            logger.warning(f"Status poll for {request_id} failed: {e}")
            return parse_status_response(request_id, None)

        return parse_status_response(request_id, _body(response))

    def download(self, url: str) -> bytes:
        """
        Download a finished video fully into memory.

        Raises:
            FalClientError: On transport errors or non-2xx responses
        """
        try:
            response = self.http.get(url, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise FalClientError(f"video download failed: {e}", details={"url": url}) from e

        logger.info(f"Downloaded video ({len(response.content)} bytes)")
        return response.content

    def close(self) -> None:
        self.http.close()
