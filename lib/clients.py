# =============================================================================
# lib/clients.py - Process-Owned Client Bundle
# =============================================================================
# Builds the external clients (Supabase, fal.ai) once per process. The
# FastAPI lifespan and the Celery worker init hook each own one bundle and
# close it on shutdown.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from lib.fal_client import FalClient
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


@dataclass
class AppClients:
    supabase: SupabaseClient
    fal: FalClient

    def close(self) -> None:
        self.fal.close()
        logger.debug("Closed provider HTTP client")


def create_clients(settings: Any) -> AppClients:
    """Create the client bundle from settings."""
    return AppClients(
        supabase=SupabaseClient.from_settings(settings),
        fal=FalClient.from_settings(settings),
    )
