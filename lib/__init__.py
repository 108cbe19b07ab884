# =============================================================================
# lib/ - External Client Wrappers
# =============================================================================
# This package contains the wrappers around third-party services:
# - supabase_client.py: Typed Supabase wrapper (tables + storage)
# - fal_client.py: fal.ai image-to-video submit/status/download
# - clients.py: Per-process bundle of the above
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.fal_client import FalClient, FalClientError
from lib.clients import AppClients, create_clients

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # fal.ai
    "FalClient",
    "FalClientError",
    # Bundle
    "AppClients",
    "create_clients",
]
