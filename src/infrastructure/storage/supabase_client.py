from __future__ import annotations

import logging
import os

from supabase import Client, create_client

logger = logging.getLogger(__name__)

# Simple reusable singleton client getter for storage
_CLIENT_SINGLETON: Client | None = None


def get_supabase_client() -> Client | None:
    """Return the shared Supabase client, or None when storage runs locally.

    Local mode applies when SUPABASE_DISABLED=1 or the URL/key are not set.
    A service key, when present, is preferred over the anon key so uploads
    and signed URLs are not subject to row-level policies.
    """
    global _CLIENT_SINGLETON
    disabled = os.getenv("SUPABASE_DISABLED", "0") == "1"
    url = os.getenv("SUPABASE_URL")
    key = os.getenv("SUPABASE_SERVICE_KEY") or os.getenv("SUPABASE_ANON_KEY")
    if disabled or not url or not key:
        return None
    if _CLIENT_SINGLETON is None:
        logger.info("Connecting to Supabase storage at %s", url)
        _CLIENT_SINGLETON = create_client(url, key)
    return _CLIENT_SINGLETON
