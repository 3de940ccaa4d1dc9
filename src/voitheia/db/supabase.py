"""Supabase client for Python backend."""

import logging
from functools import lru_cache

from supabase import Client, ClientOptions, create_client

from ..config import settings

logger = logging.getLogger(__name__)


@lru_cache()
def get_supabase_client() -> Client | None:
    """Get cached Supabase client instance.

    Returns:
        Supabase Client instance if configured, None otherwise.
        Note: This does not test the connection - actual queries may fail with network errors.
    """
    if not settings.supabase_configured:
        logger.warning("Supabase credentials not configured (missing URL or key)")
        return None

    options = ClientOptions(postgrest_client_timeout=settings.storage_timeout_seconds)
    try:
        return create_client(settings.supabase_url, settings.supabase_key, options=options)
    except Exception as e:
        logger.error(f"Failed to create Supabase client: {e}")
        return None
