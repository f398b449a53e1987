import logging

from supabase import Client, create_client

logger = logging.getLogger(__name__)


def create_supabase(url, key):
    """Return a Supabase client, or None when credentials are not configured."""
    if not (url and key):
        logger.info("ℹ️ Supabase not configured; predictions will be kept in memory.")
        return None
    client: Client = create_client(url, key)
    logger.info("✅ Supabase client initialized.")
    return client
