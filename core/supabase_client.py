# core/supabase_client.py

from typing import Optional

from supabase import create_client, Client

from core.config import Settings
from core.logging_config import logger


# ============================================================
# Supabase Client Factory (ALWAYS service role)
# ============================================================

def get_supabase_client(config: Settings) -> Optional[Client]:
    """
    Creates a Supabase client using the SERVICE ROLE KEY.
    Only Storage is used; the database lives behind SQLModel.
    Returns None when credentials are missing.
    """
    try:
        supabase_url = config.SUPABASE_URL
        supabase_key = config.SUPABASE_SERVICE_ROLE_KEY  # MUST be service-role

        if not supabase_url or not supabase_key:
            logger.error("Missing Supabase credentials")
            logger.error(f"   URL: {supabase_url}")
            logger.error(f"   SERVICE ROLE KEY: {'SET' if supabase_key else 'MISSING'}")
            return None

        return create_client(supabase_url, supabase_key)

    except Exception as e:
        logger.error(f"Supabase Init Error: {e}", exc_info=True)
        return None
