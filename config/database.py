"""
Supabase client for the HS code resolver.

One client serves the catalog tables (carriers, templates, companies,
hs_catalog) and the upload/result storage buckets.
"""

from supabase import create_client, Client
from functools import lru_cache
from typing import Optional
import structlog

from config.settings import settings
from exceptions import DatabaseError

logger = structlog.get_logger(__name__)


@lru_cache()
def get_supabase_client() -> Client:
    """
    Get the cached Supabase client.

    The first call checks that the templates table answers, since no
    spreadsheet can be processed without it.

    Raises:
        DatabaseError: If the client cannot reach the project
    """
    try:
        logger.info(
            "connecting_to_supabase",
            url=settings.supabase_url[:30] + "..."  # Log partial URL only
        )

        client = create_client(
            settings.supabase_url,
            settings.supabase_key
        )
        client.table("templates").select("template_id").limit(1).execute()

        logger.info("supabase_connected")
        return client

    except Exception as e:
        logger.error(
            "supabase_connection_failed",
            error=str(e),
            error_type=type(e).__name__
        )
        raise DatabaseError("connect", str(e))


def get_admin_client() -> Optional[Client]:
    """
    Service-role client used by scripts/seed_templates.py.

    Returns None when SUPABASE_SERVICE_KEY is not configured.
    """
    if not settings.supabase_service_key:
        logger.warning("admin_client_not_configured")
        return None

    try:
        return create_client(
            settings.supabase_url,
            settings.supabase_service_key
        )
    except Exception as e:
        logger.error(
            "admin_client_failed",
            error=str(e)
        )
        return None


def check_connection() -> dict:
    """
    Report whether the resolver can serve requests.

    Counts carriers, templates and companies. A project with no templates
    is reported as "no_templates": it is reachable but every process
    request would fail with TEMPLATE_NOT_FOUND.
    """
    try:
        client = get_supabase_client()

        carriers = client.table("carriers").select("carrier_id", count="exact").execute()
        templates = client.table("templates").select("template_id", count="exact").execute()
        companies = client.table("companies").select("id", count="exact").execute()

        return {
            "status": "healthy" if templates.count else "no_templates",
            "carriers_count": carriers.count,
            "templates_count": templates.count,
            "companies_count": companies.count
        }

    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e)
        }
