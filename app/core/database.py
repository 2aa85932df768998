from supabase import create_client, Client, ClientOptions
from app.core.config import settings

_supabase_client: Client | None = None
_schedule_client: Client | None = None


def _options() -> ClientOptions:
    return ClientOptions(postgrest_client_timeout=settings.STORE_TIMEOUT_SECONDS)


def get_supabase() -> Client:
    """Main project client (attendance summaries)."""
    global _supabase_client
    if _supabase_client is None:
        _supabase_client = create_client(
            settings.SUPABASE_URL,
            settings.SUPABASE_SERVICE_KEY or settings.SUPABASE_KEY,
            options=_options(),
        )
    return _supabase_client


def get_schedule_db() -> Client:
    """Schedule project client (cohort tables, mentor directory)."""
    global _schedule_client
    if _schedule_client is None:
        _schedule_client = create_client(
            settings.SCHEDULE_SUPABASE_URL,
            settings.SCHEDULE_SUPABASE_SERVICE_KEY,
            options=_options(),
        )
    return _schedule_client
