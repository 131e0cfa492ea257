"""Service-role Supabase client shared by the API handlers."""

from functools import lru_cache

from supabase import Client, ClientOptions, create_client

from promptshare.config import get_settings


@lru_cache
def get_supabase_client() -> Client:
    """Return a cached client authenticated with the secret key.

    The secret key bypasses row level security, so handlers scope every
    owner-only query with an explicit ``user_id`` filter.
    """
    settings = get_settings()
    options = ClientOptions(postgrest_client_timeout=settings.store.request_timeout)
    return create_client(
        settings.supabase_url,
        settings.effective_supabase_secret_key,
        options=options,
    )
