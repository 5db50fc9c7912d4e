"""
Recipe Diversity - Supabase Client.

Low-level database access. The engine runs server-side jobs and requests
on behalf of many users, so it uses the service-role key.
"""

from supabase import Client, create_client

from recipe_diversity.config import settings

# Singleton client instance
_client: Client | None = None


def get_client() -> Client:
    """
    Get the Supabase client.

    Uses singleton pattern to reuse connection.
    """
    global _client

    if _client is None:
        _client = create_client(
            settings.supabase_url,
            settings.supabase_service_role_key,
        )

    return _client
