"""
Database connections: Supabase client setup.
"""

from supabase import create_client, Client

from classmate.config import get_settings


def create_request_client() -> Client:
    """Create a Supabase client for a single request.

    Uses the service_role key when configured (server-side, bypasses RLS),
    otherwise the anon key. Ownership is enforced by explicit user_id filters
    in every query, so the client is never shared between users.
    """
    settings = get_settings()
    key = settings.SUPABASE_SERVICE_KEY or settings.SUPABASE_KEY
    return create_client(settings.SUPABASE_URL, key)
