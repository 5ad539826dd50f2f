"""
Supabase client factory with RLS enforcement.

CRITICAL SECURITY RULES:
1. NEVER use the service_role key for user operations
2. ALWAYS use the user's JWT token from Supabase Auth
3. The client MUST be created per-request with the user's token
"""

import logging

from supabase import Client, create_client

from zipplign.config import settings

logger = logging.getLogger(__name__)


def get_supabase_client(access_token: str) -> Client:
    """
    Create an authenticated Supabase client for a specific user.

    The client uses the publishable key plus the user's access token, so
    every query on profiles, zippclips, conversations, messages and
    notifications is subject to the table's RLS policies.

    Args:
        access_token: The user's JWT access token from Supabase Auth.

    Returns:
        An authenticated Supabase client that enforces RLS.
    """
    client: Client = create_client(
        supabase_url=settings.SUPABASE_URL,
        supabase_key=settings.SUPABASE_PUBLISHABLE_KEY
    )

    # Supabase uses the token's 'sub' claim for auth.uid() in RLS policies
    client.auth.set_session(access_token, access_token)

    logger.debug("Created authenticated Supabase client with user token (RLS enforced)")

    return client
