"""
Database access layer for the Zipplign backend.

All database operations MUST respect Row Level Security (RLS) and use the
per-request client from get_supabase_client(). Table schemas and migrations
live in the Supabase project, not here.
"""

from .client import get_supabase_client

__all__ = ["get_supabase_client"]
