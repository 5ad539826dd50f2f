"""
Pytest configuration for Zipplign backend tests.

Sets up test environment and global fixtures.
"""
import os
from unittest.mock import MagicMock

import pytest

# Disable config validation during tests
# This allows tests to run without requiring real environment variables
os.environ["VALIDATE_CONFIG"] = "false"

# Set test environment variables
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("SUPABASE_URL", "http://localhost:54321")
os.environ.setdefault("SUPABASE_PUBLISHABLE_KEY", "test-publishable-key")
os.environ.setdefault("GOOGLE_API_KEY", "test-google-api-key")


@pytest.fixture
def supabase_client():
    """
    Mock Supabase client for testing table queries.
    Returns a MagicMock that simulates Supabase client behavior.
    """
    mock_client = MagicMock()
    return mock_client


@pytest.fixture
def zippclip_rows():
    """Recent zippclips rows as returned by select('description')."""
    return [
        {"description": "Sunday vibes #dance #music"},
        {"description": "New recipe #food #dance"},
        {"description": "No tags here"},
        {"description": None},
        {"description": "#dance battle with #friends #music"},
    ]
