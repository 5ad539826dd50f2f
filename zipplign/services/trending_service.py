"""
Trending Hashtag Service

Counts #hashtags in the descriptions of Zippclips posted within the last
TRENDING_WINDOW_DAYS and returns the most used ones. Results are kept in
the in-memory query cache for TRENDING_TAGS_TTL_SECONDS.
"""

import logging
import re
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional, cast

from supabase import Client

from zipplign.config import settings
from zipplign.schemas.recommendations import TrendingTag
from zipplign.utils.cache import QueryCache, with_cache

logger = logging.getLogger(__name__)

HASHTAG_PATTERN = re.compile(r"#\w+")


def extract_hashtags(text: Optional[str]) -> List[str]:
    """Return every #hashtag in `text`, in order of appearance."""
    if not text:
        return []
    return HASHTAG_PATTERN.findall(text)


def count_trending_hashtags(descriptions: Iterable[Optional[str]], limit: int = 10) -> List[TrendingTag]:
    """
    Count hashtags across descriptions and keep the `limit` most used.

    Ties keep the order in which the hashtags were first seen.
    """
    counts: Counter = Counter()
    for description in descriptions:
        counts.update(extract_hashtags(description))

    # Counter preserves insertion order and most_common() sorts stably
    return [
        TrendingTag(tag=tag, count=count)
        for tag, count in counts.most_common(limit)
    ]


def trending_cache_key(limit: int) -> str:
    return f"trending_tags:{limit}"


async def _fetch_recent_descriptions(supabase_client: Client, since: datetime) -> List[Optional[str]]:
    try:
        response = (
            supabase_client.table("zippclips")
            .select("description")
            .gte("created_at", since.isoformat())
            .execute()
        )
    except Exception as e:
        logger.error(f"Error fetching recent zippclips for trending tags: {e}")
        raise

    rows = cast(List[Dict[str, Any]], response.data or [])
    return [row.get("description") for row in rows]


async def get_trending_tags(
    supabase_client: Client,
    limit: int = 10,
    now: Optional[datetime] = None,
    cache: Optional[QueryCache] = None,
) -> List[TrendingTag]:
    """
    Get the hashtags trending across recent Zippclips.

    Args:
        supabase_client: Authenticated Supabase client
        limit: Maximum number of hashtags to return
        now: Reference time (defaults to current UTC time)
        cache: Query cache to use (defaults to the shared one)

    Returns:
        List of TrendingTag, most used first
    """
    reference = now or datetime.now(timezone.utc)
    since = reference - timedelta(days=settings.TRENDING_WINDOW_DAYS)

    async def fetch() -> List[TrendingTag]:
        descriptions = await _fetch_recent_descriptions(supabase_client, since)
        tags = count_trending_hashtags(descriptions, limit)
        logger.info(f"Computed {len(tags)} trending tags from {len(descriptions)} zippclips")
        return tags

    return await with_cache(
        trending_cache_key(limit),
        fetch,
        ttl=settings.TRENDING_TAGS_TTL_SECONDS,
        cache=cache,
    )
