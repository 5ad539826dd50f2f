"""
Service layer for the Zipplign backend.

Services sit between routes (HTTP layer) and the recommendation flow or
the database. They resolve context, call the flow and return its result.
"""

from .recommendation_service import recommend_zippclips
from .trending_service import count_trending_hashtags, extract_hashtags, get_trending_tags

__all__ = [
    "recommend_zippclips",
    "get_trending_tags",
    "count_trending_hashtags",
    "extract_hashtags",
]
