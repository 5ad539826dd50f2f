"""
Recommendation Service

Glue between the HTTP layer and the Recommendation Flow:
1. Resolves trending tags (caller-supplied, or current trending hashtags)
2. Calls the flow with the user's viewing history
3. Returns the flow result unchanged

Errors from the flow are NOT caught here; routes map them to HTTP responses.
"""

import logging
from typing import List, Optional

from supabase import Client

from zipplign.agents.recommendation import RecommendationResponse, recommend
from zipplign.agents.recommendation.client import ModelClient
from zipplign.services.trending_service import get_trending_tags

logger = logging.getLogger(__name__)

DEFAULT_TRENDING_TAGS_LIMIT = 10


async def recommend_zippclips(
    supabase_client: Client,
    user_id: str,
    viewing_history: List[str],
    trending_tags: Optional[List[str]] = None,
    num_recommendations: int = 5,
    model_client: Optional[ModelClient] = None,
) -> RecommendationResponse:
    """
    Recommend Zippclips for a user.

    Args:
        supabase_client: Authenticated Supabase client
        user_id: User UUID from auth token (logging only)
        viewing_history: Zippclip IDs the user watched, oldest first
        trending_tags: Tags to consider; None means "use current trending hashtags",
            an empty list means "no trending context"
        num_recommendations: How many IDs to ask for
        model_client: Model client override (tests, alternative providers)

    Returns:
        RecommendationResponse from the flow
    """
    logger.info(
        f"recommend_zippclips called for user_id={user_id}, "
        f"history_size={len(viewing_history)}, num_recommendations={num_recommendations}"
    )

    if trending_tags is None:
        trending = await get_trending_tags(supabase_client, limit=DEFAULT_TRENDING_TAGS_LIMIT)
        trending_tags = [t.tag for t in trending]
        logger.info(f"Using {len(trending_tags)} trending hashtags as context")

    request = {
        "viewingHistory": viewing_history,
        "trendingTags": trending_tags,
        "numRecommendations": num_recommendations,
    }

    return await recommend(request, client=model_client)
