"""
FastAPI routes for recommendation endpoints.

All endpoints require authentication via Supabase Auth.

Endpoints:
- POST /recommendations/query: Recommend Zippclips from viewing history
- GET /recommendations/trending-tags: Hashtags trending across recent Zippclips

Error mapping (detail body is {"error": ..., "details": ...}):
- ValidationError            -> 422
- TransientInvocationError   -> 503 (client may retry with backoff),
                                502 when the provider rejected the call
- ProviderNotConfiguredError -> 503
- SchemaMismatchError        -> 502
- EmptyResultError           -> 502
- Anything else              -> 500
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, status

from zipplign.agents.recommendation.errors import (
    EmptyResultError,
    ProviderNotConfiguredError,
    RecommendationError,
    SchemaMismatchError,
    TransientInvocationError,
    ValidationError,
)
from zipplign.auth.dependencies import AuthenticatedUser, get_authenticated_user
from zipplign.db.client import get_supabase_client
from zipplign.schemas.recommendations import (
    RecommendationQueryRequest,
    RecommendationQueryResponse,
    TrendingTagsResponse,
)
from zipplign.services.recommendation_service import recommend_zippclips
from zipplign.services.trending_service import get_trending_tags

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/recommendations",
    tags=["recommendations"]
)


def _to_http_exception(error: RecommendationError) -> HTTPException:
    if isinstance(error, ValidationError):
        return HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"error": "validation_error", "details": str(error)}
        )
    if isinstance(error, TransientInvocationError):
        if not error.retryable:
            return HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail={"error": "provider_rejected", "details": "Recommendation service rejected the request"}
            )
        return HTTPException(

            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "provider_unavailable", "details": "Recommendation service is temporarily unavailable"}
        )
    if isinstance(error, ProviderNotConfiguredError):
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"error": "provider_not_configured", "details": "Recommendation service is not configured"}
        )
    if isinstance(error, SchemaMismatchError):
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": "schema_mismatch", "details": "Recommendation service returned an invalid response"}
        )
    if isinstance(error, EmptyResultError):
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": "empty_result", "details": "Recommendation service returned no result"}
        )
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": "recommendation_error", "details": str(error)}
    )


# ============================================================================
# ENDPOINTS
# ============================================================================

@router.post(
    "/query",
    response_model=RecommendationQueryResponse,
    status_code=200,
    summary="Recommend Zippclips",
    description="""
    Recommends Zippclips from the user's viewing history and trending tags.

    **Authentication:** Required (Bearer token)

    **Frontend Flow:**
    1. Collect recently watched Zippclip IDs
    2. POST /recommendations/query with viewingHistory (and optionally trendingTags)
    3. Load the returned Zippclip IDs into the feed; skip unknown IDs

    **Retries:** 503 responses are safe to retry with backoff. 502 responses
    mean the model misbehaved; fall back to trending content.
    """
)
async def query_recommendations_endpoint(
    request: RecommendationQueryRequest,
    auth_user: AuthenticatedUser = Depends(get_authenticated_user)
) -> RecommendationQueryResponse:
    logger.info(
        f"POST /recommendations/query called by user_id={auth_user.user_id}, "
        f"history_size={len(request.viewing_history)}"
    )

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        result = await recommend_zippclips(
            supabase_client=supabase_client,
            user_id=auth_user.user_id,
            viewing_history=request.viewing_history,
            trending_tags=request.trending_tags,
            num_recommendations=request.num_recommendations,
        )
    except RecommendationError as e:
        logger.error(f"Recommendation flow failed: {e.__class__.__name__}: {e}")
        raise _to_http_exception(e) from e
    except Exception as e:
        logger.error(f"Unexpected error recommending Zippclips: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "recommendation_error", "details": "Unable to compute recommendations"}
        ) from e


    logger.info(f"Returning {len(result.recommendations)} recommendations")
    return RecommendationQueryResponse(recommendations=result.recommendations)


@router.get(
    "/trending-tags",
    response_model=TrendingTagsResponse,
    status_code=200,
    summary="Get trending hashtags",
    description="""
    Returns the hashtags used most in Zippclips posted over the last days.

    **Authentication:** Required (Bearer token)
    """
)
async def trending_tags_endpoint(
    limit: int = Query(10, ge=1, le=50, description="Maximum number of hashtags"),
    auth_user: AuthenticatedUser = Depends(get_authenticated_user)
) -> TrendingTagsResponse:
    logger.info(f"GET /recommendations/trending-tags called by user_id={auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)

    try:
        tags = await get_trending_tags(supabase_client, limit=limit)
    except Exception as e:
        logger.error(f"Failed to compute trending tags: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "trending_tags_error", "details": "Unable to load trending tags"}
        ) from e

    return TrendingTagsResponse(tags=tags)
