"""
Pydantic schemas for recommendation endpoints.

These models define the HTTP request/response contracts. Field names follow
the client apps (camelCase) through aliases; snake_case is accepted too.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

MAX_RECOMMENDATIONS_PER_REQUEST = 50

# ============================================================================
# REQUEST MODELS
# ============================================================================

class RecommendationQueryRequest(BaseModel):
    """
    Request to recommend Zippclips for the authenticated user.

    Frontend scenarios:
    - Home feed refresh: send the recently watched Zippclip IDs
    - Discover page: send the hashtags shown to the user as trendingTags
    - Omit trendingTags to let the backend use the current trending hashtags
    """
    model_config = ConfigDict(strict=True, populate_by_name=True)

    viewing_history: List[str] = Field(
        default_factory=list,
        alias="viewingHistory",
        description="Zippclip IDs the user watched recently, oldest first",
        examples=[["zc_8f2a", "zc_91b0"]]
    )
    trending_tags: Optional[List[str]] = Field(
        None,
        alias="trendingTags",
        description=(
            "Trending tags to consider. When omitted or null, the backend "
            "uses the hashtags trending across recent Zippclips. "
            "An empty list means no trending context."
        ),
        examples=[["#dance", "#food"]]
    )
    num_recommendations: int = Field(
        5,
        alias="numRecommendations",
        ge=1,
        le=MAX_RECOMMENDATIONS_PER_REQUEST,
        description="How many Zippclip IDs to return",
        examples=[5]
    )


# ============================================================================
# RESPONSE MODELS
# ============================================================================

class RecommendationQueryResponse(BaseModel):
    """
    Zippclip IDs recommended for the user.

    The list usually has numRecommendations entries, but the model may
    return fewer or more. IDs are not checked against the zippclips table;
    the frontend skips IDs it cannot load.
    """
    recommendations: List[str] = Field(
        ...,
        description="Recommended Zippclip IDs in model order",
        examples=[["zc_77aa", "zc_1c3d", "zc_f00d"]]
    )


class TrendingTag(BaseModel):
    """A hashtag and how many recent Zippclips used it."""
    tag: str = Field(..., description="Hashtag including the leading #", examples=["#dance"])
    count: int = Field(..., ge=1, description="Number of occurrences in the window", examples=[12])


class TrendingTagsResponse(BaseModel):
    """Hashtags trending across recent Zippclips, most used first."""
    tags: List[TrendingTag] = Field(default_factory=list)
