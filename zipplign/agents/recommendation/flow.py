"""
Recommendation Flow Orchestrator

Single public entry point of the recommendation system:

    validate -> render -> invoke -> extract

Every error from the first three steps propagates unchanged. A missing
result from the model is a hard failure for the call (EmptyResultError),
never an empty list. The flow holds no mutable state, so one instance can
serve any number of concurrent callers.
"""

import logging
from typing import Any, Mapping, Optional, Union

from zipplign.agents.recommendation.client import GeminiRecommendationClient, ModelClient
from zipplign.agents.recommendation.errors import EmptyResultError
from zipplign.agents.recommendation.prompts import render_recommendation_prompt
from zipplign.agents.recommendation.schemas import (
    RecommendationRequest,
    RecommendationResponse,
    validate_request,
    validate_response,
)

logger = logging.getLogger(__name__)

_default_client: Optional[ModelClient] = None


def extract_recommendations(payload: Optional[Mapping[str, Any]]) -> RecommendationResponse:
    """
    Turn a model payload into a RecommendationResponse.

    Raises:
        EmptyResultError: no payload, or no recommendations in it
        SchemaMismatchError: recommendations present but not a list of strings
    """
    if payload is None:
        raise EmptyResultError("Model returned no result")

    if isinstance(payload, Mapping) and payload.get("recommendations") is None:
        raise EmptyResultError("Model result has no recommendations")

    return validate_response(payload)


class RecommendationFlow:
    """Composes validation, prompt rendering and model invocation."""

    def __init__(self, client: ModelClient):
        self.client = client

    async def recommend(
        self, request: Union[RecommendationRequest, Mapping[str, Any]]
    ) -> RecommendationResponse:
        validated = validate_request(request)
        prompt = render_recommendation_prompt(validated)

        logger.info(
            f"Recommendation flow invoked: history_size={len(validated.viewing_history)}, "
            f"tags={len(validated.trending_tags)}, "
            f"num_recommendations={validated.num_recommendations}"
        )

        payload = await self.client.generate(prompt)
        result = extract_recommendations(payload)

        logger.info(f"Recommendation flow returned {len(result.recommendations)} ids")
        return result


def get_default_client() -> ModelClient:
    """Lazily build the shared Gemini client."""
    global _default_client

    if _default_client is None:
        _default_client = GeminiRecommendationClient()
    return _default_client


async def recommend(
    request: Union[RecommendationRequest, Mapping[str, Any]],
    client: Optional[ModelClient] = None,
) -> RecommendationResponse:
    """
    Recommend Zippclips for a viewing history and a set of trending tags.

    Args:
        request: RecommendationRequest or a mapping with viewingHistory,
            trendingTags and optional numRecommendations (default 5)
        client: Model client to use (defaults to the shared Gemini client)

    Returns:
        RecommendationResponse with the model's IDs, unchanged

    Raises:
        ValidationError, TransientInvocationError, SchemaMismatchError,
        EmptyResultError, ProviderNotConfiguredError
    """
    flow = RecommendationFlow(client if client is not None else get_default_client())
    return await flow.recommend(request)
