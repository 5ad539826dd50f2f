"""
Recommendation System - Single-Shot LLM Architecture

Recommends Zippclips from a user's viewing history and the trending tags.

Architecture:
- Pattern: validate -> render -> invoke -> extract (plain function pipeline)
- Model: Gemini 2.5 Flash with schema-constrained output
- Output: RecommendationResponse (list of Zippclip IDs)

Modules:
- schemas: input/output contracts and their validators
- prompts: system prompt and prompt renderer
- client: Gemini invocation client
- flow: orchestrator and the `recommend` entry point
- errors: error taxonomy
"""

from zipplign.agents.recommendation.errors import (
    EmptyResultError,
    ProviderNotConfiguredError,
    RecommendationError,
    SchemaMismatchError,
    TransientInvocationError,
    ValidationError,
)
from zipplign.agents.recommendation.flow import RecommendationFlow, recommend
from zipplign.agents.recommendation.prompts import (
    RECOMMENDATION_SYSTEM_PROMPT,
    STRUCTURED_OUTPUT_SYSTEM_PROMPT,
    render_recommendation_prompt,
)
from zipplign.agents.recommendation.schemas import (
    RecommendationRequest,
    RecommendationResponse,
    validate_request,
)

__all__ = [
    # Entry point
    "recommend",
    "RecommendationFlow",
    # Contracts
    "RecommendationRequest",
    "RecommendationResponse",
    "validate_request",
    # Prompts
    "RECOMMENDATION_SYSTEM_PROMPT",
    "STRUCTURED_OUTPUT_SYSTEM_PROMPT",
    "render_recommendation_prompt",
    # Errors
    "RecommendationError",
    "ValidationError",
    "TransientInvocationError",
    "SchemaMismatchError",
    "EmptyResultError",
    "ProviderNotConfiguredError",
]
