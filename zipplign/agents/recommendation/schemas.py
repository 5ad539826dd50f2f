"""
Input/output contracts for the Recommendation Flow.

The request accepts both the camelCase names used by the mobile/web clients
(viewingHistory, trendingTags, numRecommendations) and their snake_case
equivalents. Validation is strict: a string is never accepted where a list
is expected, and the count must be a real integer.
"""

from typing import Any, Dict, List, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from zipplign.agents.recommendation.errors import SchemaMismatchError, ValidationError

DEFAULT_NUM_RECOMMENDATIONS = 5


class RecommendationRequest(BaseModel):
    """Viewing context for one recommendation call. Never persisted."""

    model_config = ConfigDict(strict=True, populate_by_name=True, frozen=True)

    viewing_history: List[str] = Field(
        ...,
        alias="viewingHistory",
        description="Zippclip IDs representing the user's viewing history, oldest first.",
    )
    trending_tags: List[str] = Field(
        ...,
        alias="trendingTags",
        description="Trending tags to consider for recommendations.",
    )
    num_recommendations: int = Field(
        DEFAULT_NUM_RECOMMENDATIONS,
        alias="numRecommendations",
        ge=1,
        description="The number of Zippclip recommendations to return.",
    )


class RecommendationResponse(BaseModel):
    """Zippclip IDs recommended for the user, in model order."""

    recommendations: List[str] = Field(
        ...,
        description="An array of Zippclip IDs recommended for the user.",
    )


def summarize_validation_errors(errors: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Reduce pydantic error dicts to JSON-safe loc/msg/type entries."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in errors
    ]


def validate_request(data: Union[RecommendationRequest, Mapping[str, Any]]) -> RecommendationRequest:
    """
    Check a request against the input contract.

    Raises:
        ValidationError: a required field is absent or has the wrong type.
    """
    if isinstance(data, RecommendationRequest):
        return data

    if not isinstance(data, Mapping):
        raise ValidationError(
            f"Recommendation request must be an object, got {type(data).__name__}"
        )

    try:
        return RecommendationRequest.model_validate(dict(data))
    except PydanticValidationError as e:
        errors = summarize_validation_errors(e.errors())
        fields = ", ".join(".".join(str(part) for part in err["loc"]) for err in errors)
        raise ValidationError(f"Invalid recommendation request: {fields}", errors=errors) from e


def validate_response(payload: Union[RecommendationResponse, Mapping[str, Any]]) -> RecommendationResponse:
    """
    Coerce a model payload to the output contract.

    Raises:
        SchemaMismatchError: the payload does not match the output contract.
    """
    if isinstance(payload, RecommendationResponse):
        return payload

    if not isinstance(payload, Mapping):
        raise SchemaMismatchError(
            f"Model payload must be an object, got {type(payload).__name__}"
        )

    try:
        return RecommendationResponse.model_validate(dict(payload))
    except PydanticValidationError as e:
        raise SchemaMismatchError(f"Model payload violates output contract: {e.error_count()} error(s)") from e
