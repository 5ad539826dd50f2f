"""
Tests for the Recommendation Flow orchestrator.

The model client is replaced by small in-memory fakes, so these tests
exercise validate -> render -> invoke -> extract without network calls.
"""

import asyncio
from typing import Any, List, Mapping, Optional
from unittest.mock import AsyncMock, patch

import pytest

from zipplign.agents.recommendation import flow as flow_module
from zipplign.agents.recommendation.errors import (
    EmptyResultError,
    SchemaMismatchError,
    TransientInvocationError,
    ValidationError,
)
from zipplign.agents.recommendation.flow import RecommendationFlow, extract_recommendations, recommend
from zipplign.agents.recommendation.prompts import render_recommendation_prompt
from zipplign.agents.recommendation.schemas import RecommendationRequest, RecommendationResponse


class FakeModelClient:
    """Returns a fixed payload and records every prompt it receives."""

    def __init__(self, payload: Optional[Mapping[str, Any]]):
        self.payload = payload
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> Optional[Mapping[str, Any]]:
        self.prompts.append(prompt)
        return self.payload


class EchoModelClient:
    """Answers with the first history entry of the prompt, after yielding control."""

    def __init__(self):
        self.prompts: List[str] = []

    async def generate(self, prompt: str) -> Optional[Mapping[str, Any]]:
        self.prompts.append(prompt)
        first_id = next(line[2:] for line in prompt.splitlines() if line.startswith("- "))
        await asyncio.sleep(0.01)
        return {"recommendations": [f"after_{first_id}"]}


@pytest.fixture
def valid_request():
    return {"viewingHistory": ["zc_1", "zc_2"], "trendingTags": ["#dance"], "numRecommendations": 3}


# =============================================================================
# UNIT TESTS: Extraction
# =============================================================================

class TestExtractRecommendations:
    """Tests for extract_recommendations."""

    def test_none_payload(self):
        with pytest.raises(EmptyResultError):
            extract_recommendations(None)

    def test_missing_recommendations(self):
        with pytest.raises(EmptyResultError):
            extract_recommendations({"ids": ["a"]})

    def test_null_recommendations(self):
        with pytest.raises(EmptyResultError):
            extract_recommendations({"recommendations": None})

    def test_wrong_type(self):
        with pytest.raises(SchemaMismatchError):
            extract_recommendations({"recommendations": "a,b"})

    def test_explicit_empty_list_is_a_result(self):
        assert extract_recommendations({"recommendations": []}).recommendations == []


# =============================================================================
# INTEGRATION TESTS: Flow
# =============================================================================

class TestRecommendationFlow:
    """Tests for RecommendationFlow.recommend and the recommend entry point."""

    @pytest.mark.asyncio
    async def test_pass_through(self, valid_request):
        client = FakeModelClient({"recommendations": ["a", "b", "c"]})

        result = await RecommendationFlow(client).recommend(valid_request)

        assert isinstance(result, RecommendationResponse)
        assert result.recommendations == ["a", "b", "c"]

    @pytest.mark.asyncio
    async def test_no_reordering_or_filtering(self, valid_request):
        ids = ["zc_9", "zc_1", "zc_9", "unknown"]
        client = FakeModelClient({"recommendations": ids})

        result = await recommend(valid_request, client=client)

        assert result.recommendations == ids

    @pytest.mark.asyncio
    async def test_length_not_enforced(self, valid_request):
        client = FakeModelClient({"recommendations": ["only_one"]})

        result = await recommend(valid_request, client=client)

        assert result.recommendations == ["only_one"]

    @pytest.mark.asyncio
    async def test_client_receives_rendered_prompt(self, valid_request):
        client = FakeModelClient({"recommendations": ["a"]})

        await recommend(valid_request, client=client)

        expected = render_recommendation_prompt(RecommendationRequest.model_validate(valid_request))
        assert client.prompts == [expected]

    @pytest.mark.asyncio
    async def test_default_count_is_five(self):
        client = FakeModelClient({"recommendations": ["a"]})

        await recommend({"viewingHistory": [], "trendingTags": []}, client=client)

        assert "Recommend exactly 5 Zippclip IDs" in client.prompts[0]

    @pytest.mark.asyncio
    async def test_missing_recommendations_is_empty_result(self, valid_request):
        client = FakeModelClient({"something_else": []})

        with pytest.raises(EmptyResultError):
            await recommend(valid_request, client=client)

    @pytest.mark.asyncio
    async def test_null_result_is_empty_result(self, valid_request):
        client = FakeModelClient(None)

        with pytest.raises(EmptyResultError):
            await recommend(valid_request, client=client)

    @pytest.mark.asyncio
    async def test_validation_happens_before_model_call(self):
        client = FakeModelClient({"recommendations": ["a"]})

        with pytest.raises(ValidationError):
            await recommend({"viewingHistory": "zc_1", "trendingTags": []}, client=client)

        assert client.prompts == []

    @pytest.mark.asyncio
    async def test_client_errors_propagate_unchanged(self, valid_request):
        error = TransientInvocationError("provider down", status_code=503)
        client = AsyncMock()
        client.generate.side_effect = error

        with pytest.raises(TransientInvocationError) as exc_info:
            await recommend(valid_request, client=client)

        assert exc_info.value is error
        client.generate.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_concurrent_calls_do_not_share_state(self):
        client = EchoModelClient()
        flow = RecommendationFlow(client)
        request_a = {"viewingHistory": ["zc_a"], "trendingTags": ["#food"], "numRecommendations": 1}
        request_b = {"viewingHistory": ["zc_b"], "trendingTags": ["#pets"], "numRecommendations": 2}

        result_a, result_b = await asyncio.gather(flow.recommend(request_a), flow.recommend(request_b))

        assert result_a.recommendations == ["after_zc_a"]
        assert result_b.recommendations == ["after_zc_b"]
        prompt_a = next(p for p in client.prompts if "- zc_a" in p)
        prompt_b = next(p for p in client.prompts if "- zc_b" in p)
        assert "- zc_b" not in prompt_a and "#pets" not in prompt_a
        assert "- zc_a" not in prompt_b and "#food" not in prompt_b

    @pytest.mark.asyncio
    async def test_default_client_used_when_none_given(self, valid_request):
        fake = FakeModelClient({"recommendations": ["x"]})

        with patch.object(flow_module, "get_default_client", return_value=fake):
            result = await recommend(valid_request)

        assert result.recommendations == ["x"]
        assert len(fake.prompts) == 1
