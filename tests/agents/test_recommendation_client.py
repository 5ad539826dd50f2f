"""
Tests for the Gemini recommendation client.

These tests use mocked Gemini responses to avoid actual API calls
and ensure deterministic test behavior.
"""

import asyncio
import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
from google.genai import errors as genai_errors

from zipplign.agents.recommendation.client import GeminiRecommendationClient, parse_id_lines
from zipplign.agents.recommendation.errors import (
    ProviderNotConfiguredError,
    SchemaMismatchError,
    TransientInvocationError,
)
from zipplign.agents.recommendation.prompts import (
    RECOMMENDATION_SYSTEM_PROMPT,
    STRUCTURED_OUTPUT_SYSTEM_PROMPT,
)
from zipplign.agents.recommendation.schemas import RecommendationResponse


# =============================================================================
# FIXTURES
# =============================================================================

def make_gemini_response(text=None, parsed=None, has_content=True):
    """Build a mock generate_content response."""
    response = MagicMock()
    response.text = text
    response.parsed = parsed
    if has_content:
        response.candidates = [MagicMock()]
        response.candidates[0].content = MagicMock()
    else:
        response.candidates = []
    return response


@pytest.fixture
def mock_genai():
    """Patch genai.Client and expose the async generate_content mock."""
    with patch("zipplign.agents.recommendation.client.genai.Client") as mock_client_cls:
        sdk = MagicMock()
        sdk.aio.models.generate_content = AsyncMock()
        mock_client_cls.return_value = sdk
        yield sdk.aio.models.generate_content, mock_client_cls


def structured_client(**kwargs) -> GeminiRecommendationClient:
    return GeminiRecommendationClient(api_key="test-key", structured_output=True, timeout=5, **kwargs)


def text_client(**kwargs) -> GeminiRecommendationClient:
    return GeminiRecommendationClient(api_key="test-key", structured_output=False, timeout=5, **kwargs)


# =============================================================================
# UNIT TESTS: Line parsing
# =============================================================================

class TestParseIdLines:
    """Tests for parse_id_lines (free-text fallback)."""

    def test_plain_lines(self):
        assert parse_id_lines("zc_1\nzc_2\nzc_3") == ["zc_1", "zc_2", "zc_3"]

    def test_bullets_and_numbering_stripped(self):
        text = "- zc_1\n* zc_2\n3. zc_3\n4) zc_4"
        assert parse_id_lines(text) == ["zc_1", "zc_2", "zc_3", "zc_4"]

    def test_blank_lines_and_fences_ignored(self):
        text = "```\nzc_1\n\n   \nzc_2\n```"
        assert parse_id_lines(text) == ["zc_1", "zc_2"]

    def test_ids_with_leading_dash_kept(self):
        assert parse_id_lines("-zc_1") == ["-zc_1"]

    def test_empty_text(self):
        assert parse_id_lines("") == []


# =============================================================================
# UNIT TESTS: Structured mode
# =============================================================================

class TestStructuredGeneration:
    """Tests for schema-constrained generation."""

    @pytest.mark.asyncio
    async def test_uses_parsed_payload(self, mock_genai):
        generate_content, _ = mock_genai
        generate_content.return_value = make_gemini_response(
            parsed=RecommendationResponse(recommendations=["a", "b"])
        )

        result = await structured_client().generate("prompt")

        assert result == {"recommendations": ["a", "b"]}

    @pytest.mark.asyncio
    async def test_falls_back_to_text_json(self, mock_genai):
        generate_content, _ = mock_genai
        generate_content.return_value = make_gemini_response(
            text=json.dumps({"recommendations": ["zc_9", "zc_3"]})
        )

        result = await structured_client().generate("prompt")

        assert result == {"recommendations": ["zc_9", "zc_3"]}

    @pytest.mark.asyncio
    async def test_request_uses_schema_and_system_prompt(self, mock_genai):
        generate_content, _ = mock_genai
        generate_content.return_value = make_gemini_response(
            text=json.dumps({"recommendations": []})
        )

        await structured_client(model="gemini-test").generate("the prompt")

        kwargs = generate_content.call_args.kwargs
        assert kwargs["model"] == "gemini-test"
        assert kwargs["contents"] == "the prompt"
        config = kwargs["config"]
        assert config.system_instruction == STRUCTURED_OUTPUT_SYSTEM_PROMPT
        assert config.response_mime_type == "application/json"
        assert config.response_schema is RecommendationResponse

    @pytest.mark.asyncio
    async def test_no_candidates_returns_none(self, mock_genai):
        generate_content, _ = mock_genai
        generate_content.return_value = make_gemini_response(has_content=False)

        assert await structured_client().generate("prompt") is None

    @pytest.mark.asyncio
    async def test_empty_text_returns_none(self, mock_genai):
        generate_content, _ = mock_genai
        generate_content.return_value = make_gemini_response(text="   ")

        assert await structured_client().generate("prompt") is None

    @pytest.mark.asyncio
    async def test_json_null_returns_none(self, mock_genai):
        generate_content, _ = mock_genai
        generate_content.return_value = make_gemini_response(text="null")

        assert await structured_client().generate("prompt") is None

    @pytest.mark.asyncio
    async def test_missing_recommendations_passed_to_orchestrator(self, mock_genai):
        generate_content, _ = mock_genai
        generate_content.return_value = make_gemini_response(text='{"items": ["a"]}')

        assert await structured_client().generate("prompt") == {"items": ["a"]}

    @pytest.mark.asyncio
    async def test_invalid_json_raises_schema_mismatch(self, mock_genai):
        generate_content, _ = mock_genai
        generate_content.return_value = make_gemini_response(text="zc_1\nzc_2")

        with pytest.raises(SchemaMismatchError):
            await structured_client().generate("prompt")

    @pytest.mark.asyncio
    async def test_non_object_json_raises_schema_mismatch(self, mock_genai):
        generate_content, _ = mock_genai
        generate_content.return_value = make_gemini_response(text='["zc_1"]')

        with pytest.raises(SchemaMismatchError):
            await structured_client().generate("prompt")

    @pytest.mark.asyncio
    async def test_wrong_item_types_raise_schema_mismatch(self, mock_genai):
        generate_content, _ = mock_genai
        generate_content.return_value = make_gemini_response(text='{"recommendations": [1, 2]}')

        with pytest.raises(SchemaMismatchError):
            await structured_client().generate("prompt")


# =============================================================================
# UNIT TESTS: Free-text fallback
# =============================================================================

class TestFreeTextGeneration:
    """Tests for generation without schema support."""

    @pytest.mark.asyncio
    async def test_parses_one_id_per_line(self, mock_genai):
        generate_content, _ = mock_genai
        generate_content.return_value = make_gemini_response(text="zc_1\n- zc_2\n\nzc_3\n")

        result = await text_client().generate("prompt")

        assert result == {"recommendations": ["zc_1", "zc_2", "zc_3"]}
        config = generate_content.call_args.kwargs["config"]
        assert config.response_schema is None
        assert config.system_instruction == RECOMMENDATION_SYSTEM_PROMPT

    @pytest.mark.asyncio
    async def test_blank_completion_returns_none(self, mock_genai):
        generate_content, _ = mock_genai
        generate_content.return_value = make_gemini_response(text="\n\n")

        assert await text_client().generate("prompt") is None


# =============================================================================
# UNIT TESTS: Failures
# =============================================================================

class TestInvocationFailures:
    """Tests for provider, network and configuration failures."""

    @pytest.mark.asyncio
    async def test_missing_api_key(self, mock_genai):
        generate_content, mock_client_cls = mock_genai
        client = GeminiRecommendationClient(api_key="", structured_output=True)

        with pytest.raises(ProviderNotConfiguredError):
            await client.generate("prompt")

        mock_client_cls.assert_not_called()
        generate_content.assert_not_called()

    @pytest.mark.asyncio
    async def test_server_error_is_transient(self, mock_genai):
        generate_content, _ = mock_genai
        generate_content.side_effect = genai_errors.ServerError(
            503, {"error": {"code": 503, "message": "overloaded", "status": "UNAVAILABLE"}}
        )

        with pytest.raises(TransientInvocationError) as exc_info:
            await structured_client().generate("prompt")

        assert exc_info.value.status_code == 503
        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_rate_limit_is_transient(self, mock_genai):
        generate_content, _ = mock_genai
        generate_content.side_effect = genai_errors.ClientError(
            429, {"error": {"code": 429, "message": "quota", "status": "RESOURCE_EXHAUSTED"}}
        )

        with pytest.raises(TransientInvocationError) as exc_info:
            await structured_client().generate("prompt")

        assert exc_info.value.status_code == 429
        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code,status", [
        (400, "INVALID_ARGUMENT"),
        (401, "UNAUTHENTICATED"),
        (403, "PERMISSION_DENIED"),
    ])
    async def test_permanent_client_errors_not_retryable(self, mock_genai, code, status):
        generate_content, _ = mock_genai
        generate_content.side_effect = genai_errors.ClientError(
            code, {"error": {"code": code, "message": "rejected", "status": status}}
        )

        with pytest.raises(TransientInvocationError) as exc_info:
            await structured_client().generate("prompt")

        assert exc_info.value.status_code == code
        assert exc_info.value.retryable is False

    @pytest.mark.asyncio
    async def test_network_error_is_transient(self, mock_genai):
        generate_content, _ = mock_genai
        generate_content.side_effect = httpx.ConnectError("connection refused")

        with pytest.raises(TransientInvocationError) as exc_info:
            await structured_client().generate("prompt")

        assert exc_info.value.retryable is True

    @pytest.mark.asyncio
    async def test_timeout_is_transient(self, mock_genai):
        generate_content, _ = mock_genai

        async def never_answers(**kwargs):
            await asyncio.sleep(10)

        generate_content.side_effect = never_answers
        client = GeminiRecommendationClient(api_key="test-key", structured_output=True, timeout=0.01)

        with pytest.raises(TransientInvocationError):
            await client.generate("prompt")

    @pytest.mark.asyncio
    async def test_cancellation_propagates(self, mock_genai):
        generate_content, _ = mock_genai
        started = asyncio.Event()

        async def pending(**kwargs):
            started.set()
            await asyncio.sleep(10)

        generate_content.side_effect = pending

        task = asyncio.create_task(structured_client().generate("prompt"))
        await started.wait()
        task.cancel()

        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_sdk_client_created_once(self, mock_genai):
        generate_content, mock_client_cls = mock_genai
        generate_content.return_value = make_gemini_response(text='{"recommendations": ["a"]}')
        client = structured_client()

        await client.generate("one")
        await client.generate("two")

        mock_client_cls.assert_called_once_with(api_key="test-key")
        assert generate_content.await_count == 2
