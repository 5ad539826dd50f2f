"""
Model Invocation Client - Gemini with schema-constrained generation

Sends a rendered recommendation prompt to Gemini and returns the decoded
payload for the flow orchestrator.

Architecture:
- Pattern: Single-shot LLM call (one outbound request per invocation)
- Model: Gemini 2.5 Flash (RECOMMENDATION_MODEL)
- API: Google Gen AI Python SDK (google-genai), async surface (client.aio)
- Output: JSON constrained by response_schema=RecommendationResponse

When RECOMMENDATION_STRUCTURED_OUTPUT is disabled the model is asked for
plain text and the IDs are parsed locally, one per line.

Retries are NOT performed here. Provider and network faults surface as
TransientInvocationError and the caller owns the retry policy. Permanent
4xx answers (other than 408 and 429) are raised with retryable=False.
"""

import asyncio
import json
import logging
import re
from typing import Any, Dict, List, Mapping, Optional, Protocol

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from zipplign.agents.recommendation.errors import (
    ProviderNotConfiguredError,
    SchemaMismatchError,
    TransientInvocationError,
)
from zipplign.agents.recommendation.prompts import (
    RECOMMENDATION_SYSTEM_PROMPT,
    STRUCTURED_OUTPUT_SYSTEM_PROMPT,
)
from zipplign.agents.recommendation.schemas import RecommendationResponse, validate_response
from zipplign.config import settings

logger = logging.getLogger(__name__)

_LINE_MARKER = re.compile(r"^(?:[-*•]\s+|\d+[.)]\s+)")

# Request timeout and rate limiting; every other 4xx is permanent
RETRYABLE_CLIENT_STATUS_CODES = {408, 429}


def _is_retryable_status(code: Optional[int]) -> bool:
    if code is None or code >= 500:
        return True
    return code in RETRYABLE_CLIENT_STATUS_CODES


class ModelClient(Protocol):
    """Anything that turns a rendered prompt into a structured payload."""

    async def generate(self, prompt: str) -> Optional[Mapping[str, Any]]:
        ...


def parse_id_lines(text: str) -> List[str]:
    """
    Parse a free-text completion into Zippclip IDs, one per line.

    Bullets ("- ", "* "), numbering ("1. ", "2) "), code fences and blank
    lines are ignored. Order is preserved.
    """
    ids: List[str] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("```"):
            continue
        line = _LINE_MARKER.sub("", line).strip().strip("`\"'")
        if line:
            ids.append(line)
    return ids


class GeminiRecommendationClient:
    """
    Gemini-backed ModelClient.

    The SDK client is created lazily on first use so that importing this
    module never requires credentials.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        structured_output: Optional[bool] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_API_KEY
        self.model = model or settings.RECOMMENDATION_MODEL
        self.temperature = temperature if temperature is not None else settings.RECOMMENDATION_TEMPERATURE
        self.structured_output = (
            structured_output if structured_output is not None
            else settings.RECOMMENDATION_STRUCTURED_OUTPUT
        )
        self.timeout = timeout if timeout is not None else settings.RECOMMENDATION_TIMEOUT_SECONDS
        self._client: Optional[genai.Client] = None

    def _get_client(self) -> genai.Client:
        if self._client is not None:
            return self._client

        if not self.api_key:
            logger.error("GOOGLE_API_KEY not configured")
            raise ProviderNotConfiguredError(
                "GOOGLE_API_KEY is not configured. "
                "Please set it in your .env file to use recommendations."
            )

        self._client = genai.Client(api_key=self.api_key)
        logger.info("Gemini client initialized successfully for recommendations")
        return self._client

    def _build_config(self) -> types.GenerateContentConfig:
        if self.structured_output:
            return types.GenerateContentConfig(
                system_instruction=STRUCTURED_OUTPUT_SYSTEM_PROMPT,
                temperature=self.temperature,
                response_mime_type="application/json",
                response_schema=RecommendationResponse,
            )
        return types.GenerateContentConfig(
            system_instruction=RECOMMENDATION_SYSTEM_PROMPT,
            temperature=self.temperature,
        )

    async def generate(self, prompt: str) -> Optional[Mapping[str, Any]]:
        """
        Send one prompt to Gemini and return the decoded payload.

        Returns:
            The payload as a mapping, or None when the model produced nothing.

        Raises:
            ProviderNotConfiguredError: no API key configured
            TransientInvocationError: network or provider fault
            SchemaMismatchError: the payload cannot be coerced to the output contract
        """
        client = self._get_client()
        config = self._build_config()

        logger.debug(
            f"Calling Gemini model={self.model} structured_output={self.structured_output}"
        )

        try:
            response = await asyncio.wait_for(
                client.aio.models.generate_content(
                    model=self.model,
                    contents=prompt,
                    config=config,
                ),
                timeout=self.timeout,
            )
        except genai_errors.APIError as e:
            code = getattr(e, "code", None)
            logger.error(f"Gemini API error: code={code}")
            raise TransientInvocationError(
                f"Model provider error: {getattr(e, 'message', None) or e}",
                status_code=code,
                retryable=_is_retryable_status(code),
            ) from e
        except asyncio.TimeoutError as e:
            logger.error(f"Gemini call timed out after {self.timeout}s")
            raise TransientInvocationError(
                f"Model provider did not answer within {self.timeout} seconds"
            ) from e
        except httpx.TransportError as e:
            logger.error(f"Network error calling Gemini: {e.__class__.__name__}")
            raise TransientInvocationError(f"Network error reaching model provider: {e}") from e

        if not response.candidates or not response.candidates[0].content:
            logger.warning("Empty response from Gemini API")
            return None

        if self.structured_output:
            return self._decode_structured(response)
        return self._decode_text(response)

    def _decode_structured(self, response: Any) -> Optional[Mapping[str, Any]]:
        parsed = getattr(response, "parsed", None)
        if isinstance(parsed, RecommendationResponse):
            return parsed.model_dump()

        text = (response.text or "").strip()
        if not text:
            logger.warning("Empty text in Gemini response")
            return None

        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse JSON response: {e}")
            logger.debug(f"Raw content: {text[:500]}")
            raise SchemaMismatchError("Model returned text that is not valid JSON") from e

        if data is None:
            return None
        if not isinstance(data, dict):
            raise SchemaMismatchError(
                f"Model returned JSON {type(data).__name__}, expected an object"
            )

        # Absent recommendations are reported by the orchestrator as an empty result
        if data.get("recommendations") is None:
            logger.warning("Gemini payload has no recommendations field")
            return data

        return validate_response(data).model_dump()

    def _decode_text(self, response: Any) -> Optional[Dict[str, Any]]:
        text = (response.text or "").strip()
        if not text:
            logger.warning("Empty text in Gemini response")
            return None

        ids = parse_id_lines(text)
        if not ids:
            return None
        return {"recommendations": ids}
