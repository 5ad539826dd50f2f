"""
Error taxonomy for the Recommendation Flow.

Every failure surfaces to the caller as one of these exceptions. The flow
never swallows or downgrades them; the caller decides on retries, messaging
or fallback content.

- ValidationError: bad input shape. Not retryable, fix the caller.
- TransientInvocationError: network/provider fault. Check .retryable before
  retrying with backoff.
- SchemaMismatchError: provider returned data violating the output contract.
- EmptyResultError: provider returned no usable payload.
- ProviderNotConfiguredError: no API key configured for the model provider.
"""

from typing import Any, Dict, List, Optional


class RecommendationError(Exception):
    """Base class for all recommendation flow errors."""

    retryable: bool = False


class ValidationError(RecommendationError):
    """Request does not match the input contract."""

    def __init__(self, message: str, errors: Optional[List[Dict[str, Any]]] = None):
        super().__init__(message)
        self.errors = errors or []


class TransientInvocationError(RecommendationError):
    """
    The model provider could not be reached or failed to answer.

    Timeouts, network faults, 408, 429 and 5xx answers are retryable.
    Other 4xx answers (bad key, invalid argument) carry retryable=False.
    """

    retryable = True

    def __init__(self, message: str, status_code: Optional[int] = None, retryable: bool = True):
        super().__init__(message)
        self.status_code = status_code
        self.retryable = retryable


class SchemaMismatchError(RecommendationError):
    """The model payload cannot be coerced to the output contract."""


class EmptyResultError(RecommendationError):
    """The model returned nothing usable for this call."""


class ProviderNotConfiguredError(RecommendationError):
    """The model provider credentials are missing."""
