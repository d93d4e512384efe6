"""
LLM-specific exceptions.

This module defines exceptions that can occur when talking to the chat
endpoint.
"""

from typing import Any, Optional


class LLMError(Exception):
    """Base exception for all LLM-related errors."""

    def __init__(
        self,
        message: str,
        *,
        provider: Optional[str] = None,
        model: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.model = model

    def __str__(self) -> str:
        return self.message


class LLMConfigurationError(LLMError):
    """Raised when the API key or endpoint is not configured."""

    pass


class LLMConnectionError(LLMError):
    """Raised when connection to the endpoint fails."""

    pass


class LLMAuthenticationError(LLMError):
    """Raised when the endpoint rejects the API key."""

    pass


class LLMRateLimitError(LLMError):
    """Raised when rate limit is exceeded."""

    def __init__(
        self,
        message: str,
        *,
        retry_after: Optional[float] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after


class LLMTimeoutError(LLMError):
    """Raised when a request times out."""

    pass


class LLMResponseError(LLMError):
    """Raised when the endpoint returns an error or an unexpected response."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.response_body = response_body
