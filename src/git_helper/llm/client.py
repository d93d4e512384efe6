"""
OpenAI-compatible chat client.

Sends a single user prompt, prefixed by the configured system prompt, to
`<base_url>/chat/completions` and returns the assistant's reply.
"""

import logging
from typing import Optional

import httpx

from git_helper.llm.config import ChatConfig, Message
from git_helper.llm.exceptions import (
    LLMAuthenticationError,
    LLMConfigurationError,
    LLMConnectionError,
    LLMError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTimeoutError,
)

logger = logging.getLogger(__name__)

NO_RESPONSE = "No response from AI."


class ChatClient:
    """
    Chat-completion client for any OpenAI-compatible endpoint.

    Example:
        ```python
        client = ChatClient(ChatConfig(base_url="https://api.openai.com/v1", api_key="sk-..."))
        answer = await client.complete("How do I undo my last commit?")
        await client.close()
        ```
    """

    def __init__(
        self,
        config: ChatConfig,
        *,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config
        self._client = http_client
        self._owns_client = http_client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.config.timeout))
            self._owns_client = True
        return self._client

    def _build_headers(self, api_key: str) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Authorization": f"Bearer {api_key}",
        }

    def _handle_error_response(self, response: httpx.Response) -> None:
        """Convert HTTP error responses to appropriate exceptions."""
        status_code = response.status_code
        detail = f"API Request Failed: {status_code} {response.reason_phrase} - {response.text}"

        common_kwargs = {
            "provider": self.config.provider,
            "model": self.config.model,
        }

        if status_code == 401:
            raise LLMAuthenticationError(detail, **common_kwargs)
        elif status_code == 429:
            retry_after = response.headers.get("Retry-After")
            try:
                retry = float(retry_after) if retry_after else None
            except ValueError:
                retry = None
            raise LLMRateLimitError(detail, retry_after=retry, **common_kwargs)
        raise LLMResponseError(
            detail,
            status_code=status_code,
            response_body=response.text,
            **common_kwargs,
        )

    async def complete(self, prompt: str) -> str:
        """
        Ask the model a question.

        Args:
            prompt: The user's query

        Returns:
            The assistant's reply, or a placeholder when the response has
            no choices

        Raises:
            LLMConfigurationError: If the API key or base URL is missing
            LLMAuthenticationError: If the API key is rejected
            LLMRateLimitError: If rate limited
            LLMTimeoutError: If the request times out
            LLMConnectionError: If the endpoint cannot be reached
            LLMResponseError: If the endpoint returns an error
        """
        api_key = self.config.get_api_key()
        if not api_key:
            raise LLMConfigurationError(
                "API Key not set. Run 'git-helper set-api-key' first."
            )
        if not self.config.base_url:
            raise LLMConfigurationError("Base URL not configured.")

        client = await self._get_client()
        url = f"{self.config.base_url}/chat/completions"
        messages = [Message.system(self.config.system_prompt), Message.user(prompt)]

        logger.debug(f"Sending completion request to {url}")

        try:
            response = await client.post(
                url,
                json=self.config.to_request_body(messages),
                headers=self._build_headers(api_key),
            )
            if not response.is_success:
                self._handle_error_response(response)
            data = response.json()

        except httpx.TimeoutException as e:
            raise LLMTimeoutError(
                f"Request timed out after {self.config.timeout}s: {e}",
                provider=self.config.provider,
                model=self.config.model,
            )
        except httpx.HTTPError as e:
            raise LLMConnectionError(
                f"Failed to connect to {self.config.base_url}: {e}",
                provider=self.config.provider,
                model=self.config.model,
            )
        except LLMError:
            raise
        except ValueError as e:
            raise LLMResponseError(
                f"Invalid JSON in response: {e}",
                provider=self.config.provider,
                model=self.config.model,
            )

        choices = data.get("choices") if isinstance(data, dict) else None
        if choices and isinstance(choices[0], dict) and choices[0].get("message"):
            return choices[0]["message"].get("content") or ""
        return NO_RESPONSE

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._owns_client and self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
