"""
Chat-completion client.

This module provides a minimal client for OpenAI-compatible chat
endpoints, used to answer Git questions.

Example:
    ```python
    from git_helper.llm import ChatClient, ChatConfig

    config = ChatConfig(
        base_url="https://api.openai.com/v1",
        model="gpt-4o-mini",
        api_key="sk-...",
    )
    client = ChatClient(config)
    print(await client.complete("What does git stash do?"))
    ```
"""

from git_helper.llm.client import NO_RESPONSE, ChatClient
from git_helper.llm.config import DEFAULT_SYSTEM_PROMPT, ChatConfig, Message, MessageRole
from git_helper.llm.exceptions import (
    LLMAuthenticationError,
    LLMConfigurationError,
    LLMConnectionError,
    LLMError,
    LLMRateLimitError,
    LLMResponseError,
    LLMTimeoutError,
)

__all__ = [
    # Config
    "ChatConfig",
    "Message",
    "MessageRole",
    "DEFAULT_SYSTEM_PROMPT",
    # Client
    "ChatClient",
    "NO_RESPONSE",
    # Exceptions
    "LLMError",
    "LLMConfigurationError",
    "LLMConnectionError",
    "LLMAuthenticationError",
    "LLMRateLimitError",
    "LLMTimeoutError",
    "LLMResponseError",
]
