"""
Chat model configuration.

This module provides Pydantic models for configuring the OpenAI-compatible
chat endpoint the helper talks to.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, SecretStr, field_validator

DEFAULT_SYSTEM_PROMPT = "You are a helpful Git expert assistant."


class MessageRole(str, Enum):
    """Message roles for chat completions."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """A single message in a conversation."""

    role: MessageRole
    content: str

    @classmethod
    def system(cls, content: str) -> "Message":
        """Create a system message."""
        return cls(role=MessageRole.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str) -> "Message":
        """Create a user message."""
        return cls(role=MessageRole.USER, content=content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        """Create an assistant message."""
        return cls(role=MessageRole.ASSISTANT, content=content)


class ChatConfig(BaseModel):
    """
    Configuration for the chat-completion endpoint.

    Any OpenAI-compatible server works: OpenAI itself, Grok or GLM through
    their compatible endpoints, or a local server.

    Example:
        ```python
        config = ChatConfig(
            provider="openai",
            base_url="https://api.openai.com/v1",
            model="gpt-4o-mini",
            api_key="sk-...",
        )
        ```
    """

    provider: str = Field(
        default="openai",
        description="Provider label (informational; all providers speak the OpenAI format)",
    )
    base_url: Optional[str] = Field(
        default=None,
        description="Base URL for the API endpoint",
    )
    model: str = Field(
        default="gpt-4o-mini",
        description="Model identifier/name",
    )
    api_key: Optional[SecretStr] = Field(
        default=None,
        description="API key sent as a bearer token",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature (0.0 = deterministic, higher = more random)",
    )
    timeout: float = Field(
        default=120.0,
        gt=0,
        description="Request timeout in seconds",
    )
    system_prompt: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        description="System prompt prepended to every query",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: Optional[str]) -> Optional[str]:
        """Ensure base_url doesn't have trailing slash."""
        return v.rstrip("/") if v else v

    def get_api_key(self) -> Optional[str]:
        """Get the API key as a plain string."""
        if self.api_key:
            return self.api_key.get_secret_value()
        return None

    def to_request_body(self, messages: list[Message]) -> dict[str, Any]:
        """Build the chat/completions request body."""
        return {
            "model": self.model,
            "messages": [m.model_dump(mode="json") for m in messages],
            "temperature": self.temperature,
        }

    def __repr__(self) -> str:
        """Safe representation that hides the API key."""
        api_key_str = "'***'" if self.api_key else "None"
        return (
            f"ChatConfig(provider={self.provider!r}, model={self.model!r}, "
            f"base_url={self.base_url!r}, api_key={api_key_str})"
        )
