"""Completion relay configuration with environment variable loading.

Pydantic-based configuration for the upstream Groq chat completion call.
The endpoint is OpenAI-compatible, so any compatible provider can be used
by overriding GROQ_API_URL.
"""

import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables from .env file
load_dotenv()

DEFAULT_API_URL = "https://api.groq.com/v1/chat/completions"
DEFAULT_MODEL = "llama-3.3-70b-versatile"
DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful and knowledgeable AI assistant. Provide clear, accurate, "
    "and engaging responses while maintaining a friendly and professional tone."
)


class RelayConfig(BaseModel):
    """Configuration for the completion relay.

    Attributes:
        api_key: Bearer key for the provider.
        api_url: Full chat completions URL.
        model_name: Model identifier to use.
        temperature: Sampling temperature (0.0 = deterministic, 2.0 = creative).
        max_tokens: Maximum tokens in generated response.
        top_p: Nucleus sampling width.
        system_prompt: System message prepended to every conversation.
    """

    api_key: str = Field(
        default_factory=lambda: os.getenv("GROQ_API_KEY", ""),
        description="API key for the completion provider",
    )
    api_url: str = Field(
        default_factory=lambda: os.getenv("GROQ_API_URL") or DEFAULT_API_URL,
        description="Chat completions endpoint",
    )
    model_name: str = Field(
        default_factory=lambda: os.getenv("GROQ_MODEL") or DEFAULT_MODEL,
        description="Model to use",
    )
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Sampling temperature for response generation",
    )
    max_tokens: int = Field(
        default=1024,
        ge=1,
        le=128000,
        description="Maximum tokens in generated response",
    )
    top_p: float = Field(
        default=1.0,
        ge=0.0,
        le=1.0,
        description="Nucleus sampling width",
    )
    system_prompt: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        min_length=1,
        description="System message prepended to the conversation",
    )

    @field_validator("api_key")
    @classmethod
    def validate_api_key(cls, v: str) -> str:
        """Validate that API key is provided and non-empty."""
        if not v or not v.strip():
            raise ValueError("API key required. Set GROQ_API_KEY in .env")
        return v.strip()


def get_relay_config() -> RelayConfig:
    """Create relay configuration from environment.

    Returns:
        Configured RelayConfig instance.

    Raises:
        ValueError: If no API key is set.
    """
    return RelayConfig()
