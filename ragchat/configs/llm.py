"""
Language model configuration settings.

Selects the chat/embedding provider and its model identifiers.

Dependencies: pydantic, pydantic_settings
System role: Model provider configuration for rewriting, synthesis and embeddings
"""

from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings

from ragchat.configs.base import section_config


class LLMSettings(BaseSettings):
    """Chat model and embedding model configuration."""

    model_config = section_config("LLM_")

    provider: Literal["google", "mistral", "groq"] = Field(
        default="google",
        description="Model provider: 'google' (Gemini), 'mistral' or 'groq' (Groq chat, Gemini embeddings)",
    )
    chat_model: str | None = Field(
        default=None,
        description="Chat model for rewriting and synthesis (provider default if unset)",
    )
    embedding_model: str | None = Field(
        default=None,
        description="Embedding model for chunks and queries (provider default if unset)",
    )
    temperature: float = Field(default=0.2, ge=0.0, le=2.0, description="Chat model temperature")

    google_api_key: SecretStr | None = Field(
        default=None,
        description="Google Generative AI key (falls back to GOOGLE_API_KEY)",
    )
    mistral_api_key: SecretStr | None = Field(
        default=None,
        description="Mistral AI key (falls back to MISTRAL_API_KEY)",
    )
    groq_api_key: SecretStr | None = Field(
        default=None,
        description="Groq key (falls back to GROQ_API_KEY)",
    )
