"""
Chat and embedding model providers.

Each provider builds a LangChain chat model and embedding model from
LLMSettings. The rest of the application depends only on the
ModelProvider protocol, so providers are swappable by configuration.

Retries are disabled on chat models: failures surface to the caller.

Dependencies: langchain_google_genai, langchain_mistralai, langchain_groq, ragchat.configs
System role: Model/embedding provider abstraction
"""

import logging
from typing import Protocol, runtime_checkable

from langchain_core.embeddings import Embeddings
from langchain_core.language_models import BaseChatModel

from ragchat.configs.llm import LLMSettings

logger = logging.getLogger(__name__)


@runtime_checkable
class ModelProvider(Protocol):
    """Structural type for anything that can build the chat and embedding models."""

    name: str

    def chat_model(self) -> BaseChatModel: ...

    def embeddings(self) -> Embeddings: ...


def _secret(value) -> str | None:
    return value.get_secret_value() if value is not None else None


class GoogleGenAIProvider:
    """Google Gemini chat model and embeddings."""

    name = "google"
    DEFAULT_CHAT_MODEL = "gemini-2.5-flash"
    DEFAULT_EMBEDDING_MODEL = "models/gemini-embedding-001"

    def __init__(self, settings: LLMSettings) -> None:
        self._settings = settings
        self._api_key = _secret(settings.google_api_key)

    def chat_model(self) -> BaseChatModel:
        from langchain_google_genai import ChatGoogleGenerativeAI

        model = self._settings.chat_model or self.DEFAULT_CHAT_MODEL
        logger.info(f"{__name__}:chat_model - Creating ChatGoogleGenerativeAI model={model}")
        kwargs = {"google_api_key": self._api_key} if self._api_key else {}
        return ChatGoogleGenerativeAI(
            model=model,
            temperature=self._settings.temperature,
            max_retries=0,
            **kwargs,
        )

    def embeddings(self) -> Embeddings:
        from langchain_google_genai import GoogleGenerativeAIEmbeddings

        model = self._settings.embedding_model or self.DEFAULT_EMBEDDING_MODEL
        logger.info(f"{__name__}:embeddings - Creating GoogleGenerativeAIEmbeddings model={model}")
        kwargs = {"google_api_key": self._api_key} if self._api_key else {}
        return GoogleGenerativeAIEmbeddings(model=model, **kwargs)


class MistralAIProvider:
    """Mistral chat model and embeddings."""

    name = "mistral"
    DEFAULT_CHAT_MODEL = "mistral-small-latest"
    DEFAULT_EMBEDDING_MODEL = "mistral-embed"

    def __init__(self, settings: LLMSettings) -> None:
        self._settings = settings
        self._api_key = _secret(settings.mistral_api_key)

    def chat_model(self) -> BaseChatModel:
        from langchain_mistralai import ChatMistralAI

        model = self._settings.chat_model or self.DEFAULT_CHAT_MODEL
        logger.info(f"{__name__}:chat_model - Creating ChatMistralAI model={model}")
        kwargs = {"api_key": self._api_key} if self._api_key else {}
        return ChatMistralAI(
            model=model,
            temperature=self._settings.temperature,
            max_retries=0,
            **kwargs,
        )

    def embeddings(self) -> Embeddings:
        from langchain_mistralai import MistralAIEmbeddings

        model = self._settings.embedding_model or self.DEFAULT_EMBEDDING_MODEL
        logger.info(f"{__name__}:embeddings - Creating MistralAIEmbeddings model={model}")
        kwargs = {"api_key": self._api_key} if self._api_key else {}
        return MistralAIEmbeddings(model=model, **kwargs)


class GroqProvider:
    """
    Groq-hosted chat model with Gemini embeddings.

    Groq serves no embedding models, so chunks and queries are embedded
    with Google (``LLM_EMBEDDING_MODEL`` and ``LLM_GOOGLE_API_KEY`` apply).
    """

    name = "groq"
    DEFAULT_CHAT_MODEL = "llama-3.1-8b-instant"

    def __init__(self, settings: LLMSettings) -> None:
        self._settings = settings
        self._api_key = _secret(settings.groq_api_key)
        self._embedding_provider = GoogleGenAIProvider(settings)

    def chat_model(self) -> BaseChatModel:
        from langchain_groq import ChatGroq

        model = self._settings.chat_model or self.DEFAULT_CHAT_MODEL
        logger.info(f"{__name__}:chat_model - Creating ChatGroq model={model}")
        kwargs = {"api_key": self._api_key} if self._api_key else {}
        return ChatGroq(
            model=model,
            temperature=self._settings.temperature,
            max_retries=0,
            **kwargs,
        )

    def embeddings(self) -> Embeddings:
        return self._embedding_provider.embeddings()


PROVIDERS: dict[str, type] = {
    GoogleGenAIProvider.name: GoogleGenAIProvider,
    MistralAIProvider.name: MistralAIProvider,
    GroqProvider.name: GroqProvider,
}


def get_provider(settings: LLMSettings) -> ModelProvider:
    """
    Build the configured model provider.

    Args:
        settings: LLM settings (provider name, models, keys)

    Returns:
        ModelProvider: Provider instance

    Raises:
        ValueError: Unknown provider name
    """
    provider_cls = PROVIDERS.get(settings.provider)
    if provider_cls is None:
        raise ValueError(
            f"Invalid LLM provider: {settings.provider}. Must be one of {sorted(PROVIDERS)}."
        )
    return provider_cls(settings)
