"""
Model provider boundary layer.

Chat and embedding model factories per provider.
"""

from ragchat.boundary.llm.providers import (
    GoogleGenAIProvider,
    MistralAIProvider,
    ModelProvider,
    get_provider,
)

__all__ = [
    "GoogleGenAIProvider",
    "MistralAIProvider",
    "ModelProvider",
    "get_provider",
]
