"""OpenRouter infrastructure package."""

from .openrouter_embedding_provider import OpenRouterEmbeddingProvider

__all__ = ["OpenRouterEmbeddingProvider"]
