"""Port for turning chunk text and search queries into vectors."""

from abc import ABC, abstractmethod


class EmbeddingProvider(ABC):
    """Embedding model behind a remote API.

    Document and query embeddings are separate calls because some models
    expect a different task prefix for each side of the search.
    """

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Length of every vector this provider returns."""

    @abstractmethod
    async def generate_embeddings(self, texts: list[str]) -> list[list[float]]:
        """Embed document chunks.

        Returns:
            One vector per text, aligned with ``texts``.

        Raises:
            EmbeddingProviderError: transport failure, non-2xx answer or a
                malformed / short response.
        """

    @abstractmethod
    async def generate_query_embedding(self, query: str) -> list[float]:
        """Embed a search query."""
