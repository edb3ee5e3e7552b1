"""Base classes and abstract interfaces for the embedding and storage capabilities."""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Optional

from .exceptions import F1RAGError, InvalidInputError, ModelUnavailableError

if TYPE_CHECKING:
    from .document import Chunk


# A raw record as returned by a store: {"id", "text", "source", "similarity"}.
# Any of the fields may be missing; the retriever fills in defaults.
StoreHit = dict[str, Any]


class BaseEmbedding(ABC):
    """Abstract base class for embedding models.

    Embedding models convert text into dense, fixed-length, L2-normalized
    vectors. Subclasses implement ``embed_documents``/``embed_query``;
    callers use ``embed`` which validates input and normalizes errors.
    """

    @abstractmethod
    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Embed a list of documents.

        Args:
            texts: List of text strings to embed

        Returns:
            List of embedding vectors
        """
        pass

    @abstractmethod
    async def embed_query(self, text: str) -> list[float]:
        """Embed a single query.

        Args:
            text: Query text to embed

        Returns:
            Embedding vector
        """
        pass

    @property
    @abstractmethod
    def dimension(self) -> int:
        """Return the dimension of the embedding vectors."""
        pass

    async def load(self) -> None:
        """Initialize the underlying model ahead of the first call.

        Backends without expensive initialization keep this no-op.
        """
        return None

    async def embed(self, text: str) -> list[float]:
        """Embed a user query.

        Args:
            text: Query text, must contain non-whitespace characters

        Returns:
            Embedding vector of length ``dimension``

        Raises:
            InvalidInputError: If the text is empty or blank
            ModelUnavailableError: If the backend fails or returns a
                vector of the wrong length
        """
        if not isinstance(text, str) or not text.strip():
            raise InvalidInputError("Cannot embed empty text")

        try:
            vector = await self.embed_query(text)
        except F1RAGError:
            raise
        except Exception as e:
            raise ModelUnavailableError(f"Embedding backend failed: {e}") from e

        if len(vector) != self.dimension:
            raise ModelUnavailableError(
                f"Embedding has dimension {len(vector)}, expected {self.dimension}"
            )

        return list(vector)


class BaseVectorStore(ABC):
    """Abstract base class for vector stores.

    Vector stores persist chunk embeddings and answer nearest-neighbour
    queries under a metric fixed when the store is created.
    """

    @abstractmethod
    async def add(
        self,
        chunks: list["Chunk"],
        embeddings: list[list[float]],
    ) -> list[str]:
        """Add chunks with their embeddings to the store.

        Args:
            chunks: List of chunks to add
            embeddings: Corresponding embedding vectors

        Returns:
            List of added chunk IDs
        """
        pass

    @abstractmethod
    async def search(
        self,
        query_embedding: list[float],
        k: int = 8,
    ) -> list[StoreHit]:
        """Find the ``k`` nearest chunks to an embedding.

        Args:
            query_embedding: Query embedding vector
            k: Number of results to return

        Returns:
            Raw records sorted by descending similarity
        """
        pass

    @abstractmethod
    async def find_one(self) -> Optional[StoreHit]:
        """Return any stored record, or None if the store is empty."""
        pass
