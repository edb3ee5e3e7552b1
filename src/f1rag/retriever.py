"""Retriever implementations."""

import logging
from collections.abc import Mapping
from typing import Any

from .base import BaseVectorStore, StoreHit
from .document import RetrievedDocument
from .exceptions import InvalidInputError, RetrievalFailedError

logger = logging.getLogger(__name__)

DEFAULT_RETRIEVAL_LIMIT = 8


class VectorRetriever:
    """Nearest-neighbour retriever over a vector store.

    Turns raw store records into ``RetrievedDocument`` objects, keeping
    the store's ordering and similarity scores untouched. Records with
    missing fields get defaults instead of failing the whole query.
    """

    def __init__(self, vectorstore: BaseVectorStore):
        """Initialize the vector retriever.

        Args:
            vectorstore: Vector store to search
        """
        self.vectorstore = vectorstore

    async def retrieve(
        self,
        vector: list[float],
        limit: int = DEFAULT_RETRIEVAL_LIMIT,
    ) -> list[RetrievedDocument]:
        """Retrieve the ``limit`` nearest documents to a query embedding.

        Args:
            vector: Query embedding
            limit: Maximum number of documents, must be a positive integer

        Returns:
            Documents ordered by descending similarity, as returned by the store

        Raises:
            InvalidInputError: If ``limit`` is not a positive integer
            RetrievalFailedError: If the store query fails
        """
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise InvalidInputError(f"Retrieval limit must be a positive integer, got {limit!r}")

        try:
            hits = await self.vectorstore.search(vector, limit)
        except Exception as e:
            logger.error(f"Error performing semantic search: {e}")
            raise RetrievalFailedError(
                f"Failed to retrieve documents from vector database: {e}"
            ) from e

        documents = []
        for position, hit in enumerate(hits):
            if not isinstance(hit, Mapping):
                logger.warning(f"Skipping malformed search result at position {position}: {hit!r}")
                continue
            documents.append(self._to_document(hit, position))

        return documents

    @staticmethod
    def _to_document(hit: StoreHit, position: int) -> RetrievedDocument:
        return RetrievedDocument(
            id=str(hit.get("id") or f"doc_{position}"),
            text=str(hit.get("text") or ""),
            source=str(hit.get("source") or "Unknown"),
            similarity=_as_float(hit.get("similarity")),
        )


def _as_float(value: Any) -> float:
    if isinstance(value, bool):
        return 0.0
    try:
        return float(value or 0.0)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric similarity {value!r}")
        return 0.0
