"""Retrieval-augmented question answering over Formula 1 content.

This package answers F1 questions from passages stored in a vector
database, without a generative model:
- Query embedding (local sentence-transformers, or a deterministic fake)
- Nearest-neighbour retrieval (ChromaDB or in-memory)
- Relevance filtering and a confidence score
- Rule-based answer synthesis with source attribution

Example:
    ```python
    from f1rag import get_rag_service

    service = get_rag_service()
    response = await service.answer("Who is Max Verstappen?")
    print(response.answer)
    print(response.sources, response.confidence)
    ```
"""

from f1rag.base import BaseEmbedding, BaseVectorStore, StoreHit
from f1rag.document import (
    Chunk,
    FilteredContext,
    QueryOutcome,
    RAGResponse,
    RetrievedDocument,
)
from f1rag.embeddings import FakeEmbedding, LocalEmbedding
from f1rag.exceptions import (
    F1RAGError,
    InvalidInputError,
    ModelUnavailableError,
    QueryFailedError,
    RetrievalFailedError,
)
from f1rag.relevance import RelevanceFilter
from f1rag.retriever import VectorRetriever
from f1rag.service import F1RAGService, get_rag_service, reset_rag_service
from f1rag.synthesizer import QueryCategory, Synthesizer, classify_query
from f1rag.utils.config import RAGConfig, load_config
from f1rag.vectorstore import (
    ChromaVectorStore,
    MemoryVectorStore,
    build_vector_store,
    cosine_similarity,
)

__version__ = "0.1.0"

__all__ = [
    # Base classes
    "BaseEmbedding",
    "BaseVectorStore",
    "StoreHit",
    # Data structures
    "Chunk",
    "RetrievedDocument",
    "FilteredContext",
    "QueryOutcome",
    "RAGResponse",
    # Embeddings
    "LocalEmbedding",
    "FakeEmbedding",
    # Vector stores
    "MemoryVectorStore",
    "ChromaVectorStore",
    "build_vector_store",
    "cosine_similarity",
    # Pipeline stages
    "VectorRetriever",
    "RelevanceFilter",
    "Synthesizer",
    "QueryCategory",
    "classify_query",
    # Service
    "F1RAGService",
    "get_rag_service",
    "reset_rag_service",
    # Config
    "RAGConfig",
    "load_config",
    # Errors
    "F1RAGError",
    "InvalidInputError",
    "ModelUnavailableError",
    "RetrievalFailedError",
    "QueryFailedError",
]
