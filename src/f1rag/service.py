"""F1 question-answering service.

``F1RAGService`` runs one query through the pipeline stages in order:

    embed query -> retrieve (limit 8) -> zero documents     -> EMPTY_RESULT
                                      -> filter -> nothing relevant -> LOW_CONFIDENCE
                                                -> synthesize        -> SUCCESS

Typed errors from any stage propagate to the caller; the service never
turns a failure into an answer. Only the embedding model and the store
client outlive a query.
"""

import logging
import threading
from typing import Optional

from .base import BaseEmbedding, BaseVectorStore
from .document import QueryOutcome, RAGResponse, RetrievedDocument
from .embeddings import LocalEmbedding
from .exceptions import F1RAGError, InvalidInputError, QueryFailedError
from .relevance import RelevanceFilter
from .retriever import VectorRetriever
from .synthesizer import Synthesizer
from .utils.config import RAGConfig, load_config
from .vectorstore import build_vector_store

logger = logging.getLogger(__name__)

NO_DOCUMENTS_ANSWER = (
    "I couldn't find any relevant F1 information for your query. "
    "Please try asking about F1 drivers, teams, races, or regulations."
)
INSUFFICIENT_INFORMATION_ANSWER = (
    "I don't have enough relevant information in my F1 database to answer that question. "
    "Could you try rephrasing or asking about a different F1 topic?"
)
LOW_CONFIDENCE = 0.1


def unique_sources(documents: list[RetrievedDocument], limit: int) -> list[str]:
    """Distinct document origins in first-seen order, capped at ``limit``."""
    sources: list[str] = []
    for doc in documents:
        if doc.source not in sources:
            sources.append(doc.source)
            if len(sources) == limit:
                break
    return sources


class F1RAGService:
    """Answers F1 questions from the passages held in a vector store.

    Example:
        ```python
        service = F1RAGService.from_config(load_config())
        if await service.health_check():
            response = await service.answer("Who is Max Verstappen?")
            print(response.answer, response.sources)
        ```
    """

    def __init__(
        self,
        embedding: BaseEmbedding,
        vectorstore: BaseVectorStore,
        retriever: Optional[VectorRetriever] = None,
        relevance_filter: Optional[RelevanceFilter] = None,
        synthesizer: Optional[Synthesizer] = None,
        config: Optional[RAGConfig] = None,
    ):
        """Initialize the service.

        Args:
            embedding: Embedding model for queries
            vectorstore: Vector store holding the ingested chunks
            retriever: Retriever over ``vectorstore`` (default: VectorRetriever)
            relevance_filter: Filter and confidence scorer (default: from config)
            synthesizer: Answer builder (default: Synthesizer)
            config: Limits and thresholds (default: RAGConfig())
        """
        self.config = config or RAGConfig()
        self.embedding = embedding
        self.vectorstore = vectorstore
        self.retriever = retriever or VectorRetriever(vectorstore)
        self.relevance_filter = relevance_filter or RelevanceFilter(
            threshold=self.config.similarity_threshold,
            boost=self.config.confidence_boost,
        )
        self.synthesizer = synthesizer or Synthesizer()

    @classmethod
    def from_config(cls, config: RAGConfig) -> "F1RAGService":
        """Build the service and its backends from configuration."""
        embedding = LocalEmbedding(
            model_name=config.embedding_model,
            device=config.device,
            dimension=config.embedding_dimension,
        )
        if config.vector_store == "chroma":
            vectorstore = build_vector_store(
                "chroma",
                collection_name=config.collection_name,
                persist_directory=config.persist_directory,
                chroma_host=config.chroma_host,
                chroma_port=config.chroma_port,
                metric=config.similarity_metric,
            )
        else:
            vectorstore = build_vector_store("memory", metric=config.similarity_metric)
        return cls(embedding=embedding, vectorstore=vectorstore, config=config)

    async def answer(self, query: str) -> RAGResponse:
        """Answer a question from the vector store.

        Args:
            query: Free-text question

        Returns:
            The response; low-confidence outcomes are normal return values

        Raises:
            InvalidInputError: If the query is empty or blank
            ModelUnavailableError: If the query cannot be embedded
            RetrievalFailedError: If the vector store query fails
            QueryFailedError: If any other stage fails unexpectedly
        """
        if not isinstance(query, str) or not query.strip():
            raise InvalidInputError("Query must be a non-empty string")

        logger.info(f"Processing F1 query: {query!r}")
        try:
            return await self._answer(query)
        except F1RAGError as e:
            logger.error(f"F1 query failed ({e.kind}): {e.message}")
            raise
        except Exception as e:
            logger.exception("Unexpected error in RAG query processing")
            raise QueryFailedError(f"Failed to process F1 query: {e}") from e

    async def _answer(self, query: str) -> RAGResponse:
        query_embedding = await self.embedding.embed(query)
        logger.debug("Generated query embedding")

        retrieved_docs = await self.retriever.retrieve(query_embedding, self.config.retrieval_limit)
        logger.info(f"Retrieved {len(retrieved_docs)} documents")

        if not retrieved_docs:
            return RAGResponse(
                answer=NO_DOCUMENTS_ANSWER,
                sources=[],
                confidence=0.0,
                retrieved_docs=[],
                outcome=QueryOutcome.EMPTY_RESULT,
            )

        context = self.relevance_filter.filter(retrieved_docs)
        sources = unique_sources(retrieved_docs, self.config.max_sources)
        debug_docs = retrieved_docs[: self.config.max_debug_docs]

        if not context.has_relevant_context:
            logger.info("No document cleared the similarity threshold")
            return RAGResponse(
                answer=INSUFFICIENT_INFORMATION_ANSWER,
                sources=sources,
                confidence=LOW_CONFIDENCE,
                retrieved_docs=debug_docs,
                outcome=QueryOutcome.LOW_CONFIDENCE,
            )

        answer = self.synthesizer.synthesize(query, context)
        logger.info(f"Generated response with confidence: {context.confidence:.2f}")

        return RAGResponse(
            answer=answer,
            sources=sources,
            confidence=context.confidence,
            retrieved_docs=debug_docs,
            outcome=QueryOutcome.SUCCESS,
        )

    async def health_check(self) -> bool:
        """Check that the embedding model loads and the store holds data.

        Returns:
            True if the model is usable and the store returned a record
        """
        try:
            await self.embedding.load()
            record = await self.vectorstore.find_one()
        except Exception as e:
            logger.error(f"RAG service health check failed: {e}")
            return False

        if record is None:
            logger.warning("RAG service health check: vector store is empty")
            return False
        return True


# Process-scoped service. Created at most once, on first use, under
# _service_lock; reset_rag_service() discards it.
_service: Optional[F1RAGService] = None
_service_lock = threading.Lock()


def get_rag_service(config: Optional[RAGConfig] = None) -> F1RAGService:
    """Return the shared service, creating it from ``config`` on first call.

    Later calls return the same instance and ignore ``config``.
    """
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                _service = F1RAGService.from_config(config or load_config())
                logger.info("F1 RAG service created")
    return _service


def reset_rag_service() -> None:
    """Drop the shared service so the next call builds a new one."""
    global _service
    with _service_lock:
        _service = None
