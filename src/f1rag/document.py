"""Data structures passed between the f1rag pipeline stages."""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class Chunk(BaseModel):
    """A bounded fragment of source content stored as one retrievable unit.

    Chunks are produced by the ingestion job and inserted into a vector
    store together with their embeddings.

    Attributes:
        id: Unique identifier for the chunk
        text: The text content of the chunk
        source: Origin of the content, usually a URL
        metadata: Additional metadata stored alongside the chunk
    """

    id: str
    text: str
    source: Optional[str] = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    def __repr__(self) -> str:
        preview = self.text[:30] + "..." if len(self.text) > 30 else self.text
        return f"Chunk(id={self.id!r}, source={self.source!r}, text={preview!r})"


class RetrievedDocument(BaseModel):
    """A single nearest-neighbour hit, normalized from a raw store record.

    Attributes:
        id: Identifier of the stored chunk
        text: Chunk text (empty if the record had none)
        source: Origin of the chunk ("Unknown" if the record had none)
        similarity: Score reported by the store, higher is closer
    """

    model_config = ConfigDict(frozen=True)

    id: str
    text: str = ""
    source: str = "Unknown"
    similarity: float = 0.0

    def __repr__(self) -> str:
        return f"RetrievedDocument(id={self.id!r}, similarity={self.similarity:.4f})"


class FilteredContext(BaseModel):
    """Retrieved documents split into the relevant subset plus a confidence signal.

    ``mean_similarity`` and ``confidence`` are computed over *all* retrieved
    documents, while ``relevant`` only holds the ones above the threshold.

    Attributes:
        documents: Every retrieved document, in store order
        relevant: Documents whose similarity exceeds the threshold
        mean_similarity: Mean similarity over ``documents``
        confidence: Boosted mean similarity, clamped to [0, 1]
    """

    model_config = ConfigDict(frozen=True)

    documents: tuple[RetrievedDocument, ...] = ()
    relevant: tuple[RetrievedDocument, ...] = ()
    mean_similarity: float = 0.0
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)

    @property
    def has_relevant_context(self) -> bool:
        return bool(self.relevant)


class QueryOutcome(str, Enum):
    """Terminal state reached while answering a query."""

    EMPTY_RESULT = "empty_result"
    LOW_CONFIDENCE = "low_confidence"
    SUCCESS = "success"


class RAGResponse(BaseModel):
    """The answer returned to callers.

    Attributes:
        answer: Final answer text
        sources: Unique document origins in first-seen order
        confidence: Heuristic trust score in [0, 1]
        retrieved_docs: Top retrieved documents, kept for diagnostics
        outcome: Which terminal branch produced the answer
    """

    model_config = ConfigDict(frozen=True)

    answer: str
    sources: tuple[str, ...] = ()
    confidence: float = Field(ge=0.0, le=1.0)
    retrieved_docs: tuple[RetrievedDocument, ...] = ()
    outcome: QueryOutcome = QueryOutcome.SUCCESS

    def __repr__(self) -> str:
        return (
            f"RAGResponse(outcome={self.outcome.value!r}, confidence={self.confidence:.2f}, "
            f"sources={self.sources!r})"
        )
