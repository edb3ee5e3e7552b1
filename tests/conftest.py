"""
Test configuration and fixtures.
"""

from typing import Optional

import pytest

from f1rag import F1RAGService, FakeEmbedding, RAGConfig, reset_rag_service
from f1rag.base import BaseVectorStore, StoreHit


class StubVectorStore(BaseVectorStore):
    """Vector store that returns scripted hits regardless of the query."""

    def __init__(self, hits: Optional[list[StoreHit]] = None):
        self.hits = list(hits or [])
        self.search_calls: list[tuple[list[float], int]] = []

    async def add(self, chunks, embeddings):
        raise NotImplementedError

    async def search(self, query_embedding, k=8):
        self.search_calls.append((query_embedding, k))
        return self.hits[:k]

    async def find_one(self):
        return self.hits[0] if self.hits else None


class FailingVectorStore(StubVectorStore):
    """Vector store whose every call raises a connection error."""

    async def search(self, query_embedding, k=8):
        raise ConnectionError("connection refused")

    async def find_one(self):
        raise ConnectionError("connection refused")


def make_hit(similarity: float, source: str = "https://www.formula1.com/en/latest", text: Optional[str] = None, id: Optional[str] = None) -> StoreHit:
    """Build a raw store record."""
    return {
        "id": id or f"doc-{similarity}",
        "text": text if text is not None else f"Passage scored {similarity} about Formula 1 racing history and drivers.",
        "source": source,
        "similarity": similarity,
    }


@pytest.fixture(autouse=True)
def _reset_shared_service():
    reset_rag_service()
    yield
    reset_rag_service()


@pytest.fixture
def embedding():
    return FakeEmbedding(dimension=384)


@pytest.fixture
def make_service(embedding):
    """Factory for a service over scripted hits."""

    def _make(hits=None, store=None, config=None):
        store = store if store is not None else StubVectorStore(hits)
        return F1RAGService(embedding=embedding, vectorstore=store, config=config or RAGConfig())

    return _make


VERSTAPPEN_TEXT = (
    "Max Verstappen is a Dutch racing driver who competes in Formula 1 for Red Bull Racing. "
    "He won his first World Championship in 2021 after a dramatic season finale in Abu Dhabi. "
    "Verstappen made his debut at the age of seventeen with Toro Rosso in 2015."
)
