"""Vector store implementations."""

import asyncio
import logging
import math
import threading
from pathlib import Path
from typing import Any, Optional

from .base import BaseVectorStore, StoreHit
from .document import Chunk

logger = logging.getLogger(__name__)

SUPPORTED_METRICS = ("cosine", "dot_product")


def dot_product(a: list[float], b: list[float]) -> float:
    """Calculate the dot product of two vectors."""
    if len(a) != len(b):
        raise ValueError("Vectors must have the same dimension")

    return sum(x * y for x, y in zip(a, b))


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Calculate cosine similarity between two vectors."""
    dot = dot_product(a, b)
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(x * x for x in b))

    if norm_a == 0 or norm_b == 0:
        return 0.0

    return dot / (norm_a * norm_b)


class MemoryVectorStore(BaseVectorStore):
    """In-memory vector store for testing and small datasets.

    Stores all vectors in memory and performs exact similarity search.
    Not suitable for large-scale production use.
    """

    def __init__(self, metric: str = "cosine") -> None:
        """Initialize the memory vector store.

        Args:
            metric: Similarity metric, "cosine" or "dot_product"
        """
        if metric not in SUPPORTED_METRICS:
            raise ValueError(f"Unsupported metric: {metric!r}. Supported: {SUPPORTED_METRICS}")

        self.metric = metric
        self._chunks: dict[str, Chunk] = {}
        self._embeddings: dict[str, list[float]] = {}

    async def add(
        self,
        chunks: list[Chunk],
        embeddings: list[list[float]],
    ) -> list[str]:
        """Add chunks with embeddings to the store."""
        if len(chunks) != len(embeddings):
            raise ValueError("Number of chunks must match number of embeddings")

        ids = []
        for chunk, embedding in zip(chunks, embeddings):
            self._chunks[chunk.id] = chunk
            self._embeddings[chunk.id] = list(embedding)
            ids.append(chunk.id)

        logger.debug(f"Added {len(ids)} chunks to memory store")
        return ids

    async def search(
        self,
        query_embedding: list[float],
        k: int = 8,
    ) -> list[StoreHit]:
        """Search for the nearest chunks under the configured metric."""
        if not self._chunks:
            return []

        score = cosine_similarity if self.metric == "cosine" else dot_product

        similarities = [
            (chunk_id, score(query_embedding, embedding))
            for chunk_id, embedding in self._embeddings.items()
        ]
        similarities.sort(key=lambda x: x[1], reverse=True)

        return [
            self._to_hit(self._chunks[chunk_id], similarity)
            for chunk_id, similarity in similarities[:k]
        ]

    @staticmethod
    def _to_hit(chunk: Chunk, similarity: Optional[float] = None) -> StoreHit:
        hit: StoreHit = {"id": chunk.id, "text": chunk.text, "source": chunk.source}
        if similarity is not None:
            hit["similarity"] = similarity
        return hit

    async def find_one(self) -> Optional[StoreHit]:
        """Return the first stored chunk, if any."""
        for chunk in self._chunks.values():
            return self._to_hit(chunk)
        return None


class ChromaVectorStore(BaseVectorStore):
    """ChromaDB vector store implementation.

    Operates in three modes:
    - HTTP client when ``chroma_host`` is given
    - Persistent client when ``persist_directory`` is given
    - Ephemeral in-memory client otherwise

    The distance space is fixed when the collection is created. Chroma
    reports distances, which are surfaced as ``1 - distance`` so that
    higher always means closer.

    Requires the 'vector' extra to be installed.
    """

    SPACES = {"cosine": "cosine", "dot_product": "ip"}

    def __init__(
        self,
        collection_name: str = "f1gpt",
        persist_directory: Optional[str] = None,
        chroma_host: Optional[str] = None,
        chroma_port: int = 8000,
        metric: str = "cosine",
    ):
        """Initialize the ChromaDB vector store.

        Args:
            collection_name: Name of the ChromaDB collection
            persist_directory: Directory for persistent storage (None for in-memory)
            chroma_host: Host of a Chroma server (takes precedence over persistence)
            chroma_port: Port of the Chroma server
            metric: Similarity metric, "cosine" or "dot_product"
        """
        if metric not in self.SPACES:
            raise ValueError(f"Unsupported metric: {metric!r}. Supported: {SUPPORTED_METRICS}")

        self.collection_name = collection_name
        self.persist_directory = persist_directory
        self.chroma_host = chroma_host
        self.chroma_port = chroma_port
        self.metric = metric
        self._client = None
        self._collection = None
        self._lock = threading.Lock()

    def _connect(self):
        """Create the ChromaDB client for the configured mode."""
        try:
            import chromadb
        except ImportError:
            raise ImportError(
                "ChromaDB vector store requires 'chromadb'. "
                "Install it with: pip install chromadb"
            )

        if self.chroma_host:
            client = chromadb.HttpClient(host=self.chroma_host, port=self.chroma_port)
            logger.info(f"Chroma: connected to {self.chroma_host}:{self.chroma_port}")
        elif self.persist_directory:
            Path(self.persist_directory).mkdir(parents=True, exist_ok=True)
            client = chromadb.PersistentClient(path=self.persist_directory)
            logger.info(f"Chroma: persistent at {self.persist_directory}")
        else:
            client = chromadb.Client()
            logger.info("Chroma: ephemeral (in-memory)")
        return client

    def _get_collection(self):
        """Get or create the collection, connecting on first use.

        Guarded by ``_lock`` so concurrent first callers share one client
        and one collection handle.
        """
        if self._collection is None:
            with self._lock:
                if self._collection is None:
                    if self._client is None:
                        self._client = self._connect()
                    self._collection = self._client.get_or_create_collection(
                        name=self.collection_name,
                        metadata={"hnsw:space": self.SPACES[self.metric]},
                    )
        return self._collection

    async def add(
        self,
        chunks: list[Chunk],
        embeddings: list[list[float]],
    ) -> list[str]:
        """Add chunks with embeddings to ChromaDB."""
        if len(chunks) != len(embeddings):
            raise ValueError("Number of chunks must match number of embeddings")
        if not chunks:
            return []

        collection = self._get_collection()

        ids = [chunk.id for chunk in chunks]
        documents = [chunk.text for chunk in chunks]
        metadatas = [{**chunk.metadata, "source": chunk.source or ""} for chunk in chunks]

        loop = asyncio.get_event_loop()
        await loop.run_in_executor(
            None,
            lambda: collection.upsert(
                ids=ids,
                documents=documents,
                embeddings=embeddings,
                metadatas=metadatas,
            ),
        )

        logger.debug(f"Added {len(ids)} chunks to ChromaDB collection '{self.collection_name}'")
        return ids

    async def search(
        self,
        query_embedding: list[float],
        k: int = 8,
    ) -> list[StoreHit]:
        """Search for similar chunks in ChromaDB."""
        collection = self._get_collection()

        loop = asyncio.get_event_loop()
        n = min(k, await loop.run_in_executor(None, collection.count))
        if n == 0:
            return []

        results = await loop.run_in_executor(
            None,
            lambda: collection.query(
                query_embeddings=[query_embedding],
                n_results=n,
                include=["documents", "metadatas", "distances"],
            ),
        )

        hits: list[StoreHit] = []
        if results and results["ids"] and results["ids"][0]:
            documents = results.get("documents") or [[]]
            metadatas = results.get("metadatas") or [[]]
            distances = results.get("distances") or [[]]
            for i, chunk_id in enumerate(results["ids"][0]):
                metadata = _at(metadatas[0], i) or {}
                hit: StoreHit = {
                    "id": chunk_id,
                    "text": _at(documents[0], i),
                    "source": metadata.get("source"),
                }
                distance = _at(distances[0], i)
                if distance is not None:
                    hit["similarity"] = 1.0 - distance
                hits.append(hit)

        return hits

    async def find_one(self) -> Optional[StoreHit]:
        """Return one stored record, or None if the collection is empty."""
        collection = self._get_collection()

        loop = asyncio.get_event_loop()
        results = await loop.run_in_executor(
            None,
            lambda: collection.get(limit=1, include=["documents", "metadatas"]),
        )

        if not results or not results["ids"]:
            return None

        metadata = _at(results.get("metadatas") or [], 0) or {}
        return {
            "id": results["ids"][0],
            "text": _at(results.get("documents") or [], 0),
            "source": metadata.get("source"),
        }


def _at(values: Optional[list[Any]], index: int) -> Any:
    if not values or index >= len(values):
        return None
    return values[index]


def build_vector_store(backend: str = "chroma", **kwargs: Any) -> BaseVectorStore:
    """Create a vector store of the requested type.

    Args:
        backend: "chroma" or "memory"
        **kwargs: Backend-specific configuration

    Returns:
        Vector store instance

    Raises:
        ValueError: Unknown backend
    """
    if backend == "chroma":
        return ChromaVectorStore(**kwargs)
    if backend == "memory":
        return MemoryVectorStore(**kwargs)
    raise ValueError(
        f"Unknown vector store backend: {backend!r}. Supported: 'chroma', 'memory'"
    )
