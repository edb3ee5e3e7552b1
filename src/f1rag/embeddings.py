"""Embedding model implementations."""

import asyncio
import hashlib
import logging
import math
import struct
import threading
from typing import Optional

from .base import BaseEmbedding
from .exceptions import ModelUnavailableError

logger = logging.getLogger(__name__)


class LocalEmbedding(BaseEmbedding):
    """Local embedding model using sentence-transformers.

    Uses HuggingFace sentence-transformers models locally.
    No API calls required, runs entirely on the local machine.

    The model is loaded lazily on first use and then shared by every
    query served by this instance. Loading is guarded by a lock, so
    concurrent first calls still create exactly one model.

    Note: Requires the 'vector' extra to be installed.
    """

    # Known model dimensions
    MODEL_DIMENSIONS = {
        "all-MiniLM-L6-v2": 384,
        "paraphrase-MiniLM-L6-v2": 384,
        "multi-qa-MiniLM-L6-cos-v1": 384,
    }

    def __init__(
        self,
        model_name: str = "all-MiniLM-L6-v2",
        device: Optional[str] = None,
        normalize: bool = True,
        dimension: Optional[int] = None,
    ):
        """Initialize the local embedding model.

        Args:
            model_name: Name of the sentence-transformers model
            device: Device to run on (cuda, cpu, mps). Auto-detected if None.
            normalize: Whether to L2-normalize embeddings
            dimension: Vector size; looked up from the model name if None
        """
        self.model_name = model_name
        self.device = device
        self.normalize = normalize
        self._dimension = dimension or self.MODEL_DIMENSIONS.get(model_name, 384)
        self._model = None
        self._lock = threading.Lock()

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def is_loaded(self) -> bool:
        return self._model is not None

    def _get_model(self):
        """Get or load the sentence-transformers model."""
        if self._model is None:
            with self._lock:
                if self._model is None:
                    self._model = self._load_model()
        return self._model

    def _load_model(self):
        try:
            from sentence_transformers import SentenceTransformer
        except ImportError as e:
            raise ModelUnavailableError(
                "Local embedding requires 'sentence-transformers'. "
                "Install it with: pip install sentence-transformers"
            ) from e

        logger.info(f"Loading embedding model: {self.model_name}")
        try:
            model = SentenceTransformer(self.model_name, device=self.device)
        except Exception as e:
            raise ModelUnavailableError(
                f"Failed to load embedding model '{self.model_name}': {e}"
            ) from e

        logger.info(f"Loaded embedding model: {self.model_name}")
        return model

    async def load(self) -> None:
        """Load the model in a worker thread if it is not loaded yet."""
        if self._model is not None:
            return
        loop = asyncio.get_event_loop()
        await loop.run_in_executor(None, self._get_model)

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        """Embed a list of documents using local model."""
        if not texts:
            return []

        # Run in thread pool to avoid blocking
        loop = asyncio.get_event_loop()
        embeddings = await loop.run_in_executor(
            None,
            lambda: self._get_model().encode(
                texts,
                normalize_embeddings=self.normalize,
                convert_to_numpy=True,
            ),
        )

        return embeddings.tolist()

    async def embed_query(self, text: str) -> list[float]:
        """Embed a single query using local model."""
        embeddings = await self.embed_documents([text])
        return embeddings[0]


class FakeEmbedding(BaseEmbedding):
    """Fake embedding that generates deterministic embeddings from text.

    Useful for testing and offline runs when you want predictable
    embeddings. The vector is derived from a hash of the text and
    L2-normalized like a real model's output.
    """

    def __init__(self, dimension: int = 384, seed: int = 42):
        """Initialize the fake embedding.

        Args:
            dimension: Dimension of the embedding vectors
            seed: Seed mixed into the hash for reproducibility
        """
        self._dimension = dimension
        self.seed = seed

    @property
    def dimension(self) -> int:
        return self._dimension

    def _hash_text(self, text: str) -> list[float]:
        """Generate a deterministic unit vector from the text hash."""
        values = []
        block = 0
        while len(values) < self._dimension:
            digest = hashlib.sha256(f"{self.seed}:{block}:{text}".encode()).digest()
            for offset in range(0, len(digest), 4):
                (raw,) = struct.unpack("<I", digest[offset:offset + 4])
                values.append(raw / 0xFFFFFFFF * 2.0 - 1.0)
            block += 1

        vector = values[: self._dimension]
        norm = math.sqrt(sum(v * v for v in vector))
        if norm == 0:
            return vector
        return [v / norm for v in vector]

    async def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [self._hash_text(text) for text in texts]

    async def embed_query(self, text: str) -> list[float]:
        return self._hash_text(text)
