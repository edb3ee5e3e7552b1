"""Tests for embedding models."""

import asyncio
import math
import sys
import threading
import time
import types

import pytest

from f1rag import FakeEmbedding, InvalidInputError, LocalEmbedding, ModelUnavailableError
from f1rag.base import BaseEmbedding


class _FakeArray:
    def __init__(self, rows):
        self.rows = rows

    def tolist(self):
        return self.rows


def _install_fake_sentence_transformers(monkeypatch, fail=False, dimension=384):
    """Replace the sentence_transformers module with a counting fake."""
    created = []
    lock = threading.Lock()

    class SentenceTransformer:
        def __init__(self, model_name, device=None):
            time.sleep(0.05)
            if fail:
                raise OSError(f"model {model_name} not found")
            with lock:
                created.append(model_name)

        def encode(self, texts, normalize_embeddings=True, convert_to_numpy=True):
            return _FakeArray([[1.0] + [0.0] * (dimension - 1) for _ in texts])

    module = types.ModuleType("sentence_transformers")
    module.SentenceTransformer = SentenceTransformer
    monkeypatch.setitem(sys.modules, "sentence_transformers", module)
    return created


class TestFakeEmbedding:
    @pytest.mark.asyncio
    async def test_deterministic(self):
        embedding = FakeEmbedding(dimension=64, seed=42)
        vec1 = await embedding.embed_query("hello world")
        vec2 = await embedding.embed_query("hello world")
        assert vec1 == vec2
        vec3 = await embedding.embed_query("goodbye world")
        assert vec1 != vec3

    @pytest.mark.asyncio
    async def test_unit_length(self):
        embedding = FakeEmbedding(dimension=384)
        vec = await embedding.embed_query("Who won the 2021 championship?")
        assert len(vec) == 384
        assert math.isclose(math.sqrt(sum(v * v for v in vec)), 1.0, rel_tol=1e-9)

    @pytest.mark.asyncio
    async def test_seed_changes_vector(self):
        a = await FakeEmbedding(dimension=32, seed=1).embed_query("monaco")
        b = await FakeEmbedding(dimension=32, seed=2).embed_query("monaco")
        assert a != b

    @pytest.mark.asyncio
    async def test_embed_documents(self):
        embedding = FakeEmbedding(dimension=16)
        vecs = await embedding.embed_documents(["a", "b", "c"])
        assert len(vecs) == 3
        assert all(len(v) == 16 for v in vecs)


class TestEmbed:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_blank_text_rejected(self, text):
        with pytest.raises(InvalidInputError) as exc_info:
            await FakeEmbedding().embed(text)
        assert exc_info.value.kind == "invalid_input"

    @pytest.mark.asyncio
    async def test_backend_error_becomes_model_unavailable(self):
        class BrokenEmbedding(FakeEmbedding):
            async def embed_query(self, text):
                raise RuntimeError("CUDA out of memory")

        with pytest.raises(ModelUnavailableError) as exc_info:
            await BrokenEmbedding().embed("Who is Lewis Hamilton?")
        assert "CUDA out of memory" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_wrong_dimension_rejected(self):
        class ShortEmbedding(BaseEmbedding):
            @property
            def dimension(self):
                return 384

            async def embed_documents(self, texts):
                return [[0.0] * 10 for _ in texts]

            async def embed_query(self, text):
                return [0.0] * 10

        with pytest.raises(ModelUnavailableError):
            await ShortEmbedding().embed("pole position")

    @pytest.mark.asyncio
    async def test_default_load_is_noop(self):
        assert await FakeEmbedding().load() is None


class TestLocalEmbedding:
    def test_dimension(self):
        assert LocalEmbedding().dimension == 384
        assert LocalEmbedding(model_name="custom-model", dimension=768).dimension == 768

    def test_lazy(self, monkeypatch):
        created = _install_fake_sentence_transformers(monkeypatch)
        embedding = LocalEmbedding()
        assert not embedding.is_loaded
        assert created == []

    @pytest.mark.asyncio
    async def test_single_load_under_concurrent_first_use(self, monkeypatch):
        created = _install_fake_sentence_transformers(monkeypatch)
        embedding = LocalEmbedding()

        vectors = await asyncio.gather(
            *(embedding.embed(f"question {i}") for i in range(8))
        )

        assert len(created) == 1
        assert embedding.is_loaded
        assert all(len(v) == 384 for v in vectors)

    @pytest.mark.asyncio
    async def test_load_then_embed_reuses_model(self, monkeypatch):
        created = _install_fake_sentence_transformers(monkeypatch)
        embedding = LocalEmbedding()

        await embedding.load()
        await embedding.load()
        await embedding.embed("Ferrari")

        assert len(created) == 1

    @pytest.mark.asyncio
    async def test_load_failure(self, monkeypatch):
        _install_fake_sentence_transformers(monkeypatch, fail=True)
        embedding = LocalEmbedding()

        with pytest.raises(ModelUnavailableError) as exc_info:
            await embedding.embed("Who is Charles Leclerc?")
        assert exc_info.value.kind == "model_unavailable"
        assert not embedding.is_loaded

    @pytest.mark.asyncio
    async def test_missing_package(self, monkeypatch):
        monkeypatch.setitem(sys.modules, "sentence_transformers", None)
        embedding = LocalEmbedding()

        with pytest.raises(ModelUnavailableError, match="sentence-transformers"):
            await embedding.load()
