"""
Configuration utilities.
"""

import os
from pathlib import Path
from typing import Literal, Optional

import yaml

from pydantic import BaseModel, Field, field_validator

CONFIG_ENV_VAR = "F1RAG_CONFIG"
DEFAULT_CONFIG_PATH = "f1rag.yaml"


class Config(BaseModel):
    """Base configuration class."""

    @classmethod
    def from_yaml(cls, path: Path) -> "Config":
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    @classmethod
    def from_file(cls, path: str | Path) -> "Config":
        """Load configuration from file (YAML or JSON)."""
        path = Path(path)

        if path.suffix in (".yaml", ".yml"):
            return cls.from_yaml(path)
        elif path.suffix == ".json":
            import json
            with open(path) as f:
                data = json.load(f)
            return cls(**data)
        else:
            raise ValueError(f"Unsupported config file format: {path.suffix}")


class RAGConfig(Config):
    """Configuration for the F1 question-answering service."""

    # Embedding settings
    embedding_model: str = "all-MiniLM-L6-v2"
    embedding_dimension: int = Field(default=384, gt=0)
    device: str | None = None

    # Vector store settings
    vector_store: Literal["chroma", "memory"] = "chroma"
    collection_name: str = "f1gpt"
    persist_directory: str | None = None
    chroma_host: str | None = None
    chroma_port: int = 8000
    similarity_metric: Literal["cosine", "dot_product"] = "cosine"

    # Retrieval and scoring
    retrieval_limit: int = 8
    similarity_threshold: float = 0.3
    confidence_boost: float = Field(default=1.2, gt=0.0)
    max_sources: int = 3
    max_debug_docs: int = 5

    log_level: str = "INFO"

    @field_validator("retrieval_limit", "max_sources", "max_debug_docs")
    @classmethod
    def _positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"must be a positive integer, got {v}")
        return v

    @field_validator("similarity_threshold")
    @classmethod
    def _threshold_range(cls, v: float) -> float:
        if not -1.0 <= v <= 1.0:
            raise ValueError(f"similarity_threshold must be within [-1, 1], got {v}")
        return v

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = v.upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return level


def load_config(path: Optional[str | Path] = None) -> RAGConfig:
    """
    Load service configuration from file.

    Args:
        path: Path to config file. Defaults to ``$F1RAG_CONFIG``,
            then ``f1rag.yaml``.

    Returns:
        RAGConfig instance (defaults if the file does not exist)
    """
    path = Path(path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)

    if not path.exists():
        return RAGConfig()

    return RAGConfig.from_file(path)
