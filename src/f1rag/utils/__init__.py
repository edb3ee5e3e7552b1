"""
Utility modules for f1rag.
"""

from f1rag.utils.config import Config, RAGConfig, load_config
from f1rag.utils.logging import setup_logging

__all__ = [
    "Config",
    "RAGConfig",
    "load_config",
    "setup_logging",
]
