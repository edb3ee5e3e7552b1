"""
f1rag exceptions.

Every fatal failure of the question-answering pipeline is raised as a
subclass of ``F1RAGError`` carrying a ``kind`` string, so callers can
decide how to present it (typically a generic apology) without parsing
messages. "No relevant context" is not an error; it is a normal
low-confidence response.
"""


class F1RAGError(Exception):
    """Base exception for f1rag errors."""

    kind = "error"

    def __init__(self, message: str, kind: str | None = None):
        self.message = message
        if kind is not None:
            self.kind = kind
        super().__init__(self.message)


class InvalidInputError(F1RAGError, ValueError):
    """Raised when a query or retrieval argument is rejected before any I/O."""

    kind = "invalid_input"

    def __init__(self, message: str = "Query must be a non-empty string"):
        super().__init__(message)


class ModelUnavailableError(F1RAGError):
    """Raised when the embedding backend cannot be loaded or fails on a call."""

    kind = "model_unavailable"

    def __init__(self, message: str = "Embedding model is unavailable"):
        super().__init__(message)


class RetrievalFailedError(F1RAGError):
    """Raised when the vector store query or connection fails."""

    kind = "retrieval_failed"

    def __init__(self, message: str = "Failed to retrieve documents from vector database"):
        super().__init__(message)


class QueryFailedError(F1RAGError):
    """Raised when an unexpected error interrupts query processing."""

    kind = "query_failed"

    def __init__(self, message: str = "Failed to process F1 query"):
        super().__init__(message)
