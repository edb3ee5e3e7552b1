"""Relevance filtering and confidence estimation for retrieved documents."""

import logging

from .document import FilteredContext, RetrievedDocument

logger = logging.getLogger(__name__)

DEFAULT_SIMILARITY_THRESHOLD = 0.3
DEFAULT_CONFIDENCE_BOOST = 1.2


class RelevanceFilter:
    """Keeps documents above a similarity threshold and scores the retrieval.

    The confidence is the mean similarity of *every* retrieved document,
    boosted and capped at 1.0, so many weak matches pull it down even
    when a few strong ones make it through the threshold.
    """

    def __init__(
        self,
        threshold: float = DEFAULT_SIMILARITY_THRESHOLD,
        boost: float = DEFAULT_CONFIDENCE_BOOST,
    ):
        """Initialize the filter.

        Args:
            threshold: Documents must score strictly above this to be kept
            boost: Multiplier applied to the mean similarity
        """
        self.threshold = threshold
        self.boost = boost

    def filter(self, documents: list[RetrievedDocument]) -> FilteredContext:
        """Split documents into the relevant subset and compute confidence.

        Args:
            documents: Retrieved documents in store order

        Returns:
            The filtered context; ``has_relevant_context`` is False when no
            document clears the threshold
        """
        if not documents:
            return FilteredContext()

        mean_similarity = sum(doc.similarity for doc in documents) / len(documents)
        relevant = [doc for doc in documents if doc.similarity > self.threshold]

        logger.debug(
            f"{len(relevant)}/{len(documents)} documents above threshold {self.threshold} "
            f"(mean similarity {mean_similarity:.3f})"
        )

        return FilteredContext(
            documents=documents,
            relevant=relevant,
            mean_similarity=mean_similarity,
            confidence=self.confidence(mean_similarity),
        )

    def confidence(self, mean_similarity: float) -> float:
        """Boost a mean similarity into a confidence score in [0, 1]."""
        return max(0.0, min(mean_similarity * self.boost, 1.0))
