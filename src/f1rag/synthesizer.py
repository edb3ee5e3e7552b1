"""Answer synthesis from retrieved F1 passages.

The synthesizer is rule based. It picks a heading from the query's topic,
breaks the best passages into sentences, drops near-duplicates, moves the
sentences that mention the query's words to the front, and appends a
confidence note.
"""

import logging
import re
import string
from enum import Enum

from .document import FilteredContext

logger = logging.getLogger(__name__)


class QueryCategory(str, Enum):
    """Topic of a user query, used to pick the answer heading."""

    DRIVER = "driver"
    TEAM = "team"
    RACE = "race"
    STATS = "stats"
    HISTORY = "history"
    RULES = "rules"
    GENERAL = "general"


# Checked in order; the first category with a matching keyword wins.
CATEGORY_KEYWORDS: list[tuple[QueryCategory, tuple[str, ...]]] = [
    (QueryCategory.DRIVER, ("driver", "pilot", "racer", "hamilton", "verstappen", "leclerc", "russell", "norris", "alonso")),
    (QueryCategory.TEAM, ("team", "constructor", "mercedes", "ferrari", "red bull", "mclaren", "aston martin", "alpine")),
    (QueryCategory.RACE, ("race", "circuit", "track", "monaco", "silverstone", "spa", "monza", "championship")),
    (QueryCategory.STATS, ("statistic", "record", "fastest", "pole", "win", "point", "standing")),
    (QueryCategory.HISTORY, ("history", "past", "legend", "classic", "old", "vintage", "historical")),
    (QueryCategory.RULES, ("rule", "regulation", "technical", "drs", "kers", "ers", "penalty")),
]

CATEGORY_HEADINGS: dict[QueryCategory, str] = {
    QueryCategory.DRIVER: "🏎️ **F1 Driver Information:**\n\n",
    QueryCategory.TEAM: "🏁 **F1 Team Information:**\n\n",
    QueryCategory.RACE: "🏆 **F1 Race Information:**\n\n",
    QueryCategory.STATS: "📊 **F1 Statistics:**\n\n",
    QueryCategory.HISTORY: "📚 **F1 History:**\n\n",
    QueryCategory.RULES: "📋 **F1 Rules & Regulations:**\n\n",
    QueryCategory.GENERAL: "🏎️ **F1 Information:**\n\n",
}

NOT_RELEVANT_ENOUGH_ANSWER = (
    "I found some F1 information but it doesn't seem directly relevant to your question. "
    "Could you please be more specific?"
)
HIGH_CONFIDENCE_NOTE = "\n\n✅ *High confidence answer based on reliable F1 sources.*"
MODERATE_CONFIDENCE_NOTE = "\n\n⚠️ *Moderate confidence - you may want to verify this information.*"

MAX_CONTEXTS = 3
MIN_CONTEXT_LENGTH = 50
MIN_SENTENCE_LENGTH = 20
DUPLICATE_THRESHOLD = 0.8
MAX_SENTENCES = 8
MAX_ANSWER_SENTENCES = 5
MIN_QUERY_WORD_LENGTH = 3
HIGH_CONFIDENCE_SIMILARITY = 0.7
MODERATE_CONFIDENCE_SIMILARITY = 0.5

_SENTENCE_BOUNDARY = re.compile(r"[.!?]+")


def classify_query(query: str) -> QueryCategory:
    """Return the first category whose keywords appear in the query."""
    query_lower = query.lower()
    for category, keywords in CATEGORY_KEYWORDS:
        if any(keyword in query_lower for keyword in keywords):
            return category
    return QueryCategory.GENERAL


def split_sentences(text: str) -> list[str]:
    """Split text on sentence punctuation, keeping trimmed sentences over 20 chars."""
    sentences = (part.strip() for part in _SENTENCE_BOUNDARY.split(text))
    return [s for s in sentences if len(s) > MIN_SENTENCE_LENGTH]


def jaccard_similarity(a: str, b: str) -> float:
    """Word-set Jaccard similarity of two strings, case-insensitive."""
    words_a = set(a.lower().split())
    words_b = set(b.lower().split())
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)


def deduplicate_sentences(
    sentences: list[str],
    threshold: float = DUPLICATE_THRESHOLD,
    limit: int = MAX_SENTENCES,
) -> list[str]:
    """Drop sentences too similar to an earlier kept one; first occurrence wins.

    Args:
        sentences: Candidate sentences in original order
        threshold: Jaccard similarity above which a sentence is a duplicate
        limit: Maximum number of sentences to keep

    Returns:
        Up to ``limit`` sentences in their original order
    """
    kept: list[str] = []
    for sentence in sentences:
        if len(kept) >= limit:
            break
        duplicate = False
        for earlier in kept:
            if jaccard_similarity(earlier, sentence) > threshold:
                duplicate = True
                break
        if not duplicate:
            kept.append(sentence)
    return kept


def query_words(query: str) -> list[str]:
    """Lowercased query words longer than three characters, punctuation trimmed."""
    words = (word.strip(string.punctuation) for word in query.lower().split())
    return [word for word in words if len(word) > MIN_QUERY_WORD_LENGTH]


def prioritize_sentences(
    sentences: list[str],
    query: str,
    limit: int = MAX_ANSWER_SENTENCES,
) -> list[str]:
    """Order sentences by how many query words they contain.

    The sort is stable, so sentences with equal scores keep their order.
    """
    words = query_words(query)

    def score(sentence: str) -> int:
        sentence_lower = sentence.lower()
        return sum(1 for word in words if word in sentence_lower)

    return sorted(sentences, key=score, reverse=True)[:limit]


def confidence_note(mean_similarity: float) -> str:
    """Disclaimer appended to the answer, based on the mean retrieval similarity."""
    if mean_similarity > HIGH_CONFIDENCE_SIMILARITY:
        return HIGH_CONFIDENCE_NOTE
    if mean_similarity > MODERATE_CONFIDENCE_SIMILARITY:
        return MODERATE_CONFIDENCE_NOTE
    return ""


class Synthesizer:
    """Builds a prose answer from the relevant documents of a filtered context."""

    def synthesize(self, query: str, context: FilteredContext) -> str:
        """Assemble the answer text for a query.

        Args:
            query: The user's question
            context: Filtered retrieval results; only ``relevant`` documents
                contribute text, while ``mean_similarity`` selects the note

        Returns:
            Heading, up to five sentences and an optional confidence note,
            or a fixed message when nothing informative survives
        """
        contexts = self.extract_contexts(context)
        if not contexts:
            return NOT_RELEVANT_ENOUGH_ANSWER

        sentences = deduplicate_sentences(
            [sentence for text in contexts for sentence in split_sentences(text)]
        )
        if not sentences:
            return NOT_RELEVANT_ENOUGH_ANSWER

        category = classify_query(query)
        top = prioritize_sentences(sentences, query)
        logger.debug(
            f"Synthesizing {category.value} answer from {len(contexts)} contexts "
            f"({len(sentences)} unique sentences)"
        )

        return (
            CATEGORY_HEADINGS[category]
            + ". ".join(top)
            + "."
            + confidence_note(context.mean_similarity)
        )

    @staticmethod
    def extract_contexts(context: FilteredContext) -> list[str]:
        """Trimmed text of the top relevant documents, skipping short snippets."""
        texts = (doc.text.strip() for doc in context.relevant[:MAX_CONTEXTS])
        return [text for text in texts if len(text) > MIN_CONTEXT_LENGTH]
