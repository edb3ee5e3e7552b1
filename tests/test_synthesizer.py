"""Tests for answer synthesis."""

import pytest

from f1rag import QueryCategory, RelevanceFilter, RetrievedDocument, Synthesizer, classify_query
from f1rag.synthesizer import (
    CATEGORY_HEADINGS,
    HIGH_CONFIDENCE_NOTE,
    MODERATE_CONFIDENCE_NOTE,
    NOT_RELEVANT_ENOUGH_ANSWER,
    confidence_note,
    deduplicate_sentences,
    jaccard_similarity,
    prioritize_sentences,
    query_words,
    split_sentences,
)


def _context(*docs):
    return RelevanceFilter().filter(list(docs))


def _doc(text, similarity=0.8, id="d"):
    return RetrievedDocument(id=id, text=text, similarity=similarity)


class TestClassifyQuery:
    @pytest.mark.parametrize(
        "query, expected",
        [
            ("Compare Hamilton vs Mercedes performance", QueryCategory.DRIVER),
            ("Ferrari history", QueryCategory.TEAM),
            ("Tell me about Monaco", QueryCategory.RACE),
            ("Who holds the fastest lap record?", QueryCategory.STATS),
            ("How does DRS work?", QueryCategory.RULES),
            ("What is Formula 1?", QueryCategory.GENERAL),
        ],
    )
    def test_categories(self, query, expected):
        assert classify_query(query) == expected

    def test_case_insensitive(self):
        assert classify_query("VERSTAPPEN") == QueryCategory.DRIVER


class TestSentenceHelpers:
    def test_split_keeps_long_sentences(self):
        text = "Short one. This sentence is clearly long enough!  Another long sentence follows here?"
        assert split_sentences(text) == [
            "This sentence is clearly long enough",
            "Another long sentence follows here",
        ]

    def test_jaccard(self):
        assert jaccard_similarity("a b c", "A B C") == 1.0
        assert jaccard_similarity("a b", "c d") == 0.0
        assert jaccard_similarity("", "") == 0.0

    def test_deduplicate_first_occurrence_wins(self):
        sentences = [
            "Lewis Hamilton won seven world titles",
            "lewis hamilton won seven world titles",
            "Michael Schumacher also won seven titles",
        ]
        assert deduplicate_sentences(sentences) == [sentences[0], sentences[2]]

    def test_deduplicate_cap(self):
        sentences = [f"unique sentence number {i} word{i}" for i in range(12)]
        assert len(deduplicate_sentences(sentences)) == 8

    def test_query_words(self):
        assert query_words("Who is Max Verstappen?") == ["verstappen"]

    def test_prioritize(self):
        query = "When did Verstappen win his first championship?"
        other = "Red Bull Racing is based in Milton Keynes in England"
        match = "Verstappen won his first championship in 2021"
        assert prioritize_sentences([other, match], query) == [match, other]

    def test_prioritize_is_stable(self):
        sentences = ["first sentence here", "second sentence here", "third sentence here"]
        assert prioritize_sentences(sentences, "nothing matches") == sentences

    def test_prioritize_limit(self):
        sentences = [f"sentence {i}" for i in range(9)]
        assert len(prioritize_sentences(sentences, "query")) == 5

    @pytest.mark.parametrize(
        "mean, note",
        [(0.71, HIGH_CONFIDENCE_NOTE), (0.7, MODERATE_CONFIDENCE_NOTE), (0.6, MODERATE_CONFIDENCE_NOTE), (0.5, "")],
    )
    def test_confidence_note(self, mean, note):
        assert confidence_note(mean) == note


class TestSynthesizer:
    def test_answer_layout(self):
        text = (
            "Ferrari is the oldest and most successful team in Formula 1 history. "
            "The Scuderia was founded by Enzo Ferrari in 1929."
        )
        answer = Synthesizer().synthesize("Tell me about Ferrari", _context(_doc(text, 0.6)))

        assert answer.startswith(CATEGORY_HEADINGS[QueryCategory.TEAM])
        assert "Ferrari is the oldest and most successful team in Formula 1 history. " in answer
        assert answer.endswith("The Scuderia was founded by Enzo Ferrari in 1929." + MODERATE_CONFIDENCE_NOTE)

    def test_identical_documents_not_duplicated(self):
        text = "Monaco is the most glamorous race on the calendar. The circuit runs through the streets of Monte Carlo."
        context = _context(_doc(text, 0.9, "a"), _doc(text, 0.9, "b"), _doc(text, 0.9, "c"))

        answer = Synthesizer().synthesize("Tell me about Monaco", context)

        assert answer.count("Monaco is the most glamorous race on the calendar") == 1
        assert answer.count("The circuit runs through the streets of Monte Carlo") == 1
        assert answer.endswith(HIGH_CONFIDENCE_NOTE)

    def test_only_top_three_relevant_documents_used(self):
        texts = [
            "Silverstone hosted the very first world championship round back in 1950.",
            "Monza is known as the temple of speed thanks to its long straights.",
            "Spa-Francorchamps features the famous Eau Rouge and Raidillon corners.",
            "Suzuka is a figure of eight layout owned by Honda in Japan.",
            "Interlagos sits in Sao Paulo and runs anticlockwise around a bowl.",
        ]
        docs = [_doc(text, 0.9, str(i)) for i, text in enumerate(texts)]
        answer = Synthesizer().synthesize("Famous circuits", _context(*docs))

        assert "Spa-Francorchamps features" in answer
        assert "Suzuka" not in answer
        assert "Interlagos" not in answer

    def test_short_documents_ignored(self):
        answer = Synthesizer().synthesize("Who is Lando Norris?", _context(_doc("Lando Norris, McLaren.", 0.9)))
        assert answer == NOT_RELEVANT_ENOUGH_ANSWER

    def test_no_usable_sentences(self):
        text = "Too short. Also short. Nope. Not this one. Nor this. Or this at all."
        answer = Synthesizer().synthesize("What is Formula 1?", _context(_doc(text, 0.9)))
        assert answer == NOT_RELEVANT_ENOUGH_ANSWER

    def test_irrelevant_documents_ignored(self):
        relevant = _doc("Fernando Alonso won world championships with Renault in 2005 and 2006.", 0.9, "a")
        weak = _doc("Weakly related passage that should never be quoted in the final answer.", 0.1, "b")

        answer = Synthesizer().synthesize("Alonso titles", _context(weak, relevant))

        assert "Fernando Alonso won world championships" in answer
        assert "Weakly related passage" not in answer
