"""
Tests for sentiment, topic modeling and text similarity
"""
import pytest

from schema_intel.intelligence import (
    SentimentAnalyzer, TopicModeler, compute_text_similarity, compute_semantic_similarity
)
from schema_intel.intelligence.text_utils import (
    cosine_similarity, count_occurrences, split_sentences, tokenize, content_tokens, is_stopword
)


TOPIC_DOCUMENTS = [
    "glass bong cleaning alcohol salt",
    "glass bong cleaning water rinse",
    "running training heart interval",
    "running training heart recovery",
    "glass cleaning salt water",
]


@pytest.fixture
def sentiment():
    """Provide a sentiment analyzer with the built-in lexicon"""
    return SentimentAnalyzer()


class TestSentimentAnalyzer:
    """Test document and aspect sentiment"""

    def test_positive(self, sentiment):
        result = sentiment.analyze("Excellent kit! Great glass.")
        assert result.overall == "positive"
        assert result.score == pytest.approx(0.4)

    def test_negative(self, sentiment):
        assert sentiment.analyze("Terrible kit.").overall == "negative"

    def test_neutral(self, sentiment):
        result = sentiment.analyze("The kit arrived on Tuesday.")
        assert result.overall == "neutral"
        assert result.score == 0.0

    def test_negation_flips_polarity(self, sentiment):
        assert sentiment.sentence_score("good") > 0
        assert sentiment.sentence_score("not good") == pytest.approx(-0.3)

    def test_negation_waits_for_next_sentiment_word(self, sentiment):
        # "not" and "really" both carry over "a" and land on "good"
        assert sentiment.sentence_score("not really a good kit") == pytest.approx(-0.9 / 5)
        assert sentiment.sentence_score("not good, good") == pytest.approx(0.0)

    def test_intensifier(self, sentiment):
        assert sentiment.sentence_score("very good") > sentiment.sentence_score("somewhat good")

    def test_modifiers_apply_to_next_word_only(self, sentiment):
        # "not" flips "good" but leaves "great" alone
        assert sentiment.sentence_score("not good but great") == pytest.approx(0.1 / 4)

    def test_mixed_aspects(self, sentiment):
        result = sentiment.analyze("The quality is excellent. The price is terrible.")
        assert result.overall == "mixed"
        by_aspect = {aspect.aspect: aspect for aspect in result.aspects}
        assert by_aspect["quality"].sentiment == "positive"
        assert by_aspect["price"].sentiment == "negative"

    def test_scores_bounded(self, sentiment):
        result = sentiment.analyze("Absolutely excellent. Extremely perfect!")
        assert -1.0 <= result.score <= 1.0
        assert 0.0 <= result.confidence <= 1.0

    def test_confidence(self):
        assert SentimentAnalyzer.confidence("x" * 1000, 0.5) == pytest.approx(0.75)
        assert SentimentAnalyzer.confidence("", 0.0) == 0.0

    def test_empty_text(self, sentiment):
        result = sentiment.analyze("")
        assert result.overall == "neutral"
        assert result.score == 0.0
        assert result.aspects == []


class TestTopicModeler:
    """Test keyword topic extraction"""

    def test_vocabulary_band(self):
        vocabulary = TopicModeler().build_vocabulary(TOPIC_DOCUMENTS)
        assert set(vocabulary) == {"glass", "bong", "cleaning", "salt", "water", "running", "training", "heart"}

    def test_document_frequency_bounds(self):
        # ten documents: kept terms appear in at least 2 and at most 9 of them
        documents = [
            " ".join(["common"] + ["nine"] * (i < 9) + ["pair"] * (i < 2) + ["rare"] * (i == 0))
            for i in range(10)
        ]
        assert set(TopicModeler().build_vocabulary(documents)) == {"nine", "pair"}

    def test_minimum_frequency_scales_with_collection(self):
        # thirty documents: a term needs 3 documents
        documents = [
            " ".join(["filler"] * (i % 2) + ["pair"] * (i < 2) + ["trio"] * (i < 3))
            for i in range(30)
        ]
        assert set(TopicModeler().build_vocabulary(documents)) == {"filler", "trio"}

    def test_seeded_runs_are_deterministic(self):
        first = TopicModeler(num_topics=2, seed=7).extract_topics(TOPIC_DOCUMENTS)
        second = TopicModeler(num_topics=2, seed=7).extract_topics(TOPIC_DOCUMENTS)
        assert [topic.model_dump() for topic in first] == [topic.model_dump() for topic in second]

    def test_topic_shape(self):
        topics = TopicModeler(num_topics=2, top_keywords=5, seed=7).extract_topics(TOPIC_DOCUMENTS)
        assert len(topics) == 2
        for topic in topics:
            assert len(topic.keywords) == 5
            assert topic.name == ", ".join(topic.keywords[:3])
            assert topic.weight == pytest.approx(0.5)
            assert 0.0 <= topic.coherence <= 1.0

    def test_too_few_documents(self):
        assert TopicModeler(seed=1).extract_topics(["glass bong", "glass bong"]) == []

    def test_no_documents(self):
        assert TopicModeler(seed=1).extract_topics([]) == []


class TestTextSimilarity:
    """Test lexical similarity helpers"""

    def test_identical(self):
        text = "Regular bong cleaning keeps the glass clear."
        assert compute_text_similarity(text, text) == pytest.approx(1.0)

    def test_no_overlap(self):
        assert compute_text_similarity("glass bong cleaning", "running shoes review") == 0.0

    def test_empty(self):
        assert compute_text_similarity("", "glass") == 0.0
        assert compute_text_similarity("the and of", "glass") == 0.0

    def test_symmetric_and_bounded(self):
        a = "Rinse the bong with warm water and salt."
        b = "Warm water and alcohol clean glass fast."
        assert compute_text_similarity(a, b) == pytest.approx(compute_text_similarity(b, a))
        assert 0.0 < compute_text_similarity(a, b) < 1.0

    def test_semantic_similarity_alignment(self):
        text = "Regular bong cleaning keeps glass clear."
        result = compute_semantic_similarity(text, text)
        assert result.similarity == pytest.approx(1.0)
        assert result.aligned_phrases
        assert all(pair.similarity == pytest.approx(1.0) for pair in result.aligned_phrases)

    def test_semantic_similarity_limits(self):
        result = compute_semantic_similarity(
            "Glass water pipes need regular cleaning routines.",
            "Running shoes wear out after many long miles.",
        )
        assert len(result.aligned_phrases) <= 10
        assert all(pair.similarity > 0.5 for pair in result.aligned_phrases)


class TestVectorHelpers:
    """Test cosine similarity and text helpers"""

    def test_cosine_properties(self):
        a, b = [1.0, 2.0, 0.5], [0.5, -1.0, 3.0]
        assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))
        assert -1.0 <= cosine_similarity(a, b) <= 1.0
        assert cosine_similarity(a, a) == pytest.approx(1.0)
        assert cosine_similarity(a, [-x for x in a]) == pytest.approx(-1.0)

    def test_cosine_of_identical_vectors_is_exact(self):
        vector = [0.1, 0.2, 0.3]
        assert cosine_similarity(vector, vector) == 1.0
        assert cosine_similarity(vector, [0.2, 0.4, 0.6]) == pytest.approx(1.0)

    def test_cosine_degenerate(self):
        assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0
        assert cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0]) == 0.0
        assert cosine_similarity([], []) == 0.0

    def test_count_occurrences_with_synonyms(self):
        text = "VO2 Max rises. Your vo2-max and VO2max both count, as does maximal oxygen uptake."
        assert count_occurrences("VO2 Max", text, ["maximal oxygen uptake"]) == 4

    def test_split_sentences(self):
        assert split_sentences("One. Two! Three") == ["One.", "Two!", "Three"]
        assert split_sentences("   ") == []

    def test_tokenize_strips_punctuation(self):
        assert tokenize("Step 1: Rinse, then shake!") == ["step", "1", "rinse", "then", "shake"]
        assert tokenize("VO2-max") == ["vo2", "max"]
        assert tokenize("") == []

    def test_stop_words(self):
        assert content_tokens("The bong and the glass") == ["bong", "glass"]
        assert is_stopword("Yourselves")
        assert is_stopword("would")
        assert not is_stopword("glass")
