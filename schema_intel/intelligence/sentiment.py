"""
Lexicon-based sentiment analysis with aspect scoring.
"""

import logging
from typing import List, Dict, Optional

from .data_models import SentimentAnalysis, AspectSentiment
from .text_utils import tokenize, split_sentences

logger = logging.getLogger(__name__)


SENTIMENT_LEXICON: Dict[str, float] = {
    # Positive
    "excellent": 0.9, "amazing": 0.9, "wonderful": 0.8, "fantastic": 0.8,
    "great": 0.7, "good": 0.6, "nice": 0.5, "positive": 0.5,
    "love": 0.8, "perfect": 0.9, "best": 0.8, "happy": 0.7,
    "recommend": 0.6, "enjoy": 0.6, "satisfied": 0.7, "impressed": 0.7,
    # Negative
    "terrible": -0.9, "awful": -0.9, "horrible": -0.8, "bad": -0.7,
    "poor": -0.6, "disappointed": -0.7, "hate": -0.8, "worst": -0.9,
    "useless": -0.8, "broken": -0.7, "failed": -0.7, "disappointing": -0.7,
    # Weak
    "okay": 0.1, "average": 0.0, "mediocre": -0.2, "fine": 0.2,
}

INTENSIFIERS: Dict[str, float] = {
    "very": 1.5, "extremely": 2.0, "really": 1.5, "absolutely": 2.0,
    "completely": 1.8, "totally": 1.8, "quite": 1.3, "somewhat": 0.8,
}

NEGATIONS = frozenset(["not", "never", "no", "nothing", "neither", "nor", "cannot", "none"])

ASPECT_KEYWORDS = [
    "quality", "price", "service", "delivery", "support",
    "performance", "design", "features", "usability", "value",
]

ASPECT_WINDOW = 5
MAX_ASPECTS = 10
POSITIVE_THRESHOLD = 0.2
NEGATIVE_THRESHOLD = -0.2
CONFIDENCE_LENGTH = 500


def classify_score(score: float) -> str:
    if score > POSITIVE_THRESHOLD:
        return "positive"
    if score < NEGATIVE_THRESHOLD:
        return "negative"
    return "neutral"


def _clamp(value: float) -> float:
    return max(-1.0, min(1.0, value))


class SentimentAnalyzer:
    """Scores document polarity sentence by sentence."""

    def __init__(self,
                 lexicon: Optional[Dict[str, float]] = None,
                 intensifiers: Optional[Dict[str, float]] = None,
                 negations: Optional[frozenset] = None,
                 aspects: Optional[List[str]] = None):
        self.lexicon = lexicon if lexicon is not None else SENTIMENT_LEXICON
        self.intensifiers = intensifiers if intensifiers is not None else INTENSIFIERS
        self.negations = negations if negations is not None else NEGATIONS
        self.aspects = aspects if aspects is not None else ASPECT_KEYWORDS

    def analyze(self, text: str) -> SentimentAnalysis:
        """
        Analyze sentiment of a document.

        The document score is the mean of sentence scores. The overall label
        is "mixed" whenever aspects of both polarities were found.
        """
        sentences = split_sentences(text)
        aspects: List[AspectSentiment] = []
        scores = []
        for sentence in sentences:
            scores.append(self.sentence_score(sentence))
            aspects.extend(self.aspect_sentiment(sentence))

        score = sum(scores) / len(scores) if scores else 0.0
        overall = classify_score(score)
        labels = {aspect.sentiment for aspect in aspects}
        if "positive" in labels and "negative" in labels:
            overall = "mixed"

        return SentimentAnalysis(
            overall=overall,
            score=score,
            confidence=self.confidence(text, score),
            aspects=aspects[:MAX_ASPECTS],
        )

    def sentence_score(self, sentence: str) -> float:
        """
        Sum of modified word polarities divided by the token count, clamped to [-1, 1].

        Pending intensifiers and negations apply to the next sentiment word
        only and are then cleared.
        """
        tokens = tokenize(sentence)
        if not tokens:
            return 0.0

        score = 0.0
        modifiers: List[float] = []
        for token in tokens:
            if token in self.negations:
                modifiers.append(-1.0)
            elif token in self.intensifiers:
                modifiers.append(self.intensifiers[token])
            elif token in self.lexicon:
                value = self.lexicon[token]
                for modifier in modifiers:
                    value *= modifier
                score += value
                modifiers = []
        return _clamp(score / len(tokens))

    def aspect_sentiment(self, sentence: str) -> List[AspectSentiment]:
        tokens = tokenize(sentence)
        results = []
        for aspect in self.aspects:
            positions = [i for i, token in enumerate(tokens) if token == aspect]
            if not positions:
                continue
            score = 0.0
            for position in positions:
                low = max(0, position - ASPECT_WINDOW)
                high = min(len(tokens), position + ASPECT_WINDOW + 1)
                for i in range(low, high):
                    if i == position:
                        continue
                    polarity = self.lexicon.get(tokens[i])
                    if polarity:
                        score += polarity / abs(i - position)
            score = _clamp(score)
            if score != 0:
                results.append(AspectSentiment(aspect=aspect, sentiment=classify_score(score), score=score))
        return results

    @staticmethod
    def confidence(text: str, score: float) -> float:
        """Blend of text length (saturating at 500 characters) and score magnitude."""
        length_factor = min(1.0, len(text or "") / CONFIDENCE_LENGTH)
        return (length_factor + abs(score)) / 2
