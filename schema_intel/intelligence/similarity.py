"""
Lexical similarity between two texts, with key-phrase alignment.
"""

import re
import math
from collections import Counter
from typing import List

from .data_models import SemanticSimilarity, AlignedPhrase
from .text_utils import content_tokens, split_sentences, is_stopword, cosine_similarity

KEY_PHRASE_PATTERN = re.compile(r'\b([A-Z]?[a-z]+(?:\s+[A-Z]?[a-z]+){0,3})\b')
MAX_KEY_PHRASES = 20
MAX_ALIGNED_PHRASES = 10
ALIGNMENT_THRESHOLD = 0.5
PHRASE_CORPUS_SIZE = 1000


def compute_text_similarity(text1: str, text2: str) -> float:
    """
    Mean of Jaccard and term-frequency cosine similarity over stop-word-filtered tokens.

    Returns 0.0 when either side has no content tokens.
    """
    tokens1 = content_tokens(text1)
    tokens2 = content_tokens(text2)
    if not tokens1 or not tokens2:
        return 0.0

    set1, set2 = set(tokens1), set(tokens2)
    jaccard = len(set1 & set2) / len(set1 | set2)

    freq1, freq2 = Counter(tokens1), Counter(tokens2)
    terms = sorted(set1 | set2)
    cosine = cosine_similarity([freq1[t] for t in terms], [freq2[t] for t in terms])
    return (jaccard + cosine) / 2


def phrase_similarity(phrase1: str, phrase2: str) -> float:
    """Shared words over the mean phrase length."""
    words1 = phrase1.lower().split()
    words2 = phrase2.lower().split()
    if not words1 or not words2:
        return 0.0
    overlap = sum(1 for word in words1 if word in words2)
    return overlap / ((len(words1) + len(words2)) / 2)


def is_key_phrase(phrase: str) -> bool:
    words = phrase.split()
    if not 2 <= len(words) <= 4:
        return False
    stopword_count = sum(1 for word in words if is_stopword(word))
    return stopword_count < len(words) / 2


def extract_key_phrases(text: str) -> List[str]:
    """2-4 word phrases ranked by a simplified TF-IDF, top 20."""
    phrases = []
    for sentence in split_sentences(text):
        for match in KEY_PHRASE_PATTERN.finditer(sentence):
            if is_key_phrase(match.group(1)):
                phrases.append(match.group(1))

    def score(phrase: str) -> float:
        tf = len(re.findall(re.escape(phrase), text, re.I))
        return tf * math.log(PHRASE_CORPUS_SIZE / (tf + 1))

    unique = list(dict.fromkeys(phrases))
    unique.sort(key=score, reverse=True)
    return unique[:MAX_KEY_PHRASES]


def compute_semantic_similarity(text1: str, text2: str) -> SemanticSimilarity:
    """Overall text similarity plus up to ten aligned key-phrase pairs."""
    phrases2 = extract_key_phrases(text2)
    aligned = []
    for phrase1 in extract_key_phrases(text1):
        best_phrase, best_score = "", 0.0
        for phrase2 in phrases2:
            similarity = phrase_similarity(phrase1, phrase2)
            if similarity > best_score:
                best_phrase, best_score = phrase2, similarity
        if best_score > ALIGNMENT_THRESHOLD:
            aligned.append(AlignedPhrase(phrase1=phrase1, phrase2=best_phrase, similarity=best_score))

    return SemanticSimilarity(
        similarity=compute_text_similarity(text1, text2),
        aligned_phrases=aligned[:MAX_ALIGNED_PHRASES],
    )
