"""
Shared text and vector helpers: tokenization, sentence splitting, stop-word
filtering, name normalization and cosine similarity.
"""

import re
from typing import List, Iterable, Sequence, Union

import nltk
import numpy as np
from nltk.corpus import stopwords
from nltk.tokenize import word_tokenize

# Download required NLTK data
try:
    nltk.data.find('tokenizers/punkt_tab')
except LookupError:
    nltk.download('punkt_tab')

try:
    nltk.data.find('corpora/stopwords')
except LookupError:
    nltk.download('stopwords')

# Modal and filler words the NLTK list leaves out
EXTRA_STOPWORDS = frozenset(["also", "could", "would", "may", "might", "must", "shall", "need", "ought"])
STOPWORDS = frozenset(stopwords.words('english')) | EXTRA_STOPWORDS

SENTENCE_PATTERN = re.compile(r'[^.!?]+[.!?]+')
PUNCTUATION_PATTERN = re.compile(r'[^\w\s]')

Vector = Union[np.ndarray, Sequence[float]]


def tokenize(text: str) -> List[str]:
    """Lowercase, replace punctuation with spaces and split with NLTK's word tokenizer."""
    text = PUNCTUATION_PATTERN.sub(" ", (text or "").lower())
    return [token for token in word_tokenize(text) if token.isalnum()]


def content_tokens(text: str) -> List[str]:
    """Tokens with stop words removed."""
    return [token for token in tokenize(text) if token not in STOPWORDS]


def is_stopword(word: str) -> bool:
    return word.lower() in STOPWORDS


def split_sentences(text: str) -> List[str]:
    """
    Split text on terminal punctuation.

    Text without any terminal punctuation is returned as one sentence; a
    trailing fragment after the last terminator is kept as its own sentence.
    """
    if not text or not text.strip():
        return []
    matches = list(SENTENCE_PATTERN.finditer(text))
    if not matches:
        return [text.strip()]
    sentences = [match.group(0).strip() for match in matches]
    tail = text[matches[-1].end():].strip()
    if tail:
        sentences.append(tail)
    return [sentence for sentence in sentences if sentence]


def normalize_name(name: str) -> str:
    """Deduplication key: lowercased with whitespace collapsed."""
    return " ".join((name or "").lower().split())


def slugify(name: str) -> str:
    slug = re.sub(r'[^a-z0-9]+', '-', (name or "").lower())
    return slug.strip("-")


def name_pattern(name: str) -> re.Pattern:
    """
    Case-insensitive whole-word pattern for a name.

    Words may be separated by whitespace, hyphens or nothing, so "VO2 Max"
    also matches "VO2max" and "vo2-max".
    """
    words = [re.escape(word) for word in re.split(r'[\s-]+', name.strip()) if word]
    return re.compile(r'(?<!\w)' + r'[\s-]*'.join(words) + r'(?!\w)', re.I)


def count_occurrences(name: str, text: str, synonyms: Iterable[str] = ()) -> int:
    """Count non-overlapping occurrences of a name or any of its synonyms."""
    if not name or not text:
        return 0
    spans = set()
    for variant in [name, *synonyms]:
        if not variant or not variant.strip():
            continue
        for match in name_pattern(variant).finditer(text):
            if not any(match.start() < end and start < match.end() for start, end in spans):
                spans.add((match.start(), match.end()))
    return len(spans)


def l2_normalize(vector: Vector) -> np.ndarray:
    """Scale to unit length; an all-zero vector stays all-zero."""
    array = np.asarray(vector, dtype=float)
    norm = np.linalg.norm(array)
    if norm == 0:
        return array
    return array / norm


def cosine_similarity(vec1: Vector, vec2: Vector) -> float:
    """Cosine similarity in [-1, 1]; 0.0 for zero vectors or mismatched lengths."""
    a = np.asarray(vec1, dtype=float)
    b = np.asarray(vec2, dtype=float)
    if a.shape != b.shape or a.size == 0:
        return 0.0

    norm1 = np.linalg.norm(a)
    norm2 = np.linalg.norm(b)
    if norm1 == 0 or norm2 == 0:
        return 0.0
    if np.array_equal(a, b):
        return 1.0
    return float(np.clip(np.dot(a, b) / (norm1 * norm2), -1.0, 1.0))
