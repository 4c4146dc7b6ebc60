"""
Topic modeling over a small document collection.

A document-frequency filtered vocabulary feeds a document-term count matrix;
topic vectors start random and are refined for a fixed number of rounds by
re-weighting documents by their cosine similarity to each topic.
"""

import logging
from typing import List, Optional, Tuple

import numpy as np

from config import config
from .data_models import Topic
from .text_utils import tokenize, STOPWORDS

logger = logging.getLogger(__name__)

MIN_DF_RATIO = 0.1
MIN_DF_FLOOR = 2
MAX_DF_RATIO = 0.9
MAX_VOCABULARY = 1000


def is_valid_term(term: str) -> bool:
    return 2 < len(term) < 20 and term not in STOPWORDS and not term.isdigit()


def _l1_normalize(vector: np.ndarray) -> np.ndarray:
    total = vector.sum()
    if total == 0:
        return vector
    return vector / total


class TopicModeler:
    """Simplified non-negative factorization into keyword topics."""

    def __init__(self,
                 num_topics: int = 5,
                 iterations: int = 20,
                 top_keywords: int = 10,
                 seed: Optional[int] = None):
        """
        Initialize the topic modeler.

        Args:
            num_topics: Default number of topics to extract
            iterations: Fixed number of refinement rounds
            top_keywords: Keywords kept per topic
            seed: Seed for topic initialization; falls back to RANDOM_SEED,
                and runs are non-deterministic when both are unset
        """
        self.num_topics = num_topics
        self.iterations = iterations
        self.top_keywords = top_keywords
        self.seed = seed if seed is not None else config.RANDOM_SEED

    def build_vocabulary(self, documents: List[str]) -> List[str]:
        """Terms within the document-frequency band, most frequent first, capped at 1000."""
        term_freq = {}
        doc_freq = {}
        for document in documents:
            seen = set()
            for token in tokenize(document):
                if is_valid_term(token):
                    term_freq[token] = term_freq.get(token, 0) + 1
                    seen.add(token)
            for token in seen:
                doc_freq[token] = doc_freq.get(token, 0) + 1

        min_df = max(MIN_DF_FLOOR, len(documents) * MIN_DF_RATIO)
        max_df = len(documents) * MAX_DF_RATIO
        vocabulary = [term for term in term_freq if min_df <= doc_freq[term] <= max_df]
        vocabulary.sort(key=lambda term: term_freq[term], reverse=True)
        return vocabulary[:MAX_VOCABULARY]

    @staticmethod
    def document_term_matrix(documents: List[str], vocabulary: List[str]) -> np.ndarray:
        index = {term: i for i, term in enumerate(vocabulary)}
        matrix = np.zeros((len(documents), len(vocabulary)))
        for row, document in enumerate(documents):
            for token in tokenize(document):
                column = index.get(token)
                if column is not None:
                    matrix[row, column] += 1
        return matrix

    def extract_topics(self, documents: List[str], num_topics: Optional[int] = None) -> List[Topic]:
        """
        Extract topics from documents.

        Returns an empty list when no term survives the vocabulary filter,
        which is always the case for fewer than three documents.
        """
        num_topics = num_topics or self.num_topics
        vocabulary = self.build_vocabulary(documents)
        if not vocabulary or num_topics <= 0:
            logger.info(f"No topic vocabulary from {len(documents)} documents")
            return []

        matrix = self.document_term_matrix(documents, vocabulary)
        topic_matrix = self._factorize(matrix, num_topics)

        topics = []
        for vector in topic_matrix:
            top = np.argsort(-vector, kind="stable")[:self.top_keywords]
            keywords = [vocabulary[i] for i in top]
            topics.append(Topic(
                name=", ".join(keywords[:3]),
                keywords=keywords,
                weight=1.0 / num_topics,
                coherence=self.coherence(keywords, matrix, vocabulary),
            ))
        logger.info(f"Extracted {len(topics)} topics over {len(vocabulary)} terms")
        return topics

    def _factorize(self, matrix: np.ndarray, num_topics: int) -> np.ndarray:
        rng = np.random.default_rng(self.seed)
        topics = np.array([_l1_normalize(rng.random(matrix.shape[1])) for _ in range(num_topics)])
        doc_norms = np.linalg.norm(matrix, axis=1)

        for _ in range(self.iterations):
            for t in range(num_topics):
                topic_norm = np.linalg.norm(topics[t])
                denominator = doc_norms * topic_norm
                with np.errstate(divide="ignore", invalid="ignore"):
                    similarity = np.where(denominator > 0, matrix @ topics[t] / denominator, 0.0)
                topics[t] = _l1_normalize(similarity @ matrix)
        return topics

    @staticmethod
    def coherence(keywords: List[str], matrix: np.ndarray, vocabulary: List[str]) -> float:
        """Average share of documents in which each keyword pair co-occurs."""
        index = {term: i for i, term in enumerate(vocabulary)}
        present = matrix > 0
        pairs: List[Tuple[int, int]] = []
        for i in range(len(keywords) - 1):
            for j in range(i + 1, len(keywords)):
                if keywords[i] in index and keywords[j] in index:
                    pairs.append((index[keywords[i]], index[keywords[j]]))
        if not pairs or matrix.shape[0] == 0:
            return 0.0
        total = sum(float(np.mean(present[:, a] & present[:, b])) for a, b in pairs)
        return total / len(pairs)
