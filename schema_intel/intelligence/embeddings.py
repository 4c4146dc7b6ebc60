"""
Feature-based text embeddings and an in-memory embedding store.

Each vector has four contiguous bands:
  0-299    TF-IDF weights against a bootstrapped vocabulary
  300-499  rule-based semantic features (schema-type hits, text shape, industry overlap)
  500-699  n-gram features (key bigram counts, n-gram diversity)
  700-767  contextual features (sentiment, action and temporal word ratios)

Vectors are L2-normalized so cosine similarity is a dot product. The store
is a cache, not a database: callers serialize access themselves and may
export, import or clear it at any time.
"""

import math
import uuid
import logging
from datetime import datetime, timezone
from functools import lru_cache
from typing import List, Dict, Any, Optional, Tuple, Union, Iterable

import numpy as np

from config import config
from .data_models import Entity, VectorEmbedding, EmbeddingMetadata, SimilarityResult
from .text_utils import content_tokens, l2_normalize, cosine_similarity

logger = logging.getLogger(__name__)


TFIDF_BAND = (0, 300)
SEMANTIC_BAND = (300, 500)
NGRAM_BAND = (500, 700)
CONTEXT_START = 700

BOOTSTRAP_VOCABULARY = [
    # Schema types
    "article", "blogposting", "product", "review", "recipe", "howto",
    "event", "organization", "person", "place", "service", "offer",
    # Common properties
    "name", "description", "author", "publisher", "date", "image",
    "price", "rating", "location", "address", "phone", "email",
    # Industries
    "technology", "business", "health", "education", "fitness",
    "food", "travel", "entertainment", "sports", "fashion",
    # Actions
    "buy", "sell", "learn", "teach", "create", "make", "build",
    "develop", "design", "improve", "optimize", "analyze",
]
DEFAULT_IDF = math.log(100)

SCHEMA_TYPE_KEYWORDS = [
    "article", "blog", "product", "review", "recipe", "howto",
    "event", "job", "course", "faq", "video", "local",
]

INDUSTRY_KEYWORDS: Dict[str, List[str]] = {
    "tech": ["software", "app", "digital", "tech"],
    "health": ["health", "medical", "doctor", "patient"],
    "finance": ["money", "invest", "finance", "bank"],
    "education": ["learn", "course", "student", "teach"],
    "ecommerce": ["buy", "shop", "product", "price"],
}

IMPORTANT_BIGRAMS = [
    "how_to", "step_by", "by_step", "product_review", "best_practices",
    "getting_started", "complete_guide", "ultimate_guide", "for_beginners",
]

POSITIVE_WORDS = ["good", "great", "excellent", "best", "amazing", "love"]
NEGATIVE_WORDS = ["bad", "poor", "worst", "terrible", "hate", "awful"]
ACTION_WORDS = ["create", "make", "build", "develop", "design", "implement"]
TEMPORAL_WORDS = ["today", "tomorrow", "yesterday", "now", "soon", "recent"]

STORED_TEXT_LENGTH = 500
KMEANS_ITERATIONS = 50

Vector = Union[np.ndarray, List[float]]


def _keyword_ratio(text: str, words: Iterable[str]) -> float:
    words = list(words)
    return sum(1 for word in words if word in text) / len(words)


class EmbeddingModel:
    """Turns text into a fixed-length feature vector."""

    def __init__(self,
                 vocabulary: List[str],
                 idf: Optional[Dict[str, float]] = None,
                 dimension: Optional[int] = None):
        self.dimension = dimension or config.EMBEDDING_DIMENSION
        if self.dimension <= CONTEXT_START:
            raise ValueError(f"Embedding dimension must exceed {CONTEXT_START}, got {self.dimension}")
        self.vocabulary = {term: i for i, term in enumerate(vocabulary[:TFIDF_BAND[1]])}
        self.idf = idf or {}

    @classmethod
    @lru_cache(maxsize=1)
    def default(cls) -> "EmbeddingModel":
        """Process-wide model over the bootstrap vocabulary, built on first use."""
        logger.debug(f"Building default embedding model with {len(BOOTSTRAP_VOCABULARY)} terms")
        return cls(BOOTSTRAP_VOCABULARY)

    def vectorize(self, text: str) -> np.ndarray:
        """Embed text; the result has unit length unless every feature is zero."""
        text = text or ""
        tokens = content_tokens(text)
        vector = np.zeros(self.dimension)

        start, end = TFIDF_BAND
        tfidf = self.tfidf_features(tokens)
        vector[start:start + len(tfidf)] = tfidf[:end - start]

        start, end = SEMANTIC_BAND
        semantic = self.semantic_features(text)
        vector[start:start + len(semantic)] = semantic[:end - start]

        start, end = NGRAM_BAND
        ngrams = self.ngram_features(tokens)
        vector[start:start + len(ngrams)] = ngrams[:end - start]

        context = self.contextual_features(text)
        span = self.dimension - CONTEXT_START
        vector[CONTEXT_START:CONTEXT_START + min(span, len(context))] = context[:span]

        return l2_normalize(vector)

    def tfidf_features(self, tokens: List[str]) -> List[float]:
        features = [0.0] * len(self.vocabulary)
        if not tokens:
            return features
        counts: Dict[str, int] = {}
        for token in tokens:
            counts[token] = counts.get(token, 0) + 1
        for term, index in self.vocabulary.items():
            tf = counts.get(term, 0) / len(tokens)
            features[index] = tf * self.idf.get(term, DEFAULT_IDF)
        return features

    @staticmethod
    def semantic_features(text: str) -> List[float]:
        lowered = text.lower()
        features = [1.0 if keyword in lowered else 0.0 for keyword in SCHEMA_TYPE_KEYWORDS]

        features.append(len(text) / 1000)
        features.append(text.count("?") / 10)
        features.append(sum(1 for c in text if c.isdigit()) / 10)
        features.append(sum(1 for c in text if c.isupper()) / len(text) if text else 0.0)
        features.append(text.count("\n") / 10)

        for keywords in INDUSTRY_KEYWORDS.values():
            features.append(_keyword_ratio(lowered, keywords))
        return features

    @staticmethod
    def ngram_features(tokens: List[str]) -> List[float]:
        bigrams: Dict[str, int] = {}
        for i in range(len(tokens) - 1):
            key = f"{tokens[i]}_{tokens[i + 1]}"
            bigrams[key] = bigrams.get(key, 0) + 1
        trigrams = {f"{tokens[i]}_{tokens[i + 1]}_{tokens[i + 2]}" for i in range(len(tokens) - 2)}

        features = [float(bigrams.get(bigram, 0)) for bigram in IMPORTANT_BIGRAMS]
        if tokens:
            features.append(len(bigrams) / len(tokens))
            features.append(len(trigrams) / len(tokens))
        else:
            features.extend([0.0, 0.0])
        return features

    @staticmethod
    def contextual_features(text: str) -> List[float]:
        lowered = text.lower()
        return [
            _keyword_ratio(lowered, POSITIVE_WORDS),
            _keyword_ratio(lowered, NEGATIVE_WORDS),
            _keyword_ratio(lowered, ACTION_WORDS),
            _keyword_ratio(lowered, TEMPORAL_WORDS),
        ]


def _similarity_matrix(points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Pairwise cosine similarity; rows or centroids with zero norm score 0."""
    point_norms = np.linalg.norm(points, axis=1, keepdims=True)
    centroid_norms = np.linalg.norm(centroids, axis=1, keepdims=True)
    denominator = point_norms @ centroid_norms.T
    with np.errstate(divide="ignore", invalid="ignore"):
        similarity = np.where(denominator > 0, (points @ centroids.T) / denominator, 0.0)
    return similarity


def assign_to_centroids(points: np.ndarray, centroids: np.ndarray) -> np.ndarray:
    """Index of the nearest centroid by cosine distance for every point."""
    return np.argmax(_similarity_matrix(points, centroids), axis=1)


def kmeans_plus_plus(points: np.ndarray, k: int, rng: np.random.Generator) -> np.ndarray:
    """Seed centroids, picking each new one with probability proportional to its cosine distance."""
    chosen = [int(rng.integers(len(points)))]
    while len(chosen) < k:
        similarity = _similarity_matrix(points, points[chosen])
        distances = np.clip(1.0 - similarity.max(axis=1), 0.0, None)
        total = distances.sum()
        if total > 0:
            probabilities = distances / total
        else:
            probabilities = np.full(len(points), 1.0 / len(points))
        chosen.append(int(rng.choice(len(points), p=probabilities)))
    return points[chosen].astype(float).copy()


def kmeans(points: np.ndarray,
           k: int,
           iterations: int = KMEANS_ITERATIONS,
           rng: Optional[np.random.Generator] = None) -> Tuple[np.ndarray, np.ndarray]:
    """
    Spherical k-means with k-means++ seeding.

    Runs a fixed number of reassignment rounds. A cluster that loses all its
    points keeps a zero centroid. The returned assignment is recomputed
    against the final centroids, so every point sits with its nearest one.

    Returns:
        Tuple of (assignments, centroids)
    """
    rng = rng or np.random.default_rng()
    centroids = kmeans_plus_plus(points, k, rng)
    for _ in range(iterations):
        assignments = assign_to_centroids(points, centroids)
        for c in range(k):
            members = points[assignments == c]
            if len(members):
                centroids[c] = l2_normalize(members.mean(axis=0))
            else:
                centroids[c] = np.zeros(points.shape[1])
    return assign_to_centroids(points, centroids), centroids


class EmbeddingStore:
    """In-memory embedding cache with similarity search and clustering."""

    def __init__(self, model: Optional[EmbeddingModel] = None, seed: Optional[int] = None):
        """
        Initialize the store.

        Args:
            model: Embedding model; the shared default model when omitted
            seed: Seed for clustering; falls back to RANDOM_SEED
        """
        self.model = model or EmbeddingModel.default()
        self.seed = seed if seed is not None else config.RANDOM_SEED
        self._vectors: Dict[str, np.ndarray] = {}
        self._metadata: Dict[str, EmbeddingMetadata] = {}

    def __len__(self) -> int:
        return len(self._vectors)

    def __contains__(self, embedding_id: str) -> bool:
        return embedding_id in self._vectors

    def embed(self,
              text: str,
              embedding_id: Optional[str] = None,
              embedding_type: str = "text",
              source: Optional[str] = None) -> VectorEmbedding:
        """Embed text and store the vector under the given or a generated id."""
        embedding_id = embedding_id or f"emb-{uuid.uuid4().hex[:12]}"
        vector = self.model.vectorize(text)
        metadata = EmbeddingMetadata(
            text=(text or "")[:STORED_TEXT_LENGTH],
            type=embedding_type,
            source=source,
            timestamp=datetime.now(timezone.utc).isoformat(),
        )
        self._vectors[embedding_id] = vector
        self._metadata[embedding_id] = metadata
        return VectorEmbedding(id=embedding_id, vector=vector.tolist(), metadata=metadata)

    def embed_entity(self, entity: Entity, context: str = "") -> VectorEmbedding:
        text = f"{entity.name} {entity.type} {entity.context} {context}"
        return self.embed(text, f"entity-{entity.name}", "entity", entity.name)

    def embed_schema_type(self, schema_type: str, properties: List[str]) -> VectorEmbedding:
        text = f"{schema_type} {' '.join(properties)}"
        return self.embed(text, f"schema-{schema_type}", "schema", schema_type)

    def get(self, embedding_id: str) -> Optional[VectorEmbedding]:
        if embedding_id not in self._vectors:
            return None
        return VectorEmbedding(
            id=embedding_id,
            vector=self._vectors[embedding_id].tolist(),
            metadata=self._metadata[embedding_id],
        )

    def find_similar(self,
                     query: Union[str, Vector],
                     k: int = 5,
                     threshold: float = 0.5) -> List[SimilarityResult]:
        """
        Stored embeddings most similar to a query.

        Args:
            query: Text (embedded on the fly, not stored) or a vector
            k: Maximum number of results
            threshold: Minimum cosine similarity

        Returns:
            Results ordered by descending similarity, ties broken by id
        """
        vector = self.model.vectorize(query) if isinstance(query, str) else np.asarray(query, dtype=float)
        results = []
        for embedding_id, stored in self._vectors.items():
            similarity = cosine_similarity(vector, stored)
            if similarity >= threshold:
                results.append(SimilarityResult(
                    id=embedding_id, similarity=similarity, metadata=self._metadata[embedding_id]
                ))
        results.sort(key=lambda r: (-r.similarity, r.id))
        return results[:k]

    def cluster(self, k: int, seed: Optional[int] = None,
                iterations: int = KMEANS_ITERATIONS) -> Dict[str, List[str]]:
        """
        Group stored embeddings into k clusters.

        Returns:
            "cluster-<n>" -> embedding ids; clusters that end up empty map to []
        """
        ids = list(self._vectors)
        if not ids or k <= 0:
            return {}
        k = min(k, len(ids))

        points = np.array([self._vectors[i] for i in ids])
        rng = np.random.default_rng(seed if seed is not None else self.seed)
        assignments, _ = kmeans(points, k, iterations, rng)

        clusters = {f"cluster-{c}": [] for c in range(k)}
        for embedding_id, c in zip(ids, assignments):
            clusters[f"cluster-{int(c)}"].append(embedding_id)
        logger.info(f"Clustered {len(ids)} embeddings into {k} clusters")
        return clusters

    def export_embeddings(self) -> List[Dict[str, Any]]:
        """Plain JSON-serializable records for every stored embedding."""
        return [self.get(embedding_id).model_dump() for embedding_id in self._vectors]

    def import_embeddings(self, data: Iterable[Union[Dict[str, Any], VectorEmbedding]]) -> int:
        """
        Load exported records, replacing entries with the same id.

        Vectors are re-normalized to unit length. Nothing is stored when any
        record has the wrong dimension.

        Returns:
            Number of records loaded

        Raises:
            ValueError: If a vector length differs from the model dimension
        """
        embeddings = [
            record if isinstance(record, VectorEmbedding) else VectorEmbedding.model_validate(record)
            for record in data
        ]
        for embedding in embeddings:
            if len(embedding.vector) != self.model.dimension:
                raise ValueError(
                    f"Embedding {embedding.id!r} has {len(embedding.vector)} dimensions, "
                    f"expected {self.model.dimension}"
                )

        for embedding in embeddings:
            self._vectors[embedding.id] = l2_normalize(embedding.vector)
            self._metadata[embedding.id] = embedding.metadata
        logger.info(f"Imported {len(embeddings)} embeddings")
        return len(embeddings)

    def clear(self) -> None:
        self._vectors.clear()
        self._metadata.clear()
