"""
Intelligence module for semantic analysis of extracted page content.

Combines:
- Lexicon, brand and phrase based entity recognition
- Regex named-entity recognition with relation extraction
- Entity knowledge graphs with importance and clustering
- Sentiment, topics, text similarity and feature embeddings
- Schema.org type recommendation
"""

from .data_models import (
    Entity, NamedEntity, EntityRelation, GraphNode, GraphEdge, KnowledgeGraph,
    AspectSentiment, SentimentAnalysis, Topic, AlignedPhrase, SemanticSimilarity,
    EmbeddingMetadata, VectorEmbedding, SimilarityResult, ContentFeatures,
    SchemaRecommendation, SchemaValidation, ContentAnalysis
)
from .entity_recognizer import EntityRecognizer, merge_entities
from .named_entities import NamedEntityRecognizer
from .content_analyzer import ContentAnalyzer
from .knowledge_graph import KnowledgeGraphBuilder
from .sentiment import SentimentAnalyzer
from .topic_model import TopicModeler
from .similarity import compute_text_similarity, compute_semantic_similarity
from .embeddings import EmbeddingModel, EmbeddingStore
from .recommender import SchemaRecommender

__all__ = [
    "Entity",
    "NamedEntity",
    "EntityRelation",
    "GraphNode",
    "GraphEdge",
    "KnowledgeGraph",
    "AspectSentiment",
    "SentimentAnalysis",
    "Topic",
    "AlignedPhrase",
    "SemanticSimilarity",
    "EmbeddingMetadata",
    "VectorEmbedding",
    "SimilarityResult",
    "ContentFeatures",
    "SchemaRecommendation",
    "SchemaValidation",
    "ContentAnalysis",
    "EntityRecognizer",
    "merge_entities",
    "NamedEntityRecognizer",
    "ContentAnalyzer",
    "KnowledgeGraphBuilder",
    "SentimentAnalyzer",
    "TopicModeler",
    "compute_text_similarity",
    "compute_semantic_similarity",
    "EmbeddingModel",
    "EmbeddingStore",
    "SchemaRecommender"
]
