"""
Data models for the intelligence module.

Entities, named entities and their relations, the knowledge graph, semantic
signals (sentiment, topics, embeddings) and schema recommendations.
"""

from typing import List, Dict, Any, Optional
from pydantic import BaseModel, Field


class Entity(BaseModel):
    """A named thing found in page text."""
    name: str
    type: str  # person, organization, product, service, concept, location, event, medical, fitness, material, brand
    confidence: float = Field(ge=0.0, le=1.0)
    context: str = ""
    synonyms: List[str] = Field(default_factory=list)
    same_as: List[str] = Field(default_factory=list)
    category: Optional[str] = None
    mentions: int = 1


class NamedEntity(BaseModel):
    """A typed span found by the general named-entity recognizer."""
    text: str
    type: str  # PERSON, ORGANIZATION, LOCATION, DATE, MONEY, PRODUCT, EVENT, TECHNOLOGY
    start: int
    end: int
    confidence: float
    metadata: Dict[str, Any] = Field(default_factory=dict)


class EntityRelation(BaseModel):
    """Subject-predicate-object relation between two named entities."""
    subject: NamedEntity
    predicate: str
    object: NamedEntity
    confidence: float
    context: str = ""


class GraphNode(BaseModel):
    """Knowledge graph node wrapping an entity."""
    id: str
    name: str
    type: str
    importance: float = 0.0
    mentions: int = 1
    properties: Dict[str, Any] = Field(default_factory=dict)


class GraphEdge(BaseModel):
    """Weighted, labelled edge between two existing nodes."""
    source: str
    target: str
    relation: str  # isPartOf, hasProperty, relatedTo, causedBy, usedFor, locatedIn, produces, requires, contains, hierarchical
    weight: float = Field(default=0.5, ge=0.0, le=1.0)
    properties: Dict[str, Any] = Field(default_factory=dict)

    @property
    def id(self) -> str:
        return f"{self.source}-{self.relation}-{self.target}"


class KnowledgeGraph(BaseModel):
    """Nodes and edges keyed by id, plus connected clusters of node ids."""
    nodes: Dict[str, GraphNode] = Field(default_factory=dict)
    edges: Dict[str, GraphEdge] = Field(default_factory=dict)
    clusters: Dict[str, List[str]] = Field(default_factory=dict)


class AspectSentiment(BaseModel):
    aspect: str
    sentiment: str  # positive, negative, neutral
    score: float


class SentimentAnalysis(BaseModel):
    """Document polarity with per-aspect breakdown."""
    overall: str  # positive, negative, neutral, mixed
    score: float
    confidence: float
    aspects: List[AspectSentiment] = Field(default_factory=list)


class Topic(BaseModel):
    name: str
    keywords: List[str] = Field(default_factory=list)
    weight: float = 0.0
    coherence: float = 0.0


class AlignedPhrase(BaseModel):
    phrase1: str
    phrase2: str
    similarity: float


class SemanticSimilarity(BaseModel):
    similarity: float
    aligned_phrases: List[AlignedPhrase] = Field(default_factory=list)


class EmbeddingMetadata(BaseModel):
    text: str = ""
    type: str = "text"  # text, entity, schema
    source: Optional[str] = None
    timestamp: Optional[str] = None


class VectorEmbedding(BaseModel):
    """Serializable embedding; vectors are plain lists here and numpy arrays in the store."""
    id: str
    vector: List[float]
    metadata: EmbeddingMetadata = Field(default_factory=EmbeddingMetadata)


class SimilarityResult(BaseModel):
    id: str
    similarity: float
    metadata: EmbeddingMetadata = Field(default_factory=EmbeddingMetadata)


class ContentFeatures(BaseModel):
    """Structural flags derived from raw content and title."""
    has_steps: bool = False
    has_rating: bool = False
    has_price: bool = False
    has_ingredients: bool = False
    has_instructions: bool = False
    has_author: bool = False
    has_date: bool = False
    has_location: bool = False
    has_event: bool = False
    has_product: bool = False
    has_service: bool = False
    has_faq: bool = False
    has_howto: bool = False
    has_recipe: bool = False
    has_review: bool = False
    has_job: bool = False
    has_course: bool = False
    has_video: bool = False
    content_length: int = 0
    image_count: int = 0
    link_density: float = 0.0
    question_count: int = 0
    list_count: int = 0


class SchemaRecommendation(BaseModel):
    """A ranked Schema.org type suggestion with its justification."""
    schema_type: str
    confidence: float = Field(ge=0.0, le=1.0)
    reasoning: str = ""
    properties: List[str] = Field(default_factory=list)
    related_types: List[str] = Field(default_factory=list)


class SchemaValidation(BaseModel):
    valid: bool
    confidence: float
    issues: List[str] = Field(default_factory=list)


class ContentAnalysis(BaseModel):
    """Semantic signals for one document, consumed by the schema generator."""
    entities: List[Entity] = Field(default_factory=list)
    topics: List[str] = Field(default_factory=list)
    keywords: List[str] = Field(default_factory=list)
    content_type: str = "Article"
    industry: str = "general"
    target_audience: Dict[str, Any] = Field(default_factory=dict)
    learning_outcomes: List[Dict[str, Any]] = Field(default_factory=list)
    main_concepts: List[str] = Field(default_factory=list)
