"""
Schema module for assembling Schema.org JSON-LD documents.

Combines:
- Typed JSON-LD node models with uniform empty-value pruning
- Entity type correction and allow-listed external references
- The generator that merges page fields with content analysis
"""

from .jsonld import (
    SchemaBuilder, prune_empty, JsonLdNode, Thing, DefinedTerm, ImageObject, Organization, Person,
    Blog, HowToStep, Article, BlogPosting, Review, ScholarlyArticle, HowTo
)
from .type_mapping import entity_schema_type, node_schema_type, wiki_reference, WikiReference
from .generator import SchemaGenerator, SchemaConfig

__all__ = [
    "SchemaBuilder",
    "prune_empty",
    "JsonLdNode",
    "Thing",
    "DefinedTerm",
    "ImageObject",
    "Organization",
    "Person",
    "Blog",
    "HowToStep",
    "Article",
    "BlogPosting",
    "Review",
    "ScholarlyArticle",
    "HowTo",
    "entity_schema_type",
    "node_schema_type",
    "wiki_reference",
    "WikiReference",
    "SchemaGenerator",
    "SchemaConfig"
]
