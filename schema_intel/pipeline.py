"""
End-to-end pipeline: page markup -> extracted document -> content analysis ->
knowledge graph -> type recommendations -> JSON-LD document.

Components are constructed explicitly and can be swapped per instance.
"""

import logging
from typing import List, Dict, Any, Optional, Callable
from pydantic import BaseModel, Field

from .errors import InsufficientContentError
from .extraction import DocumentExtractor, ExtractedDocument, AuthorProfile
from .intelligence import (
    ContentAnalyzer, ContentAnalysis, KnowledgeGraphBuilder, KnowledgeGraph,
    SchemaRecommender, SchemaRecommendation
)
from .schema import SchemaGenerator, SchemaConfig

logger = logging.getLogger(__name__)

# Industry -> knowledge-graph ontology
INDUSTRY_DOMAINS: Dict[str, str] = {
    "technology": "technology",
    "mortgage": "business",
    "dental": "medical",
    "education": "education",
}


class PipelineResult(BaseModel):
    """Every stage's output for one page."""
    document: ExtractedDocument
    analysis: ContentAnalysis
    graph: KnowledgeGraph
    recommendations: List[SchemaRecommendation] = Field(default_factory=list)
    schema_document: Dict[str, Any] = Field(default_factory=dict)


class SchemaPipeline:
    """Runs the extraction and analysis stages in order for one page."""

    def __init__(self,
                 extractor: Optional[DocumentExtractor] = None,
                 analyzer: Optional[ContentAnalyzer] = None,
                 graph_builder: Optional[KnowledgeGraphBuilder] = None,
                 recommender: Optional[SchemaRecommender] = None,
                 generator: Optional[SchemaGenerator] = None):
        self.extractor = extractor or DocumentExtractor()
        self.analyzer = analyzer or ContentAnalyzer()
        self.graph_builder = graph_builder or KnowledgeGraphBuilder()
        self.recommender = recommender or SchemaRecommender()
        self.generator = generator or SchemaGenerator(analyzer=self.analyzer)

    def extract(self, html: str, url: str) -> ExtractedDocument:
        return self.extractor.extract_document(html, url)

    def analyze(self, document: ExtractedDocument) -> ContentAnalysis:
        return self.analyzer.analyze_content(document.content, document.title, document.url)

    def run(self,
            html: str,
            url: str,
            allow_thin_content: bool = False,
            author_profile: Optional[AuthorProfile] = None) -> PipelineResult:
        """
        Run every stage over one page.

        Args:
            html: Raw page markup
            url: Page URL
            allow_thin_content: Continue even when the page is flagged low-content
            author_profile: Parsed author profile merged into the author node

        Returns:
            PipelineResult with the output of every stage

        Raises:
            InvalidURLError: If the URL has no scheme or host
            InsufficientContentError: If the page is low-content and thin content
                was not allowed
        """
        document = self.extract(html, url)
        if document.is_thin and not allow_thin_content:
            logger.warning(f"Insufficient content at {url}: {document.metadata.content_length} characters")
            raise InsufficientContentError(document.metadata.content_length, self.extractor.min_content_length)

        analysis = self.analyze(document)
        domain = INDUSTRY_DOMAINS.get(analysis.industry)
        graph = self.graph_builder.build_graph(analysis.entities, document.content, domain)
        recommendations = self.recommender.recommend(
            document.content, document.title, document.url, analysis.entities
        )
        schema = self.generator.generate_schema(SchemaConfig.from_document(document, author_profile), analysis)

        logger.info(f"Pipeline complete for {url}: {len(analysis.entities)} entities, "
                    f"{len(graph.nodes)} nodes, {len(graph.edges)} edges")
        return PipelineResult(
            document=document,
            analysis=analysis,
            graph=graph,
            recommendations=recommendations,
            schema_document=schema,
        )

    def run_url(self, url: str, fetch_page: Callable[[str], str], **kwargs) -> PipelineResult:
        """Fetch a page with the supplied fetcher, then run the pipeline on it."""
        html = fetch_page(url)
        return self.run(html, url, **kwargs)
