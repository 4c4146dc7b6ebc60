"""
Extraction module for turning scraped page markup into normalized documents.

Combines:
- Head/meta and JSON-LD parsing with BeautifulSoup
- A candidate cascade for locating the main content region
- Byline, date and image heuristics with documented fallback chains
"""

from .metadata_extractor import MetadataExtractor
from .content_parser import ContentParser
from .author_profile import AuthorProfileExtractor, author_slug_variations, candidate_profile_urls
from .extractor import DocumentExtractor
from .data_models import ExtractedDocument, ExtractionMetadata, OpenGraphData, AuthorProfile

__all__ = [
    "MetadataExtractor",
    "ContentParser",
    "AuthorProfileExtractor",
    "author_slug_variations",
    "candidate_profile_urls",
    "DocumentExtractor",
    "ExtractedDocument",
    "ExtractionMetadata",
    "OpenGraphData",
    "AuthorProfile"
]
