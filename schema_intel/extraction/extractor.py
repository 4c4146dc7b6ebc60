"""
Document extraction orchestrator.

Coordinates metadata and content parsing for one scraped page:
head/meta -> embedded JSON-LD -> main content region -> byline/dates -> images.
"""

import logging
from typing import Optional
from bs4 import BeautifulSoup

from config import config
from ..errors import require_url
from .metadata_extractor import MetadataExtractor
from .content_parser import ContentParser
from .data_models import ExtractedDocument, ExtractionMetadata

logger = logging.getLogger(__name__)

THIN_CONTENT_WARNING = "Minimal content extracted. Manual input may be required."


class DocumentExtractor:
    """Turns raw page markup into an ExtractedDocument."""

    def __init__(self,
                 min_content_length: Optional[int] = None,
                 thin_content_length: Optional[int] = None,
                 default_language: Optional[str] = None):
        """
        Initialize the document extractor.

        Args:
            min_content_length: Text length a content region must exceed to win
                (and below which the document is flagged low-content)
            thin_content_length: Length below which a manual-input warning is attached
            default_language: Language tag used when <html lang> is missing
        """
        self.min_content_length = min_content_length if min_content_length is not None \
            else config.MIN_MAIN_CONTENT_LENGTH
        self.thin_content_length = thin_content_length if thin_content_length is not None \
            else config.THIN_CONTENT_LENGTH
        self.default_language = default_language or config.DEFAULT_LANGUAGE
        self.content_parser = ContentParser(min_content_length=self.min_content_length)

    def extract_document(self, html: str, url: str) -> ExtractedDocument:
        """
        Extract a normalized document from raw markup.

        Never raises for malformed markup; only a missing or malformed URL
        is an error.

        Args:
            html: Raw page markup (may be empty)
            url: Absolute source URL

        Returns:
            ExtractedDocument with metadata.low_content set for thin pages
        """
        require_url(url)
        html = html or ""
        soup = BeautifulSoup(html, "html.parser")

        og = MetadataExtractor.extract_open_graph(soup)
        title = MetadataExtractor.extract_title(soup, og)
        schemas = MetadataExtractor.extract_existing_schemas(soup)

        content, method, region = self.content_parser.extract_main_content(html)
        logger.info(f"Extracted {len(content)} characters of content from {url} using {method}")

        low_content = len(content) < self.min_content_length
        warning = None
        if len(content) < self.thin_content_length:
            warning = THIN_CONTENT_WARNING
            logger.warning(f"Thin content on {url}: {len(content)} characters")

        metadata = ExtractionMetadata(
            og=og,
            has_existing_schema=bool(schemas),
            schema_count=len(schemas),
            content_length=len(content),
            extraction_method=method or "None",
            low_content=low_content,
            warning=warning,
        )

        return ExtractedDocument(
            url=url,
            title=title,
            description=MetadataExtractor.extract_description(soup, og),
            content=content,
            page_type=og.type or "WebPage",
            organization_name=MetadataExtractor.extract_organization_name(og, schemas, url, title),
            author_name=MetadataExtractor.extract_author_name(soup, html, schemas),
            editor_name=MetadataExtractor.extract_editor_name(html),
            reviewer_name=MetadataExtractor.extract_reviewer_name(html),
            published_date=MetadataExtractor.extract_published_date(soup, html, schemas),
            modified_date=MetadataExtractor.extract_modified_date(soup, schemas),
            logo_url=MetadataExtractor.extract_logo_url(soup, url),
            featured_image=MetadataExtractor.extract_featured_image(soup, og, url, region),
            language=MetadataExtractor.extract_language(soup, self.default_language),
            existing_schemas=schemas,
            metadata=metadata,
        )
