"""
Data models for the extraction module.

Defines the structure of a scraped page once its markup has been parsed,
and of author profiles parsed from about/team pages.
"""

from typing import List, Dict, Any, Optional
from pydantic import BaseModel, ConfigDict, Field


class OpenGraphData(BaseModel):
    """Open-Graph meta fields found in the page head."""
    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    description: Optional[str] = None
    type: Optional[str] = None
    site_name: Optional[str] = None
    image: Optional[str] = None


class ExtractionMetadata(BaseModel):
    """Diagnostics describing how the document was extracted."""
    model_config = ConfigDict(frozen=True)

    og: OpenGraphData = Field(default_factory=OpenGraphData)
    has_existing_schema: bool = False
    schema_count: int = 0
    content_length: int = 0
    extraction_method: str = "None"
    low_content: bool = False
    warning: Optional[str] = None


class ExtractedDocument(BaseModel):
    """Normalized view of one scraped page. Immutable once built."""
    model_config = ConfigDict(frozen=True)

    url: str
    title: str = ""
    description: str = ""
    content: str = ""
    page_type: str = "WebPage"
    organization_name: str = ""
    author_name: str = ""
    editor_name: str = ""
    reviewer_name: str = ""
    published_date: str = ""
    modified_date: str = ""
    logo_url: str = ""
    featured_image: str = ""
    language: str = "en-US"
    existing_schemas: List[Dict[str, Any]] = Field(default_factory=list)
    metadata: ExtractionMetadata = Field(default_factory=ExtractionMetadata)

    @property
    def is_thin(self) -> bool:
        """True when the extractor flagged the page as too short to trust."""
        return self.metadata.low_content


class AuthorProfile(BaseModel):
    """Author details parsed from a profile or about page."""
    name: str
    found: bool = False
    job_title: str = ""
    description: str = ""
    image: str = ""
    same_as: List[str] = Field(default_factory=list)
    knows_about: List[str] = Field(default_factory=list)
    works_for: str = ""
    alumni_of: str = ""
