"""
Schema generator: merges an extracted page and its content analysis into one
Schema.org JSON-LD document.

Rules, in order:
- base @type from URL path, then content type
- author / publisher / image only when their source field is present
- about (primary) vs mentions (secondary) entity split, with corrected types
  and allow-listed external references only
- teaches only for instructional content
- HowTo steps only when the title and the content both read as a how-to
- empty values pruned from the whole tree
"""

import re
import logging
from datetime import datetime, timezone
from typing import List, Dict, Any, Optional, Callable
from urllib.parse import urlparse
from pydantic import BaseModel

from config import config
from ..errors import require_url
from ..extraction.data_models import ExtractedDocument, AuthorProfile
from ..intelligence.content_analyzer import ContentAnalyzer
from ..intelligence.data_models import ContentAnalysis, Entity
from ..intelligence.text_utils import count_occurrences, normalize_name, slugify, split_sentences
from .jsonld import SchemaBuilder, Person, Organization, ImageObject, Blog, Thing, DefinedTerm, HowToStep
from .type_mapping import entity_schema_type, wiki_reference

logger = logging.getLogger(__name__)


BLOG_URL_HINTS = ("/blog", "/blogs", "/article")
BLOG_PATH_SEGMENT = re.compile(r'^blogs?$', re.I)
CONTENT_TYPE_TO_SCHEMA = {
    "HowTo": "BlogPosting",
    "Review": "Review",
    "BlogPosting": "BlogPosting",
    "ScholarlyArticle": "ScholarlyArticle",
    "Article": "Article",
}

DESCRIPTION_SENTENCES = 2
MAX_DESCRIPTION_LENGTH = 160

ABOUT_MIN_CONFIDENCE = 0.85
ABOUT_MIN_OCCURRENCES = 3
MENTION_MIN_CONFIDENCE = 0.7
MAX_ABOUT = 5
WIKI_MIN_CONFIDENCE = 0.85

INSTRUCTIONAL_TITLE_HINTS = ("how to", "guide")

HOWTO_INDICATOR_PATTERNS = [
    re.compile(r'step\s+\d+', re.I),
    re.compile(r'\bfirst(?:ly)?(?=[,:\s])', re.I),
    re.compile(r'\bsecond(?:ly)?(?=[,:\s])', re.I),
    re.compile(r'\bthird(?:ly)?(?=[,:\s])', re.I),
    re.compile(r'\bthen(?=[,:\s])', re.I),
    re.compile(r'\bnext(?=[,:\s])', re.I),
    re.compile(r'\bfinally(?=[,:\s])', re.I),
    re.compile(r'follow\s+these\s+steps', re.I),
    re.compile(r"here's\s+how", re.I),
]

# Tried in order; the first family that yields steps wins
STEP_PATTERNS = [
    re.compile(r'\bstep\s*(\d+)\s*[:.)\-]?\s*([^.!?\n]+[.!?]?)', re.I),
    re.compile(r'^\s*(\d+)[.)]\s+([^.!?\n]+[.!?]?)', re.M),
    re.compile(r'\b(first(?:ly)?|second(?:ly)?|third(?:ly)?|then|next|finally)[\s,:]+([^.!?\n]+[.!?])', re.I),
]

TOTAL_TIME_PATTERN = re.compile(r'(?:takes?|requires?|needs?)\s*(?:about\s*)?(\d+)\s*(minutes?|hours?)', re.I)


class SchemaConfig(BaseModel):
    """Page fields the generator needs; built from an ExtractedDocument or by hand."""
    url: str
    title: str
    content: str
    description: str = ""
    organization_name: str = ""
    author_name: str = ""
    featured_image: str = ""
    logo_url: str = ""
    published_date: Optional[str] = None
    modified_date: Optional[str] = None
    language: str = ""
    author_profile: Optional[AuthorProfile] = None

    @classmethod
    def from_document(cls, document: ExtractedDocument,
                      author_profile: Optional[AuthorProfile] = None) -> "SchemaConfig":
        return cls(
            url=document.url,
            title=document.title,
            content=document.content,
            description=document.description,
            organization_name=document.organization_name,
            author_name=document.author_name,
            featured_image=document.featured_image,
            logo_url=document.logo_url,
            published_date=document.published_date,
            modified_date=document.modified_date,
            language=document.language,
            author_profile=author_profile,
        )


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SchemaGenerator:
    """Builds JSON-LD documents from page fields and content analysis."""

    def __init__(self,
                 analyzer: Optional[ContentAnalyzer] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 min_howto_indicators: Optional[int] = None,
                 max_howto_steps: Optional[int] = None,
                 max_mentions: Optional[int] = None,
                 max_learning_outcomes: Optional[int] = None):
        """
        Initialize the schema generator.

        Args:
            analyzer: Content analyzer used when no analysis is supplied
            clock: Source of the current time for missing dates
            min_howto_indicators: Distinct sequential indicators required for HowTo
            max_howto_steps: Maximum HowTo steps emitted
            max_mentions: Maximum secondary entities emitted
            max_learning_outcomes: Maximum teaches entries emitted
        """
        self.analyzer = analyzer or ContentAnalyzer()
        self.clock = clock or _utc_now
        self.min_howto_indicators = min_howto_indicators if min_howto_indicators is not None \
            else config.MIN_HOWTO_INDICATORS
        self.max_howto_steps = max_howto_steps or config.MAX_HOWTO_STEPS
        self.max_mentions = max_mentions or config.MAX_MENTIONS
        self.max_learning_outcomes = max_learning_outcomes or config.MAX_LEARNING_OUTCOMES

    def generate_schema(self, schema_config: SchemaConfig,
                        analysis: Optional[ContentAnalysis] = None) -> Dict[str, Any]:
        """
        Generate a JSON-LD document.

        Args:
            schema_config: Page fields
            analysis: Precomputed content analysis; computed when omitted

        Returns:
            Pruned JSON-LD document

        Raises:
            InvalidURLError: If the page URL has no scheme or host
        """
        url = require_url(schema_config.url)
        if analysis is None:
            analysis = self.analyzer.analyze_content(schema_config.content, schema_config.title, url)

        parsed = urlparse(url)
        origin = f"{parsed.scheme}://{parsed.netloc}"
        base_type = self.determine_schema_type(analysis.content_type, url)
        now = self.clock().isoformat()

        builder = SchemaBuilder(base_type).set(
            id=f"{url}#{base_type}",
            main_entity_of_page=url,
            headline=schema_config.title,
            name=schema_config.title,
            description=schema_config.description or self.generate_description(schema_config.content),
            date_published=schema_config.published_date or now,
            date_modified=schema_config.modified_date or schema_config.published_date or now,
            author=self.build_author(schema_config, origin),
            publisher=self.build_publisher(schema_config, origin),
            image=self.build_image(schema_config.featured_image),
            in_language=schema_config.language or config.DEFAULT_LANGUAGE,
            keywords=", ".join(analysis.keywords),
            audience=analysis.target_audience,
            article_body=schema_config.content,
            word_count=len(schema_config.content.split()),
            is_part_of=self.build_blog(url, schema_config.organization_name),
        )

        if self.is_instructional(schema_config.title, schema_config.content):
            builder.set(teaches=self.deduplicate_learning_outcomes(analysis.learning_outcomes))

        about, mentions = self.split_entities(analysis.entities, schema_config.content, analysis.industry)
        builder.set(about=about, mentions=mentions)

        if analysis.content_type == "HowTo" and self.is_howto(schema_config.content, schema_config.title):
            builder.as_howto(self.extract_steps(schema_config.content),
                             self.extract_total_time(schema_config.content))

        schema = builder.build()
        logger.info(f"Generated {schema['@type']} schema for {url}: "
                    f"{len(about)} about, {len(mentions)} mentions")
        return schema

    @staticmethod
    def determine_schema_type(content_type: str, url: str) -> str:
        path = urlparse(url or "").path
        if any(hint in path for hint in BLOG_URL_HINTS):
            return "BlogPosting"
        return CONTENT_TYPE_TO_SCHEMA.get(content_type, "Article")

    @staticmethod
    def generate_description(content: str) -> str:
        """First two sentences, truncated to 160 characters."""
        description = " ".join(split_sentences(content)[:DESCRIPTION_SENTENCES])
        if len(description) > MAX_DESCRIPTION_LENGTH:
            return description[:MAX_DESCRIPTION_LENGTH - 3] + "..."
        return description

    @staticmethod
    def build_author(schema_config: SchemaConfig, origin: str) -> Optional[Person]:
        name = schema_config.author_name
        if not name:
            return None
        author = Person(name=name, id=f"{origin}/author/{slugify(name)}#Person")

        profile = schema_config.author_profile
        if profile is not None and profile.found:
            author.job_title = profile.job_title or None
            author.description = profile.description or None
            author.image = profile.image or None
            author.same_as = list(profile.same_as)
            author.knows_about = list(profile.knows_about)
            if profile.works_for:
                author.works_for = Organization(name=profile.works_for)
            if profile.alumni_of:
                author.alumni_of = Organization(type="EducationalOrganization", name=profile.alumni_of)
        return author

    @staticmethod
    def build_publisher(schema_config: SchemaConfig, origin: str) -> Optional[Organization]:
        if not schema_config.organization_name:
            return None
        logo = ImageObject(url=schema_config.logo_url) if schema_config.logo_url else None
        return Organization(name=schema_config.organization_name, id=origin, logo=logo)

    @staticmethod
    def build_image(featured_image: str) -> Optional[ImageObject]:
        if not featured_image:
            return None
        return ImageObject(url=featured_image, id=f"{featured_image}#image")

    @staticmethod
    def build_blog(url: str, organization_name: str) -> Optional[Blog]:
        """Blog node for URLs whose path contains a blog/blogs segment."""
        parsed = urlparse(url)
        parts = [part for part in parsed.path.split("/") if part]
        for index, part in enumerate(parts):
            if BLOG_PATH_SEGMENT.match(part):
                origin = f"{parsed.scheme}://{parsed.netloc}"
                blog_path = "/".join(parts[:index + 1])
                return Blog(
                    id=f"{origin}/{blog_path}/",
                    name=f"{organization_name or 'Company'} Blog",
                    publisher=Organization(id=origin),
                )
        return None

    @staticmethod
    def is_instructional(title: str, content: str) -> bool:
        title_lower = title.lower()
        return any(hint in title_lower for hint in INSTRUCTIONAL_TITLE_HINTS) or "learn" in content.lower()

    def deduplicate_learning_outcomes(self, outcomes: List[Dict[str, Any]]) -> List[DefinedTerm]:
        seen = set()
        unique = []
        for outcome in outcomes:
            key = normalize_name(outcome.get("name", ""))
            if not key or key in seen:
                continue
            seen.add(key)
            unique.append(DefinedTerm(name=outcome["name"], description=outcome.get("description")))
        return unique[:self.max_learning_outcomes]

    def split_entities(self, entities: List[Entity], content: str, industry: str):
        """
        Partition entities into primary (about) and secondary (mentions) nodes.

        Primary entities have confidence above 0.85, more than three mentions
        in the text and are not people. Everything else above 0.7 is a mention.

        Returns:
            Tuple of (about, mentions) lists of Thing nodes
        """
        about: List[Thing] = []
        mentions: List[Thing] = []
        seen = set()
        for entity in sorted(entities, key=lambda e: e.confidence, reverse=True):
            key = normalize_name(entity.name)
            if key in seen:
                continue
            seen.add(key)

            occurrences = count_occurrences(entity.name, content, entity.synonyms)
            if (entity.confidence > ABOUT_MIN_CONFIDENCE and occurrences > ABOUT_MIN_OCCURRENCES
                    and entity.type != "person" and len(about) < MAX_ABOUT):
                about.append(self.entity_node(entity, industry))
            elif entity.confidence > MENTION_MIN_CONFIDENCE and len(mentions) < self.max_mentions:
                mentions.append(self.entity_node(entity, industry))
        return about, mentions

    @staticmethod
    def entity_node(entity: Entity, industry: str) -> Thing:
        node = Thing(
            type=entity_schema_type(entity.name, entity.type, industry),
            name=entity.name,
            description=entity.context or None,
        )
        reference = wiki_reference(entity.name) if entity.confidence > WIKI_MIN_CONFIDENCE else None
        if reference is not None:
            node.id = reference.id
            node.same_as = list(reference.same_as)
            node.description = reference.description or node.description
        return node

    def howto_indicators(self, content: str) -> set:
        """Distinct normalized sequential-language matches in the content."""
        found = set()
        for pattern in HOWTO_INDICATOR_PATTERNS:
            for match in pattern.finditer(content):
                found.add(normalize_name(match.group(0)))
        return found

    def is_howto(self, content: str, title: str) -> bool:
        title_lower = title.lower()
        if not any(hint in title_lower for hint in INSTRUCTIONAL_TITLE_HINTS):
            return False
        indicators = self.howto_indicators(content)
        logger.debug(f"HowTo indicators: {sorted(indicators)}")
        return len(indicators) >= self.min_howto_indicators

    def extract_steps(self, content: str) -> List[HowToStep]:
        """Steps from the first pattern family that matches, deduplicated and in text order."""
        for pattern in STEP_PATTERNS:
            seen = set()
            found = []
            for match in pattern.finditer(content):
                text = match.group(2).strip()
                key = normalize_name(text)
                if not key or key in seen:
                    continue
                seen.add(key)
                found.append((match.start(), text))
            if found:
                found.sort(key=lambda item: item[0])
                return [
                    HowToStep(position=i, name=f"Step {i}", text=text)
                    for i, (_, text) in enumerate(found[:self.max_howto_steps], start=1)
                ]
        return []

    @staticmethod
    def extract_total_time(content: str) -> Optional[str]:
        """ISO-8601 duration such as PT30M when the content states how long it takes."""
        match = TOTAL_TIME_PATTERN.search(content)
        if not match:
            return None
        return f"PT{match.group(1)}{match.group(2)[0].upper()}"
