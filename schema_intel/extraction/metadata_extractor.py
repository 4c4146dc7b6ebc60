"""
Metadata extractor for scraped page HTML.

Uses CSS selectors for head/meta fields and ordered regex families for
byline and date text. Every lookup degrades to an empty string instead of
raising, so a partially broken page still yields whatever could be found.
"""

import re
import json
import logging
from typing import Dict, List, Optional, Any, Iterator
from datetime import datetime, timezone
from urllib.parse import urlparse
from bs4 import BeautifulSoup, Tag
from .data_models import OpenGraphData

logger = logging.getLogger(__name__)


# Regex families tried in order against the raw markup. The first capture
# group holds the candidate author name.
AUTHOR_PATTERNS = [
    re.compile(r'(?:Written by|Author:|By:?)\s*([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)'),
    re.compile(r'(?:Written by|Author:|By:?)\s*<[^>]*>([^<]+)<', re.I),
    re.compile(r'<span[^>]+class=["\'][^"\']*author[^"\']*["\'][^>]*>([^<]+)<', re.I),
    re.compile(r'<div[^>]+class=["\'][^"\']*author[^"\']*["\'][^>]*>([^<]+)<', re.I),
    re.compile(r'<a[^>]+class=["\'][^"\']*author[^"\']*["\'][^>]*>([^<]+)<', re.I),
    re.compile(r'class=["\']author-name["\'][^>]*>([^<]+)<', re.I),
    re.compile(r'Written by\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)'),
    re.compile(r'By\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)\s*(?:<|$|\n)'),
    re.compile(r'Posted by\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)', re.I),
    re.compile(r'<[^>]+class=["\'][^"\']*post-author[^"\']*["\'][^>]*>([^<]+)<', re.I),
    re.compile(r'<[^>]+itemprop=["\']author["\'][^>]*>([^<]+)<', re.I),
]

AUTHOR_FORBIDDEN_SUBSTRINGS = ("posted", "category", "tag", "admin")
AUTHOR_NAME_SHAPE = re.compile(r'^[A-Z][a-z]+(?:\s+[A-Z][a-z]+)*$')

EDITOR_PATTERNS = [
    re.compile(r'(?:Edited by|Editor:)\s*([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)'),
    re.compile(r'<span[^>]+class=["\'][^"\']*editor[^"\']*["\'][^>]*>([^<]+)<', re.I),
]

REVIEWER_PATTERNS = [
    re.compile(r'(?:Reviewed by:?|Medically reviewed by:?)\s*([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)'),
]

DATE_PATTERNS = [
    re.compile(r'<span[^>]+class=["\'][^"\']*date["\'][^>]*>([^<]+)<', re.I),
    re.compile(r'<time[^>]+datetime=["\']([^"\']+)["\']', re.I),
    re.compile(r'(?:Published|Posted|Date)[\s:]*([A-Z][a-z]+\s+\d{1,2},?\s+\d{4})', re.I),
    re.compile(r'(?:Published|Posted|Date)[\s:]*(\d{1,2}[-/]\d{1,2}[-/]\d{4})'),
    re.compile(r'<meta[^>]+name=["\']publish_date["\'][^>]+content=["\']([^"\']+)["\']', re.I),
    re.compile(r'Posted on\s+([A-Z][a-z]+\s+\d{1,2},?\s+\d{4})', re.I),
    re.compile(r'<[^>]+class=["\'][^"\']*post-date[^"\']*["\'][^>]*>([^<]+)<', re.I),
    re.compile(r'<[^>]+class=["\'][^"\']*entry-date[^"\']*["\'][^>]*>([^<]+)<', re.I),
    re.compile(r'<[^>]+itemprop=["\']datePublished["\'][^>]*content=["\']([^"\']+)["\']', re.I),
]

DATE_FORMATS = [
    "%B %d, %Y",
    "%B %d %Y",
    "%b %d, %Y",
    "%b %d %Y",
    "%d %B %Y",
    "%d %b %Y",
    "%m/%d/%Y",
    "%m-%d-%Y",
    "%Y-%m-%d",
    "%Y/%m/%d",
    "%Y",
]

FEATURED_IMAGE_SELECTORS = [
    'img[class*="featured"][src]',
    'img[class*="wp-post-image"][src]',
    'meta[property="twitter:image"][content]',
    'meta[name="twitter:image"][content]',
    'img[class*="article__image"][src]',
]

LOGO_SELECTORS = [
    'img[class*="logo"][src]',
    'img[id*="logo"][src]',
    'img[alt*="logo" i][src]',
    'a[class*="logo"] img[src]',
    '.site-logo img[src]',
    '.brand img[src]',
    '.navbar-brand img[src]',
    '.header__logo img[src]',
    'img[class*="header__logo-image"][src]',
]

DOMAIN_PREFIX_PATTERN = re.compile(r'^(?:try|get|buy|shop)')
TITLE_BRAND_PATTERN = re.compile(
    r'\|\s*([^|]+?)(?:®|™|©)?(?:\s+(?:Oral Care|Inc|LLC|Corp|Company|Co\.))?$', re.I
)


class MetadataExtractor:
    """Extracts page-level facts (title, publisher, byline, dates, images)."""

    @staticmethod
    def extract_title(soup: BeautifulSoup, og: OpenGraphData) -> str:
        """First <title> element, falling back to og:title when it is empty."""
        title_tag = soup.find("title")
        title = MetadataExtractor._clean_text(title_tag.get_text()) if title_tag else ""
        return title or (og.title or "")

    @staticmethod
    def extract_description(soup: BeautifulSoup, og: OpenGraphData) -> str:
        description = MetadataExtractor.meta_content(soup, name="description")
        return description or (og.description or "")

    @staticmethod
    def meta_content(soup: BeautifulSoup,
                     name: Optional[str] = None,
                     prop: Optional[str] = None) -> str:
        """Return the content attribute of a <meta name=...> or <meta property=...> tag."""
        attrs = {"name": name} if name else {"property": prop}
        tag = soup.find("meta", attrs=attrs)
        if tag is None and prop:
            # Some sites put Open-Graph keys in the name attribute
            tag = soup.find("meta", attrs={"name": prop})
        if tag is None:
            return ""
        return MetadataExtractor._clean_text(tag.get("content", ""))

    @staticmethod
    def extract_open_graph(soup: BeautifulSoup) -> OpenGraphData:
        fields = {}
        for field in ["title", "description", "type", "site_name", "image"]:
            value = MetadataExtractor.meta_content(soup, prop=f"og:{field}")
            if value:
                fields[field] = value
        return OpenGraphData(**fields)

    @staticmethod
    def extract_language(soup: BeautifulSoup, default: str = "en-US") -> str:
        html_tag = soup.find("html")
        if isinstance(html_tag, Tag) and html_tag.get("lang"):
            return html_tag["lang"].strip()
        return default

    @staticmethod
    def extract_existing_schemas(soup: BeautifulSoup) -> List[Dict[str, Any]]:
        """
        Parse every embedded JSON-LD block.

        Malformed blocks are skipped individually; a page with one broken
        script still returns the others.
        """
        schemas = []
        for script in soup.find_all("script", attrs={"type": re.compile(r"application/ld\+json", re.I)}):
            raw = (script.string or script.get_text() or "").strip()
            if not raw:
                continue
            try:
                parsed = json.loads(raw)
            except json.JSONDecodeError as e:
                logger.warning(f"Skipping malformed JSON-LD block: {e}")
                continue

            if isinstance(parsed, list):
                schemas.extend(item for item in parsed if isinstance(item, dict))
            elif isinstance(parsed, dict):
                schemas.append(parsed)
        return schemas

    @staticmethod
    def iter_schema_nodes(schemas: List[Dict[str, Any]]) -> Iterator[Dict[str, Any]]:
        """Yield each top-level JSON-LD object followed by the members of its @graph."""
        for schema in schemas:
            yield schema
            graph = schema.get("@graph")
            if isinstance(graph, list):
                for item in graph:
                    if isinstance(item, dict):
                        yield item

    @staticmethod
    def _name_of(value: Any) -> str:
        """Pull a name out of a JSON-LD reference that may be a string, object or list."""
        if isinstance(value, str):
            return value.strip()
        if isinstance(value, dict):
            name = value.get("name")
            return name.strip() if isinstance(name, str) else ""
        if isinstance(value, list):
            for item in value:
                name = MetadataExtractor._name_of(item)
                if name:
                    return name
        return ""

    @staticmethod
    def extract_organization_name(og: OpenGraphData,
                                  schemas: List[Dict[str, Any]],
                                  url: str,
                                  title: str) -> str:
        """
        Resolve the publishing organization.

        Order: og:site_name, JSON-LD publisher/Organization, domain name,
        then a "... | Brand" title suffix.
        """
        if og.site_name:
            return og.site_name

        for node in MetadataExtractor.iter_schema_nodes(schemas):
            publisher = MetadataExtractor._name_of(node.get("publisher"))
            if publisher:
                return publisher
            if node.get("@type") == "Organization" and isinstance(node.get("name"), str):
                return node["name"].strip()

        organization = MetadataExtractor.organization_from_domain(url)
        if organization:
            return organization

        match = TITLE_BRAND_PATTERN.search(title or "")
        if match:
            return match.group(1).strip()
        return ""

    @staticmethod
    def organization_from_domain(url: str) -> str:
        """Turn e.g. https://www.trysnow-oral.com into "Snow Oral"."""
        hostname = (urlparse(url).hostname or "").lower()
        if hostname.startswith("www."):
            hostname = hostname[4:]
        label = hostname.split(".")[0] if hostname else ""
        if not label or label == "www":
            return ""

        label = DOMAIN_PREFIX_PATTERN.sub("", label).replace("-", " ")
        words = [word[:1].upper() + word[1:] for word in label.split()]
        return " ".join(words)

    @staticmethod
    def is_valid_author(candidate: str) -> bool:
        """Reject bylines that are really post metadata or generic accounts."""
        if not candidate or not (2 < len(candidate) < 50):
            return False
        lowered = candidate.lower()
        if any(word in lowered for word in AUTHOR_FORBIDDEN_SUBSTRINGS):
            return False
        return bool(AUTHOR_NAME_SHAPE.match(candidate))

    @staticmethod
    def extract_author_name(soup: BeautifulSoup, html: str, schemas: List[Dict[str, Any]]) -> str:
        """Structured-data author, then <meta name="author">, then byline patterns."""
        for node in MetadataExtractor.iter_schema_nodes(schemas):
            author = MetadataExtractor._name_of(node.get("author"))
            if author:
                return author

        meta_author = MetadataExtractor.meta_content(soup, name="author")
        if meta_author:
            return meta_author

        for pattern in AUTHOR_PATTERNS:
            for match in pattern.finditer(html):
                candidate = re.sub(r'^by\s+', '', match.group(1).strip(), flags=re.I)
                if MetadataExtractor.is_valid_author(candidate):
                    logger.debug(f"Author matched by pattern {pattern.pattern[:40]!r}: {candidate}")
                    return candidate
        return ""

    @staticmethod
    def _first_name_match(patterns: List[re.Pattern], html: str) -> str:
        for pattern in patterns:
            match = pattern.search(html)
            if match:
                name = match.group(1).strip()
                if 2 < len(name) < 50:
                    return name
        return ""

    @staticmethod
    def extract_editor_name(html: str) -> str:
        return MetadataExtractor._first_name_match(EDITOR_PATTERNS, html)

    @staticmethod
    def extract_reviewer_name(html: str) -> str:
        return MetadataExtractor._first_name_match(REVIEWER_PATTERNS, html)

    @staticmethod
    def normalize_date(value: str) -> Optional[str]:
        """
        Parse a date string into an ISO-8601 timestamp.

        Naive values are taken as UTC. Returns None when nothing parses.
        """
        if not value:
            return None
        text = value.strip()

        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            parsed = None

        if parsed is None:
            cleaned = re.sub(r'(\d{1,2})(?:st|nd|rd|th)\b', r'\1', text)
            cleaned = " ".join(cleaned.split())
            for fmt in DATE_FORMATS:
                try:
                    parsed = datetime.strptime(cleaned, fmt)
                    break
                except ValueError:
                    continue

        if parsed is None:
            return None
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.isoformat()

    @staticmethod
    def _schema_date(schemas: List[Dict[str, Any]], key: str) -> Optional[str]:
        for node in MetadataExtractor.iter_schema_nodes(schemas):
            value = node.get(key)
            if isinstance(value, str):
                normalized = MetadataExtractor.normalize_date(value)
                if normalized:
                    return normalized
        return None

    @staticmethod
    def extract_published_date(soup: BeautifulSoup, html: str, schemas: List[Dict[str, Any]]) -> str:
        meta_value = MetadataExtractor.meta_content(soup, prop="article:published_time")
        normalized = MetadataExtractor.normalize_date(meta_value)
        if normalized:
            return normalized

        normalized = MetadataExtractor._schema_date(schemas, "datePublished")
        if normalized:
            return normalized

        for pattern in DATE_PATTERNS:
            match = pattern.search(html)
            if not match:
                continue
            normalized = MetadataExtractor.normalize_date(match.group(1))
            if normalized:
                return normalized
            logger.debug(f"Discarding unparsable date {match.group(1)!r}")
        return ""

    @staticmethod
    def extract_modified_date(soup: BeautifulSoup, schemas: List[Dict[str, Any]]) -> str:
        meta_value = MetadataExtractor.meta_content(soup, prop="article:modified_time")
        normalized = MetadataExtractor.normalize_date(meta_value)
        if normalized:
            return normalized
        return MetadataExtractor._schema_date(schemas, "dateModified") or ""

    @staticmethod
    def absolutize_url(src: str, page_url: str) -> str:
        """Rewrite protocol-relative and root-relative URLs against the page origin."""
        if not src:
            return ""
        if src.startswith("//"):
            return f"https:{src}"
        if src.startswith("/"):
            parsed = urlparse(page_url)
            return f"{parsed.scheme}://{parsed.netloc}{src}"
        return src

    @staticmethod
    def _select_url(soup: BeautifulSoup, selectors: List[str]) -> str:
        for selector in selectors:
            element = soup.select_one(selector)
            if element is None:
                continue
            value = element.get("src") or element.get("content") or ""
            if value.strip():
                return value.strip()
        return ""

    @staticmethod
    def extract_featured_image(soup: BeautifulSoup,
                               og: OpenGraphData,
                               url: str,
                               content_region: Optional[Tag] = None) -> str:
        image = og.image or MetadataExtractor._select_url(soup, FEATURED_IMAGE_SELECTORS)

        if not image and content_region is not None:
            first_image = content_region.find("img", src=True)
            if first_image is not None:
                image = first_image["src"].strip()

        if "{width}" in image:
            # Shopify responsive image template
            image = image.replace("{width}", "1200")
        return MetadataExtractor.absolutize_url(image, url)

    @staticmethod
    def extract_logo_url(soup: BeautifulSoup, url: str) -> str:
        return MetadataExtractor.absolutize_url(
            MetadataExtractor._select_url(soup, LOGO_SELECTORS), url
        )

    @staticmethod
    def _clean_text(text: str) -> str:
        """Clean and normalize extracted text."""
        if not text:
            return ""
        return re.sub(r'\s+', ' ', text.strip())
