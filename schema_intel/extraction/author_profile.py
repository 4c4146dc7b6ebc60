"""
Author profile parsing.

Builds the list of pages where a site is likely to describe one of its
authors, and parses such pages into an AuthorProfile. Fetching the pages is
left to the caller.
"""

import re
import logging
from typing import List
from bs4 import BeautifulSoup
from .data_models import AuthorProfile
from .metadata_extractor import MetadataExtractor

logger = logging.getLogger(__name__)


ABOUT_PAGE_PATHS = ["/about-us", "/about", "/team", "/our-team", "/people", "/staff"]
AUTHOR_PAGE_PREFIXES = ["/author/", "/authors/", "/team/", "/staff/", "/writer/", "/contributor/"]

JOB_TITLE_KEYWORDS = (
    r'writer|author|editor|journalist|contributor|specialist|expert|'
    r'manager|director|founder|ceo|cto'
)

ABOUT_TITLE_PATTERNS = [
    re.compile(r'<(?:h3|h4|p|span|div)[^>]*>([^<]+(?:' + JOB_TITLE_KEYWORDS + r')[^<]*)<', re.I),
    re.compile(r'(?:title|position|role)[:"\s]+([^<"]+)', re.I),
]

PROFILE_TITLE_PATTERNS = [
    re.compile(r'<(?:h2|h3|p|span)[^>]*class=["\'][^"\']*(?:title|role|position|job)[^"\']*["\'][^>]*>([^<]+)<', re.I),
    re.compile(r'(?:Job Title|Position|Role)[\s:]*<[^>]*>([^<]+)<', re.I),
    re.compile(r'<meta[^>]+property=["\']profile:job_title["\'][^>]+content=["\']([^"\']+)["\']', re.I),
]

BIO_SELECTORS = [
    'div[class*="bio"]', 'p[class*="bio"]',
    'div[class*="about"]', 'p[class*="about"]',
    'div[class*="description"]', 'p[class*="description"]',
    'div[class*="summary"]', 'p[class*="summary"]',
]

EXPERTISE_TEXT_PATTERN = re.compile(r'(?:expertise|specializes in|knows about|expert in)[\s:]*([^<.]+)', re.I)
EXPERTISE_SELECTORS = ['ul[class*="skills"]', 'ul[class*="expertise"]', 'ul[class*="specialties"]',
                       'div[class*="skills"]', 'div[class*="expertise"]', 'div[class*="specialties"]']

SOCIAL_LINK_PATTERN = re.compile(r'linkedin|twitter|x\.com|facebook|instagram|youtube', re.I)

WORKS_FOR_PATTERNS = [
    re.compile(r'(?:works? (?:at|for)|employed by)[\s:]*<[^>]*>([^<]+)<', re.I),
    re.compile(r'(?:company|organization)[\s:]*<[^>]*>([^<]+)<', re.I),
]

ALUMNI_OF_PATTERNS = [
    re.compile(r'(?:graduated from|alumni of|studied at)[\s:]*<[^>]*>([^<]+)<', re.I),
    re.compile(r'(?:education|university|college)[\s:]*<[^>]*>([^<]+)<', re.I),
]

PROFILE_IMAGE_SELECTORS = ['img[class*="author"][src]', 'img[class*="profile"][src]', 'img[class*="avatar"][src]']

MIN_BIO_LENGTH = 50


def author_slug_variations(name: str) -> List[str]:
    """
    URL slugs a site might use for an author.

    "Nathan Smith" gives nathan-smith, nathansmith, nathan_smith,
    nathan.smith, nathan, smith, nsmith and n-smith.
    """
    parts = name.lower().split()
    if not parts:
        return []

    slugs = ["-".join(parts), "".join(parts), "_".join(parts), ".".join(parts), parts[0]]
    if len(parts) > 1:
        first, last = parts[0], parts[1]
        slugs.extend([last, first[0] + last, f"{first[0]}-{last}"])

    # Single-word names produce identical variants
    return list(dict.fromkeys(slugs))


def candidate_profile_urls(site_url: str, name: str) -> List[str]:
    """About/team pages first, then every author-page prefix combined with every slug."""
    base = site_url.rstrip("/")
    urls = [f"{base}{path}" for path in ABOUT_PAGE_PATHS]
    for prefix in AUTHOR_PAGE_PREFIXES:
        for slug in author_slug_variations(name):
            urls.append(f"{base}{prefix}{slug}")
    return list(dict.fromkeys(urls))


class AuthorProfileExtractor:
    """Parses author details from profile and about pages."""

    @staticmethod
    def from_profile_page(html: str, name: str, base_url: str = "") -> AuthorProfile:
        """
        Parse a dedicated author page.

        Args:
            html: Page markup
            name: Author name the page should mention
            base_url: Site URL used to absolutize a relative profile image

        Returns:
            AuthorProfile with found=False when the page never mentions the author
        """
        profile = AuthorProfile(name=name)
        if not html or name.lower() not in html.lower():
            return profile

        soup = BeautifulSoup(html, "html.parser")
        profile.found = True
        profile.job_title = AuthorProfileExtractor._first_group(PROFILE_TITLE_PATTERNS, html)

        for selector in BIO_SELECTORS:
            element = soup.select_one(selector)
            if element is not None:
                bio = MetadataExtractor._clean_text(element.get_text(" "))
                if bio:
                    profile.description = bio
                    break
        if not profile.description:
            profile.description = MetadataExtractor.meta_content(soup, name="description")

        profile.knows_about = AuthorProfileExtractor._expertise(soup, html)
        profile.same_as = AuthorProfileExtractor._social_links(soup)
        profile.works_for = AuthorProfileExtractor._first_group(WORKS_FOR_PATTERNS, html)
        profile.alumni_of = AuthorProfileExtractor._first_group(ALUMNI_OF_PATTERNS, html)
        profile.image = AuthorProfileExtractor._profile_image(soup, name, base_url)

        logger.debug(f"Parsed profile page for {name}: job_title={profile.job_title!r}")
        return profile

    @staticmethod
    def from_about_page(html: str, name: str) -> AuthorProfile:
        """Parse the section of a team/about page that introduces the author."""
        profile = AuthorProfile(name=name)
        if not html:
            return profile

        escaped = re.escape(name)
        section_pattern = re.compile(
            r'<[^>]+>([^<]*' + escaped + r'[^<]*)</[^>]+>([\s\S]*?)'
            r'(?=<[^>]+>[^<]*(?:' + escaped + r'|team|staff|about)[^<]*</|$)',
            re.I,
        )
        match = section_pattern.search(html)
        if not match:
            return profile

        section = match.group(2)
        profile.found = True
        profile.job_title = AuthorProfileExtractor._first_group(ABOUT_TITLE_PATTERNS, section)

        section_soup = BeautifulSoup(section, "html.parser")
        for paragraph in section_soup.find_all("p"):
            text = MetadataExtractor._clean_text(paragraph.get_text())
            if len(text) >= MIN_BIO_LENGTH:
                profile.description = text
                break

        profile.same_as = AuthorProfileExtractor._social_links(section_soup)
        return profile

    @staticmethod
    def _first_group(patterns: List[re.Pattern], text: str) -> str:
        for pattern in patterns:
            match = pattern.search(text)
            if match:
                return MetadataExtractor._clean_text(match.group(1))
        return ""

    @staticmethod
    def _expertise(soup: BeautifulSoup, html: str) -> List[str]:
        for selector in EXPERTISE_SELECTORS:
            element = soup.select_one(selector)
            if element is None:
                continue
            items = [MetadataExtractor._clean_text(li.get_text()) for li in element.find_all("li")]
            items = [item for item in items if item]
            if items:
                return items

        match = EXPERTISE_TEXT_PATTERN.search(html)
        if match:
            return [part.strip() for part in re.split(r',|\band\b', match.group(1)) if part.strip()]
        return []

    @staticmethod
    def _social_links(soup: BeautifulSoup) -> List[str]:
        links = []
        for anchor in soup.find_all("a", href=True):
            href = anchor["href"].strip()
            if (SOCIAL_LINK_PATTERN.search(href) or "/in/" in href) and href not in links:
                links.append(href)
        return links

    @staticmethod
    def _profile_image(soup: BeautifulSoup, name: str, base_url: str) -> str:
        image = None
        for selector in PROFILE_IMAGE_SELECTORS:
            image = soup.select_one(selector)
            if image is not None:
                break
        if image is None:
            for img in soup.find_all("img", src=True):
                if name.lower() in (img.get("alt") or "").lower():
                    image = img
                    break
        if image is None:
            return ""
        src = image["src"].strip()
        if base_url or src.startswith("//"):
            return MetadataExtractor.absolutize_url(src, base_url)
        return src
