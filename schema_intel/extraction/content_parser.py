"""
Content parser for locating the main text region of a page.

Candidate regions come from ordered selector families (semantic containers,
then platform conventions), plus a paragraph-density heuristic. The longest
candidate that is not link-heavy wins; otherwise the parser falls back to a
cleaned <body> and finally the whole document.
"""

import re
import logging
from typing import List, Optional, Tuple
from bs4 import BeautifulSoup, Tag
from bs4.element import PreformattedString

logger = logging.getLogger(__name__)


class ContentParser:
    """Finds and flattens the main content region of an HTML page."""

    # Elements that never carry readable content
    NON_CONTENT_TAGS = ["script", "style", "noscript", "svg", "iframe", "template"]

    # Page chrome removed before the body fallback
    BOILERPLATE_TAGS = ["nav", "header", "footer", "aside"]
    BOILERPLATE_CLASS_PATTERN = re.compile(
        r'\b(?:sidebar|widget|advertisement|ads|promo|social-share|newsletter|popup|modal|overlay|menu)\b',
        re.I,
    )

    # (family, selector) pairs in priority order
    CONTENT_SELECTORS: List[Tuple[str, str]] = [
        ("semantic", "article"),
        ("semantic", "main"),
        ("ecommerce", "div.rte"),
        ("ecommerce", 'div[class*="article__content"]'),
        ("ecommerce", 'div[class*="product__description"]'),
        ("blog-engine", "div.entry-content"),
        ("blog-engine", "div.post-content"),
        ("blog-engine", "div.wp-block-post-content"),
        ("blog-engine", "div.post-body"),
        ("cms", "section.o_wblog_post_content"),
        ("cms", "div.blog-content"),
        ("cms", "div.blog-post"),
        ("generic", "div.article-content"),
        ("generic", "div.article-body"),
        ("generic", "div.main-content"),
        ("generic", "div.page-content"),
        ("generic", "div.content-area"),
        ("generic", "div.body-content"),
        ("id", 'div[id*="content"]'),
    ]

    # Direct children that count towards paragraph density
    BLOCK_TAGS = ["p", "h1", "h2", "h3", "h4", "h5", "h6", "ul", "ol", "blockquote"]
    MIN_DENSE_BLOCKS = 3

    CONTAINER_PATTERN = re.compile(r'container|wrapper|main|content', re.I)

    # Elements that end a paragraph when flattened
    PARAGRAPH_TAGS = ["p", "div", "br", "li", "h1", "h2", "h3", "h4", "h5", "h6",
                      "blockquote", "section", "article", "tr"]

    def __init__(self, min_content_length: int = 500):
        self.min_content_length = min_content_length

    def extract_main_content(self, html: str) -> Tuple[str, str, Optional[Tag]]:
        """
        Locate the main content region.

        Args:
            html: Raw page markup

        Returns:
            Tuple of (flattened text, extraction method, winning region element)
        """
        soup = BeautifulSoup(html or "", "html.parser")
        for tag in soup.find_all(self.NON_CONTENT_TAGS):
            tag.decompose()

        best_text, best_method, best_region = "", "", None
        candidates = self._candidate_regions(soup)
        logger.debug(f"Scoring {len(candidates)} candidate content regions")

        for method, region in candidates:
            text = self.flatten_text(region)
            if self._is_link_heavy(region, text):
                continue
            if len(text) > len(best_text):
                best_text, best_method, best_region = text, method, region

        if len(best_text) > self.min_content_length:
            return best_text, best_method, best_region

        body = soup.find("body")
        if body is None:
            text = self.flatten_text(soup)
            return text, "Fallback Full HTML", None

        self._strip_boilerplate(body)

        for container in body.find_all("div", attrs={"class": self.CONTAINER_PATTERN}):
            text = self.flatten_text(container)
            if len(text) > self.min_content_length and not self._is_link_heavy(container, text):
                return text, "Fallback Container", container

        text = self.flatten_text(body)
        if text:
            return text, "Fallback Body", body

        # Body held only chrome; whatever text remains anywhere is all there is
        return self.flatten_text(soup), "Fallback Full HTML", None

    def _candidate_regions(self, soup: BeautifulSoup) -> List[Tuple[str, Tag]]:
        candidates = []
        for family, selector in self.CONTENT_SELECTORS:
            for element in soup.select(selector):
                candidates.append((f"{family}: {selector}", element))

        for div in soup.find_all("div"):
            blocks = div.find_all(self.BLOCK_TAGS, recursive=False)
            paragraphs = [b for b in blocks if b.name == "p"]
            if len(blocks) >= self.MIN_DENSE_BLOCKS and paragraphs:
                candidates.append(("paragraph-density", div))
        return candidates

    @staticmethod
    def _is_link_heavy(region: Tag, text: str) -> bool:
        """More than one link per ten words reads as navigation."""
        words = len(text.split())
        links = len(region.find_all("a"))
        return links > words / 10

    def _strip_boilerplate(self, body: Tag) -> None:
        for tag in body.find_all(self.BOILERPLATE_TAGS):
            tag.decompose()
        for tag in body.find_all(True):
            if tag.decomposed:
                continue
            marker = " ".join(tag.get("class", []) or []) + " " + (tag.get("id") or "")
            if tag.name not in ("body", "html") and self.BOILERPLATE_CLASS_PATTERN.search(marker):
                tag.decompose()

    @classmethod
    def flatten_text(cls, region) -> str:
        """
        Flatten a region to plain text.

        Paragraph ends become newlines before whitespace is collapsed, so
        sentences in adjacent blocks never run together. Entities are already
        decoded by the parser.
        """
        if region is None:
            return ""
        pieces = []
        for element in region.descendants:
            if isinstance(element, Tag):
                if element.name in cls.PARAGRAPH_TAGS:
                    pieces.append("\n")
                continue
            if isinstance(element, PreformattedString):
                continue
            pieces.append(str(element))

        text = "".join(pieces)
        paragraphs = [" ".join(chunk.split()) for chunk in text.split("\n")]
        return " ".join(p for p in paragraphs if p).strip()
