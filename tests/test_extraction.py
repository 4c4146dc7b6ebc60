"""
Tests for page extraction: metadata, content region, author profiles
"""
import pytest
from bs4 import BeautifulSoup

from schema_intel.errors import InvalidURLError
from schema_intel.extraction import (
    DocumentExtractor, MetadataExtractor, ContentParser, AuthorProfileExtractor,
    author_slug_variations, candidate_profile_urls
)
from schema_intel.extraction.extractor import THIN_CONTENT_WARNING


PROFILE_HTML = """<html><head><meta name="description" content="Editor at Glass House"></head>
<body>
  <h1>Jamie Rivera</h1>
  <p class="job-title">Senior Editor</p>
  <div class="author-bio">Jamie Rivera has written about glassware and its care for ten years.</div>
  <ul class="expertise"><li>Glass care</li><li>Percolators</li></ul>
  <a href="https://www.linkedin.com/in/jamierivera">LinkedIn</a>
  <img class="author-photo" src="/img/jamie.jpg" alt="Jamie Rivera">
</body></html>
"""


@pytest.fixture
def extractor():
    """Provide a document extractor with default thresholds"""
    return DocumentExtractor()


@pytest.fixture
def document(extractor, article_html, article_url):
    """Provide the extracted sample article"""
    return extractor.extract_document(article_html, article_url)


class TestDocumentExtractor:
    """Test end-to-end document extraction"""

    def test_title_and_description(self, document):
        assert document.title == "How to Clean a Bong: Step-by-Step Guide | Glass House"
        assert document.description == "A quick guide to keeping your glass clean."

    def test_open_graph(self, document):
        assert document.metadata.og.site_name == "Glass House"
        assert document.page_type == "article"
        assert document.organization_name == "Glass House"

    def test_author_from_embedded_schema(self, document):
        assert document.author_name == "Jamie Rivera"

    def test_dates_normalized(self, document):
        assert document.published_date == "2024-03-05T10:00:00+00:00"
        assert document.modified_date == "2024-03-06T00:00:00+00:00"

    def test_images(self, document):
        assert document.featured_image == "https://cdn.example.com/images/bong_1200x.jpg"
        assert document.logo_url == "https://glasshouse.example.com/static/logo.png"

    def test_language(self, document):
        assert document.language == "en-GB"

    def test_malformed_schema_block_skipped(self, document):
        assert document.metadata.has_existing_schema is True
        assert document.metadata.schema_count == 1
        assert document.existing_schemas[0]["@type"] == "BlogPosting"

    def test_main_content_region(self, document):
        assert document.metadata.extraction_method == "semantic: article"
        assert "Step 1: Rinse with water." in document.content
        assert "Copyright" not in document.content
        assert "\n" not in document.content
        assert document.metadata.content_length == len(document.content)
        assert document.is_thin is False
        assert document.metadata.warning is None

    def test_thin_page_flagged(self, extractor, thin_html):
        document = extractor.extract_document(thin_html, "https://example.com/soon")
        assert document.is_thin is True
        assert document.metadata.warning == THIN_CONTENT_WARNING
        assert document.content == "We are working on this page."
        assert document.page_type == "WebPage"
        assert document.language == "en-US"

    def test_empty_markup(self, extractor):
        document = extractor.extract_document("", "https://example.com/")
        assert document.content == ""
        assert document.is_thin is True
        assert document.metadata.schema_count == 0

    @pytest.mark.parametrize("url", ["", "example.com/page", "ftp://example.com/file", "https://"])
    def test_invalid_url(self, extractor, article_html, url):
        with pytest.raises(InvalidURLError):
            extractor.extract_document(article_html, url)

    def test_invalid_url_is_value_error(self, extractor):
        with pytest.raises(ValueError, match="Invalid URL format"):
            extractor.extract_document("<p>hi</p>", "not a url")


class TestMetadataExtractor:
    """Test individual metadata heuristics"""

    @pytest.mark.parametrize("value,expected", [
        ("2024-03-05T10:00:00Z", "2024-03-05T10:00:00+00:00"),
        ("2024-03-05", "2024-03-05T00:00:00+00:00"),
        ("March 5, 2024", "2024-03-05T00:00:00+00:00"),
        ("5th March 2024", "2024-03-05T00:00:00+00:00"),
        ("2024-03-05T10:00:00+02:00", "2024-03-05T10:00:00+02:00"),
    ])
    def test_normalize_date(self, value, expected):
        assert MetadataExtractor.normalize_date(value) == expected

    def test_normalize_date_unparsable(self):
        assert MetadataExtractor.normalize_date("sometime soon") is None
        assert MetadataExtractor.normalize_date("") is None

    def test_organization_from_domain(self):
        assert MetadataExtractor.organization_from_domain("https://www.trysnow-oral.com") == "Snow Oral"
        assert MetadataExtractor.organization_from_domain("https://acme.io/blog") == "Acme"

    def test_organization_from_embedded_schema(self):
        assert MetadataExtractor.extract_organization_name(
            MetadataExtractor.extract_open_graph(BeautifulSoup("", "html.parser")),
            [{"@type": "Organization", "name": "Acme Labs"}],
            "https://acme.io",
            "Home | Other",
        ) == "Acme Labs"

    def test_absolutize_url(self):
        page = "https://example.com/blog/post"
        assert MetadataExtractor.absolutize_url("//cdn.example.com/a.png", page) == "https://cdn.example.com/a.png"
        assert MetadataExtractor.absolutize_url("/a.png", page) == "https://example.com/a.png"
        assert MetadataExtractor.absolutize_url("https://other.com/a.png", page) == "https://other.com/a.png"
        assert MetadataExtractor.absolutize_url("", page) == ""

    def test_author_byline_pattern(self):
        html = '<p>Written by Maria Lopez</p>'
        soup = BeautifulSoup(html, "html.parser")
        assert MetadataExtractor.extract_author_name(soup, html, []) == "Maria Lopez"

    def test_author_rejects_metadata_bylines(self):
        assert MetadataExtractor.is_valid_author("Maria Lopez") is True
        assert MetadataExtractor.is_valid_author("Admin") is False
        assert MetadataExtractor.is_valid_author("maria") is False
        assert MetadataExtractor.is_valid_author("Jo") is False

    def test_meta_author_before_patterns(self):
        html = '<head><meta name="author" content="Sam Field"></head><p>Written by Maria Lopez</p>'
        soup = BeautifulSoup(html, "html.parser")
        assert MetadataExtractor.extract_author_name(soup, html, []) == "Sam Field"


class TestContentParser:
    """Test main content region selection"""

    def test_body_fallback_strips_chrome(self):
        html = "<html><body><nav>Home Shop</nav><p>Only a little text here.</p><footer>Legal</footer></body></html>"
        text, method, region = ContentParser().extract_main_content(html)
        assert text == "Only a little text here."
        assert method == "Fallback Body"

    def test_scripts_removed(self):
        html = "<body><article><p>Visible.</p><script>var hidden = 1;</script></article></body>"
        text, _, _ = ContentParser(min_content_length=5).extract_main_content(html)
        assert "hidden" not in text
        assert text == "Visible."

    def test_paragraphs_do_not_run_together(self):
        html = "<article><p>First sentence.</p><p>Second sentence.</p></article>"
        text, _, _ = ContentParser(min_content_length=5).extract_main_content(html)
        assert text == "First sentence. Second sentence."


class TestAuthorProfiles:
    """Test author profile discovery and parsing"""

    def test_slug_variations(self):
        assert author_slug_variations("Nathan Smith") == [
            "nathan-smith", "nathansmith", "nathan_smith", "nathan.smith",
            "nathan", "smith", "nsmith", "n-smith",
        ]

    def test_single_word_slug(self):
        assert author_slug_variations("Prince") == ["prince"]

    def test_candidate_urls(self):
        urls = candidate_profile_urls("https://example.com/", "Nathan Smith")
        assert urls[0] == "https://example.com/about-us"
        assert "https://example.com/author/nathan-smith" in urls
        assert "https://example.com/contributor/n-smith" in urls
        assert len(urls) == len(set(urls))

    def test_profile_page(self):
        profile = AuthorProfileExtractor.from_profile_page(
            PROFILE_HTML, "Jamie Rivera", "https://glasshouse.example.com"
        )
        assert profile.found is True
        assert profile.job_title == "Senior Editor"
        assert profile.description.startswith("Jamie Rivera has written")
        assert profile.knows_about == ["Glass care", "Percolators"]
        assert profile.same_as == ["https://www.linkedin.com/in/jamierivera"]
        assert profile.image == "https://glasshouse.example.com/img/jamie.jpg"

    def test_profile_page_for_someone_else(self):
        profile = AuthorProfileExtractor.from_profile_page(PROFILE_HTML, "Nathan Smith")
        assert profile.found is False
        assert profile.job_title == ""
