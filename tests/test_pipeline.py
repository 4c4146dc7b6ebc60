"""
End-to-end tests for the extraction and synthesis pipeline
"""
import json

import pytest

from main import main
from schema_intel.errors import InsufficientContentError, InvalidURLError
from schema_intel.pipeline import SchemaPipeline
from schema_intel.schema import SchemaGenerator


@pytest.fixture
def pipeline(fixed_clock):
    """Provide a pipeline whose generator uses a fixed clock"""
    return SchemaPipeline(generator=SchemaGenerator(clock=fixed_clock))


class TestSchemaPipeline:
    """Test running every stage over one page"""

    def test_full_run(self, pipeline, article_html, article_url):
        result = pipeline.run(article_html, article_url)

        assert result.document.title.startswith("How to Clean a Bong")
        assert result.analysis.industry == "cannabis"
        assert result.analysis.content_type == "HowTo"
        assert "bong" in result.graph.nodes
        assert 1 <= len(result.recommendations) <= 3

        schema = result.schema_document
        assert schema["@type"] == ["BlogPosting", "HowTo"]
        assert schema["author"]["name"] == "Jamie Rivera"
        assert schema["publisher"]["name"] == "Glass House"
        assert schema["publisher"]["logo"]["url"] == "https://glasshouse.example.com/static/logo.png"
        assert schema["image"]["url"] == "https://cdn.example.com/images/bong_1200x.jpg"
        assert schema["datePublished"] == "2024-03-05T10:00:00+00:00"
        assert schema["dateModified"] == "2024-03-06T00:00:00+00:00"
        assert schema["inLanguage"] == "en-GB"
        assert schema["description"] == "A quick guide to keeping your glass clean."
        assert [step["text"] for step in schema["step"]] == [
            "Rinse with water.", "Add alcohol.", "Shake and repeat."
        ]
        assert schema["isPartOf"]["@id"] == "https://glasshouse.example.com/blogs/"
        assert [node["name"] for node in schema["about"]] == ["Bong"]

    def test_thin_content_rejected(self, pipeline, thin_html):
        with pytest.raises(InsufficientContentError) as excinfo:
            pipeline.run(thin_html, "https://example.com/soon")
        assert excinfo.value.content_length == len("We are working on this page.")
        assert excinfo.value.minimum == 500
        assert "Manual input may be required" in str(excinfo.value)

    def test_thin_content_allowed(self, pipeline, thin_html):
        result = pipeline.run(thin_html, "https://example.com/soon", allow_thin_content=True)
        assert result.document.is_thin is True
        assert result.schema_document["@type"] == "Article"
        assert result.schema_document["headline"] == "Coming soon"
        assert result.recommendations[0].schema_type == "Article"

    def test_invalid_url(self, pipeline, article_html):
        with pytest.raises(InvalidURLError):
            pipeline.run(article_html, "/blogs/news/how-to-clean-a-bong")

    def test_run_url_uses_fetcher(self, pipeline, article_html, article_url):
        fetched = []

        def fetch_page(url):
            fetched.append(url)
            return article_html

        result = pipeline.run_url(article_url, fetch_page)
        assert fetched == [article_url]
        assert result.document.url == article_url
        assert result.schema_document["@id"] == f"{article_url}#BlogPosting"

    def test_graph_export(self, pipeline, article_html, article_url):
        result = pipeline.run(article_html, article_url)
        exported = pipeline.graph_builder.export_to_schema(result.graph)
        ids = {item["@id"] for item in exported["@graph"]}
        assert "#bong" in ids


class TestCommandLine:
    """Test the command-line entry point on a saved page"""

    def test_prints_schema_and_recommendations(self, tmp_path, capsys, article_html, article_url):
        page = tmp_path / "page.html"
        page.write_text(article_html, encoding="utf-8")

        assert main([str(page), "--url", article_url, "--recommend", "--graph"]) == 0
        output = json.loads(capsys.readouterr().out)
        assert output["schema"]["@type"] == ["BlogPosting", "HowTo"]
        assert output["recommendations"]
        assert output["graph"]["@context"] == "https://schema.org"

    def test_thin_page_fails(self, tmp_path, thin_html):
        page = tmp_path / "thin.html"
        page.write_text(thin_html, encoding="utf-8")

        assert main([str(page), "--url", "https://example.com/soon"]) == 1
