"""
Tests for JSON-LD assembly: type mapping, node models, pruning and the generator
"""
import pytest

from schema_intel.errors import InvalidURLError
from schema_intel.extraction import AuthorProfile
from schema_intel.schema import (
    SchemaBuilder, SchemaConfig, SchemaGenerator, HowToStep, prune_empty,
    entity_schema_type, node_schema_type, wiki_reference
)


BONG_URL = "https://glasshouse.example.com/blogs/news/how-to-clean-a-bong"
BONG_IMAGE = "https://cdn.example.com/images/bong_1200x.jpg"
FITNESS_URL = "https://fitlab.example.com/training/vo2-max"


def assert_no_empty_values(value):
    """Fail if any nested value is None, "", [] or an object without content."""
    if isinstance(value, dict):
        assert set(value) - {"@type", "@context"}, value
        for item in value.values():
            assert item is not None and item != "" and item != []
            assert_no_empty_values(item)
    elif isinstance(value, list):
        for item in value:
            assert_no_empty_values(item)


@pytest.fixture
def generator(fixed_clock):
    """Provide a generator with a fixed clock"""
    return SchemaGenerator(clock=fixed_clock)


@pytest.fixture
def bong_config(bong_content):
    """Provide page fields for the bong cleaning article"""
    return SchemaConfig(
        url=BONG_URL,
        title="How to Clean a Bong: Step-by-Step Guide",
        content=bong_content,
        organization_name="Glass House",
        author_name="Jamie Rivera",
        featured_image=BONG_IMAGE,
        published_date="2024-03-05T10:00:00+00:00",
        language="en-GB",
    )


@pytest.fixture
def fitness_config(fitness_content):
    return SchemaConfig(url=FITNESS_URL, title="Raising Your VO2 Max", content=fitness_content)


class TestTypeMapping:
    """Test entity type to Schema.org type mapping"""

    def test_fitness_concepts_are_things(self):
        assert entity_schema_type("VO2 Max", "fitness", "fitness") == "Thing"
        assert entity_schema_type("Heart Rate Training Zones", "location", "fitness") == "Thing"

    def test_regular_mapping(self):
        assert entity_schema_type("Denver", "location") == "Place"
        assert entity_schema_type("Bong", "product", "cannabis") == "Product"
        assert node_schema_type("medical") == "MedicalEntity"
        assert node_schema_type("something-else") == "Thing"

    def test_wiki_allow_list(self):
        reference = wiki_reference("VO2 Max")
        assert reference.id == "https://www.wikidata.org/wiki/Q917808"
        assert "https://en.wikipedia.org/wiki/VO2_max" in reference.same_as
        assert wiki_reference("Some Startup") is None


class TestPruning:
    """Test removal of empty values"""

    def test_prune_empty(self):
        value = {
            "a": "",
            "b": [],
            "c": {"@type": "Thing"},
            "d": {"x": None},
            "e": [{"@type": "Thing"}, "v", ""],
            "f": 0,
            "g": False,
        }
        assert prune_empty(value) == {"e": ["v"], "f": 0, "g": False}

    def test_prune_idempotent(self, generator, bong_config):
        schema = generator.generate_schema(bong_config)
        assert prune_empty(schema) == schema
        assert prune_empty(prune_empty(schema)) == prune_empty(schema)


class TestSchemaBuilder:
    """Test document assembly from typed nodes"""

    def test_unsupported_type(self):
        with pytest.raises(ValueError):
            SchemaBuilder("Recipe")

    def test_context_first_and_none_ignored(self):
        document = SchemaBuilder("Article").set(headline="Title", description=None).build()
        assert list(document) == ["@context", "@type", "headline"]
        assert document["@type"] == "Article"

    def test_howto_type(self):
        document = SchemaBuilder("Review").set(headline="Title").as_howto(
            [HowToStep(position=1, name="Step 1", text="Rinse.")], "PT5M"
        ).build()
        assert document["@type"] == ["Review", "HowTo"]
        assert document["step"] == [{"@type": "HowToStep", "name": "Step 1", "position": 1, "text": "Rinse."}]
        assert document["totalTime"] == "PT5M"


class TestHowToScenario:
    """Test the instructional blog post end to end through the generator"""

    def test_type_and_id(self, generator, bong_config):
        schema = generator.generate_schema(bong_config)
        assert list(schema)[0] == "@context"
        assert schema["@context"] == "https://schema.org"
        assert schema["@type"] == ["BlogPosting", "HowTo"]
        assert schema["@id"] == f"{BONG_URL}#BlogPosting"
        assert schema["mainEntityOfPage"] == BONG_URL

    def test_steps(self, generator, bong_config):
        schema = generator.generate_schema(bong_config)
        assert schema["step"] == [
            {"@type": "HowToStep", "name": "Step 1", "position": 1, "text": "Rinse with water."},
            {"@type": "HowToStep", "name": "Step 2", "position": 2, "text": "Add alcohol."},
            {"@type": "HowToStep", "name": "Step 3", "position": 3, "text": "Shake and repeat."},
        ]
        assert schema["totalTime"] == "PT15M"

    def test_people_and_publisher(self, generator, bong_config):
        schema = generator.generate_schema(bong_config)
        assert schema["author"] == {
            "@type": "Person",
            "@id": "https://glasshouse.example.com/author/jamie-rivera#Person",
            "name": "Jamie Rivera",
        }
        assert schema["publisher"] == {
            "@type": "Organization",
            "@id": "https://glasshouse.example.com",
            "name": "Glass House",
        }
        assert schema["image"] == {"@type": "ImageObject", "@id": f"{BONG_IMAGE}#image", "url": BONG_IMAGE}

    def test_logo_only_when_extracted(self, generator, bong_config):
        with_logo = bong_config.model_copy(update={"logo_url": "https://glasshouse.example.com/static/logo.png"})
        schema = generator.generate_schema(with_logo)
        assert schema["publisher"]["logo"] == {
            "@type": "ImageObject", "url": "https://glasshouse.example.com/static/logo.png"
        }
        assert "logo" not in generator.generate_schema(bong_config)["publisher"]

    def test_blog_membership(self, generator, bong_config):
        schema = generator.generate_schema(bong_config)
        assert schema["isPartOf"] == {
            "@type": "Blog",
            "@id": "https://glasshouse.example.com/blogs/",
            "name": "Glass House Blog",
            "publisher": {"@type": "Organization", "@id": "https://glasshouse.example.com"},
        }

    def test_entities(self, generator, bong_config):
        schema = generator.generate_schema(bong_config)
        about = schema["about"]
        assert [node["name"] for node in about] == ["Bong"]
        assert about[0]["@type"] == "Product"
        assert about[0]["@id"] == "https://www.wikidata.org/wiki/Q847027"
        mention_names = {node["name"] for node in schema["mentions"]}
        assert "Borosilicate Glass" in mention_names
        assert "Bong" not in mention_names

    def test_page_fields(self, generator, bong_config):
        schema = generator.generate_schema(bong_config)
        assert schema["headline"] == bong_config.title
        assert schema["datePublished"] == "2024-03-05T10:00:00+00:00"
        assert schema["dateModified"] == "2024-03-05T10:00:00+00:00"
        assert schema["inLanguage"] == "en-GB"
        assert schema["audience"]["suggestedMinAge"] == 21
        assert schema["wordCount"] == len(bong_config.content.split())
        assert schema["articleBody"] == bong_config.content

    def test_no_empty_values(self, generator, bong_config):
        assert_no_empty_values(generator.generate_schema(bong_config))

    def test_indicator_threshold_configurable(self, fixed_clock, bong_config):
        strict = SchemaGenerator(clock=fixed_clock, min_howto_indicators=5)
        schema = strict.generate_schema(bong_config)
        assert schema["@type"] == "BlogPosting"
        assert "step" not in schema

    def test_step_cap_configurable(self, fixed_clock, bong_config):
        capped = SchemaGenerator(clock=fixed_clock, max_howto_steps=2)
        assert len(capped.generate_schema(bong_config)["step"]) == 2

    def test_howto_needs_instructional_title(self, generator, bong_content):
        assert generator.is_howto(bong_content, "How to Clean a Bong") is True
        assert generator.is_howto(bong_content, "Bong Care Notes") is False


class TestFitnessScenario:
    """Test entity typing and external references for a fitness article"""

    def test_primary_entity(self, generator, fitness_config):
        schema = generator.generate_schema(fitness_config)
        assert schema["@type"] == "Article"
        about = schema["about"]
        assert [node["name"] for node in about] == ["VO2 Max"]
        assert about[0]["@type"] == "Thing"
        assert "https://en.wikipedia.org/wiki/VO2_max" in about[0]["sameAs"]
        assert about[0]["description"] == "Maximal oxygen consumption during incremental exercise"

    def test_secondary_entity(self, generator, fitness_config):
        schema = generator.generate_schema(fitness_config)
        hiit = next(node for node in schema["mentions"] if node["name"] == "HIIT")
        assert hiit["@type"] == "Thing"
        assert "https://en.wikipedia.org/wiki/High-intensity_interval_training" in hiit["sameAs"]

    def test_never_typed_as_place(self, generator, fitness_config):
        schema = generator.generate_schema(fitness_config)
        types = [node["@type"] for node in schema.get("about", []) + schema.get("mentions", [])]
        assert "Place" not in types

    def test_missing_dates_use_clock(self, generator, fitness_config):
        schema = generator.generate_schema(fitness_config)
        assert schema["datePublished"] == "2024-01-01T00:00:00+00:00"
        assert schema["dateModified"] == "2024-01-01T00:00:00+00:00"

    def test_absent_sources_are_omitted(self, generator, fitness_config):
        schema = generator.generate_schema(fitness_config)
        for key in ("author", "publisher", "image", "isPartOf", "step", "teaches"):
            assert key not in schema

    def test_keywords_and_audience(self, generator, fitness_config):
        schema = generator.generate_schema(fitness_config)
        assert schema["keywords"].startswith("VO2 Max, HIIT")
        assert schema["audience"]["audienceType"] == "athletes and fitness enthusiasts"


class TestGeneratorHelpers:
    """Test individual generator rules"""

    @pytest.mark.parametrize("content_type,url,expected", [
        ("HowTo", "https://example.com/guides/a", "BlogPosting"),
        ("Review", "https://example.com/r", "Review"),
        ("ScholarlyArticle", "https://example.com/papers/a", "ScholarlyArticle"),
        ("Article", "https://example.com/blog/a", "BlogPosting"),
        ("Unknown", "https://example.com/", "Article"),
        ("Article", "https://blog.example.com/notes", "Article"),
        ("Article", "https://example.com/notes?ref=/blog", "Article"),
    ])
    def test_determine_schema_type(self, content_type, url, expected):
        assert SchemaGenerator.determine_schema_type(content_type, url) == expected

    def test_description_two_sentences(self):
        assert SchemaGenerator.generate_description("One. Two. Three.") == "One. Two."

    def test_description_truncated(self):
        description = SchemaGenerator.generate_description("word " * 60 + "end.")
        assert len(description) == 160
        assert description.endswith("...")

    def test_description_prefers_page_description(self, generator, fitness_config):
        page = fitness_config.model_copy(update={"description": "Why VO2 Max matters."})
        assert generator.generate_schema(page)["description"] == "Why VO2 Max matters."

    def test_total_time(self):
        assert SchemaGenerator.extract_total_time("This requires 2 hours of soaking.") == "PT2H"
        assert SchemaGenerator.extract_total_time("No timing here.") is None

    def test_numbered_list_steps(self, generator):
        steps = generator.extract_steps("Supplies first.\n1. Fill the sink.\n2. Soak the glass.\n")
        assert [step.text for step in steps] == ["Fill the sink.", "Soak the glass."]

    def test_sequence_word_steps(self, generator):
        steps = generator.extract_steps("First, rinse the glass. Then, add salt. Finally, shake it.")
        assert [step.position for step in steps] == [1, 2, 3]
        assert steps[0].text == "rinse the glass."

    def test_learning_outcomes_deduplicated(self, generator):
        terms = generator.deduplicate_learning_outcomes([
            {"name": "VO2 Max", "description": "a"},
            {"name": "vo2  max", "description": "b"},
            {"name": "HIIT"},
        ])
        assert [term.name for term in terms] == ["VO2 Max", "HIIT"]

    def test_author_profile_merged(self, generator, bong_config):
        profile = AuthorProfile(
            name="Jamie Rivera", found=True, job_title="Senior Editor",
            same_as=["https://www.linkedin.com/in/jamierivera"],
            works_for="Glass House", alumni_of="State University",
        )
        author = generator.generate_schema(bong_config.model_copy(update={"author_profile": profile}))["author"]
        assert author["jobTitle"] == "Senior Editor"
        assert author["sameAs"] == ["https://www.linkedin.com/in/jamierivera"]
        assert author["worksFor"] == {"@type": "Organization", "name": "Glass House"}
        assert author["alumniOf"] == {"@type": "EducationalOrganization", "name": "State University"}

    def test_unfound_profile_ignored(self, generator, bong_config):
        profile = AuthorProfile(name="Jamie Rivera", found=False, job_title="Senior Editor")
        author = generator.generate_schema(bong_config.model_copy(update={"author_profile": profile}))["author"]
        assert "jobTitle" not in author

    @pytest.mark.parametrize("url", ["", "glasshouse.example.com/page", "mailto:someone@example.com"])
    def test_invalid_url(self, generator, bong_config, url):
        with pytest.raises(InvalidURLError):
            generator.generate_schema(bong_config.model_copy(update={"url": url}))
