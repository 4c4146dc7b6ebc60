"""
Tests for Schema.org type recommendation and validation
"""
import pytest

from schema_intel.intelligence import Entity, SchemaRecommender


RECIPE_CONTENT = (
    "Banana bread recipe. Ingredients: 2 cups flour, 3 tablespoons sugar, 2 ripe bananas. "
    "Instructions: preheat the oven, mix the batter, then bake for an hour. Serves 8."
)

FAQ_CONTENT = (
    "Frequently asked questions. Does it ship abroad? Is it real glass? "
    "Can I clean it with salt? How long does it last?"
)

PLAIN_CONTENT = "Quiet afternoons by the lake."


@pytest.fixture
def recommender():
    """Provide a recommender with the built-in rule tables"""
    return SchemaRecommender()


class TestFeatureExtraction:
    """Test structural feature flags"""

    def test_recipe_features(self):
        features = SchemaRecommender.extract_features(RECIPE_CONTENT, "Banana Bread")
        assert features.has_ingredients
        assert features.has_instructions
        assert features.has_steps
        assert features.has_recipe
        assert not features.has_video
        assert features.content_length == len(RECIPE_CONTENT)

    def test_markup_counts(self):
        content = '<ul><li>a</li></ul><ol><li>b</li></ol><img src="x.png"> Is it? <a href="/">home</a>'
        features = SchemaRecommender.extract_features(content, "")
        assert features.list_count == 2
        assert features.image_count == 1
        assert features.question_count == 1
        assert features.link_density > 0


class TestRecommend:
    """Test ranking, bonuses and the fallback type"""

    def test_recipe(self, recommender):
        recommendations = recommender.recommend(RECIPE_CONTENT, "Banana Bread", "https://example.com/banana-bread")
        top = recommendations[0]
        assert top.schema_type == "Recipe"
        assert top.confidence == 1.0
        assert "contains ingredients list" in top.reasoning
        assert top.reasoning.endswith("(confidence: 100%)")
        assert "recipeIngredient" in top.properties
        assert top.related_types == ["Article", "CreativeWork"]

    def test_at_most_three(self, recommender):
        recommendations = recommender.recommend(RECIPE_CONTENT, "Banana Bread", "https://example.com/recipe/x")
        assert 1 <= len(recommendations) <= 3
        confidences = [r.confidence for r in recommendations]
        assert confidences == sorted(confidences, reverse=True)
        assert all(0.0 <= c <= 1.0 for c in confidences)

    def test_faq_reason_includes_question_count(self, recommender):
        top = recommender.recommend(FAQ_CONTENT, "Shipping FAQ", "https://example.com/help")[0]
        assert top.schema_type == "FAQ"
        assert "FAQ section detected" in top.reasoning
        assert "4 questions found" in top.reasoning

    def test_fallback_article(self, recommender):
        recommendations = recommender.recommend(PLAIN_CONTENT, "Lake", "https://example.com/notes/lake")
        fallback = recommendations[0]
        assert fallback.schema_type == "Article"
        assert fallback.confidence == 0.5
        assert fallback.reasoning == "Default Article schema based on content structure"
        assert fallback.related_types == ["WebPage", "CreativeWork"]
        assert "headline" in fallback.properties

    def test_fallback_blog_posting(self, recommender):
        recommendations = recommender.recommend(PLAIN_CONTENT, "Lake", "https://example.com/blog/lake")
        assert recommendations[0].schema_type == "BlogPosting"
        assert "keywords" in recommendations[0].properties

    def test_fallback_placed_above_weak_candidates(self, recommender):
        recommendations = recommender.recommend("Our seminar by the lake.", "Lake notes", "https://example.com/notes/lake")
        assert [r.schema_type for r in recommendations] == ["Article", "Event"]
        assert recommendations[0].confidence == 0.5
        assert recommendations[1].confidence == pytest.approx(0.4)

    def test_url_hints_read_the_path_only(self, recommender):
        url = "https://blog.example.com/notes/lake?from=/event"
        recommendations = recommender.recommend("Our seminar by the lake.", "Lake notes", url)
        assert [r.schema_type for r in recommendations] == ["Article", "Event"]
        assert recommendations[1].confidence == pytest.approx(0.4)

    def test_url_and_entity_bonuses(self, recommender):
        entities = [Entity(name="Glass Expo", type="event", confidence=0.8)]
        recommendations = recommender.recommend(PLAIN_CONTENT, "Lake", "https://example.com/event/lake", entities)
        assert recommendations[0].schema_type == "Event"
        assert recommendations[0].confidence == pytest.approx(0.6)

    def test_entity_bonus_capped(self, recommender):
        entities = [Entity(name="Starter Kit", type="product", confidence=0.9)]
        content = "Buy the product today. Price, features, warranty and shipping details inside."
        recommendations = recommender.recommend(content, "Starter Kit", "https://example.com/shop/kit", entities)
        product = next(r for r in recommendations if r.schema_type == "Product")
        assert product.confidence == 1.0


class TestValidateSchemaType:
    """Test validation of a proposed type"""

    def test_unknown_type(self, recommender):
        result = recommender.validate_schema_type("Spaceship", RECIPE_CONTENT, "Banana Bread")
        assert result.valid is False
        assert result.confidence == 0.0
        assert result.issues == ["Unknown schema type"]

    def test_valid_recipe(self, recommender):
        result = recommender.validate_schema_type("Recipe", RECIPE_CONTENT, "Banana Bread")
        assert result.valid is True
        assert result.issues == []
        assert result.confidence > 0.3

    def test_missing_requirements(self, recommender):
        result = recommender.validate_schema_type("Recipe", PLAIN_CONTENT, "Lake")
        assert result.valid is False
        assert result.issues == ["Missing ingredients", "Missing cooking instructions"]

    def test_howto(self, recommender, bong_content):
        result = recommender.validate_schema_type("HowTo", bong_content, "How to Clean a Bong")
        assert result.valid is True
