"""
Schema.org type recommendation from content structure.

Every candidate type is scored by two independent passes that are summed:
regex pattern hits over the raw content, and a table of weighted feature
rules over a ContentFeatures record. URL hints and the types of already
recognized entities add fixed bonuses on top.
"""

import re
import logging
from typing import List, Dict, Optional, Callable, NamedTuple
from urllib.parse import urlparse

from .data_models import ContentFeatures, Entity, SchemaRecommendation, SchemaValidation

logger = logging.getLogger(__name__)


SCHEMA_PATTERNS: Dict[str, List[re.Pattern]] = {
    "Recipe": [
        re.compile(r'\b(ingredients?|recipe|cooking|baking|preparation)\b', re.I),
        re.compile(r'\b(\d+\s*(cups?|tablespoons?|teaspoons?|ounces?|pounds?|grams?))\b', re.I),
        re.compile(r'\b(preheat|mix|stir|bake|cook|simmer|boil)\b', re.I),
        re.compile(r'\b(serves?|servings?|yield|prep\s*time|cook\s*time)\b', re.I),
    ],
    "HowTo": [
        re.compile(r'\b(how\s+to|tutorial|guide|steps?\s+\d+|instructions?)\b', re.I),
        re.compile(r'\b(first|second|third|then|next|finally)\s*[,:]', re.I),
        re.compile(r'\b(tools?\s+needed|materials?\s+needed|requirements?)\b', re.I),
    ],
    "Product": [
        re.compile(r'\b(price|cost|buy|purchase|shop|cart|checkout)\b', re.I),
        re.compile(r'\b(features?|specifications?|dimensions?|weight|size)\b', re.I),
        re.compile(r'\b(in\s+stock|out\s+of\s+stock|availability|shipping)\b', re.I),
        re.compile(r'\b(warranty|guarantee|return\s+policy)\b', re.I),
    ],
    "Review": [
        re.compile(r'\b(review|rating|stars?|pros?\s+and\s+cons?|verdict)\b', re.I),
        re.compile(r'\b(recommend|would\s+not?\s+recommend|worth|value)\b', re.I),
        re.compile(r'\b(comparison|versus|vs\.?|better\s+than|worse\s+than)\b', re.I),
        re.compile(r'\b(\d+\s*(?:out\s+of\s+)?\d+\s*stars?)\b', re.I),
    ],
    "Event": [
        re.compile(r'\b(event|conference|meeting|workshop|seminar|webinar)\b', re.I),
        re.compile(r'\b(date|time|location|venue|address|tickets?)\b', re.I),
        re.compile(r'\b(register|registration|RSVP|attend|join)\b', re.I),
        re.compile(r'\b(schedule|agenda|speakers?|presenter)\b', re.I),
    ],
    "FAQ": [
        re.compile(r'\b(frequently\s+asked\s+questions?|FAQ|Q\s*&\s*A)\b', re.I),
        re.compile(r'\b(question|answer|ask|respond|reply)\b', re.I),
        re.compile(r'^Q:|^A:', re.I | re.M),
        re.compile(r'\?[\s\S]{1,200}?[.!]'),
    ],
    "JobPosting": [
        re.compile(r'\b(job|position|career|employment|hiring|vacancy)\b', re.I),
        re.compile(r'\b(salary|compensation|benefits?|pay|wage)\b', re.I),
        re.compile(r'\b(requirements?|qualifications?|experience|skills?)\b', re.I),
        re.compile(r'\b(apply|application|resume|CV)\b', re.I),
    ],
    "Course": [
        re.compile(r'\b(course|class|lesson|curriculum|syllabus|module)\b', re.I),
        re.compile(r'\b(learn|teach|instructor|student|education)\b', re.I),
        re.compile(r'\b(duration|weeks?|hours?|credits?|certificate)\b', re.I),
        re.compile(r'\b(enroll|enrollment|register|tuition)\b', re.I),
    ],
    "LocalBusiness": [
        re.compile(r'\b(hours?|open|closed|monday|tuesday|wednesday|thursday|friday|saturday|sunday)\b', re.I),
        re.compile(r'\b(address|location|directions?|map|near)\b', re.I),
        re.compile(r'\b(contact|phone|email|website)\b', re.I),
        re.compile(r'\b(services?|menu|offerings?)\b', re.I),
    ],
    "VideoObject": [
        re.compile(r'\b(video|watch|play|duration|minutes?|seconds?)\b', re.I),
        re.compile(r'\b(youtube|vimeo|embed|player|streaming)\b', re.I),
        re.compile(r'\b(transcript|captions?|subtitles?)\b', re.I),
        re.compile(r'\b(views?|likes?|comments?|share)\b', re.I),
    ],
}

PATTERN_MATCH_SCORE = 0.1
MAX_PATTERN_SCORE = 0.3

# Checked over the lowercased title + content
FEATURE_PATTERNS: Dict[str, re.Pattern] = {
    "has_steps": re.compile(r'\b(step\s+\d+|first|second|third|then|next|finally)\b', re.I),
    "has_rating": re.compile(r'\b(\d+\s*(?:out\s+of\s+)?\d+\s*stars?|rating|review)', re.I),
    "has_price": re.compile(r'(\$\d+|\b(price|cost|fee|payment))', re.I),
    "has_ingredients": re.compile(r'\b(ingredients?|cups?|tablespoons?|teaspoons?)\b', re.I),
    "has_instructions": re.compile(r'\b(instructions?|directions?|method|steps?)\b', re.I),
    "has_author": re.compile(r'\b(author|writer|by\s+[a-z]+)\b', re.I),
    "has_date": re.compile(
        r'\b(\d{4}|\d{1,2}[/-]\d{1,2}[/-]\d{2,4}|january|february|march|april|may|june|july|'
        r'august|september|october|november|december)\b', re.I),
    "has_location": re.compile(r'\b(address|location|venue|city|state|country|zip)\b', re.I),
    "has_event": re.compile(r'\b(event|conference|meeting|seminar|workshop)\b', re.I),
    "has_product": re.compile(r'\b(product|item|model|brand|manufacturer)\b', re.I),
    "has_service": re.compile(r'\b(service|offering|solution|consultation)\b', re.I),
    "has_faq": re.compile(r'\b(faq|frequently\s+asked|questions?\s+and\s+answers?)\b', re.I),
    "has_howto": re.compile(r'\b(how\s+to|guide|tutorial|learn)\b', re.I),
    "has_recipe": re.compile(r'\b(recipe|cooking|baking|ingredients?)\b', re.I),
    "has_review": re.compile(r'\b(review|pros?\s+and\s+cons?|verdict|rating)\b', re.I),
    "has_job": re.compile(r'\b(job|position|career|hiring|employment)\b', re.I),
    "has_course": re.compile(r'\b(course|class|lesson|learn|teach)\b', re.I),
    "has_video": re.compile(r'\b(video|watch|play|youtube|vimeo)\b', re.I),
}


class FeatureRule(NamedTuple):
    """A weighted check; `reason` is formatted with the feature values when the rule fires."""
    check: Callable[[ContentFeatures], bool]
    weight: float
    reason: Optional[str] = None


FEATURE_RULES: Dict[str, List[FeatureRule]] = {
    "Recipe": [
        FeatureRule(lambda f: f.has_ingredients, 0.3, "contains ingredients list"),
        FeatureRule(lambda f: f.has_instructions, 0.3, "has cooking instructions"),
        FeatureRule(lambda f: f.has_steps, 0.2),
        FeatureRule(lambda f: f.image_count > 0, 0.1),
        FeatureRule(lambda f: f.list_count > 1, 0.1, "multiple structured lists"),
    ],
    "HowTo": [
        FeatureRule(lambda f: f.has_howto, 0.3, "contains how-to keywords"),
        FeatureRule(lambda f: f.has_steps, 0.3, "has step-by-step instructions"),
        FeatureRule(lambda f: f.has_instructions, 0.2, "includes detailed instructions"),
        FeatureRule(lambda f: f.list_count > 0, 0.1),
        FeatureRule(lambda f: f.image_count > 1, 0.1),
    ],
    "Product": [
        FeatureRule(lambda f: f.has_product, 0.3, "mentions product details"),
        FeatureRule(lambda f: f.has_price, 0.3, "includes pricing information"),
        FeatureRule(lambda f: f.has_rating, 0.2),
        FeatureRule(lambda f: f.image_count > 0, 0.2, "contains product images"),
    ],
    "Review": [
        FeatureRule(lambda f: f.has_review, 0.3, "contains review keywords"),
        FeatureRule(lambda f: f.has_rating, 0.3, "includes ratings"),
        FeatureRule(lambda f: f.has_product, 0.2, "discusses specific products"),
        FeatureRule(lambda f: f.content_length > 500, 0.2),
    ],
    "FAQ": [
        FeatureRule(lambda f: f.has_faq, 0.4, "FAQ section detected"),
        FeatureRule(lambda f: f.question_count > 3, 0.3, "{question_count} questions found"),
        FeatureRule(lambda f: f.list_count > 0, 0.2),
        FeatureRule(lambda f: f.content_length > 300, 0.1),
    ],
    "Event": [
        FeatureRule(lambda f: f.has_event, 0.3, "event-related content"),
        FeatureRule(lambda f: f.has_date, 0.3, "includes dates"),
        FeatureRule(lambda f: f.has_location, 0.2, "mentions location"),
        FeatureRule(lambda f: f.has_price, 0.2),
    ],
    "JobPosting": [
        FeatureRule(lambda f: f.has_job, 0.4, "job-related keywords"),
        FeatureRule(lambda f: f.has_location, 0.2),
        FeatureRule(lambda f: f.list_count > 1, 0.2, "requirements/qualifications lists"),
        FeatureRule(lambda f: f.content_length > 400, 0.2),
    ],
    "Course": [
        FeatureRule(lambda f: f.has_course, 0.4, "educational content"),
        FeatureRule(lambda f: f.has_price, 0.2),
        FeatureRule(lambda f: f.list_count > 0, 0.2, "structured curriculum"),
        FeatureRule(lambda f: f.content_length > 500, 0.2),
    ],
    "VideoObject": [
        FeatureRule(lambda f: f.has_video, 0.5, "video content detected"),
        FeatureRule(lambda f: f.image_count > 0, 0.3),
        FeatureRule(lambda f: f.content_length < 500, 0.2),
    ],
}

# Concrete requirements checked by validate_schema_type
VALIDATION_RULES: Dict[str, List[FeatureRule]] = {
    "Recipe": [
        FeatureRule(lambda f: f.has_ingredients, 0.0, "Missing ingredients"),
        FeatureRule(lambda f: f.has_instructions, 0.0, "Missing cooking instructions"),
    ],
    "HowTo": [
        FeatureRule(lambda f: f.has_steps, 0.0, "Missing step-by-step instructions"),
    ],
    "Product": [
        FeatureRule(lambda f: f.has_product, 0.0, "No clear product information"),
    ],
    "Review": [
        FeatureRule(lambda f: f.has_rating or f.has_review, 0.0, "Missing review content or ratings"),
    ],
    "Event": [
        FeatureRule(lambda f: f.has_date, 0.0, "Missing event date"),
        FeatureRule(lambda f: f.has_location, 0.0, "Missing event location"),
    ],
    "FAQ": [
        FeatureRule(lambda f: f.question_count >= 2, 0.0, "Insufficient Q&A pairs"),
    ],
}

URL_HINTS: Dict[str, List[str]] = {
    "Recipe": ["/recipe", "/cooking"],
    "Review": ["/review"],
    "HowTo": ["/how-to", "/guide"],
    "Product": ["/product", "/shop"],
    "Event": ["/event"],
    "FAQ": ["/faq", "/help"],
    "JobPosting": ["/job", "/career"],
    "Course": ["/course", "/learn"],
}
URL_HINT_BONUS = 0.3

SCHEMA_PROPERTIES: Dict[str, List[str]] = {
    "Recipe": ["name", "image", "recipeIngredient", "recipeInstructions", "prepTime", "cookTime",
               "totalTime", "recipeYield", "nutrition", "recipeCategory", "recipeCuisine"],
    "HowTo": ["name", "description", "step", "totalTime", "supply", "tool", "image", "video"],
    "Product": ["name", "description", "image", "brand", "offers", "aggregateRating", "review",
                "sku", "mpn", "category"],
    "Review": ["itemReviewed", "reviewRating", "name", "author", "datePublished", "reviewBody", "publisher"],
    "Event": ["name", "startDate", "endDate", "location", "image", "description", "offers",
              "performer", "organizer"],
    "FAQ": ["mainEntity", "name", "acceptedAnswer", "text"],
    "JobPosting": ["title", "description", "datePosted", "validThrough", "employmentType",
                   "hiringOrganization", "jobLocation", "baseSalary", "qualifications", "responsibilities"],
    "Course": ["name", "description", "provider", "courseCode", "coursePrerequisites",
               "educationalCredentialAwarded", "hasCourseInstance"],
    "LocalBusiness": ["name", "address", "telephone", "openingHours", "image", "priceRange",
                      "servesCuisine", "hasMenu"],
    "VideoObject": ["name", "description", "thumbnailUrl", "uploadDate", "duration", "embedUrl",
                    "contentUrl", "transcript"],
    "Article": ["headline", "description", "author", "datePublished", "dateModified", "publisher",
                "image", "articleBody"],
    "BlogPosting": ["headline", "description", "author", "datePublished", "dateModified", "publisher",
                    "image", "articleBody", "keywords"],
}

RELATED_TYPES: Dict[str, List[str]] = {
    "Recipe": ["Article", "CreativeWork"],
    "HowTo": ["Article", "CreativeWork"],
    "Product": ["Thing", "Offer"],
    "Review": ["Article", "CreativeWork", "Rating"],
    "Event": ["Thing", "Place"],
    "FAQ": ["WebPage", "QAPage"],
    "JobPosting": ["Intangible", "Organization"],
    "Course": ["CreativeWork", "EducationalOrganization"],
    "LocalBusiness": ["Organization", "Place"],
    "VideoObject": ["MediaObject", "CreativeWork"],
    "Article": ["CreativeWork", "WebPage"],
    "BlogPosting": ["Article", "CreativeWork"],
}

RECOMMENDATION_THRESHOLD = 0.3
FALLBACK_CONFIDENCE = 0.5
FALLBACK_RELATED_TYPES = ["WebPage", "CreativeWork"]
MAX_RECOMMENDATIONS = 3


class SchemaRecommender:
    """Ranks candidate Schema.org types for a page."""

    def __init__(self,
                 schema_patterns: Optional[Dict[str, List[re.Pattern]]] = None,
                 feature_rules: Optional[Dict[str, List[FeatureRule]]] = None,
                 url_hints: Optional[Dict[str, List[str]]] = None):
        self.schema_patterns = schema_patterns if schema_patterns is not None else SCHEMA_PATTERNS
        self.feature_rules = feature_rules if feature_rules is not None else FEATURE_RULES
        self.url_hints = url_hints if url_hints is not None else URL_HINTS

    @staticmethod
    def extract_features(content: str, title: str) -> ContentFeatures:
        """
        Derive structural flags and counts from content and title.

        Args:
            content: Raw page content (text or markup)
            title: Page title

        Returns:
            ContentFeatures record
        """
        text = f"{title} {content}".lower()
        flags = {name: bool(pattern.search(text)) for name, pattern in FEATURE_PATTERNS.items()}
        words = content.split()
        return ContentFeatures(
            **flags,
            content_length=len(content),
            image_count=len(re.findall(r'<img', content, re.I)),
            link_density=len(re.findall(r'<a\b', content, re.I)) / (len(words) or 1),
            question_count=content.count("?"),
            list_count=len(re.findall(r'<[uo]l', content, re.I)),
        )

    def pattern_score(self, schema_type: str, content: str) -> float:
        matches = sum(len(pattern.findall(content)) for pattern in self.schema_patterns.get(schema_type, []))
        return min(matches * PATTERN_MATCH_SCORE, MAX_PATTERN_SCORE)

    def feature_score(self, schema_type: str, features: ContentFeatures) -> float:
        return sum(rule.weight for rule in self.feature_rules.get(schema_type, []) if rule.check(features))

    def recommend(self,
                  content: str,
                  title: str,
                  url: str,
                  existing_entities: Optional[List[Entity]] = None) -> List[SchemaRecommendation]:
        """
        Recommend up to three Schema.org types for the content.

        Args:
            content: Page content
            title: Page title
            url: Page URL, used for path hints and the fallback type
            existing_entities: Entities already recognized on the page

        Returns:
            Recommendations by descending confidence. When nothing reaches 0.5
            an Article or BlogPosting fallback is placed first.
        """
        features = self.extract_features(content, title)

        scores: Dict[str, float] = {}
        for schema_type in list(self.schema_patterns) + list(self.feature_rules):
            if schema_type not in scores:
                scores[schema_type] = (self.pattern_score(schema_type, content)
                                       + self.feature_score(schema_type, features))

        self._adjust_for_url(url, scores)
        if existing_entities:
            self._adjust_for_entities(existing_entities, scores)

        recommendations = [
            SchemaRecommendation(
                schema_type=schema_type,
                confidence=min(score, 1.0),
                reasoning=self.generate_reasoning(schema_type, features, score),
                properties=self.suggested_properties(schema_type),
                related_types=self.related_types(schema_type),
            )
            for schema_type, score in scores.items()
            if score > RECOMMENDATION_THRESHOLD
        ]
        recommendations.sort(key=lambda r: r.confidence, reverse=True)

        if not recommendations or recommendations[0].confidence < FALLBACK_CONFIDENCE:
            fallback = "BlogPosting" if "/blog" in urlparse(url or "").path else "Article"
            recommendations.insert(0, SchemaRecommendation(
                schema_type=fallback,
                confidence=FALLBACK_CONFIDENCE,
                reasoning=f"Default {fallback} schema based on content structure",
                properties=self.suggested_properties(fallback),
                related_types=list(FALLBACK_RELATED_TYPES),
            ))

        logger.info(f"Recommended {[r.schema_type for r in recommendations[:MAX_RECOMMENDATIONS]]}")
        return recommendations[:MAX_RECOMMENDATIONS]

    def _adjust_for_url(self, url: str, scores: Dict[str, float]) -> None:
        path = urlparse(url or "").path.lower()
        for schema_type, hints in self.url_hints.items():
            if any(hint in path for hint in hints):
                self._adjust(scores, schema_type, URL_HINT_BONUS)

    def _adjust_for_entities(self, entities: List[Entity], scores: Dict[str, float]) -> None:
        types = {entity.type for entity in entities}
        if "product" in types:
            self._adjust(scores, "Product", 0.2)
            self._adjust(scores, "Review", 0.1)
        if "event" in types:
            self._adjust(scores, "Event", 0.3)
        if "person" in types and "organization" in types:
            self._adjust(scores, "JobPosting", 0.2)
        if "location" in types:
            self._adjust(scores, "LocalBusiness", 0.2)
            self._adjust(scores, "Event", 0.1)

    @staticmethod
    def _adjust(scores: Dict[str, float], schema_type: str, bonus: float) -> None:
        scores[schema_type] = min(scores.get(schema_type, 0.0) + bonus, 1.0)

    def generate_reasoning(self, schema_type: str, features: ContentFeatures, score: float) -> str:
        values = features.model_dump()
        reasons = [
            rule.reason.format(**values)
            for rule in self.feature_rules.get(schema_type, [])
            if rule.reason and rule.check(features)
        ]
        return f"Recommended based on: {', '.join(reasons)} (confidence: {min(score, 1.0) * 100:.0f}%)"

    @staticmethod
    def suggested_properties(schema_type: str) -> List[str]:
        return list(SCHEMA_PROPERTIES.get(schema_type, SCHEMA_PROPERTIES["Article"]))

    @staticmethod
    def related_types(schema_type: str) -> List[str]:
        return list(RELATED_TYPES.get(schema_type, ["Thing"]))

    def validate_schema_type(self, schema_type: str, content: str, title: str) -> SchemaValidation:
        """
        Check whether a proposed type fits the content.

        Returns:
            Invalid with "Unknown schema type" for types without feature rules;
            otherwise valid only when no requirement is missing and the
            feature score exceeds 0.3.
        """
        if schema_type not in self.feature_rules:
            return SchemaValidation(valid=False, confidence=0.0, issues=["Unknown schema type"])

        features = self.extract_features(content, title)
        score = self.feature_score(schema_type, features)
        issues = [rule.reason for rule in VALIDATION_RULES.get(schema_type, []) if not rule.check(features)]
        return SchemaValidation(
            valid=not issues and score > RECOMMENDATION_THRESHOLD,
            confidence=score,
            issues=issues,
        )
