"""
Content analyzer combining entity recognition with document-level signals:
industry, content type, keywords, topics, audience, learning outcomes and
main concepts.
"""

import re
import logging
from typing import List, Dict, Any, Optional, Tuple
from urllib.parse import urlparse

from config import config
from .data_models import ContentAnalysis, Entity
from .entity_recognizer import EntityRecognizer
from .text_utils import count_occurrences, normalize_name

logger = logging.getLogger(__name__)


# Ordered (substrings, content type); the first hit wins
CONTENT_TYPE_RULES: List[Tuple[Tuple[str, ...], str]] = [
    (("how to", "guide", "tutorial"), "HowTo"),
    (("review", "comparison"), "Review"),
]
URL_CONTENT_TYPE_HINTS = ("/blog", "/news")
SCHOLARLY_HINTS = ("research", "study")

KEYWORD_PHRASE_PATTERN = re.compile(r'\b([A-Z][a-z]+(?:\s+[A-Z]?[a-z]+){0,2})\b')
GENERIC_WORDS = frozenset([
    "the", "this", "that", "these", "those", "very", "much", "many",
    "some", "from", "with", "high", "low", "good", "bad", "best",
    "improve", "effective", "zone", "for", "work", "recovery",
])
MAX_KEYWORDS = 10

TOPIC_PATTERNS: Dict[str, List[Tuple[str, str]]] = {
    "fitness": [
        (r'cardiovascular\s*fitness', "Cardiovascular Fitness"),
        (r'endurance\s*training', "Endurance Training"),
        (r'performance\s*improvement', "Athletic Performance"),
        (r'fitness\s*assessment', "Fitness Testing"),
        (r'training\s*zones?', "Training Intensity"),
    ],
    "cannabis": [
        (r'\bclean(?:ing)?\b', "Device Maintenance"),
        (r'percolat', "Smoke Filtration"),
        (r'\bglass\b', "Glassware"),
    ],
    "technology": [
        (r'\berp\b|enterprise\s*resource\s*planning', "Enterprise Resource Planning"),
        (r'automation', "Business Automation"),
        (r'integration', "System Integration"),
    ],
    "education": [
        (r'course|curriculum', "Course Design"),
        (r'assessment|evaluation', "Learning Assessment"),
    ],
    "dental": [
        (r'whitening', "Teeth Whitening"),
        (r'\bgums?\b|gingivitis', "Gum Health"),
        (r'cavit(?:y|ies)|decay', "Cavity Prevention"),
    ],
    "mortgage": [
        (r'refinanc', "Refinancing"),
        (r'credit\s*score', "Credit Health"),
        (r'down\s*payment|closing\s*costs', "Home Buying Costs"),
    ],
}

LEARNING_PATTERNS = [
    re.compile(r'how to ([^.!?]+)', re.I),
    re.compile(r"you(?:'ll| will) learn (?:about |to )?([^.!?]+)", re.I),
    re.compile(r'understand(?:ing)? ([^.!?]+)', re.I),
    re.compile(r'improv(?:e|ing) (?:your )?([^.!?]+)', re.I),
    re.compile(r'master(?:ing)? ([^.!?]+)', re.I),
]
OUTCOME_FUNCTION_WORDS = re.compile(
    r'\b(?:the|a|an|and|or|but|in|on|at|to|for|of|with|by|from|up|about|into|'
    r'through|during|before|after|above|below|between|under|over)\b',
    re.I,
)
MIN_OUTCOME_LENGTH = 10
MAX_OUTCOME_LENGTH = 100

MAX_MAIN_CONCEPTS = 5


class ContentAnalyzer:
    """Derives document-level semantic signals used to assemble a schema."""

    def __init__(self,
                 recognizer: Optional[EntityRecognizer] = None,
                 max_learning_outcomes: Optional[int] = None):
        self.recognizer = recognizer or EntityRecognizer()
        self.max_learning_outcomes = max_learning_outcomes or config.MAX_LEARNING_OUTCOMES

    def analyze_content(self, content: str, title: str, url: Optional[str] = None) -> ContentAnalysis:
        """
        Analyze a document.

        Args:
            content: Main text
            title: Document title
            url: Source URL, used as a content-type hint

        Returns:
            ContentAnalysis with entities, topics, keywords and audience
        """
        industry = self.recognizer.detect_industry(content, title)
        content_type = self.detect_content_type(content, title, url)
        entities = self.recognizer.extract_entities(content, title, industry=industry)

        analysis = ContentAnalysis(
            entities=entities,
            topics=self.extract_topics(content, industry),
            keywords=self.extract_keywords(content, entities),
            content_type=content_type,
            industry=industry,
            target_audience=self.analyze_audience(content, industry),
            learning_outcomes=self.extract_learning_outcomes(content, entities),
            main_concepts=self.identify_main_concepts(entities, content),
        )
        logger.info(
            f"Analyzed content: industry={industry}, type={content_type}, "
            f"{len(entities)} entities, {len(analysis.main_concepts)} main concepts"
        )
        return analysis

    @staticmethod
    def detect_content_type(content: str, title: str, url: Optional[str] = None) -> str:
        text = f"{title} {content}".lower()
        for needles, content_type in CONTENT_TYPE_RULES:
            if any(needle in text for needle in needles):
                return content_type
        if url and any(hint in urlparse(url).path for hint in URL_CONTENT_TYPE_HINTS):
            return "BlogPosting"
        if any(hint in text for hint in SCHOLARLY_HINTS):
            return "ScholarlyArticle"
        return "Article"

    @staticmethod
    def extract_keywords(content: str, entities: List[Entity]) -> List[str]:
        """High-confidence entity names, then capitalized phrases that are not generic."""
        keywords: Dict[str, str] = {}
        for entity in entities:
            if entity.confidence > 0.8:
                keywords.setdefault(normalize_name(entity.name), entity.name)

        entity_names = {normalize_name(entity.name) for entity in entities}
        for match in KEYWORD_PHRASE_PATTERN.finditer(content):
            phrase = match.group(1)
            key = normalize_name(phrase)
            if len(phrase) <= 3 or key in entity_names:
                continue
            if all(word in GENERIC_WORDS for word in key.split()):
                continue
            keywords.setdefault(key, phrase)
            if len(keywords) >= MAX_KEYWORDS:
                break
        return list(keywords.values())[:MAX_KEYWORDS]

    @staticmethod
    def extract_topics(content: str, industry: str) -> List[str]:
        topics = []
        for pattern, topic in TOPIC_PATTERNS.get(industry, []):
            if re.search(pattern, content, re.I) and topic not in topics:
                topics.append(topic)
        return topics

    @staticmethod
    def analyze_audience(content: str, industry: str) -> Dict[str, Any]:
        """JSON-LD Audience node for the detected industry."""
        lowered = content.lower()
        if industry == "fitness":
            if "athlete" in lowered or "performance" in lowered:
                return {
                    "@type": "Audience",
                    "audienceType": "athletes and fitness enthusiasts",
                    "suggestedMinAge": 16,
                    "suggestedGender": "unisex",
                }
            if "beginner" in lowered or "start" in lowered:
                return {"@type": "Audience", "audienceType": "fitness beginners"}
            return {"@type": "Audience", "audienceType": "fitness enthusiasts", "suggestedMinAge": 18}

        if industry == "cannabis":
            return {
                "@type": "Audience",
                "audienceType": "cannabis consumers",
                "suggestedMinAge": 21,
                "geographicArea": {
                    "@type": "AdministrativeArea",
                    "name": "Areas where cannabis is legal",
                },
            }

        if industry in ("technology", "mortgage"):
            audience = "business decision makers" if industry == "technology" else "home buyers and homeowners"
            audience_type = "BusinessAudience" if industry == "technology" else "Audience"
            return {"@type": audience_type, "audienceType": audience}

        if industry == "dental":
            return {"@type": "PeopleAudience", "audienceType": "people seeking oral care"}

        return {"@type": "Audience", "audienceType": "general audience"}

    def extract_learning_outcomes(self, content: str, entities: List[Entity]) -> List[Dict[str, Any]]:
        """DefinedTerm outcomes from instructional phrasing plus high-confidence concepts."""
        outcomes: Dict[str, Dict[str, Any]] = {}

        for pattern in LEARNING_PATTERNS:
            for match in pattern.finditer(content):
                outcome = self._clean_outcome(match.group(1))
                if not outcome:
                    continue
                name = self._outcome_name(outcome, entities)
                if normalize_name(name) in outcomes:
                    continue
                outcomes[normalize_name(name)] = {
                    "@type": "DefinedTerm",
                    "name": name,
                    "description": self._outcome_description(outcome, entities),
                }

        for entity in entities:
            if entity.confidence > 0.85 and entity.type in ("fitness", "concept"):
                outcomes.setdefault(normalize_name(entity.name), {
                    "@type": "DefinedTerm",
                    "name": entity.name,
                    "description": f"Understanding and application of {entity.name.lower()} "
                                   f"in {entity.context or 'practice'}",
                })

        return list(outcomes.values())[:self.max_learning_outcomes]

    @staticmethod
    def _clean_outcome(outcome: str) -> str:
        cleaned = " ".join(OUTCOME_FUNCTION_WORDS.sub(" ", outcome).split())
        if not (MIN_OUTCOME_LENGTH <= len(cleaned) <= MAX_OUTCOME_LENGTH):
            return ""
        return cleaned

    @staticmethod
    def _outcome_name(outcome: str, entities: List[Entity]) -> str:
        lowered = outcome.lower()
        for entity in entities:
            if entity.name.lower() in lowered:
                return entity.name
        words = [word for word in outcome.split() if len(word) > 2]
        return " ".join(word[:1].upper() + word[1:] for word in words[:4])

    @staticmethod
    def _outcome_description(outcome: str, entities: List[Entity]) -> str:
        lowered = outcome.lower()
        for entity in entities:
            if entity.name.lower() in lowered:
                return f"Practical knowledge and application of {entity.name} " \
                       f"for {entity.context or 'improved performance'}"
        return f"Practical understanding and application of {lowered}"

    @staticmethod
    def identify_main_concepts(entities: List[Entity], content: str) -> List[str]:
        """Entities mentioned more than twice with confidence above 0.8, most prominent first."""
        scored = []
        for entity in entities:
            occurrences = count_occurrences(entity.name, content, entity.synonyms)
            if occurrences > 2 and entity.confidence > 0.8:
                scored.append((occurrences * entity.confidence, entity.name))
        scored.sort(key=lambda item: item[0], reverse=True)
        return [name for _, name in scored[:MAX_MAIN_CONCEPTS]]
