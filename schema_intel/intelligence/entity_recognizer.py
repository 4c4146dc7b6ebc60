"""
Entity recognizer for page content.

Three layered sources, highest precision first:
- domain lexicons for the detected industry
- brand names marked with a trademark symbol
- capitalized phrases, boosted by frequency and by nearby type cues

Results are deduplicated on the normalized name and sorted by confidence.
"""

import re
import logging
from typing import List, Dict, Optional, NamedTuple, Tuple, Iterable

from config import config
from .data_models import Entity
from .text_utils import STOPWORDS, normalize_name, name_pattern

logger = logging.getLogger(__name__)


class LexiconTerm(NamedTuple):
    """One domain term: a regex over the text and the entity it yields."""
    pattern: str
    name: str
    type: str
    confidence: float
    context: str
    category: str
    synonyms: Tuple[str, ...] = ()


# Match counts per industry decide which lexicon applies
INDUSTRY_PATTERNS: Dict[str, List[str]] = {
    "fitness": [
        r'\b(?:vo2\s*max|aerobic\s*capacity|cardiovascular\s*fitness)\b',
        r'\b(?:hiit|high[\s-]intensity\s*interval\s*training)\b',
        r'\b(?:strength\s*training|resistance\s*training|weight\s*training)\b',
        r'\b(?:endurance|stamina|conditioning)\b',
        r'\b(?:workout|exercise|training\s*program)\b',
        r'\b(?:fitness\s*goals?|performance|athletic)\b',
        r'\b(?:heart\s*rate|zones?|threshold)\b',
        r'\b(?:recovery|rest\s*days?|adaptation)\b',
    ],
    "cannabis": [
        r'\b(?:bongs?|water\s*pipes?|bubblers?|dab\s*rigs?)\b',
        r'\b(?:cannabis|marijuana|hemp|thc|cbd)\b',
        r'\b(?:smoking|vaping|consumption)\b',
        r'\b(?:strain|indica|sativa|hybrid)\b',
    ],
    "technology": [
        r'\b(?:software|application|platform|system)\b',
        r'\b(?:api|integration|automation)\b',
        r'\b(?:data|analytics|metrics)\b',
        r'\b(?:cloud|saas|infrastructure)\b',
    ],
    "education": [
        r'\b(?:learning|education|training|course)\b',
        r'\b(?:student|teacher|instructor|educator)\b',
        r'\b(?:curriculum|lesson|module)\b',
        r'\b(?:assessment|evaluation|feedback)\b',
    ],
    "dental": [
        r'\b(?:teeth|tooth|dental|dentist|orthodontist)\b',
        r'\b(?:enamel|gums?|plaque|cavit(?:y|ies))\b',
        r'\b(?:oral\s*care|whitening|fluoride|toothpaste)\b',
    ],
    "mortgage": [
        r'\b(?:mortgage|refinanc\w*|home\s*loan)\b',
        r'\b(?:down\s*payment|closing\s*costs|escrow|appraisal)\b',
        r'\b(?:credit\s*score|interest\s*rate|apr|lender|borrower)\b',
    ],
}

DOMAIN_LEXICONS: Dict[str, List[LexiconTerm]] = {
    "fitness": [
        LexiconTerm(r'\bvo2[\s-]*max\b|\bmaximal\s*oxygen\s*(?:consumption|uptake)\b', "VO2 Max", "fitness", 0.95,
                    "cardiovascular fitness measurement", "fitness_metric",
                    ("VO2max", "maximal oxygen consumption", "maximal oxygen uptake")),
        LexiconTerm(r'\baerobic\s*capacity\b', "Aerobic Capacity", "fitness", 0.95,
                    "cardiovascular fitness measurement", "fitness_metric"),
        LexiconTerm(r'\bhiit\b|\bhigh[\s-]intensity\s*interval\s*training\b', "HIIT", "fitness", 0.9,
                    "training methodology", "training_method", ("High-Intensity Interval Training",)),
        LexiconTerm(r'\bsteady[\s-]state\s*cardio\b', "Steady-State Cardio", "fitness", 0.9,
                    "training methodology", "training_method", ("Steady-State Cardiovascular Training",)),
        LexiconTerm(r'(?<!intensity )\binterval\s*training\b', "Interval Training", "fitness", 0.9,
                    "training methodology", "training_method"),
        LexiconTerm(r'\bendurance\s*training\b', "Endurance Training", "fitness", 0.9,
                    "training methodology", "training_method"),
        LexiconTerm(r'\b(?:heart\s*rate\s*)?zones?\s*(?:\d+|one|two|three|four|five)\b', "Heart Rate Training Zones",
                    "fitness", 0.85, "training intensity measurement", "training_concept"),
    ],
    "cannabis": [
        LexiconTerm(r'\bbongs?\b', "Bong", "product", 0.9, "cannabis consumption device", "smoking_device"),
        LexiconTerm(r'\bwater\s*pipes?\b', "Water Pipe", "product", 0.9, "cannabis consumption device", "smoking_device"),
        LexiconTerm(r'\bbubblers?\b', "Bubbler", "product", 0.9, "cannabis consumption device", "smoking_device"),
        LexiconTerm(r'\bpercolators?\b', "Percolator", "product", 0.9, "cannabis consumption device", "smoking_device"),
        LexiconTerm(r'\bborosilicate\s*glass\b', "Borosilicate Glass", "material", 0.9,
                    "device material", "material"),
        LexiconTerm(r'\bsilicone\s*(?:pipes?|bongs?)\b', "Silicone", "material", 0.9, "device material", "material"),
    ],
    "technology": [
        LexiconTerm(r'\bodoo\b', "Odoo", "product", 0.85, "enterprise software", "technology"),
        LexiconTerm(r'\berp\b', "ERP", "concept", 0.85, "enterprise software", "technology",
                    ("Enterprise Resource Planning",)),
        LexiconTerm(r'\bcustomization\b', "Software Customization", "service", 0.85,
                    "enterprise software", "technology"),
    ],
    "dental": [
        LexiconTerm(r'\bfluoride\b', "Fluoride", "material", 0.9, "oral care ingredient", "dental_material"),
        LexiconTerm(r'\benamel\b', "Tooth Enamel", "medical", 0.9, "oral health", "dental_anatomy"),
        LexiconTerm(r'\bgum\s*disease\b|\bgingivitis\b', "Gum Disease", "medical", 0.9, "oral health",
                    "dental_condition", ("Gingivitis",)),
        LexiconTerm(r'\bplaque\b', "Dental Plaque", "medical", 0.88, "oral health", "dental_condition"),
        LexiconTerm(r'\bcavit(?:y|ies)\b|\btooth\s*decay\b', "Tooth Decay", "medical", 0.88, "oral health",
                    "dental_condition", ("Cavity",)),
        LexiconTerm(r'\b(?:teeth|tooth)\s*whitening\b', "Tooth Whitening", "service", 0.9,
                    "cosmetic dental treatment", "dental_treatment"),
    ],
    "mortgage": [
        LexiconTerm(r'\bmortgage\s*rates?\b', "Mortgage Rate", "concept", 0.85, "home financing", "financial"),
        LexiconTerm(r'\brefinanc(?:e|ing)\b', "Refinance", "service", 0.85, "home financing", "process"),
        LexiconTerm(r'\bcredit\s*scores?\b', "Credit Score", "concept", 0.85, "home financing", "financial"),
        LexiconTerm(r'\bdown\s*payments?\b', "Down Payment", "concept", 0.85, "home financing", "financial"),
        LexiconTerm(r'\bclosing\s*costs\b', "Closing Costs", "concept", 0.85, "home financing", "financial"),
        LexiconTerm(r'\bfha\s*loans?\b', "FHA Loan", "product", 0.85, "home financing", "loan_type"),
        LexiconTerm(r'\bpre-?approval\b', "Pre-Approval", "service", 0.85, "home financing", "process"),
        LexiconTerm(r'\bescrow\b', "Escrow", "concept", 0.85, "home financing", "process"),
        LexiconTerm(r'\bapr\b|\bannual\s*percentage\s*rate\b', "APR", "concept", 0.85, "home financing", "financial",
                    ("Annual Percentage Rate",)),
    ],
}

BRAND_SYMBOL_PATTERN = re.compile(r"\b([A-Z][\w&'-]*(?:\s+[A-Z][\w&'-]*){0,3})\s*(?:®|™|©)")
BRAND_CONFIDENCE = 0.95

CAPITALIZED_PHRASE_PATTERN = re.compile(r'\b([A-Z][a-z]+(?:[ \t]+[A-Z][a-z]+){0,2})\b')

# Capitalized words that are almost never entities on their own
COMMON_WORDS = frozenset([
    "the", "this", "that", "these", "those", "very", "much", "many", "some",
    "from", "with", "high", "low", "good", "bad", "best", "improve",
    "effective", "zone", "for", "work", "recovery", "step", "steps", "first",
    "second", "third", "then", "next", "finally", "however", "also", "here",
    "there", "when", "what", "how", "why", "our", "your", "you", "we",
    "they", "it", "in", "on", "at", "if", "but", "and", "or", "so", "read",
    "click", "learn", "more", "share", "home", "contact", "about", "blog",
    "menu", "search", "subscribe", "guide", "tips", "new", "all",
    "monday", "tuesday", "wednesday", "thursday", "friday", "saturday",
    "sunday", "january", "february", "march", "april", "may", "june", "july",
    "august", "september", "october", "november", "december",
])

# Checked in order; the first cue found near a phrase decides its type
CONTEXT_CUES: List[Tuple[str, re.Pattern]] = [
    ("person", re.compile(r'\b(?:said|says|dr\.?|mr\.?|mrs\.?|ms\.?|author|wrote|founder|ceo)\b', re.I)),
    ("organization", re.compile(r'\b(?:inc\.?|llc|corp\.?|company|founded|headquartered|brand)\b', re.I)),
    ("product", re.compile(r'\b(?:buy|price|model|version|features?|order)\b', re.I)),
    ("medical", re.compile(r'\b(?:treatment|symptoms?|diagnosis|patients?|clinical|disease)\b', re.I)),
]
CONTEXT_WINDOW = 60

MAX_PHRASE_CONFIDENCE = 0.9


def merge_entities(*entity_lists: Iterable[Entity]) -> List[Entity]:
    """
    Merge entity lists from separate extraction calls.

    Entities sharing a normalized name collapse into one whose confidence is
    the maximum observed and whose mention count is the sum. Type, context and
    category come from the higher-confidence observation.
    """
    merged: Dict[str, Entity] = {}
    for entities in entity_lists:
        for entity in entities:
            key = normalize_name(entity.name)
            existing = merged.get(key)
            if existing is None:
                merged[key] = entity.model_copy(deep=True)
                continue

            winner = entity if entity.confidence > existing.confidence else existing
            merged[key] = winner.model_copy(update={
                "confidence": max(existing.confidence, entity.confidence),
                "mentions": existing.mentions + entity.mentions,
                "synonyms": list(dict.fromkeys(existing.synonyms + entity.synonyms)),
                "same_as": list(dict.fromkeys(existing.same_as + entity.same_as)),
            })
    return list(merged.values())


class EntityRecognizer:
    """Extracts typed, confidence-scored entities from page text."""

    def __init__(self,
                 industry_patterns: Optional[Dict[str, List[str]]] = None,
                 lexicons: Optional[Dict[str, List[LexiconTerm]]] = None,
                 max_entities: Optional[int] = None):
        """
        Initialize the recognizer.

        Args:
            industry_patterns: Industry name -> regex list used for industry detection
            lexicons: Industry name -> domain terms
            max_entities: Cap on returned entities
        """
        patterns = industry_patterns if industry_patterns is not None else INDUSTRY_PATTERNS
        self.industry_patterns = {
            industry: [re.compile(p, re.I) for p in regexes] for industry, regexes in patterns.items()
        }
        self.lexicons = lexicons if lexicons is not None else DOMAIN_LEXICONS
        self._compiled_lexicons = {
            industry: [(re.compile(term.pattern, re.I), term) for term in terms]
            for industry, terms in self.lexicons.items()
        }
        self.max_entities = max_entities or config.MAX_ENTITIES

    def detect_industry(self, content: str, title: str = "") -> str:
        """Industry with the most pattern hits, or "general" when nothing matches."""
        text = f"{title} {content}".lower()
        best_industry, best_count = "general", 0
        for industry, patterns in self.industry_patterns.items():
            count = sum(len(pattern.findall(text)) for pattern in patterns)
            if count > best_count:
                best_industry, best_count = industry, count
        return best_industry

    def extract_entities(self,
                         content: str,
                         title: str = "",
                         industry: Optional[str] = None) -> List[Entity]:
        """
        Extract entities from content.

        Args:
            content: Main text of the document
            title: Document title, used for industry detection
            industry: Industry hint; detected from the text when omitted

        Returns:
            Entities sorted by confidence descending, capped at max_entities
        """
        if not content or not content.strip():
            return []
        industry = industry or self.detect_industry(content, title)

        entities = self.lexicon_entities(content, industry)
        entities.extend(self.brand_entities(content))
        entities.extend(self.phrase_entities(content, known=entities))

        unique = self._dedupe(entities)
        unique.sort(key=lambda e: e.confidence, reverse=True)
        logger.info(f"Extracted {len(unique)} entities ({industry}), keeping {min(len(unique), self.max_entities)}")
        return unique[:self.max_entities]

    def lexicon_entities(self, content: str, industry: str) -> List[Entity]:
        entities = []
        for pattern, term in self._compiled_lexicons.get(industry, []):
            matches = pattern.findall(content)
            if not matches:
                continue
            entities.append(Entity(
                name=term.name,
                type=term.type,
                confidence=term.confidence,
                context=term.context,
                category=term.category,
                synonyms=list(term.synonyms),
                mentions=len(matches),
            ))
        return entities

    @staticmethod
    def brand_entities(content: str) -> List[Entity]:
        """Names followed by a registered, trademark or copyright symbol."""
        counts: Dict[str, int] = {}
        for match in BRAND_SYMBOL_PATTERN.finditer(content):
            name = match.group(1).strip()
            if len(name) > 1:
                counts[name] = counts.get(name, 0) + 1
        return [
            Entity(name=name, type="brand", confidence=BRAND_CONFIDENCE, context="trademarked brand",
                   category="brand", mentions=count)
            for name, count in counts.items()
        ]

    def phrase_entities(self, content: str, known: List[Entity] = ()) -> List[Entity]:
        """Capitalized phrases not already covered by a known entity."""
        known_variants = [variant for entity in known for variant in [entity.name, *entity.synonyms]]
        seen = set()
        entities = []

        for match in CAPITALIZED_PHRASE_PATTERN.finditer(content):
            phrase = match.group(1).strip()
            key = normalize_name(phrase)
            if key in seen:
                continue
            seen.add(key)

            if not self._is_candidate_phrase(phrase, content):
                continue
            if any(name_pattern(phrase).search(variant) for variant in known_variants):
                continue

            occurrences = len(re.findall(r'\b' + re.escape(phrase) + r'\b', content))
            confidence = 0.7 if " " in phrase else 0.6
            if occurrences > 2:
                confidence += 0.1
            if occurrences > 5:
                confidence += 0.1

            entity_type = "concept"
            window = content[max(0, match.start() - CONTEXT_WINDOW):match.end() + CONTEXT_WINDOW]
            for cue_type, cue in CONTEXT_CUES:
                if cue.search(window):
                    entity_type = cue_type
                    confidence += 0.1
                    break

            entities.append(Entity(
                name=phrase,
                type=entity_type,
                confidence=round(min(MAX_PHRASE_CONFIDENCE, confidence), 4),
                context=" ".join(window.split()),
                mentions=max(1, occurrences),
            ))
        logger.debug(f"Found {len(entities)} capitalized phrase candidates")
        return entities

    @staticmethod
    def _is_candidate_phrase(phrase: str, content: str) -> bool:
        if len(phrase) <= 3:
            return False
        words = phrase.lower().split()
        if all(word in COMMON_WORDS or word in STOPWORDS for word in words):
            return False
        if len(words) == 1:
            # Single words only count when capitalized mid-sentence
            mid_sentence = re.compile(r'(?<=[a-z0-9,;:)][ \t])' + re.escape(phrase) + r'\b')
            return bool(mid_sentence.search(content))
        return True

    @staticmethod
    def _dedupe(entities: List[Entity]) -> List[Entity]:
        """Collapse same-name entities from one text, keeping the higher-confidence record."""
        unique: Dict[str, Entity] = {}
        for entity in entities:
            key = normalize_name(entity.name)
            existing = unique.get(key)
            if existing is None or entity.confidence > existing.confidence:
                mentions = max(entity.mentions, existing.mentions) if existing else entity.mentions
                unique[key] = entity.model_copy(update={"mentions": mentions})
        return list(unique.values())
