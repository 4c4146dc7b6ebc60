"""
General-purpose named-entity recognition and relation extraction.

Regex families per entity type (PERSON, ORGANIZATION, LOCATION, DATE, MONEY,
PRODUCT, EVENT, TECHNOLOGY); overlapping spans are resolved in favour of
the more confident match.
"""

import re
import logging
from typing import List, Dict, Any, Optional

from .data_models import NamedEntity, EntityRelation
from .text_utils import split_sentences
from ..extraction.metadata_extractor import MetadataExtractor

logger = logging.getLogger(__name__)


ENTITY_PATTERNS: Dict[str, List[re.Pattern]] = {
    "PERSON": [
        re.compile(r'\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+){1,3})\b'),
        re.compile(r'\b(?:Mr\.|Mrs\.|Ms\.|Dr\.|Prof\.)\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)?)\b'),
        re.compile(r'\b([A-Z][a-z]+)\s+(?:said|says|stated|announced|explained)\b'),
    ],
    "ORGANIZATION": [
        re.compile(r'\b([A-Z][a-zA-Z]+(?:\s+[A-Z][a-zA-Z]+)*\s+(?:Inc\.|LLC|Ltd\.|Corp\.|Corporation|Company))'),
        re.compile(r'\b(?:The\s+)?([A-Z][a-zA-Z]+(?:\s+[A-Z][a-zA-Z]+)*\s+(?:Institute|University|College|Foundation|Association))\b'),
        re.compile(r'\b([A-Z]{2,})\b'),
    ],
    "LOCATION": [
        re.compile(r'\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*,\s*[A-Z][a-z]+)\b'),
        re.compile(r'\b(?:in|at|from)\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)\b'),
        re.compile(r'\b([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*\s+(?:Street|Avenue|Road|Boulevard|Drive|Lane|Way))\b'),
    ],
    "DATE": [
        re.compile(r'\b(\d{1,2}[/-]\d{1,2}[/-]\d{2,4})\b'),
        re.compile(r'\b((?:January|February|March|April|May|June|July|August|September|October|November|December)'
                   r'\s+\d{1,2},?\s+\d{4})\b', re.I),
        re.compile(r'\b(today|tomorrow|yesterday|next\s+week|last\s+week|next\s+month|last\s+month)\b', re.I),
        re.compile(r'\b((?:19|20)\d{2})\b'),
    ],
    "MONEY": [
        re.compile(r'(\$\s*\d+(?:,\d{3})*(?:\.\d{2})?)\b'),
        re.compile(r'\b(\d+(?:,\d{3})*(?:\.\d{2})?\s*(?:dollars?|USD|EUR|GBP))\b', re.I),
        re.compile(r'\b(?:costs?|prices?|fees?)\s+(?:of\s+)?(\$?\d+(?:,\d{3})*(?:\.\d{2})?)\b', re.I),
    ],
    "PRODUCT": [
        re.compile(r'\b([A-Z][a-zA-Z]+(?:\s+[A-Z]?[a-zA-Z]+)*)\s+(?:model|version|edition)\b'),
        re.compile(r'\b(?:buy|purchase|order)\s+(?:the\s+)?([A-Z][a-zA-Z]+(?:\s+[A-Z][a-zA-Z]+)*)\b'),
        re.compile(r'\b([A-Z][a-zA-Z]+\s+\d+[a-zA-Z]*)\b'),
    ],
    "EVENT": [
        re.compile(r'\b([A-Z][a-zA-Z]+(?:\s+[A-Z][a-zA-Z]+)*\s+(?:Conference|Summit|Meeting|Symposium|Workshop|Seminar))\b'),
        re.compile(r'\b(?:attend|join|register\s+for)\s+(?:the\s+)?([A-Z][a-zA-Z]+(?:\s+[A-Z][a-zA-Z]+)*)\b'),
    ],
    "TECHNOLOGY": [
        re.compile(r'\b(AI|ML|IoT|API|SDK|SaaS|PaaS|IaaS)\b'),
        re.compile(r'\b([A-Z][a-zA-Z]+(?:JS|DB|SQL|XML|JSON|API|SDK))\b'),
        re.compile(r'\b(?:using|with|powered\s+by)\s+([A-Z][a-zA-Z]+(?:\s+[A-Z][a-zA-Z]+)*)\b'),
    ],
}

# Matches rejected per type
INVALID_ENTITY_PATTERNS: Dict[str, List[re.Pattern]] = {
    "PERSON": [re.compile(r'^(?:The|This|That|These|Those|A|An)\b', re.I)],
    "ORGANIZATION": [re.compile(r'^[A-Z]$')],
    "LOCATION": [re.compile(r'^(?:In|At|From|To)$', re.I)],
}

CAPITALIZED = r'[A-Z][a-zA-Z]+(?:\s+[A-Z][a-zA-Z]+)*'

RELATION_PATTERNS: Dict[str, List[re.Pattern]] = {
    "works_for": [
        re.compile(r'([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)\s+(?:works?\s+(?:for|at)|employed\s+by)\s+(' + CAPITALIZED + ')'),
        re.compile(r'([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*),?\s+(?:CEO|CTO|CFO|founder|director|manager)\s+(?:of|at)\s+('
                   + CAPITALIZED + ')'),
    ],
    "located_in": [
        re.compile('(' + CAPITALIZED + r')\s+(?:is\s+)?(?:located|based|headquartered)\s+in\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)'),
    ],
    "acquired_by": [
        re.compile('(' + CAPITALIZED + r')\s+(?:was\s+)?(?:acquired|bought|purchased)\s+by\s+(' + CAPITALIZED + ')'),
    ],
    "acquired": [
        re.compile('(' + CAPITALIZED + r')\s+(?:acquires?|acquired|buys?|bought)\s+(' + CAPITALIZED + ')'),
    ],
    "founded_by": [
        re.compile('(' + CAPITALIZED + r')\s+(?:was\s+)?founded\s+by\s+([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)'),
    ],
    "produces": [
        re.compile('(' + CAPITALIZED + r')\s+(?:produces?|manufactures?|makes?|creates?)\s+([A-Z][a-zA-Z]+(?:\s+[A-Z]?[a-zA-Z]+)*)'),
    ],
}

PATTERN_RELATION_CONFIDENCE = 0.8
DEPENDENCY_RELATION_CONFIDENCE = 0.6

VERB_PATTERN = re.compile(r'\b(is|are|was|were|has|have|had|[a-z]+(?:s|ed|ing))\b')
ENTITY_CONFIDENCE_CAP = 0.95


class NamedEntityRecognizer:
    """Regex-driven NER with overlap resolution and simple relation extraction."""

    def __init__(self,
                 entity_patterns: Optional[Dict[str, List[re.Pattern]]] = None,
                 relation_patterns: Optional[Dict[str, List[re.Pattern]]] = None):
        self.entity_patterns = entity_patterns if entity_patterns is not None else ENTITY_PATTERNS
        self.relation_patterns = relation_patterns if relation_patterns is not None else RELATION_PATTERNS

    def recognize(self, text: str) -> List[NamedEntity]:
        """
        Tag entity spans in text.

        Args:
            text: Plain text

        Returns:
            Non-overlapping entities ordered by start offset
        """
        if not text:
            return []

        entities = []
        found = set()
        for entity_type, patterns in self.entity_patterns.items():
            for pattern in patterns:
                for match in pattern.finditer(text):
                    group = 1 if match.re.groups else 0
                    entity_text = match.group(group)
                    key = (entity_text, entity_type)
                    if key in found or not self.is_valid_entity(entity_text, entity_type):
                        continue
                    found.add(key)
                    entities.append(NamedEntity(
                        text=entity_text,
                        type=entity_type,
                        start=match.start(group),
                        end=match.end(group),
                        confidence=self.entity_confidence(entity_text, entity_type, match.group(0)),
                        metadata=self.entity_metadata(entity_text, entity_type),
                    ))

        resolved = self.resolve_overlaps(entities)
        logger.debug(f"Recognized {len(resolved)} named entities from {len(entities)} matches")
        return resolved

    @staticmethod
    def is_valid_entity(text: str, entity_type: str) -> bool:
        patterns = INVALID_ENTITY_PATTERNS.get(entity_type)
        if patterns:
            return not any(pattern.search(text) for pattern in patterns)
        return len(text) > 1

    @staticmethod
    def entity_confidence(text: str, entity_type: str, matched: str) -> float:
        confidence = 0.7
        if entity_type == "PERSON":
            if len(text.split()) >= 2:
                confidence += 0.1
            if re.match(r'(?:Mr\.|Mrs\.|Ms\.|Dr\.|Prof\.)', matched):
                confidence += 0.15
        elif entity_type == "ORGANIZATION":
            if "Inc." in text or "LLC" in text:
                confidence += 0.2
            if len(text) > 20:
                confidence -= 0.1
        elif entity_type == "DATE":
            if re.search(r'\d{4}', text):
                confidence += 0.1
        elif entity_type == "MONEY":
            if "$" in text:
                confidence += 0.15
        return round(min(ENTITY_CONFIDENCE_CAP, confidence), 4)

    @staticmethod
    def entity_metadata(text: str, entity_type: str) -> Dict[str, Any]:
        metadata: Dict[str, Any] = {}
        if entity_type == "DATE":
            normalized = MetadataExtractor.normalize_date(text)
            if normalized:
                metadata["normalized_value"] = normalized
        elif entity_type == "MONEY":
            amount = re.sub(r'[^\d.]', '', text)
            try:
                metadata["normalized_value"] = float(amount)
            except ValueError:
                pass
        elif entity_type == "ORGANIZATION":
            if "University" in text or "College" in text or "Institute" in text:
                metadata["subtype"] = "educational"
            elif "Inc." in text or "LLC" in text or "Corp" in text or "Company" in text:
                metadata["subtype"] = "company"
            elif "Foundation" in text or "Association" in text:
                metadata["subtype"] = "nonprofit"
        return metadata

    @staticmethod
    def resolve_overlaps(entities: List[NamedEntity]) -> List[NamedEntity]:
        """
        Resolve overlapping spans.

        Entities are visited by start offset; an entity overlapping the last
        kept one replaces it only when it is more confident.
        """
        ordered = sorted(entities, key=lambda e: (e.start, -e.end))
        resolved: List[NamedEntity] = []
        for entity in ordered:
            if not resolved or entity.start >= resolved[-1].end:
                resolved.append(entity)
            elif entity.confidence > resolved[-1].confidence:
                resolved[-1] = entity
        return resolved

    def extract_relations(self, text: str, entities: List[NamedEntity]) -> List[EntityRelation]:
        """
        Find relations between recognized entities.

        Pattern families give labelled relations; entity pairs sharing a
        sentence give a relation named after the first verb between them.
        Duplicate (subject, predicate, object) triples keep the higher confidence.
        """
        entity_map = {entity.text.lower(): entity for entity in entities}
        relations = []

        for predicate, patterns in self.relation_patterns.items():
            for pattern in patterns:
                for match in pattern.finditer(text):
                    subject = self._find_entity(match.group(1), entity_map)
                    obj = self._find_entity(match.group(2), entity_map)
                    if subject and obj and subject is not obj:
                        relations.append(EntityRelation(
                            subject=subject,
                            predicate=predicate,
                            object=obj,
                            confidence=PATTERN_RELATION_CONFIDENCE,
                            context=match.group(0),
                        ))

        relations.extend(self._dependency_relations(text, entities))

        unique: Dict[tuple, EntityRelation] = {}
        for relation in relations:
            key = (relation.subject.text, relation.predicate, relation.object.text)
            if key not in unique or relation.confidence > unique[key].confidence:
                unique[key] = relation
        return list(unique.values())

    @staticmethod
    def _find_entity(text: str, entity_map: Dict[str, NamedEntity]) -> Optional[NamedEntity]:
        normalized = text.lower().strip()
        if normalized in entity_map:
            return entity_map[normalized]
        for key, entity in entity_map.items():
            if len(key) >= 3 and len(normalized) >= 3 and (normalized in key or key in normalized):
                return entity
        return None

    @staticmethod
    def _dependency_relations(text: str, entities: List[NamedEntity]) -> List[EntityRelation]:
        relations = []
        offset = 0
        for sentence in split_sentences(text):
            start = text.find(sentence, offset)
            if start == -1:
                continue
            end = start + len(sentence)
            offset = end

            in_sentence = [e for e in entities if e.start >= start and e.end <= end]
            for i in range(len(in_sentence) - 1):
                for j in range(i + 1, len(in_sentence)):
                    first, second = in_sentence[i], in_sentence[j]
                    between = text[first.end:second.start] if first.end <= second.start else ""
                    verb = VERB_PATTERN.search(between)
                    if verb:
                        relations.append(EntityRelation(
                            subject=first,
                            predicate=verb.group(1),
                            object=second,
                            confidence=DEPENDENCY_RELATION_CONFIDENCE,
                            context=sentence,
                        ))
        return relations
