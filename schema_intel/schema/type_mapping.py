"""
Entity type -> Schema.org type mapping and the allow-list of external references.

Kept free of analysis imports so the knowledge graph can use it for export.
"""

from typing import Dict, List, NamedTuple, Optional


ENTITY_SCHEMA_TYPES: Dict[str, str] = {
    "concept": "Thing",
    "product": "Product",
    "service": "Service",
    "organization": "Organization",
    "person": "Person",
    "location": "Place",
    "event": "Event",
    "medical": "MedicalEntity",
    "fitness": "Thing",
    "brand": "Brand",
    "material": "Thing",
}
DEFAULT_SCHEMA_TYPE = "Thing"

# Fitness concepts are never places, whatever their recognized type
FITNESS_CONCEPT_MARKERS = ("VO2", "Capacity", "Training", "Heart Rate", "Cardio", "HIIT")


class WikiReference(NamedTuple):
    id: str
    same_as: List[str]
    description: Optional[str] = None


WIKI_REFERENCES: Dict[str, WikiReference] = {
    "VO2 Max": WikiReference(
        "https://www.wikidata.org/wiki/Q917808",
        ["https://en.wikipedia.org/wiki/VO2_max", "https://www.wikidata.org/wiki/Q917808"],
        "Maximal oxygen consumption during incremental exercise",
    ),
    "High-Intensity Interval Training": WikiReference(
        "https://www.wikidata.org/wiki/Q5758789",
        ["https://en.wikipedia.org/wiki/High-intensity_interval_training",
         "https://www.wikidata.org/wiki/Q5758789"],
    ),
    "HIIT": WikiReference(
        "https://www.wikidata.org/wiki/Q5758789",
        ["https://en.wikipedia.org/wiki/High-intensity_interval_training",
         "https://www.wikidata.org/wiki/Q5758789"],
    ),
    "Bong": WikiReference(
        "https://www.wikidata.org/wiki/Q847027",
        ["https://en.wikipedia.org/wiki/Bong", "https://www.wikidata.org/wiki/Q847027"],
    ),
    "Odoo": WikiReference(
        "https://www.wikidata.org/wiki/Q2629990",
        ["https://en.wikipedia.org/wiki/Odoo", "https://www.wikidata.org/wiki/Q2629990"],
    ),
    "ERP": WikiReference(
        "https://www.wikidata.org/wiki/Q131508",
        ["https://en.wikipedia.org/wiki/Enterprise_resource_planning",
         "https://www.wikidata.org/wiki/Q131508"],
    ),
}


def node_schema_type(entity_type: str) -> str:
    return ENTITY_SCHEMA_TYPES.get(entity_type, DEFAULT_SCHEMA_TYPE)


def entity_schema_type(name: str, entity_type: str, industry: str = "general") -> str:
    """
    Schema.org type for an entity.

    Args:
        name: Entity name
        entity_type: Recognized entity type
        industry: Detected industry of the page

    Returns:
        Schema.org type name; fitness concepts always map to Thing
    """
    if entity_type == "fitness" or industry == "fitness":
        if any(marker in name for marker in FITNESS_CONCEPT_MARKERS):
            return "Thing"
    return node_schema_type(entity_type)


def wiki_reference(name: str) -> Optional[WikiReference]:
    """External reference for a known entity name; None for anything off the allow-list."""
    return WIKI_REFERENCES.get(name)
