"""
Knowledge graph builder.

Links entities through verb-pattern relations, sentence co-occurrence and
type hierarchy, overlays domain ontologies, then computes connected
clusters and a damped importance score per node. The builder keeps the last
graph it built so it can answer neighbourhood and path queries.
"""

import re
import logging
from typing import List, Dict, Any, Optional, NamedTuple, Tuple

import networkx as nx

from .data_models import Entity, GraphNode, GraphEdge, KnowledgeGraph
from .text_utils import slugify, name_pattern
from ..schema.type_mapping import node_schema_type

logger = logging.getLogger(__name__)


RELATION_PATTERNS: Dict[str, List[str]] = {
    "isPartOf": [
        r'\b(\w+)\s+(?:is|are)\s+(?:a\s+)?part\s+of\s+(\w+)',
        r'\b(\w+)\s+belongs?\s+to\s+(\w+)',
        r'\b(\w+)\s+(?:component|element|member)\s+of\s+(\w+)',
    ],
    "hasProperty": [
        r'\b(\w+)\s+(?:has|have)\s+(\w+)',
        r'\b(\w+)\s+(?:contains?|includes?)\s+(\w+)',
        r'\b(\w+)\s+with\s+(\w+)',
    ],
    "relatedTo": [
        r'\b(\w+)\s+(?:related|similar)\s+to\s+(\w+)',
        r'\b(\w+)\s+and\s+(\w+)\s+are\s+(?:related|similar)',
        r'\b(\w+)\s+(?:like|such\s+as)\s+(\w+)',
    ],
    "causedBy": [
        r'\b(\w+)\s+(?:caused?|due)\s+(?:by|to)\s+(\w+)',
        r'\b(\w+)\s+(?:results?|resulting)\s+(?:from|in)\s+(\w+)',
        r'\b(\w+)\s+(?:leads?|leading)\s+to\s+(\w+)',
    ],
    "usedFor": [
        r'\b(\w+)\s+(?:used?|using)\s+(?:for|to)\s+(\w+)',
        r'\b(\w+)\s+(?:helps?|helping)\s+(?:with|to)\s+(\w+)',
        r'\b(\w+)\s+for\s+(\w+)',
    ],
    "locatedIn": [
        r'\b(\w+)\s+(?:located?|found)\s+(?:in|at)\s+(\w+)',
        r'\b(\w+)\s+in\s+(\w+)',
        r'\b(\w+)\s+at\s+(\w+)',
    ],
    "produces": [
        r'\b(\w+)\s+(?:produces?|producing|creates?|creating)\s+(\w+)',
        r'\b(\w+)\s+(?:generates?|generating|makes?|making)\s+(\w+)',
    ],
    "requires": [
        r'\b(\w+)\s+(?:requires?|requiring|needs?|needing)\s+(\w+)',
        r'\b(\w+)\s+(?:depends?|depending)\s+on\s+(\w+)',
    ],
}

# Parent entity type -> child entity types joined by a "contains" edge
TYPE_HIERARCHY: Dict[str, List[str]] = {
    "organization": ["department", "team", "group"],
    "product": ["feature", "component", "variant"],
    "concept": ["subconcept", "aspect", "element"],
    "location": ["sublocation", "area", "region"],
}

DOMAIN_ONTOLOGIES: Dict[str, Dict[str, Any]] = {
    "technology": {
        "entities": ["software", "hardware", "api", "database", "server", "application"],
        "relationships": ["integrates", "implements", "extends", "uses", "connects"],
        "hierarchy": {
            "software": ["application", "api", "database"],
            "hardware": ["server", "device", "component"],
        },
    },
    "business": {
        "entities": ["company", "product", "service", "customer", "market", "revenue"],
        "relationships": ["provides", "serves", "competes", "partners", "acquires"],
        "hierarchy": {
            "company": ["department", "team", "employee"],
            "market": ["segment", "demographic", "region"],
        },
    },
    "medical": {
        "entities": ["disease", "symptom", "treatment", "medication", "patient", "condition"],
        "relationships": ["treats", "causes", "prevents", "diagnoses", "affects"],
        "hierarchy": {
            "disease": ["symptom", "complication"],
            "treatment": ["medication", "therapy", "procedure"],
        },
    },
    "education": {
        "entities": ["course", "student", "teacher", "curriculum", "skill", "knowledge"],
        "relationships": ["teaches", "learns", "requires", "develops", "assesses"],
        "hierarchy": {
            "curriculum": ["course", "module", "lesson"],
            "skill": ["competency", "ability", "expertise"],
        },
    },
}

PATTERN_RELATION_CONFIDENCE = 0.7
CO_OCCURRENCE_BASE = 0.5
CO_OCCURRENCE_STEP = 0.1
CO_OCCURRENCE_MIN_STRENGTH = 0.4
HIERARCHY_CONFIDENCE = 0.6
ONTOLOGY_EDGE_WEIGHT = 0.8
EDGE_REINFORCEMENT = 0.1
MIN_PARTIAL_MATCH = 3

DAMPING = 0.85
IMPORTANCE_ITERATIONS = 50


class Relationship(NamedTuple):
    source: str
    target: str
    relation: str
    confidence: float
    context: str = ""


class KnowledgeGraphBuilder:
    """Builds and queries an entity relationship graph."""

    def __init__(self,
                 relation_patterns: Optional[Dict[str, List[str]]] = None,
                 type_hierarchy: Optional[Dict[str, List[str]]] = None,
                 ontologies: Optional[Dict[str, Dict[str, Any]]] = None):
        patterns = relation_patterns if relation_patterns is not None else RELATION_PATTERNS
        self.relation_patterns = {
            relation: [re.compile(p, re.I) for p in regexes] for relation, regexes in patterns.items()
        }
        self.type_hierarchy = type_hierarchy if type_hierarchy is not None else TYPE_HIERARCHY
        self.ontologies = ontologies if ontologies is not None else DOMAIN_ONTOLOGIES
        self.graph = KnowledgeGraph()

    @staticmethod
    def node_id(name: str) -> str:
        return slugify(name)

    def build_graph(self, entities: List[Entity], content: str, domain: Optional[str] = None) -> KnowledgeGraph:
        """
        Build a fresh graph, discarding any previous one.

        Args:
            entities: Entities to become nodes
            content: Text searched for relations between them
            domain: Optional ontology name (technology, business, medical, education)

        Returns:
            KnowledgeGraph with nodes, edges, clusters and importance scores
        """
        self.graph = KnowledgeGraph()

        for entity in entities:
            self._add_node(entity)

        for relationship in self.extract_relationships(content or "", entities):
            self._add_edge(relationship)

        if domain and domain in self.ontologies:
            self._apply_domain_knowledge(domain)

        self.graph.clusters = self._cluster_nodes()
        self._calculate_importance()

        logger.info(
            f"Built graph with {len(self.graph.nodes)} nodes, {len(self.graph.edges)} edges, "
            f"{len(self.graph.clusters)} clusters"
        )
        return self.graph

    def _add_node(self, entity: Entity) -> None:
        node_id = self.node_id(entity.name)
        if not node_id:
            return
        existing = self.graph.nodes.get(node_id)
        if existing is not None:
            existing.mentions += 1
            existing.properties["confidence"] = max(existing.properties["confidence"], entity.confidence)
            return

        self.graph.nodes[node_id] = GraphNode(
            id=node_id,
            name=entity.name,
            type=entity.type or "Thing",
            properties={
                "confidence": entity.confidence,
                "category": entity.category,
                "context": entity.context,
            },
        )

    def extract_relationships(self, content: str, entities: List[Entity]) -> List[Relationship]:
        """Union of pattern, co-occurrence and type-hierarchy relations."""
        names = [entity.name for entity in entities]
        relationships = []

        for relation, patterns in self.relation_patterns.items():
            for pattern in patterns:
                for match in pattern.finditer(content):
                    source = self._match_entity(match.group(1), names)
                    target = self._match_entity(match.group(2), names)
                    if source and target and source != target:
                        relationships.append(Relationship(
                            source, target, relation, PATTERN_RELATION_CONFIDENCE, match.group(0)
                        ))

        for (source, target), strength in self._co_occurrences(content, names).items():
            relationships.append(Relationship(source, target, "relatedTo", strength, "co-occurrence"))

        relationships.extend(self._hierarchy_relationships(entities, relationships))
        return relationships

    @staticmethod
    def _match_entity(text: str, names: List[str]) -> Optional[str]:
        """Exact case-insensitive match first, then containment either way."""
        normalized = text.lower().strip()
        for name in names:
            if name.lower() == normalized:
                return name
        if len(normalized) < MIN_PARTIAL_MATCH:
            return None
        for name in names:
            lowered = name.lower()
            if len(lowered) >= MIN_PARTIAL_MATCH and (normalized in lowered or lowered in normalized):
                return name
        return None

    @staticmethod
    def _co_occurrences(content: str, names: List[str]) -> Dict[Tuple[str, str], float]:
        """Entity pairs sharing a sentence; each further shared sentence adds strength."""
        patterns = [(name, name_pattern(name)) for name in dict.fromkeys(names)]
        strengths: Dict[Tuple[str, str], float] = {}

        for sentence in re.split(r'[.!?]+', content):
            found = [name for name, pattern in patterns if pattern.search(sentence)]
            for i in range(len(found)):
                for j in range(i + 1, len(found)):
                    pair = (found[i], found[j])
                    if (found[j], found[i]) in strengths:
                        pair = (found[j], found[i])
                    if pair in strengths:
                        strengths[pair] = min(strengths[pair] + CO_OCCURRENCE_STEP, 1.0)
                    else:
                        strengths[pair] = CO_OCCURRENCE_BASE

        return {pair: round(s, 4) for pair, s in strengths.items() if s > CO_OCCURRENCE_MIN_STRENGTH}

    def _hierarchy_relationships(self,
                                 entities: List[Entity],
                                 existing: List[Relationship]) -> List[Relationship]:
        linked = {(r.source, r.target) for r in existing} | {(r.target, r.source) for r in existing}
        inferred = []
        for parent in entities:
            child_types = self.type_hierarchy.get(parent.type)
            if not child_types:
                continue
            for child in entities:
                if child.type not in child_types or child.name == parent.name:
                    continue
                if (parent.name, child.name) in linked:
                    continue
                linked.add((parent.name, child.name))
                linked.add((child.name, parent.name))
                inferred.append(Relationship(parent.name, child.name, "contains", HIERARCHY_CONFIDENCE))
        return inferred

    def _add_edge(self, relationship: Relationship) -> None:
        source_id = self.node_id(relationship.source)
        target_id = self.node_id(relationship.target)
        if source_id not in self.graph.nodes or target_id not in self.graph.nodes:
            return

        edge = GraphEdge(
            source=source_id,
            target=target_id,
            relation=relationship.relation,
            weight=min(relationship.confidence, 1.0),
            properties={"context": relationship.context} if relationship.context else {},
        )
        existing = self.graph.edges.get(edge.id)
        if existing is not None:
            existing.weight = min(existing.weight + EDGE_REINFORCEMENT, 1.0)
        else:
            self.graph.edges[edge.id] = edge

    def _apply_domain_knowledge(self, domain: str) -> None:
        hierarchy = self.ontologies[domain].get("hierarchy", {})
        nodes = list(self.graph.nodes.values())
        added = 0
        for parent_type, child_types in hierarchy.items():
            parents = [n for n in nodes if n.type.lower() == parent_type]
            children = [n for n in nodes if n.type.lower() in child_types]
            for parent in parents:
                for child in children:
                    if parent.id == child.id:
                        continue
                    edge = GraphEdge(source=parent.id, target=child.id, relation="hierarchical",
                                     weight=ONTOLOGY_EDGE_WEIGHT)
                    if edge.id not in self.graph.edges:
                        self.graph.edges[edge.id] = edge
                        added += 1
        logger.debug(f"Ontology {domain} added {added} hierarchical edges")

    def to_networkx(self) -> nx.Graph:
        """Undirected view of the graph; parallel edges keep the strongest weight."""
        G = nx.Graph()
        G.add_nodes_from(self.graph.nodes)
        for edge in self.graph.edges.values():
            if G.has_edge(edge.source, edge.target):
                weight = max(G[edge.source][edge.target]["weight"], edge.weight)
            else:
                weight = edge.weight
            G.add_edge(edge.source, edge.target, weight=weight)
        return G

    def _cluster_nodes(self) -> Dict[str, List[str]]:
        """Connected components of two or more nodes, members in insertion order."""
        clusters = {}
        for component in nx.connected_components(self.to_networkx()):
            if len(component) > 1:
                members = [node_id for node_id in self.graph.nodes if node_id in component]
                clusters[f"cluster-{len(clusters)}"] = members
        return clusters

    def _calculate_importance(self) -> None:
        """
        Damped PageRank-style importance over directed edges.

        Runs a fixed number of iterations. Scores are rescaled to sum to 1
        after each round, since weighted contributions leak mass.
        """
        nodes = self.graph.nodes
        count = len(nodes)
        if count == 0:
            return

        out_degree = {node_id: 0 for node_id in nodes}
        incoming: Dict[str, List[GraphEdge]] = {node_id: [] for node_id in nodes}
        for edge in self.graph.edges.values():
            out_degree[edge.source] += 1
            incoming[edge.target].append(edge)

        scores = {node_id: 1.0 / count for node_id in nodes}
        for _ in range(IMPORTANCE_ITERATIONS):
            updated = {}
            for node_id in nodes:
                score = (1 - DAMPING) / count
                for edge in incoming[node_id]:
                    score += DAMPING * (scores[edge.source] / max(out_degree[edge.source], 1)) * edge.weight
                updated[node_id] = score
            total = sum(updated.values())
            scores = {node_id: s / total for node_id, s in updated.items()} if total > 0 else updated

        for node_id, score in scores.items():
            nodes[node_id].importance = score

    def get_node(self, name: str) -> Optional[GraphNode]:
        return self.graph.nodes.get(self.node_id(name))

    def get_related_nodes(self, name: str, max_depth: int = 2) -> List[GraphNode]:
        """Nodes within max_depth hops of the named node, nearest first."""
        start = self.node_id(name)
        if start not in self.graph.nodes:
            return []

        depths = nx.single_source_shortest_path_length(self.to_networkx(), start, cutoff=max_depth)
        return [self.graph.nodes[node_id] for node_id in depths if node_id != start]

    def get_shortest_path(self, source: str, target: str) -> Optional[List[GraphNode]]:
        """
        Dijkstra over the undirected graph with cost 1/weight.

        Returns:
            Nodes from source to target, or None when either is absent or unreachable
        """
        source_id, target_id = self.node_id(source), self.node_id(target)
        try:
            path = nx.dijkstra_path(
                self.to_networkx(), source_id, target_id,
                weight=lambda u, v, d: 1.0 / d["weight"] if d["weight"] > 0 else None,
            )
        except (nx.NetworkXNoPath, nx.NodeNotFound):
            return None
        return [self.graph.nodes[node_id] for node_id in path]

    def get_most_important_nodes(self, limit: int = 10) -> List[GraphNode]:
        return sorted(self.graph.nodes.values(), key=lambda n: n.importance, reverse=True)[:limit]

    def export_to_schema(self, graph: Optional[KnowledgeGraph] = None) -> Dict[str, Any]:
        """Serialize the graph as a JSON-LD @graph; outbound edges become potentialAction entries."""
        graph = graph or self.graph
        items = []
        for node in graph.nodes.values():
            item: Dict[str, Any] = {
                "@type": node_schema_type(node.type),
                "@id": f"#{node.id}",
                "name": node.name,
            }
            actions = []
            for edge in graph.edges.values():
                if edge.source != node.id or edge.target not in graph.nodes:
                    continue
                actions.append({
                    "@type": "Relationship",
                    "relationshipType": edge.relation,
                    "object": {"@id": f"#{edge.target}", "name": graph.nodes[edge.target].name},
                })
            if actions:
                item["potentialAction"] = actions
            items.append(item)
        return {"@context": "https://schema.org", "@graph": items}
