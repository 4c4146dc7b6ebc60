"""
Tests for the knowledge graph builder
"""
import networkx as nx
import pytest

from schema_intel.intelligence import Entity, KnowledgeGraphBuilder


GRAPH_CONTENT = (
    "Odoo is a modular ERP. Odoo runs on Python. "
    "Odoo and ERP buyers compare features. Island stands alone."
)


@pytest.fixture
def entities():
    """Provide entities for a small software article"""
    return [
        Entity(name="Odoo", type="product", confidence=0.85),
        Entity(name="ERP", type="concept", confidence=0.85),
        Entity(name="Python", type="concept", confidence=0.7),
        Entity(name="Island", type="concept", confidence=0.6),
    ]


@pytest.fixture
def builder():
    return KnowledgeGraphBuilder()


@pytest.fixture
def graph(builder, entities):
    """Provide a graph built from the sample entities"""
    return builder.build_graph(entities, GRAPH_CONTENT)


class TestGraphConstruction:
    """Test nodes, edges and clusters"""

    def test_nodes(self, graph):
        assert set(graph.nodes) == {"odoo", "erp", "python", "island"}
        assert graph.nodes["odoo"].name == "Odoo"
        assert graph.nodes["odoo"].properties["confidence"] == 0.85

    def test_edge_endpoints_exist(self, graph):
        assert graph.edges
        for edge in graph.edges.values():
            assert edge.source in graph.nodes
            assert edge.target in graph.nodes

    def test_co_occurrence_strength(self, graph):
        assert graph.edges["odoo-relatedTo-erp"].weight == pytest.approx(0.6)
        assert graph.edges["odoo-relatedTo-python"].weight == pytest.approx(0.5)

    def test_clusters_exclude_singletons(self, graph):
        assert sorted(graph.clusters["cluster-0"]) == ["erp", "odoo", "python"]
        assert list(graph.clusters) == ["cluster-0"]
        for members in graph.clusters.values():
            assert len(members) >= 2
            assert "island" not in members

    def test_importance_sums_to_one(self, graph):
        total = sum(node.importance for node in graph.nodes.values())
        assert total == pytest.approx(1.0)
        assert all(node.importance > 0 for node in graph.nodes.values())

    def test_link_targets_rank_above_isolated_node(self, graph):
        assert graph.nodes["erp"].importance > graph.nodes["island"].importance

    def test_rebuild_discards_previous_graph(self, builder, graph):
        rebuilt = builder.build_graph([Entity(name="Solo", type="concept", confidence=0.6)], "Solo.")
        assert set(rebuilt.nodes) == {"solo"}
        assert rebuilt.edges == {}
        assert rebuilt.clusters == {}
        assert rebuilt.nodes["solo"].importance == pytest.approx(1.0)

    def test_empty_graph(self, builder):
        graph = builder.build_graph([], "")
        assert graph.nodes == {}
        assert graph.clusters == {}

    def test_domain_ontology_edges(self, builder):
        graph = builder.build_graph(
            [Entity(name="Odoo", type="software", confidence=0.85),
             Entity(name="PostgreSQL", type="database", confidence=0.8)],
            "Two unrelated sentences. Nothing links them.",
            domain="technology",
        )
        edge = graph.edges["odoo-hierarchical-postgresql"]
        assert edge.weight == 0.8

    def test_domain_ontology_matches_types_only(self, builder):
        graph = builder.build_graph(
            [Entity(name="Software", type="concept", confidence=0.85),
             Entity(name="PostgreSQL", type="database", confidence=0.8)],
            "Two unrelated sentences. Nothing links them.",
            domain="technology",
        )
        assert graph.edges == {}

    def test_type_hierarchy_edges(self, builder):
        graph = builder.build_graph(
            [Entity(name="Bong", type="product", confidence=0.9),
             Entity(name="Percolator", type="component", confidence=0.9)],
            "Clean everything. Rinse well.",
        )
        assert graph.edges["bong-contains-percolator"].weight == 0.6


class TestGraphQueries:
    """Test neighbourhood and path queries"""

    def test_get_node(self, builder, graph):
        assert builder.get_node("ERP").id == "erp"
        assert builder.get_node("Missing") is None

    def test_related_nodes(self, builder, graph):
        assert [node.id for node in builder.get_related_nodes("ERP", max_depth=1)] == ["odoo"]
        assert {node.id for node in builder.get_related_nodes("ERP", max_depth=2)} == {"odoo", "python"}
        assert builder.get_related_nodes("Missing") == []

    def test_networkx_view(self, builder, graph):
        G = builder.to_networkx()
        assert isinstance(G, nx.Graph)
        assert set(G.nodes) == {"odoo", "erp", "python", "island"}
        assert G["erp"]["odoo"]["weight"] == pytest.approx(max(
            edge.weight for edge in graph.edges.values() if {edge.source, edge.target} == {"erp", "odoo"}
        ))
        assert G.degree("island") == 0

    def test_shortest_path(self, builder, graph):
        path = builder.get_shortest_path("ERP", "Python")
        assert [node.id for node in path] == ["erp", "odoo", "python"]

    def test_shortest_path_to_self(self, builder, graph):
        assert [node.id for node in builder.get_shortest_path("Odoo", "Odoo")] == ["odoo"]

    def test_shortest_path_unreachable_or_absent(self, builder, graph):
        assert builder.get_shortest_path("ERP", "Island") is None
        assert builder.get_shortest_path("ERP", "Missing") is None
        assert builder.get_shortest_path("Missing", "ERP") is None

    def test_most_important_nodes(self, builder, graph):
        ranked = builder.get_most_important_nodes(limit=2)
        assert len(ranked) == 2
        assert ranked[0].importance >= ranked[1].importance


class TestGraphExport:
    """Test JSON-LD export"""

    def test_export(self, builder, graph):
        exported = builder.export_to_schema()
        assert exported["@context"] == "https://schema.org"

        items = {item["@id"]: item for item in exported["@graph"]}
        assert items["#odoo"]["@type"] == "Product"
        assert items["#erp"]["@type"] == "Thing"
        targets = {action["object"]["@id"] for action in items["#odoo"]["potentialAction"]}
        assert targets == {"#erp", "#python"}
        assert all(action["@type"] == "Relationship" for action in items["#odoo"]["potentialAction"])
        assert "potentialAction" not in items["#island"]
