"""Tests for adjacency construction and the NetworkX graph views."""

from enrichment import enrich
from graph import CHILD, PARENT, SIBLING, SPOUSE, build_adjacency, build_graph, build_union_layout_graph
from models import AdjacencyEntry


class TestBuildAdjacency:
    def test_fixed_order(self, enriched_family):
        adjacency = build_adjacency(enriched_family)

        assert adjacency["P"] == [
            AdjacencyEntry("G", "father-child", PARENT),
            AdjacencyEntry("H", "mother-child", PARENT),
            AdjacencyEntry("K1", "father-child", CHILD),
            AdjacencyEntry("K2", "father-child", CHILD),
            AdjacencyEntry("W", "spouse", SPOUSE),
        ]
        assert [e.id for e in adjacency["G"]] == ["P", "Q", "H"]

    def test_every_edge_at_both_endpoints(self, enriched_family):
        adjacency = build_adjacency(enriched_family)
        reverse = {PARENT: CHILD, CHILD: PARENT, SPOUSE: SPOUSE, SIBLING: SIBLING}

        for owner, entries in adjacency.items():
            for entry in entries:
                back = [e for e in adjacency[entry.id] if e.id == owner]
                assert [e.direction for e in back] == [reverse[entry.direction]]

    def test_no_duplicates(self, enriched_family):
        for entries in build_adjacency(enriched_family).values():
            keys = [(e.id, e.direction) for e in entries]
            assert len(keys) == len(set(keys))

    def test_sibling_entries(self, enriched_family):
        adjacency = build_adjacency(enriched_family)

        assert AdjacencyEntry("K2", "sibling", SIBLING) in adjacency["K1"]
        assert AdjacencyEntry("K1", "sibling", SIBLING) in adjacency["K2"]

    def test_skips_unknown_and_self(self):
        dataset = enrich(
            {
                "people": [{"id": "A"}, {"id": "B"}],
                "relationships": [
                    {"from": "A", "to": "ZZ", "type": "spouse"},
                    {"from": "A", "to": "A", "type": "sibling"},
                    {"from": "A", "to": "B", "type": "spouse"},
                ],
            }
        )
        adjacency = build_adjacency(dataset)

        assert adjacency == {
            "A": [AdjacencyEntry("B", "spouse", SPOUSE)],
            "B": [AdjacencyEntry("A", "spouse", SPOUSE)],
        }

    def test_parent_of_unknown_gender_is_linked(self):
        dataset = enrich(
            {
                "people": [{"id": "X"}, {"id": "Y"}],
                "relationships": [{"from": "X", "to": "Y", "type": "parent-child"}],
            }
        )
        adjacency = build_adjacency(dataset)

        assert adjacency["Y"] == [AdjacencyEntry("X", "parent-child", PARENT)]
        assert adjacency["X"] == [AdjacencyEntry("Y", "parent-child", CHILD)]


class TestBuildGraph:
    def test_nodes_and_edges(self, enriched_family):
        G = build_graph(enriched_family)

        assert G.number_of_nodes() == 8
        assert G.nodes["K1"]["person_name"] == "Kai Hale"
        assert G.nodes["K1"]["generation"] == 2
        assert G.edges["G", "P"]["relationship_type"] == "PARENT_OF"
        assert G.edges["G", "H"]["relationship_type"] == "SPOUSE_OF"
        assert not G.has_edge("H", "G")
        assert G.edges["K1", "K2"]["relationship_type"] == "SIBLING_OF"


class TestUnionLayoutGraph:
    def test_family_nodes(self, enriched_family):
        H = build_union_layout_graph(build_graph(enriched_family))

        assert H.nodes["FAM_G_H"]["node_type"] == "family"
        assert H.has_edge("G", "FAM_G_H")
        assert H.has_edge("FAM_G_H", "P")
        assert H.has_edge("FAM_G_H", "Q")
        assert H.has_edge("FAM_P_W", "K1")
        assert H.has_edge("FAM_Q", "N")
        assert not H.has_edge("K1", "K2")
