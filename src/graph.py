"""Relationship graph construction: BFS adjacency lists and NetworkX views."""

import itertools

import networkx as nx

from models import AdjacencyEntry, Dataset, RelationshipKind

Adjacency = dict[str, list[AdjacencyEntry]]

PARENT = "parent"
CHILD = "child"
SPOUSE = "spouse"
SIBLING = "sibling"


def build_adjacency(dataset: Dataset) -> Adjacency:
    """
    Build the undirected, edge-typed adjacency used by path finding.

    Entry order is fixed so that BFS tie-breaking is reproducible:
    per person (in dataset order) the father edge, then the mother edge; then
    parent-child relationships not already covered; then all spousal
    relationships; then all sibling relationships. Every edge is inserted at both
    endpoints. `direction` says what the neighbour is to the list owner.
    """
    people = dataset.people_map()
    adjacency: Adjacency = {pid: [] for pid in people}
    seen: dict[str, set[tuple[str, str]]] = {pid: set() for pid in people}

    def link(a: str, b: str, edge_type: str, a_to_b: str, b_to_a: str):
        if a == b or a not in people or b not in people:
            return
        for owner, neighbour, direction in ((a, b, a_to_b), (b, a, b_to_a)):
            key = (neighbour, direction)
            if key in seen[owner]:
                continue
            seen[owner].add(key)
            adjacency[owner].append(AdjacencyEntry(id=neighbour, type=edge_type, direction=direction))

    for person in dataset.people:
        if person.father_id:
            link(person.id, person.father_id, RelationshipKind.FATHER_CHILD.value, PARENT, CHILD)
        if person.mother_id:
            link(person.id, person.mother_id, RelationshipKind.MOTHER_CHILD.value, PARENT, CHILD)

    for rel in dataset.relationships:
        if rel.kind.is_parental:
            link(rel.to_id, rel.from_id, rel.kind.value, PARENT, CHILD)

    for rel in dataset.relationships:
        if rel.kind is RelationshipKind.SPOUSE:
            link(rel.from_id, rel.to_id, rel.kind.value, SPOUSE, SPOUSE)

    for rel in dataset.relationships:
        if rel.kind is RelationshipKind.SIBLING:
            link(rel.from_id, rel.to_id, rel.kind.value, SIBLING, SIBLING)

    return adjacency


def build_graph(dataset: Dataset) -> nx.DiGraph:
    """
    Build a NetworkX directed graph from an (enriched) dataset.

    PARENT_OF edges point parent -> child; SPOUSE_OF and SIBLING_OF edges keep the
    direction they were recorded in.
    """
    G = nx.DiGraph()

    # Note: use 'person_name' instead of 'name' to avoid conflict with pydot
    for p in dataset.people:
        G.add_node(
            p.id,
            person_name=p.display_name,
            gender=p.gender.value,
            birth_year=p.birth_year,
            death_year=p.death_year,
            generation=p.generation,
        )

    def add(u: str, v: str, relationship_type: str):
        if u != v and u in G and v in G:
            G.add_edge(u, v, relationship_type=relationship_type)

    for p in dataset.people:
        for parent_id in p.parent_ids:
            add(parent_id, p.id, "PARENT_OF")

    for rel in dataset.relationships:
        if rel.kind.is_parental:
            add(rel.from_id, rel.to_id, "PARENT_OF")
        elif rel.kind is RelationshipKind.SPOUSE:
            if not G.has_edge(rel.to_id, rel.from_id):
                add(rel.from_id, rel.to_id, "SPOUSE_OF")
        elif rel.kind is RelationshipKind.SIBLING:
            if not G.has_edge(rel.to_id, rel.from_id):
                add(rel.from_id, rel.to_id, "SIBLING_OF")

    return G


def build_union_layout_graph(G: nx.DiGraph) -> nx.DiGraph:
    """
    Build a layout graph using the union-node model.

    Each spouse pair gets a "family" node; children hang from the family node of
    their parents (or from a single-parent family node), so spouses share a rank
    and siblings line up under one connector. SIBLING_OF edges are dropped, since
    siblings are already joined through their family node.
    """
    H = nx.DiGraph()
    for n, data in G.nodes(data=True):
        H.add_node(n, node_type="person", **data)

    couples = {
        tuple(sorted((u, v)))
        for u, v, rtype in G.edges(data="relationship_type")
        if rtype == "SPOUSE_OF"
    }

    def family_node(parents: tuple[str, ...]) -> str:
        fam_id = "FAM_" + "_".join(parents)
        if fam_id not in H:
            H.add_node(fam_id, node_type="family", spouses=parents)
            for p in parents:
                H.add_edge(p, fam_id, edge_type="spouse_to_family")
        return fam_id

    for couple in sorted(couples):
        family_node(couple)

    parents_by_child: dict[str, list[str]] = {}
    for u, v, rtype in G.edges(data="relationship_type"):
        if rtype == "PARENT_OF":
            parents_by_child.setdefault(v, []).append(u)

    for child, parents in parents_by_child.items():
        parents = sorted(set(parents))
        pair = next(
            (c for c in itertools.combinations(parents, 2) if c in couples),
            None,
        )
        H.add_edge(family_node(pair or tuple(parents)), child, edge_type="family_to_child")

    return H
