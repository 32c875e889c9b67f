"""
Dataset enrichment: derives ages, eras, family-link ID lists and generation numbers
from raw person records and typed relationship edges.

enrich() never mutates its input and never raises for malformed records; problems
it tolerates are logged and collected on Dataset.anomalies.
"""

import copy
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from typing import Any

import networkx as nx

from models import Anomaly, Dataset, Gender, Person, Relationship, RelationshipKind
from parsing import extract_year, parse_dataset
from settings import EraSetting, settings

logger = logging.getLogger("genealogy.enrichment")


@dataclass
class FamilyLinks:
    """Insertion-ordered ID sets keyed by person id (dicts used as ordered sets)."""

    children: dict[str, dict[str, None]] = field(default_factory=dict)
    spouses: dict[str, dict[str, None]] = field(default_factory=dict)
    siblings: dict[str, dict[str, None]] = field(default_factory=dict)

    def add_child(self, parent_id: str, child_id: str):
        self.children.setdefault(parent_id, {})[child_id] = None

    def add_spouses(self, a: str, b: str):
        self.spouses.setdefault(a, {})[b] = None
        self.spouses.setdefault(b, {})[a] = None

    def add_siblings(self, a: str, b: str):
        self.siblings.setdefault(a, {})[b] = None
        self.siblings.setdefault(b, {})[a] = None


def enrich(
    raw: dict[str, Any] | Dataset,
    current_year: int | None = None,
    iteration_cap: int | None = None,
    eras: list[EraSetting] | None = None,
    key_figures: list[str] | None = None,
) -> Dataset:
    """
    Enrich a raw dataset (decoded JSON or a Dataset) with derived fields.

    Args:
        raw: {"people": [...], "relationships": [...]} or an existing Dataset
        current_year: Year used for the age of living people (default: settings, then today)
        iteration_cap: Optional hard stop on generation worklist iterations
            (default: settings; None means no stop beyond the dataset-size bound)
        eras: Year ranges used to stamp `era` (default: settings)
        key_figures: Person ids flagged as key figures (default: settings)

    Returns:
        A new, enriched Dataset. If `raw` has no `people` list the problem is logged
        and an empty Dataset with metadata {"enriched": False} is returned.
    """
    if isinstance(raw, Dataset):
        dataset = copy.deepcopy(raw)
    elif isinstance(raw, dict) and isinstance(raw.get("people"), list):
        dataset = parse_dataset(copy.deepcopy(raw))
    else:
        logger.error("Invalid data provided to enrich: a 'people' list is required")
        return Dataset(metadata={"enriched": False})

    if current_year is None:
        current_year = settings.CURRENT_YEAR or datetime.now().year
    if iteration_cap is None:
        iteration_cap = settings.GENERATION_ITERATION_CAP
    if eras is None:
        eras = settings.ERAS
    key_figure_ids = {k.lower() for k in (settings.KEY_FIGURES if key_figures is None else key_figures)}

    # Anomalies describe this run only
    dataset.anomalies = []

    for person in dataset.people:
        backfill_years(person)
        compute_age(person, current_year)
        assign_era(person, eras, settings.DEFAULT_ERA)
        flag_key_figure(person, key_figure_ids)

    links = link_relationships(dataset)
    synthesize_parent_relationships(dataset, links)
    apply_links(dataset, links)
    assign_generations(dataset, links, iteration_cap)
    stamp_metadata(dataset)

    logger.info(
        "Enriched %d people and %d relationships (%d anomalies)",
        len(dataset.people),
        len(dataset.relationships),
        len(dataset.anomalies),
    )
    return dataset


def backfill_years(person: Person):
    """Fill birth/death years from the date strings when the year fields are absent."""
    if person.birth_year is None:
        person.birth_year = extract_year(person.birth_date)
    if person.death_year is None:
        person.death_year = extract_year(person.death_date)


def compute_age(person: Person, current_year: int):
    """Set `age` and `is_alive`. Leaves supplied values alone when no year is known."""
    birth, death = person.birth_year, person.death_year
    if birth is not None and death is not None:
        person.age = death - birth
        person.is_alive = False
    elif birth is not None:
        person.is_alive = birth <= current_year
        person.age = current_year - birth if person.is_alive else None
    elif death is not None:
        person.is_alive = False


def determine_era(year: int | None, eras: list[EraSetting], default: str) -> str:
    """Return the id of the first era whose inclusive year range holds `year`."""
    if year is None:
        return default
    for era in eras:
        if era.start_year <= year <= era.end_year:
            return era.id
    return default


def assign_era(person: Person, eras: list[EraSetting], default: str):
    """Set `era` from the birth year, else the death year. A supplied era is kept."""
    if person.era:
        return
    year = person.birth_year if person.birth_year is not None else person.death_year
    person.era = determine_era(year, eras, default)


def flag_key_figure(person: Person, key_figure_ids: set[str]):
    """Set `is_key_figure` by lowercased id. A supplied flag is kept."""
    if person.is_key_figure is None:
        person.is_key_figure = person.id.lower() in key_figure_ids


def _record(dataset: Dataset, kind: str, message: str, person_ids: list[str]):
    logger.warning("%s: %s", kind, message)
    dataset.anomalies.append(Anomaly(kind=kind, message=message, person_ids=person_ids))


def _parent_slot(kind: RelationshipKind, parent: Person | None) -> str | None:
    if kind is RelationshipKind.FATHER_CHILD:
        return "father_id"
    if kind is RelationshipKind.MOTHER_CHILD:
        return "mother_id"
    if parent is None:
        return None
    if parent.gender is Gender.MALE:
        return "father_id"
    if parent.gender is Gender.FEMALE:
        return "mother_id"
    return None


def _set_parent(dataset: Dataset, child: Person, slot: str, parent_id: str):
    current = getattr(child, slot)
    if current is None:
        setattr(child, slot, parent_id)
    elif current != parent_id:
        label = "father" if slot == "father_id" else "mother"
        _record(
            dataset,
            "conflicting-parent",
            f"{child.id} already has {label} {current}; ignoring {parent_id}",
            [child.id, current, parent_id],
        )


def link_relationships(dataset: Dataset) -> FamilyLinks:
    """
    Scan the relationships once, building children/spouse/sibling sets and setting
    fatherId/motherId on children (generic parent-child edges use the parent's gender).
    """
    people = dataset.people_map()
    links = FamilyLinks()

    for rel in dataset.relationships:
        if rel.from_id == rel.to_id:
            _record(
                dataset,
                "self-reference",
                f"{rel.kind.value} relationship from {rel.from_id} to itself",
                [rel.from_id],
            )
            continue

        if rel.kind.is_parental:
            links.add_child(rel.from_id, rel.to_id)
            child = people.get(rel.to_id)
            if child is None:
                continue
            slot = _parent_slot(rel.kind, people.get(rel.from_id))
            if slot:
                _set_parent(dataset, child, slot, rel.from_id)
        elif rel.kind is RelationshipKind.SPOUSE:
            links.add_spouses(rel.from_id, rel.to_id)
        elif rel.kind is RelationshipKind.SIBLING:
            links.add_siblings(rel.from_id, rel.to_id)

    return links


def synthesize_parent_relationships(dataset: Dataset, links: FamilyLinks) -> list[Relationship]:
    """
    Append father-child/mother-child relationships implied only by fatherId/motherId
    on a person record. Any existing parent kind between the same pair counts as
    equivalent.
    """
    people = dataset.people_map()
    existing = {(r.from_id, r.to_id) for r in dataset.relationships if r.kind.is_parental}
    added: list[Relationship] = []

    for person in dataset.people:
        for slot, kind in (
            ("father_id", RelationshipKind.FATHER_CHILD),
            ("mother_id", RelationshipKind.MOTHER_CHILD),
        ):
            parent_id = getattr(person, slot)
            if parent_id is None or (parent_id, person.id) in existing:
                continue
            if parent_id == person.id:
                _record(dataset, "self-reference", f"{person.id} is recorded as its own parent", [person.id])
                continue
            if parent_id not in people:
                logger.debug("Not synthesizing %s -> %s: unknown parent", parent_id, person.id)
                continue

            rel = Relationship(from_id=parent_id, to_id=person.id, kind=kind, synthesized=True)
            added.append(rel)
            existing.add((parent_id, person.id))
            links.add_child(parent_id, person.id)

    dataset.relationships.extend(added)
    if added:
        logger.info("Synthesized %d parent relationships from person records", len(added))
    return added


def apply_links(dataset: Dataset, links: FamilyLinks):
    """Write the ID lists and counts, only where the backing set is non-empty."""
    known = {p.id for p in dataset.people}

    for person in dataset.people:
        for index, ids_attr, count_attr in (
            (links.children, "children_ids", "child_count"),
            (links.spouses, "spouse_ids", "spouse_count"),
            (links.siblings, "sibling_ids", "sibling_count"),
        ):
            ids = [i for i in index.get(person.id, {}) if i in known and i != person.id]
            setattr(person, ids_attr, ids or None)
            setattr(person, count_attr, len(ids) or None)


def find_cyclic_ancestry(children: dict[str, dict[str, None]]) -> list[set[str]]:
    """Return the groups of people whose parent-child edges form a cycle."""
    G = nx.DiGraph()
    for parent, kids in children.items():
        for child in kids:
            G.add_edge(parent, child)

    cycles = []
    for component in nx.strongly_connected_components(G):
        if len(component) > 1:
            cycles.append(component)
            continue
        node = next(iter(component))
        if G.has_edge(node, node):
            cycles.append(component)
    return cycles


def assign_generations(dataset: Dataset, links: FamilyLinks, iteration_cap: int | None = None):
    """
    Seed every root (no fatherId, no motherId) at generation 0 and propagate with a
    worklist. A child takes the largest parent generation + 1 seen; spouses are pulled
    up to their partner's generation and re-queued so the change reaches their
    children. Parent-child edges inside a cycle are not followed.

    A parentless person married into a later generation takes the partner's
    generation, so such a root can end above 0.

    Without cycles no generation reaches the number of people, so a raise to that
    value marks a cycle through spouse links: it is refused and reported as a
    generation-overflow anomaly. `iteration_cap`, when given, stops the worklist early.
    """
    people = dataset.people_map()
    for person in dataset.people:
        person.generation = None

    cyclic_edges: set[tuple[str, str]] = set()
    for group in find_cyclic_ancestry(links.children):
        members = sorted(group)
        _record(dataset, "cyclic-ancestry", f"Parent-child cycle among {members}", members)
        for parent in group:
            for child in links.children.get(parent, {}):
                if child in group:
                    cyclic_edges.add((parent, child))

    ceiling = len(people)
    generation: dict[str, int] = {}
    overflowed: dict[str, None] = {}
    queue: deque[str] = deque()
    for person in dataset.people:
        if person.father_id is None and person.mother_id is None:
            generation[person.id] = 0
            queue.append(person.id)

    def raise_to(person_id: str, gen: int):
        if generation.get(person_id, -1) >= gen:
            return
        if gen >= ceiling:
            overflowed[person_id] = None
            return
        generation[person_id] = gen
        queue.append(person_id)

    iterations = 0
    while queue:
        if iteration_cap is not None and iterations >= iteration_cap:
            _record(
                dataset,
                "iteration-cap",
                f"Generation propagation stopped after {iterations} iterations",
                list(dict.fromkeys(queue)),
            )
            break
        iterations += 1

        current = queue.popleft()
        gen = generation[current]

        for child in links.children.get(current, {}):
            if child in people and (current, child) not in cyclic_edges:
                raise_to(child, gen + 1)

        for spouse in links.spouses.get(current, {}):
            if spouse in people:
                raise_to(spouse, gen)

    if overflowed:
        _record(
            dataset,
            "generation-overflow",
            f"Generation numbers reached {ceiling}, the number of people; "
            "ancestry is cyclic through spouse links",
            list(overflowed),
        )

    for person_id, gen in generation.items():
        people[person_id].generation = gen

    logger.debug("Generation propagation finished after %d iterations", iterations)


def stamp_metadata(dataset: Dataset):
    generations = [p.generation for p in dataset.people if p.generation is not None]
    dataset.metadata.update(
        {
            "enriched": True,
            "lastUpdated": datetime.now(timezone.utc).isoformat(),
            "personCount": len(dataset.people),
            "relationshipCount": len(dataset.relationships),
            "rootCount": sum(1 for p in dataset.people if p.father_id is None and p.mother_id is None),
            "maxGeneration": max(generations) if generations else None,
            "anomalyCount": len(dataset.anomalies),
        }
    )
