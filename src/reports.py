"""Read-only reports over an enriched dataset: statistics, lineages, groupings and search."""

from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from graph import build_adjacency
from models import Dataset, Gender, LineageResult, Person
from settings import settings
from subgraph import parents_index

DEFAULT_SEARCH_FIELDS = ("name", "tribe", "birthplace", "occupation", "notes")


@dataclass
class DatasetStatistics:
    total_persons: int = 0
    total_relationships: int = 0
    male_count: int = 0
    female_count: int = 0
    unknown_gender_count: int = 0
    living_count: int = 0
    root_count: int = 0
    generations: list[int] = field(default_factory=list)
    people_per_generation: dict[int, int] = field(default_factory=dict)
    ungenerated_count: int = 0
    min_birth_year: int | None = None
    max_death_year: int | None = None
    relationship_types: dict[str, int] = field(default_factory=dict)
    average_lifespan: float | None = None
    longest_life: tuple[str, int] | None = None  # (person id, age)
    most_connected: tuple[str, int] | None = None  # (person id, adjacency degree)
    eras: dict[str, int] = field(default_factory=dict)
    key_figure_count: int = 0

    @property
    def generation_count(self) -> int:
        return len(self.generations)

    @property
    def year_range(self) -> str:
        if self.min_birth_year is None or self.max_death_year is None:
            return "Unknown"
        return f"{self.min_birth_year} to {self.max_death_year}"


def compute_statistics(dataset: Dataset) -> DatasetStatistics:
    """Aggregate counts, generation and era spread, lifespans and connectivity."""
    stats = DatasetStatistics(
        total_persons=len(dataset.people),
        total_relationships=len(dataset.relationships),
    )

    per_generation: Counter[int] = Counter()
    lifespans: list[int] = []
    per_era: Counter[str] = Counter()

    for p in dataset.people:
        if p.gender is Gender.MALE:
            stats.male_count += 1
        elif p.gender is Gender.FEMALE:
            stats.female_count += 1
        else:
            stats.unknown_gender_count += 1

        if p.is_alive:
            stats.living_count += 1
        if p.father_id is None and p.mother_id is None:
            stats.root_count += 1

        if p.era:
            per_era[p.era] += 1
        if p.is_key_figure:
            stats.key_figure_count += 1

        if p.generation is None:
            stats.ungenerated_count += 1
        else:
            per_generation[p.generation] += 1

        if p.birth_year is not None:
            if stats.min_birth_year is None or p.birth_year < stats.min_birth_year:
                stats.min_birth_year = p.birth_year
        if p.death_year is not None:
            if stats.max_death_year is None or p.death_year > stats.max_death_year:
                stats.max_death_year = p.death_year

        # Lifespans only count the dead; a living person's age is not a lifespan
        if p.age is not None and p.death_year is not None:
            lifespans.append(p.age)
            if stats.longest_life is None or p.age > stats.longest_life[1]:
                stats.longest_life = (p.id, p.age)

    stats.generations = sorted(per_generation)
    stats.people_per_generation = {g: per_generation[g] for g in stats.generations}
    stats.eras = _order_eras(per_era)
    stats.relationship_types = dict(Counter(r.kind.value for r in dataset.relationships))
    if lifespans:
        stats.average_lifespan = sum(lifespans) / len(lifespans)

    for person_id, entries in build_adjacency(dataset).items():
        degree = len({e.id for e in entries})
        if degree and (stats.most_connected is None or degree > stats.most_connected[1]):
            stats.most_connected = (person_id, degree)

    return stats


def _walk_lineage(
    start: str,
    next_ids,
    max_generations: int | None,
) -> list[list[str]]:
    generations: list[list[str]] = []
    seen = {start}
    frontier = [start]
    while frontier and (max_generations is None or len(generations) < max_generations):
        layer: list[str] = []
        for person_id in frontier:
            for nxt in next_ids(person_id):
                if nxt not in seen:
                    seen.add(nxt)
                    layer.append(nxt)
        if not layer:
            break
        generations.append(layer)
        frontier = layer
    return generations


def get_ancestors(
    dataset: Dataset, person_id: str, max_generations: int | None = None
) -> LineageResult:
    """Ancestors of `person_id` grouped by generation, parents first."""
    people = dataset.people_map()
    if person_id not in people:
        return LineageResult(found=False, person_id=person_id, error=f"Person not found: {person_id}")

    parents_of = parents_index(dataset)
    generations = _walk_lineage(
        person_id,
        lambda pid: [p for p in parents_of.get(pid, []) if p in people],
        max_generations,
    )
    return LineageResult(found=True, person_id=person_id, generations=generations)


def get_descendants(
    dataset: Dataset, person_id: str, max_generations: int | None = None
) -> LineageResult:
    """Descendants of `person_id` grouped by generation, children first."""
    people = dataset.people_map()
    if person_id not in people:
        return LineageResult(found=False, person_id=person_id, error=f"Person not found: {person_id}")

    generations = _walk_lineage(
        person_id,
        lambda pid: [c for c in people[pid].children_ids or [] if c in people],
        max_generations,
    )
    return LineageResult(found=True, person_id=person_id, generations=generations)


def search_people(
    dataset: Dataset,
    query: str,
    fields: tuple[str, ...] = DEFAULT_SEARCH_FIELDS,
    exact: bool = False,
    case_sensitive: bool = False,
    limit: int | None = None,
) -> list[Person]:
    """Find people whose descriptive fields contain (or equal) the query."""
    if limit is None:
        limit = settings.SEARCH_LIMIT
    if not query or not query.strip():
        return []

    needle = query.strip() if case_sensitive else query.strip().lower()
    results: list[Person] = []

    for p in dataset.people:
        for name in fields:
            value = getattr(p, name, None)
            if value is None:
                value = p.extra.get(name)
            if value is None:
                continue
            text = str(value) if case_sensitive else str(value).lower()
            if (text == needle) if exact else (needle in text):
                results.append(p)
                break
        if len(results) >= limit:
            break

    return results


def people_by_generation(dataset: Dataset) -> dict[int, list[Person]]:
    """Group people by generation number; people without one are left out."""
    grouped: dict[int, list[Person]] = {}
    for p in dataset.people:
        if p.generation is not None:
            grouped.setdefault(p.generation, []).append(p)
    return dict(sorted(grouped.items()))


def _order_eras(counts: dict[str, Any]) -> dict[str, Any]:
    """Configured eras first, in their configured order, then the rest as first seen."""
    order = {era.id: i for i, era in enumerate(settings.ERAS)}
    return dict(sorted(counts.items(), key=lambda item: order.get(item[0], len(order))))


def people_by_era(dataset: Dataset) -> dict[str, list[Person]]:
    """Group people by era id; people without one are left out."""
    grouped: dict[str, list[Person]] = {}
    for p in dataset.people:
        if p.era:
            grouped.setdefault(p.era, []).append(p)
    return _order_eras(grouped)


def people_in_era(dataset: Dataset, era: str) -> list[Person]:
    return [p for p in dataset.people if p.era == era]
