"""Bounded subgraph extraction around a set of seed people."""

from collections import deque
import logging

from models import Dataset, Subgraph, SubgraphConfig
from settings import settings

logger = logging.getLogger("genealogy.subgraph")


def default_config() -> SubgraphConfig:
    return SubgraphConfig(
        max_generations_up=settings.SUBGRAPH_MAX_UP,
        max_generations_down=settings.SUBGRAPH_MAX_DOWN,
    )


def parents_index(dataset: Dataset) -> dict[str, list[str]]:
    """child id -> parent ids, from fatherId/motherId and every person's childrenIds."""
    index: dict[str, dict[str, None]] = {}
    for person in dataset.people:
        for parent_id in person.parent_ids:
            index.setdefault(person.id, {})[parent_id] = None
    for person in dataset.people:
        for child_id in person.children_ids or []:
            index.setdefault(child_id, {})[person.id] = None
    return {child: list(parents) for child, parents in index.items()}


def extract_subgraph(
    dataset: Dataset,
    seed_ids: list[str],
    config: SubgraphConfig | None = None,
) -> Subgraph:
    """
    Collect the people reachable from `seed_ids` under the traversal rules in `config`.

    Each person carries how many generations up and down from its discovering
    seed it was found at. Parents are followed while `up < max_generations_up`,
    children while `down < max_generations_down`; siblings and spouses are
    followed at the same depth without limit. A person is visited once, at the
    depth it was first discovered with.

    Returns:
        Subgraph with the discovered people and every relationship whose both
        endpoints were discovered, both in dataset order.
    """
    if config is None:
        config = default_config()

    people = dataset.people_map()
    parents_of = parents_index(dataset)

    depths: dict[str, tuple[int, int]] = {}
    queue: deque[str] = deque()

    def enqueue(person_id: str, up: int, down: int):
        if person_id in depths or person_id not in people:
            return
        depths[person_id] = (up, down)
        queue.append(person_id)

    for seed in seed_ids:
        if seed not in people:
            logger.warning("Subgraph seed %s not found; skipping", seed)
            continue
        enqueue(seed, 0, 0)

    while queue:
        current = queue.popleft()
        person = people[current]
        up, down = depths[current]

        if config.include_parents and up < config.max_generations_up:
            for parent_id in parents_of.get(current, []):
                enqueue(parent_id, up + 1, down)

        if config.include_children and down < config.max_generations_down:
            for child_id in person.children_ids or []:
                enqueue(child_id, up, down + 1)

        if config.include_siblings:
            for sibling_id in person.sibling_ids or []:
                enqueue(sibling_id, up, down)

        if config.include_spouses:
            for spouse_id in person.spouse_ids or []:
                enqueue(spouse_id, up, down)

    return Subgraph(
        people=[p for p in dataset.people if p.id in depths],
        relationships=[
            r for r in dataset.relationships if r.from_id in depths and r.to_id in depths
        ],
        depths=depths,
    )
