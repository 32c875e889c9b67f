"""Shortest relationship paths between two people and their natural-language labels."""

from collections import deque
import logging

from graph import CHILD, PARENT, SIBLING, SPOUSE, Adjacency, build_adjacency
from models import Dataset, PathNode, PathResult, PathStep, Person, RelationshipKind
from settings import settings

logger = logging.getLogger("genealogy.pathfinding")

SAME_PERSON = "Same person"

# Two-step patterns, keyed by the (first, second) step directions
TWO_STEP_LABELS = {
    (PARENT, PARENT): "Grandparent",
    (CHILD, CHILD): "Grandchild",
    (PARENT, SIBLING): "Aunt/Uncle",
    (SIBLING, PARENT): "Aunt/Uncle",
    (SIBLING, CHILD): "Niece/Nephew",
    (CHILD, SIBLING): "Niece/Nephew",
    (SPOUSE, PARENT): "Parent-in-law",
    (PARENT, SPOUSE): "Parent-in-law",
    (SPOUSE, CHILD): "Child-in-law",
    (CHILD, SPOUSE): "Child-in-law",
}


def find_path(
    graph: Adjacency,
    people_map: dict[str, Person],
    id_a: str,
    id_b: str,
    max_depth: int | None = None,
) -> PathResult:
    """
    Breadth-first search for the shortest relationship path from `id_a` to `id_b`.

    Nodes are marked when first discovered, so the first path found is a shortest
    one; among equally short paths the adjacency order decides. Nodes at depth
    `max_depth` are not expanded.

    Returns:
        PathResult with found=False (and an error message when an id is unknown),
        or the path nodes, typed steps and a relationship label.
    """
    if max_depth is None:
        max_depth = settings.DEFAULT_MAX_DEPTH

    missing = [pid for pid in (id_a, id_b) if pid not in people_map]
    if missing:
        return PathResult(found=False, error=f"Person not found: {', '.join(missing)}")

    if id_a == id_b:
        person = people_map[id_a]
        return PathResult(
            found=True,
            distance=0,
            path=[PathNode(id=person.id, name=person.display_name)],
            relationship=SAME_PERSON,
        )

    # node -> (predecessor, step taken to reach node)
    came_from: dict[str, tuple[str, PathStep] | None] = {id_a: None}
    queue: deque[tuple[str, int]] = deque([(id_a, 0)])

    while queue:
        current, depth = queue.popleft()
        if depth >= max_depth:
            continue

        for entry in graph.get(current, []):
            if entry.id in came_from:
                continue
            step = PathStep(from_id=current, to_id=entry.id, type=entry.type, direction=entry.direction)
            came_from[entry.id] = (current, step)
            if entry.id == id_b:
                return _build_result(came_from, people_map, id_b)
            queue.append((entry.id, depth + 1))

    logger.debug("No path from %s to %s within %d steps", id_a, id_b, max_depth)
    return PathResult(found=False)


def _build_result(
    came_from: dict[str, tuple[str, PathStep] | None],
    people_map: dict[str, Person],
    target: str,
) -> PathResult:
    steps: list[PathStep] = []
    node_ids = [target]
    link = came_from[target]
    while link is not None:
        previous, step = link
        steps.append(step)
        node_ids.append(previous)
        link = came_from[previous]

    steps.reverse()
    node_ids.reverse()
    return PathResult(
        found=True,
        distance=len(steps),
        path=[PathNode(id=pid, name=people_map[pid].display_name) for pid in node_ids],
        steps=steps,
        relationship=describe_relationship(steps),
    )


def describe_relationship(steps: list[PathStep]) -> str:
    """
    Label what the last person of a path is to the first, from the step directions.

    Only 0-, 1- and a fixed set of 2-step shapes get a specific name; everything
    else is "Extended family (N steps away)".
    """
    if not steps:
        return SAME_PERSON

    if len(steps) == 1:
        step = steps[0]
        if step.direction == PARENT:
            if step.type == RelationshipKind.FATHER_CHILD.value:
                return "Father"
            if step.type == RelationshipKind.MOTHER_CHILD.value:
                return "Mother"
        elif step.direction == CHILD:
            if step.type in (RelationshipKind.FATHER_CHILD.value, RelationshipKind.MOTHER_CHILD.value):
                return "Child"
        elif step.direction == SPOUSE:
            return "Spouse"
        elif step.direction == SIBLING:
            return "Sibling"
        return "Direct relationship"

    if len(steps) == 2:
        label = TWO_STEP_LABELS.get((steps[0].direction, steps[1].direction))
        if label:
            return label

    return f"Extended family ({len(steps)} steps away)"


def find_relationship(
    dataset: Dataset, id_a: str, id_b: str, max_depth: int | None = None
) -> PathResult:
    """Convenience wrapper: build the adjacency and people map, then find_path."""
    return find_path(build_adjacency(dataset), dataset.people_map(), id_a, id_b, max_depth)
