"""Validation of raw genealogy datasets."""

from typing import Any

import networkx as nx

from models import Dataset, RelationshipKind, ValidationResult
from parsing import extract_year


def validate_dataset(data: dict[str, Any] | Dataset) -> ValidationResult:
    """
    Validate a raw dataset (decoded JSON) or a Dataset.

    Errors (dataset unusable as-is):
    - missing or non-list `people`
    - person without id or name, duplicate ids
    - relationship without from/to/type, unknown type, reference to an unknown person

    Warnings (tolerated by enrichment):
    - missing `relationships`, self-references
    - cycles in parent-child relationships
    - impossible ages (child born before parent, parent under 12, death before birth)

    Never raises; the result carries the findings.
    """
    if isinstance(data, Dataset):
        data = data.to_dict()

    if not isinstance(data, dict):
        return ValidationResult(valid=False, errors=["Data must be a JSON object"])

    errors: list[str] = []
    warnings: list[str] = []

    people = data.get("people")
    if not isinstance(people, list):
        return ValidationResult(valid=False, errors=["Missing people array"])

    relationships = data.get("relationships")
    if relationships is None:
        warnings.append("Missing relationships array")
        relationships = []
    elif not isinstance(relationships, list):
        errors.append("Relationships must be an array")
        relationships = []

    by_id: dict[str, dict[str, Any]] = {}
    for index, person in enumerate(people):
        if not isinstance(person, dict):
            errors.append(f"Person at index {index} is not an object")
            continue
        pid = person.get("id")
        if pid is None or pid == "":
            errors.append(f"Person at index {index} is missing an id")
            continue
        pid = str(pid)
        if not person.get("name") and not person.get("fullName"):
            errors.append(f"Person at index {index} (id: {pid}) is missing a name")
        if pid in by_id:
            errors.append(f"Duplicate person id: {pid}")
            continue
        by_id[pid] = person

    # Parent edges come from relationships and from fatherId/motherId on records
    parent_edges: list[tuple[str, str]] = []

    for index, rel in enumerate(relationships):
        if not isinstance(rel, dict):
            errors.append(f"Relationship at index {index} is not an object")
            continue
        src = rel.get("from", rel.get("source"))
        dst = rel.get("to", rel.get("target"))
        rtype = rel.get("type")
        if src is None or src == "":
            errors.append(f"Relationship at index {index} is missing from")
        if dst is None or dst == "":
            errors.append(f"Relationship at index {index} is missing to")
        if not rtype:
            errors.append(f"Relationship at index {index} is missing type")
        if src is None or dst is None or not rtype:
            continue

        src, dst = str(src), str(dst)
        kind = RelationshipKind.parse(rtype)
        if kind is None:
            errors.append(f"Relationship at index {index} has unknown type: {rtype}")
        for end in (src, dst):
            if end not in by_id:
                errors.append(f"Relationship at index {index} references unknown person: {end}")
        if src == dst:
            warnings.append(f"Relationship at index {index} is a self-reference ({src} -> {dst})")
        elif kind is not None and kind.is_parental:
            parent_edges.append((src, dst))

    for pid, person in by_id.items():
        for key in ("fatherId", "motherId"):
            parent = person.get(key)
            if parent is None or parent == "":
                continue
            parent = str(parent)
            if parent not in by_id:
                errors.append(f"Person {pid} has {key} referencing unknown person: {parent}")
            elif parent == pid:
                warnings.append(f"Person {pid} is recorded as its own parent")
            else:
                parent_edges.append((parent, pid))

    warnings.extend(_check_parent_cycles(parent_edges))
    warnings.extend(_check_dates(by_id, parent_edges))

    return ValidationResult(valid=not errors, errors=errors, warnings=warnings)


def _check_parent_cycles(parent_edges: list[tuple[str, str]]) -> list[str]:
    parent_graph = nx.DiGraph(parent_edges)
    try:
        cycle = nx.find_cycle(parent_graph, orientation="original")
    except nx.NetworkXNoCycle:
        return []
    cycle_nodes = [edge[0] for edge in cycle]
    return [f"Cycle detected in parent-child relationships: {cycle_nodes}"]


def _year(person: dict[str, Any], year_key: str, date_key: str) -> int | None:
    value = person.get(year_key)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return extract_year(person.get(date_key))


def _label(person: dict[str, Any]) -> str:
    return str(person.get("name") or person.get("fullName") or person.get("id"))


def _check_dates(by_id: dict[str, dict[str, Any]], parent_edges: list[tuple[str, str]]) -> list[str]:
    warnings: list[str] = []

    for parent_id, child_id in dict.fromkeys(parent_edges):
        parent = by_id.get(parent_id)
        child = by_id.get(child_id)
        if parent is None or child is None:
            continue
        parent_birth = _year(parent, "birthYear", "birthDate")
        child_birth = _year(child, "birthYear", "birthDate")
        if parent_birth is None or child_birth is None:
            continue
        if child_birth < parent_birth:
            warnings.append(f"Impossible: {_label(child)} born before parent {_label(parent)}")
        elif child_birth - parent_birth < 12:
            warnings.append(
                f"Suspicious: {_label(parent)} was less than 12 years old when "
                f"{_label(child)} was born"
            )

    for person in by_id.values():
        birth = _year(person, "birthYear", "birthDate")
        death = _year(person, "deathYear", "deathDate")
        if birth is not None and death is not None and death < birth:
            warnings.append(f"Impossible: {_label(person)} died before being born")

    return warnings
