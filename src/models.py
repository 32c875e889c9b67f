"""Data classes for genealogy entities and engine results."""

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, value: Any) -> "Gender":
        """Map free-form gender strings ("M", "Female", None, ...) onto the enum."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.UNKNOWN
        v = value.strip().lower()
        if v in ("m", "male", "man"):
            return cls.MALE
        if v in ("f", "female", "woman"):
            return cls.FEMALE
        return cls.UNKNOWN


class RelationshipKind(str, Enum):
    PARENT_CHILD = "parent-child"
    FATHER_CHILD = "father-child"
    MOTHER_CHILD = "mother-child"
    SPOUSE = "spouse"
    SIBLING = "sibling"

    @classmethod
    def parse(cls, value: Any) -> "RelationshipKind | None":
        """Return the canonical kind for a relationship type string, or None if unknown."""
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None
        return RELATIONSHIP_SYNONYMS.get(value.strip().lower())

    @property
    def is_parental(self) -> bool:
        return self in PARENT_KINDS


RELATIONSHIP_SYNONYMS = {
    "parent-child": RelationshipKind.PARENT_CHILD,
    "parent": RelationshipKind.PARENT_CHILD,
    "parental": RelationshipKind.PARENT_CHILD,
    "father-child": RelationshipKind.FATHER_CHILD,
    "mother-child": RelationshipKind.MOTHER_CHILD,
    "marriage": RelationshipKind.SPOUSE,
    "spouse": RelationshipKind.SPOUSE,
    "husband-wife": RelationshipKind.SPOUSE,
    "spousal": RelationshipKind.SPOUSE,
    "married": RelationshipKind.SPOUSE,
    "sibling": RelationshipKind.SIBLING,
}

PARENT_KINDS = frozenset(
    {RelationshipKind.PARENT_CHILD, RelationshipKind.FATHER_CHILD, RelationshipKind.MOTHER_CHILD}
)


# camelCase key -> attribute name, in export order
PERSON_FIELDS = {
    "id": "id",
    "name": "name",
    "gender": "gender",
    "birthDate": "birth_date",
    "deathDate": "death_date",
    "birthYear": "birth_year",
    "deathYear": "death_year",
    "age": "age",
    "isAlive": "is_alive",
    "fatherId": "father_id",
    "motherId": "mother_id",
    "childrenIds": "children_ids",
    "childCount": "child_count",
    "spouseIds": "spouse_ids",
    "spouseCount": "spouse_count",
    "siblingIds": "sibling_ids",
    "siblingCount": "sibling_count",
    "generation": "generation",
    "era": "era",
    "isKeyFigure": "is_key_figure",
    "tribe": "tribe",
    "birthplace": "birthplace",
    "occupation": "occupation",
    "notes": "notes",
}

# Alternate spellings accepted on input
PERSON_ALIASES = {
    "fullName": "name",
    "sex": "gender",
    "birthPlace": "birthplace",
    "birth_year": "birthYear",
    "death_year": "deathYear",
}


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


def _as_id(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _as_id_list(value: Any) -> list[str] | None:
    if not isinstance(value, list):
        return None
    return [str(v) for v in value]


@dataclass
class Person:
    id: str
    name: str | None = None
    gender: Gender = Gender.UNKNOWN
    birth_date: str | None = None
    death_date: str | None = None
    birth_year: int | None = None
    death_year: int | None = None
    age: int | None = None
    is_alive: bool | None = None
    father_id: str | None = None
    mother_id: str | None = None
    children_ids: list[str] | None = None
    child_count: int | None = None
    spouse_ids: list[str] | None = None
    spouse_count: int | None = None
    sibling_ids: list[str] | None = None
    sibling_count: int | None = None
    generation: int | None = None
    era: str | None = None
    is_key_figure: bool | None = None
    tribe: str | None = None
    birthplace: str | None = None
    occupation: str | None = None
    notes: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @property
    def display_name(self) -> str:
        return self.name or self.id

    @property
    def parent_ids(self) -> list[str]:
        return [pid for pid in (self.father_id, self.mother_id) if pid is not None]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Person":
        """Build a Person from a JSON record. Raises ValueError if `id` is missing."""
        record = dict(data)
        for alias, key in PERSON_ALIASES.items():
            if alias in record and key not in record:
                record[key] = record[alias]
            record.pop(alias, None)

        person_id = _as_id(record.get("id"))
        if person_id is None:
            raise ValueError("Person record is missing an id")

        name = record.get("name")
        is_alive = record.get("isAlive")
        is_key_figure = record.get("isKeyFigure")
        return cls(
            id=person_id,
            name=str(name) if name is not None else None,
            gender=Gender.parse(record.get("gender")),
            birth_date=_as_id(record.get("birthDate")),
            death_date=_as_id(record.get("deathDate")),
            birth_year=_as_int(record.get("birthYear")),
            death_year=_as_int(record.get("deathYear")),
            age=_as_int(record.get("age")),
            is_alive=is_alive if isinstance(is_alive, bool) else None,
            father_id=_as_id(record.get("fatherId")),
            mother_id=_as_id(record.get("motherId")),
            children_ids=_as_id_list(record.get("childrenIds")),
            child_count=_as_int(record.get("childCount")),
            spouse_ids=_as_id_list(record.get("spouseIds")),
            spouse_count=_as_int(record.get("spouseCount")),
            sibling_ids=_as_id_list(record.get("siblingIds")),
            sibling_count=_as_int(record.get("siblingCount")),
            generation=_as_int(record.get("generation")),
            era=_as_id(record.get("era")),
            is_key_figure=is_key_figure if isinstance(is_key_figure, bool) else None,
            tribe=record.get("tribe"),
            birthplace=record.get("birthplace"),
            occupation=record.get("occupation"),
            notes=record.get("notes"),
            extra={k: copy.deepcopy(v) for k, v in record.items() if k not in PERSON_FIELDS},
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase exporter contract, omitting absent fields."""
        out: dict[str, Any] = {}
        for key, attr in PERSON_FIELDS.items():
            value = getattr(self, attr)
            if value is None:
                continue
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, list):
                value = list(value)
            out[key] = value
        for key, value in self.extra.items():
            out.setdefault(key, copy.deepcopy(value))
        return out


@dataclass
class Relationship:
    from_id: str
    to_id: str
    kind: RelationshipKind
    synthesized: bool = False
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Relationship | None":
        """Build a Relationship from a JSON record; None if endpoints or type are unusable."""
        from_id = _as_id(data.get("from", data.get("source")))
        to_id = _as_id(data.get("to", data.get("target")))
        kind = RelationshipKind.parse(data.get("type"))
        if from_id is None or to_id is None or kind is None:
            return None
        extra = {
            k: copy.deepcopy(v)
            for k, v in data.items()
            if k not in ("from", "to", "source", "target", "type", "synthesized")
        }
        return cls(
            from_id=from_id,
            to_id=to_id,
            kind=kind,
            synthesized=bool(data.get("synthesized", False)),
            extra=extra,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"from": self.from_id, "to": self.to_id, "type": self.kind.value}
        if self.synthesized:
            out["synthesized"] = True
        for key, value in self.extra.items():
            out.setdefault(key, copy.deepcopy(value))
        return out

    def touches(self, person_id: str) -> bool:
        return person_id in (self.from_id, self.to_id)


@dataclass
class Anomaly:
    """A data problem noticed (and tolerated) while enriching."""

    kind: str  # self-reference, cyclic-ancestry, conflicting-parent, generation-overflow, iteration-cap
    message: str
    person_ids: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message, "personIds": list(self.person_ids)}


@dataclass
class Dataset:
    people: list[Person] = field(default_factory=list)
    relationships: list[Relationship] = field(default_factory=list)
    metadata: dict[str, Any] = field(default_factory=dict)
    anomalies: list[Anomaly] = field(default_factory=list)

    def people_map(self) -> dict[str, Person]:
        return {p.id: p for p in self.people}

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "people": [p.to_dict() for p in self.people],
            "relationships": [r.to_dict() for r in self.relationships],
        }
        if self.metadata:
            out["metadata"] = copy.deepcopy(self.metadata)
        if self.anomalies:
            out["anomalies"] = [a.to_dict() for a in self.anomalies]
        return out


@dataclass(frozen=True)
class AdjacencyEntry:
    id: str  # the neighbour
    type: str  # relationship kind value
    direction: str  # what the neighbour is to the list owner: parent, child, spouse, sibling


@dataclass(frozen=True)
class PathNode:
    id: str
    name: str


@dataclass(frozen=True)
class PathStep:
    from_id: str
    to_id: str
    type: str
    direction: str

    def to_dict(self) -> dict[str, str]:
        return {"from": self.from_id, "to": self.to_id, "type": self.type, "direction": self.direction}


@dataclass
class PathResult:
    found: bool
    distance: int | None = None
    path: list[PathNode] = field(default_factory=list)
    steps: list[PathStep] = field(default_factory=list)
    relationship: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        if not self.found:
            out: dict[str, Any] = {"found": False}
            if self.error:
                out["error"] = self.error
            return out
        return {
            "found": True,
            "distance": self.distance,
            "path": [{"id": n.id, "name": n.name} for n in self.path],
            "steps": [s.to_dict() for s in self.steps],
            "relationship": self.relationship,
        }


@dataclass
class SubgraphConfig:
    include_parents: bool = True
    include_children: bool = True
    include_siblings: bool = True
    include_spouses: bool = True
    max_generations_up: int = 2
    max_generations_down: int = 2


@dataclass
class Subgraph:
    people: list[Person] = field(default_factory=list)
    relationships: list[Relationship] = field(default_factory=list)
    depths: dict[str, tuple[int, int]] = field(default_factory=dict)  # id -> (up, down)

    def to_dict(self) -> dict[str, Any]:
        return {
            "people": [p.to_dict() for p in self.people],
            "relationships": [r.to_dict() for r in self.relationships],
        }


@dataclass
class ValidationResult:
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"valid": self.valid, "errors": list(self.errors), "warnings": list(self.warnings)}


@dataclass
class LineageResult:
    found: bool
    person_id: str
    generations: list[list[str]] = field(default_factory=list)  # nearest generation first
    error: str | None = None

    @property
    def ids(self) -> list[str]:
        return [pid for gen in self.generations for pid in gen]
