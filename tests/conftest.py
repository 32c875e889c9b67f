"""
Shared pytest fixtures for the genealogy engine tests.

Fixture Organization
--------------------
- **three_generations**: A -> B -> C chain, linked once by relationship and once by fatherId
- **family**: eight people over three generations with spouses, a married-in
  partner, a recorded sibling pair and every relationship type spelling
- **enriched_family**: `family` passed through enrich() with a fixed current year
- **write_json**: helper writing a dataset to a temporary file
"""

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from enrichment import enrich
from models import Dataset

CURRENT_YEAR = 2020


@pytest.fixture
def three_generations() -> dict[str, Any]:
    return {
        "people": [
            {"id": "A", "name": "Adam", "gender": "male", "birthDate": "1900-03-01", "deathDate": "1970-05-05"},
            {"id": "B", "name": "Ben", "gender": "male", "birthDate": "1925"},
            {"id": "C", "name": "Cara", "gender": "female", "birthYear": 1950, "fatherId": "B"},
        ],
        "relationships": [
            {"from": "A", "to": "B", "type": "father-child"},
        ],
    }


@pytest.fixture
def family() -> dict[str, Any]:
    """
    G + H (married) have P and Q. P marries W, who has no recorded parents.
    P + W have K1 and K2 (recorded siblings). Q has N.
    """
    return {
        "people": [
            {"id": "G", "name": "George Hale", "gender": "male", "birthDate": "1890", "deathDate": "1960",
             "occupation": "farmer"},
            {"id": "H", "name": "Helen Hale", "gender": "female", "birthDate": "1895", "deathDate": "1980"},
            {"id": "P", "name": "Peter Hale", "gender": "male", "birthDate": "1920"},
            {"id": "Q", "name": "Quinn Hale", "gender": "female", "birthDate": "1923", "fatherId": "G",
             "motherId": "H"},
            {"id": "W", "name": "Wendy Stone", "gender": "female", "birthDate": "1922"},
            {"id": "K1", "name": "Kai Hale", "gender": "male", "birthDate": "1950"},
            {"id": "K2", "name": "Kim Hale", "gender": "female", "birthDate": "1952", "fatherId": "P",
             "motherId": "W"},
            {"id": "N", "name": "Nils Berg", "gender": "male", "birthDate": "1955", "motherId": "Q",
             "village": "Dalen"},
        ],
        "relationships": [
            {"from": "G", "to": "H", "type": "marriage"},
            {"from": "G", "to": "P", "type": "father-child"},
            {"from": "H", "to": "P", "type": "mother-child"},
            {"from": "P", "to": "W", "type": "husband-wife"},
            {"from": "P", "to": "K1", "type": "parent-child"},
            {"from": "W", "to": "K1", "type": "parent"},
            {"from": "K1", "to": "K2", "type": "sibling"},
        ],
    }


@pytest.fixture
def enriched_family(family: dict[str, Any]) -> Dataset:
    return enrich(family, current_year=CURRENT_YEAR)


@pytest.fixture
def write_json(tmp_path: Path) -> Callable[[Any, str], Path]:
    """Write `data` as JSON under tmp_path and return the file path."""

    def _write(data: Any, name: str = "dataset.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write
