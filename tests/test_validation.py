"""Tests for dataset validation."""

from models import Dataset
from validation import validate_dataset


class TestStructure:
    def test_valid_family(self, family):
        result = validate_dataset(family)

        assert result.valid is True
        assert result.errors == []
        assert result.warnings == []

    def test_accepts_dataset(self, enriched_family):
        assert validate_dataset(enriched_family).valid is True

    def test_missing_people(self):
        result = validate_dataset({"relationships": []})

        assert result.valid is False
        assert result.errors == ["Missing people array"]

    def test_not_an_object(self):
        assert validate_dataset([]).errors == ["Data must be a JSON object"]

    def test_missing_relationships_is_warning(self):
        result = validate_dataset({"people": [{"id": "1", "name": "One"}]})

        assert result.valid is True
        assert result.warnings == ["Missing relationships array"]

    def test_person_errors(self):
        result = validate_dataset(
            {
                "people": [{"name": "No id"}, {"id": "1"}, {"id": "2", "name": "Two"}, {"id": "2", "name": "Again"}],
                "relationships": [],
            }
        )

        assert result.valid is False
        assert "Person at index 0 is missing an id" in result.errors
        assert "Person at index 1 (id: 1) is missing a name" in result.errors
        assert "Duplicate person id: 2" in result.errors

    def test_relationship_errors(self):
        result = validate_dataset(
            {
                "people": [{"id": "1", "name": "One"}, {"id": "2", "name": "Two"}],
                "relationships": [
                    {"from": "1", "type": "spouse"},
                    {"from": "1", "to": "2", "type": "cousin"},
                    {"from": "1", "to": "9", "type": "spouse"},
                ],
            }
        )

        assert "Relationship at index 0 is missing to" in result.errors
        assert "Relationship at index 1 has unknown type: cousin" in result.errors
        assert "Relationship at index 2 references unknown person: 9" in result.errors

    def test_dangling_parent_id(self):
        result = validate_dataset(
            {"people": [{"id": "1", "name": "One", "fatherId": "9"}], "relationships": []}
        )

        assert result.errors == ["Person 1 has fatherId referencing unknown person: 9"]


class TestWarnings:
    def test_self_reference(self):
        result = validate_dataset(
            {
                "people": [{"id": "1", "name": "One"}],
                "relationships": [{"from": "1", "to": "1", "type": "sibling"}],
            }
        )

        assert result.valid is True
        assert result.warnings == ["Relationship at index 0 is a self-reference (1 -> 1)"]

    def test_parent_cycle(self):
        result = validate_dataset(
            {
                "people": [{"id": "1", "name": "One", "fatherId": "2"}, {"id": "2", "name": "Two"}],
                "relationships": [{"from": "1", "to": "2", "type": "parent-child"}],
            }
        )

        assert result.valid is True
        assert any(w.startswith("Cycle detected") for w in result.warnings)

    def test_impossible_dates(self):
        result = validate_dataset(
            {
                "people": [
                    {"id": "p", "name": "Parent", "birthDate": "1950"},
                    {"id": "c", "name": "Child", "birthDate": "1940", "deathDate": "1930"},
                    {"id": "y", "name": "Young", "birthYear": 1955},
                ],
                "relationships": [
                    {"from": "p", "to": "c", "type": "parent-child"},
                    {"from": "p", "to": "y", "type": "parent-child"},
                ],
            }
        )

        assert "Impossible: Child born before parent Parent" in result.warnings
        assert "Impossible: Child died before being born" in result.warnings
        assert "Suspicious: Parent was less than 12 years old when Young was born" in result.warnings

    def test_validation_result_to_dict(self):
        assert validate_dataset(Dataset()).to_dict() == {
            "valid": True,
            "errors": [],
            "warnings": [],
        }
