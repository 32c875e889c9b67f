"""Tests for statistics, lineage lookups and people search."""

import pytest

from enrichment import enrich
from reports import (
    compute_statistics,
    get_ancestors,
    get_descendants,
    people_by_era,
    people_by_generation,
    people_in_era,
    search_people,
)


class TestComputeStatistics:
    def test_counts(self, enriched_family):
        stats = compute_statistics(enriched_family)

        assert stats.total_persons == 8
        assert stats.total_relationships == 12
        assert (stats.male_count, stats.female_count, stats.unknown_gender_count) == (4, 4, 0)
        assert stats.living_count == 6
        assert stats.root_count == 3

    def test_generations(self, enriched_family):
        stats = compute_statistics(enriched_family)

        assert stats.generations == [0, 1, 2]
        assert stats.generation_count == 3
        assert stats.people_per_generation == {0: 2, 1: 3, 2: 3}
        assert stats.ungenerated_count == 0

    def test_years_and_lifespans(self, enriched_family):
        stats = compute_statistics(enriched_family)

        assert stats.year_range == "1890 to 1980"
        assert stats.longest_life == ("H", 85)
        assert stats.average_lifespan == 77.5

    def test_relationship_types(self, enriched_family):
        assert compute_statistics(enriched_family).relationship_types == {
            "spouse": 2,
            "father-child": 3,
            "mother-child": 4,
            "parent-child": 2,
            "sibling": 1,
        }

    def test_most_connected(self, enriched_family):
        assert compute_statistics(enriched_family).most_connected == ("P", 5)

    def test_eras_and_key_figures(self, enriched_family):
        stats = compute_statistics(enriched_family)

        assert stats.eras == {"unknown": 8}
        assert stats.key_figure_count == 0

    def test_empty_dataset(self):
        stats = compute_statistics(enrich({"people": []}))

        assert stats.total_persons == 0
        assert stats.year_range == "Unknown"
        assert stats.average_lifespan is None
        assert stats.most_connected is None


class TestLineage:
    def test_ancestors(self, enriched_family):
        result = get_ancestors(enriched_family, "K1")

        assert result.found is True
        assert result.generations == [["P", "W"], ["G", "H"]]
        assert result.ids == ["P", "W", "G", "H"]

    def test_descendants(self, enriched_family):
        assert get_descendants(enriched_family, "G").generations == [["P", "Q"], ["K1", "K2", "N"]]

    def test_max_generations(self, enriched_family):
        assert get_descendants(enriched_family, "G", max_generations=1).generations == [["P", "Q"]]
        assert get_ancestors(enriched_family, "K1", max_generations=1).ids == ["P", "W"]

    def test_root_has_no_ancestors(self, enriched_family):
        result = get_ancestors(enriched_family, "G")

        assert result.found is True
        assert result.generations == []

    def test_not_found(self, enriched_family):
        result = get_ancestors(enriched_family, "ZZ")

        assert result.found is False
        assert result.error == "Person not found: ZZ"
        assert get_descendants(enriched_family, "ZZ").found is False


class TestSearchPeople:
    def test_substring_case_insensitive(self, enriched_family):
        found = search_people(enriched_family, "HALE")

        assert [p.id for p in found] == ["G", "H", "P", "Q", "K1", "K2"]

    def test_limit(self, enriched_family):
        assert len(search_people(enriched_family, "hale", limit=2)) == 2

    def test_exact(self, enriched_family):
        assert [p.id for p in search_people(enriched_family, "wendy stone", exact=True)] == ["W"]
        assert search_people(enriched_family, "wendy", exact=True) == []

    def test_case_sensitive(self, enriched_family):
        assert search_people(enriched_family, "hale", case_sensitive=True) == []

    def test_other_fields(self, enriched_family):
        assert [p.id for p in search_people(enriched_family, "farm")] == ["G"]
        assert [p.id for p in search_people(enriched_family, "dalen", fields=("village",))] == ["N"]

    def test_blank_query(self, enriched_family):
        assert search_people(enriched_family, "  ") == []


class TestPeopleByGeneration:
    def test_grouping(self, enriched_family):
        grouped = people_by_generation(enriched_family)

        assert list(grouped) == [0, 1, 2]
        assert [p.id for p in grouped[1]] == ["P", "Q", "W"]


@pytest.fixture
def era_dataset():
    return enrich(
        {
            "people": [
                {"id": "stray"},
                {"id": "david", "birthYear": -1040},
                {"id": "adam", "birthYear": -4000},
                {"id": "solomon", "birthYear": -990},
            ]
        }
    )


class TestPeopleByEra:
    def test_grouping_follows_era_order(self, era_dataset):
        grouped = people_by_era(era_dataset)

        assert list(grouped) == ["antediluvian", "judges-kings", "unknown"]
        assert [p.id for p in grouped["judges-kings"]] == ["david", "solomon"]

    def test_statistics(self, era_dataset):
        stats = compute_statistics(era_dataset)

        assert stats.eras == {"antediluvian": 1, "judges-kings": 2, "unknown": 1}
        assert stats.key_figure_count == 3

    def test_people_in_era(self, era_dataset):
        assert [p.id for p in people_in_era(era_dataset, "antediluvian")] == ["adam"]
        assert people_in_era(era_dataset, "new-testament") == []
