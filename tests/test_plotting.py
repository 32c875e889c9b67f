"""Tests for chart construction. Rendering to images needs Graphviz and is not exercised."""

import matplotlib

matplotlib.use("Agg")

from pathfinding import find_relationship  # noqa: E402
from plotting import HIGHLIGHT_COLOR, build_chart, plot_generation_histogram  # noqa: E402
from reports import compute_statistics  # noqa: E402


class TestBuildChart:
    def test_people_and_family_nodes(self, enriched_family):
        text = build_chart(enriched_family).to_string()

        for person_id in ("G", "H", "P", "Q", "W", "K1", "K2", "N"):
            assert person_id in text
        assert "FAM_G_H" in text
        assert "couple_0" in text
        assert "generation_2" in text
        assert HIGHLIGHT_COLOR not in text

    def test_highlight_path(self, enriched_family):
        result = find_relationship(enriched_family, "K1", "Q")
        text = build_chart(enriched_family, highlight=result).to_string()

        assert HIGHLIGHT_COLOR in text
        assert "dashed" in text

    def test_not_found_path_is_ignored(self, enriched_family):
        result = find_relationship(enriched_family, "K1", "ZZ")

        assert HIGHLIGHT_COLOR not in build_chart(enriched_family, highlight=result).to_string()


class TestGenerationHistogram:
    def test_writes_file(self, enriched_family, tmp_path):
        out = tmp_path / "generations.png"
        plot_generation_histogram(compute_statistics(enriched_family), out)

        assert out.exists()
        assert out.stat().st_size > 0
