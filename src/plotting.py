"""Visualization of enriched datasets: Graphviz family charts and statistics plots."""

from pathlib import Path
import tempfile

import pydot

from graph import build_graph, build_union_layout_graph
from models import Dataset, PathResult
from reports import DatasetStatistics

FILL_COLORS = {"male": "lightblue", "female": "lightpink"}
HIGHLIGHT_COLOR = "firebrick"


def _person_label(data: dict) -> str:
    birth = data.get("birth_year")
    death = data.get("death_year")
    years = f"{birth if birth is not None else ''}-{death if death is not None else ''}"
    label = f"{data.get('person_name', '')}\n{years}"
    if data.get("generation") is not None:
        label += f"\ngen {data['generation']}"
    return label


def build_chart(dataset: Dataset, highlight: PathResult | None = None) -> pydot.Dot:
    """
    Build a hierarchical Graphviz chart using the union-node model.

    - Parents appear above children (ancestors at top)
    - Spouses are aligned horizontally on the same rank
    - People of the same generation share a rank
    - People on `highlight` (a found path) are outlined in red
    """
    H = build_union_layout_graph(build_graph(dataset))
    on_path = {node.id for node in highlight.path} if highlight and highlight.found else set()

    P = pydot.Dot(graph_type="digraph")
    P.set("rankdir", "TB")  # Top-to-bottom (ancestors at top)
    P.set("splines", "ortho")  # Orthogonal edges for cleaner tree look
    P.set("nodesep", "0.4")
    P.set("ranksep", "0.6")

    couples: list[tuple] = []
    ranks: dict[int, list[str]] = {}

    for node, data in H.nodes(data=True):
        if data.get("node_type") == "family":
            # Family nodes are small connector points
            P.add_node(pydot.Node(str(node), shape="point", width="0.1", height="0.1", label=""))
            spouses = data.get("spouses", ())
            if len(spouses) == 2:
                couples.append(spouses)
            continue

        attrs = {
            "label": _person_label(data),
            "shape": "box",
            "style": "rounded,filled",
            "fillcolor": FILL_COLORS.get(data.get("gender"), "lightgray"),
            "fontsize": "10",
        }
        if node in on_path:
            attrs.update(color=HIGHLIGHT_COLOR, penwidth="2.5")
        P.add_node(pydot.Node(str(node), **attrs))

        if data.get("generation") is not None:
            ranks.setdefault(data["generation"], []).append(str(node))

    for u, v, data in H.edges(data=True):
        if data.get("edge_type") == "spouse_to_family":
            P.add_edge(pydot.Edge(str(u), str(v), dir="none", color="darkgray"))
        else:
            P.add_edge(pydot.Edge(str(u), str(v), color="darkgray"))

    # Path steps between people not otherwise joined directly (siblings, in-laws)
    if on_path:
        for step in highlight.steps:
            P.add_edge(
                pydot.Edge(
                    step.from_id,
                    step.to_id,
                    color=HIGHLIGHT_COLOR,
                    style="dashed",
                    constraint="false",
                    label=step.direction,
                    fontsize="8",
                )
            )

    for i, (a, b) in enumerate(couples):
        sg = pydot.Subgraph(f"couple_{i}", rank="same")
        sg.add_node(pydot.Node(str(a)))
        sg.add_node(pydot.Node(str(b)))
        P.add_subgraph(sg)

    for gen, members in sorted(ranks.items()):
        sg = pydot.Subgraph(f"generation_{gen}", rank="same")
        for member in members:
            sg.add_node(pydot.Node(member))
        P.add_subgraph(sg)

    return P


def plot_graph(dataset: Dataset, output_path: Path | None = None, highlight: PathResult | None = None):
    """
    Render the family chart with Graphviz.

    Args:
        dataset: Enriched dataset (or subgraph packed into a Dataset)
        output_path: Image path (png, svg or pdf). If None, displays interactively.
        highlight: Optional path result to emphasise
    """
    P = build_chart(dataset, highlight)

    if output_path:
        ext = output_path.suffix.lower().lstrip(".")
        if ext not in ("png", "svg", "pdf"):
            ext = "png"
        P.write(str(output_path), format=ext)
        return

    import matplotlib.image as mpimg
    import matplotlib.pyplot as plt

    with tempfile.NamedTemporaryFile(suffix=".png", delete=False) as f:
        P.write(f.name, format="png")
        img = mpimg.imread(f.name)
    plt.figure(figsize=(20, 16))
    plt.imshow(img)
    plt.axis("off")
    plt.tight_layout()
    plt.show()


def plot_generation_histogram(stats: DatasetStatistics, output_path: Path | None = None):
    """Bar chart of how many people each generation holds."""
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(figsize=(10, 5))
    gens = list(stats.people_per_generation)
    ax.bar([str(g) for g in gens], [stats.people_per_generation[g] for g in gens], color="steelblue")
    ax.set_xlabel("Generation")
    ax.set_ylabel("People")
    ax.set_title(
        f"People per generation ({stats.total_persons} people, "
        f"{stats.total_relationships} relationships)"
    )
    fig.tight_layout()

    if output_path:
        fig.savefig(output_path, dpi=150, bbox_inches="tight")
        plt.close(fig)
    else:
        plt.show()
