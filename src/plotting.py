"""Visualization of focal hierarchies with Graphviz."""

from pathlib import Path
import itertools

import pydot

from models import Marker, Person, PersonNode, TreeNode, VirtualRoot

SEX_COLORS = {"M": "lightblue", "F": "lightpink"}
FOCAL_COLOR = "gold"


def person_label(person: Person) -> str:
    """Name on the first line, birth and death years on the second."""
    birth_year = person.birth_date[:4] if person.birth_date else ""
    death_year = person.death_date[:4] if person.death_date else ""
    return f"{person.full_name}\n{birth_year}-{death_year}"


def hierarchy_to_dot(tree: TreeNode, focal_id: str | None = None) -> pydot.Dot:
    """
    Convert a focal hierarchy into a top-to-bottom Graphviz graph.

    - People are rounded boxes colored by sex; the focal person is highlighted
    - Spouses sit on the same rank as their partner, joined by an undirected edge
    - Extended Family markers are dashed ellipses
    - A virtual root is a plain text label
    """
    P = pydot.Dot(graph_type="digraph")
    P.set("rankdir", "TB")  # Top-to-bottom (ancestors at top)
    P.set("splines", "ortho")  # Orthogonal edges for cleaner tree look
    P.set("nodesep", "0.4")  # Horizontal spacing between nodes
    P.set("ranksep", "0.6")  # Vertical spacing between ranks

    # Node names are generated: one person may legitimately appear twice
    names = (f"n{i}" for i in itertools.count())
    couple_count = itertools.count()

    def add_node(node: TreeNode) -> str:
        name = next(names)
        if isinstance(node, PersonNode):
            fillcolor = (
                FOCAL_COLOR if node.id == focal_id else SEX_COLORS.get(node.person.sex, "lightgray")
            )
            P.add_node(
                pydot.Node(
                    name,
                    label=person_label(node.person),
                    shape="box",
                    style="rounded,filled",
                    fillcolor=fillcolor,
                    fontsize="10",
                )
            )
        elif isinstance(node, Marker):
            P.add_node(
                pydot.Node(
                    name,
                    label=node.label,
                    shape="ellipse",
                    style="dashed",
                    fontcolor="gray40",
                    fontsize="9",
                )
            )
        else:
            P.add_node(pydot.Node(name, label=node.label, shape="plaintext", fontsize="11"))
        return name

    def visit(node: TreeNode) -> str:
        name = add_node(node)

        if isinstance(node, PersonNode) and node.spouses:
            sg = pydot.Subgraph(f"couple_{next(couple_count)}", rank="same")
            sg.add_node(pydot.Node(name))
            previous = name
            for entry in node.spouses:
                spouse_name = add_node(entry)
                sg.add_node(pydot.Node(spouse_name))
                if isinstance(entry, Marker):
                    # Marker trails the spouse whose parents it stands for
                    P.add_edge(pydot.Edge(previous, spouse_name, dir="none", style="dashed"))
                else:
                    P.add_edge(pydot.Edge(name, spouse_name, dir="none", color="darkgray"))
                    previous = spouse_name
            P.add_subgraph(sg)

        children = node.children if isinstance(node, (PersonNode, VirtualRoot)) else None
        for child in children or []:
            child_name = visit(child)
            P.add_edge(pydot.Edge(name, child_name, color="darkgray"))

        return name

    visit(tree)
    return P


def plot_hierarchy(tree: TreeNode, output_path: Path | None = None, focal_id: str | None = None):
    """
    Plot a focal hierarchy using Graphviz hierarchical layout.

    Args:
        tree: Root returned by hierarchy.build_hierarchy
        output_path: Path to save the output image (png, svg or pdf). If None, displays interactively.
        focal_id: Person to highlight
    """
    P = hierarchy_to_dot(tree, focal_id=focal_id)

    if output_path:
        # Determine format from extension
        ext = output_path.suffix.lower().lstrip(".")
        if ext not in ("png", "svg", "pdf"):
            ext = "png"

        P.write(str(output_path), format=ext)
        print(f"Tree saved to {output_path}")
    else:
        # Render to a temporary file, display it, then remove the file
        import os
        import tempfile

        import matplotlib.image as mpimg
        import matplotlib.pyplot as plt

        fd, tmp_name = tempfile.mkstemp(suffix=".png")
        os.close(fd)
        try:
            P.write(tmp_name, format="png")
            img = mpimg.imread(tmp_name)
        finally:
            os.unlink(tmp_name)

        plt.figure(figsize=(20, 16))
        plt.imshow(img)
        plt.axis("off")
        plt.tight_layout()
        plt.show()
