"""NetworkX graph building and operations."""

from collections.abc import Sequence
import logging

import networkx as nx

from models import Person, Union

logger = logging.getLogger(__name__)


def build_graph(members: Sequence[Person], unions: Sequence[Union]) -> nx.DiGraph:
    """
    Build a NetworkX directed graph of the family records.

    Edges are PARENT_OF (parent -> child) and SPOUSE_OF (person1 -> person2).
    References to people outside `members` are dropped.
    """
    G = nx.DiGraph()

    # Note: use 'person_name' instead of 'name' to avoid conflict with pydot
    for m in members:
        G.add_node(
            m.id,
            person_name=m.full_name,
            sex=m.sex,
            birth_date=m.birth_date,
            death_date=m.death_date,
        )

    dangling = 0
    for m in members:
        for parent_id in (m.father_id, m.mother_id):
            if not parent_id:
                continue
            if parent_id in G:
                G.add_edge(parent_id, m.id, relationship_type="PARENT_OF")
            else:
                dangling += 1

    for u in unions:
        if u.person1_id in G and u.person2_id in G:
            G.add_edge(u.person1_id, u.person2_id, relationship_type="SPOUSE_OF", union_id=u.id)
        else:
            dangling += 1

    if dangling:
        logger.debug("Dropped %d references to unknown people", dangling)

    return G


def get_parents(G: nx.DiGraph, person_id: str) -> list[str]:
    """Return the ids of person_id's parents present in the graph."""
    if person_id not in G:
        raise ValueError(f"Person ID {person_id} not found in graph")

    return [
        parent
        for parent in G.predecessors(person_id)
        if G.edges[parent, person_id].get("relationship_type") == "PARENT_OF"
    ]


def select_default_focal(G: nx.DiGraph) -> str | None:
    """
    Pick the person to focus on when none was chosen: the first person (in
    insertion order) without a known parent, else the first person.
    """
    for node in G.nodes:
        if not get_parents(G, node):
            return node
    return next(iter(G.nodes), None)
