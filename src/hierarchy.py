"""Hierarchy construction: turn flat person/union records into tree shapes.

Two policies share the same records:
- build_hierarchy: a bounded three-generation window around a focal person,
  used by the interactive tree view.
- build_deep_hierarchy: every descendant of a root person, used by reports.

find_ancestors picks the roots for bulk reporting.
"""

from collections.abc import Iterable, Sequence
from functools import reduce
import logging

from models import Marker, Person, PersonNode, ReportNode, TreeNode, Union, VirtualRoot

logger = logging.getLogger(__name__)


class CyclicAncestryError(ValueError):
    """Raised when a person turns up as their own descendant along one branch."""

    def __init__(self, path: Sequence[str], person_id: str):
        self.path = tuple(path)
        self.person_id = person_id
        chain = " -> ".join([*self.path, person_id])
        super().__init__(f"Cyclic ancestry detected: {chain}")


# ============================================================================
# Shared helpers
# ============================================================================


def birth_sort_key(person: Person) -> tuple[bool, str]:
    """Sort key placing dated people first (ISO dates compare as strings), undated last."""
    return (person.birth_date is None, person.birth_date or "")


def children_of(person_id: str, members: Iterable[Person]) -> list[Person]:
    """Members naming person_id as father or mother, ordered by birth date."""
    children = [m for m in members if m.father_id == person_id or m.mother_id == person_id]
    return sorted(children, key=birth_sort_key)


def union_partner_ids(person_id: str, unions: Iterable[Union]) -> list[str]:
    partner_ids = []
    for union in unions:
        other = union.other_party(person_id)
        if other is not None:
            partner_ids.append(other)
    return partner_ids


def has_recorded_parents(person: Person) -> bool:
    return bool(person.father_id or person.mother_id)


# ============================================================================
# Focal (bounded) hierarchy
# ============================================================================


def build_hierarchy(
    members: Sequence[Person], focal_id: str | None, unions: Sequence[Union] = ()
) -> TreeNode | None:
    """
    Build a three-generation tree centered on the focal person.

    Generations shown:
    1. Parents of the focal person (the first resolved parent is the tree's
       structural parent, the other is attached as its spouse).
    2. The focal person, their siblings and spouses.
    3. The focal person's children.

    Anything beyond those generations is replaced by an "Extended Family"
    marker so the viewer knows there is more to explore.

    Args:
        members: All known people, in any order
        focal_id: The person to center the tree on
        unions: All known unions, in any order

    Returns:
        The root of the tree, or None if there is no focal person to show.
    """
    if not focal_id or not members:
        return None

    member_map = {m.id: m for m in members}
    focal = member_map.get(focal_id)
    if focal is None:
        logger.debug("Focal person %s not found among %d members", focal_id, len(members))
        return None

    parent_ids = {m.father_id for m in members} | {m.mother_id for m in members}

    def has_children(person: Person) -> bool:
        return person.id in parent_ids

    def has_spouse(person: Person) -> bool:
        return any(u.involves(person.id) for u in unions)

    # 1) Parents
    parents = [
        member_map[pid] for pid in (focal.father_id, focal.mother_id) if pid and pid in member_map
    ]

    # 2) Siblings, half-siblings included
    siblings = [
        m
        for m in members
        if m.id != focal_id
        and (
            (focal.father_id and m.father_id == focal.father_id)
            or (focal.mother_id and m.mother_id == focal.mother_id)
        )
    ]

    # 3) Children
    children = children_of(focal_id, members)

    # 4) Spouses: recorded unions first, then co-parents without a union
    spouses: dict[str, PersonNode] = {}
    for union in unions:
        spouse_id = union.other_party(focal_id)
        if spouse_id is not None and spouse_id in member_map:
            spouses[spouse_id] = PersonNode(member_map[spouse_id], union=union)
    for child in children:
        other_id = child.mother_id if child.father_id == focal_id else child.father_id
        if other_id and other_id != focal_id and other_id in member_map and other_id not in spouses:
            spouses[other_id] = PersonNode(member_map[other_id])

    # 5) Markers bound the tree to three generations
    child_nodes: list[TreeNode] = []
    for child in children:
        node = PersonNode(child)
        if has_children(child) or has_spouse(child):
            node.children = [Marker(child.id)]
        child_nodes.append(node)

    spouse_entries: list[PersonNode | Marker] = []
    for spouse_node in spouses.values():
        spouse_entries.append(spouse_node)
        if has_recorded_parents(spouse_node.person):
            spouse_entries.append(Marker(spouse_node.id))

    focal_node = PersonNode(
        focal,
        children=child_nodes or None,
        spouses=spouse_entries or None,
    )
    sibling_nodes: list[TreeNode] = [PersonNode(s) for s in siblings]

    # 6) Root selection
    if parents:
        structural, *other_parents = parents
        parent_spouses: list[PersonNode | Marker] = [
            PersonNode(
                other,
                union=next((u for u in unions if u.links(structural.id, other.id)), None),
            )
            for other in other_parents
        ]
        parent_node = PersonNode(
            structural,
            children=[focal_node, *sibling_nodes],
            spouses=parent_spouses or None,
        )
        if has_recorded_parents(structural):
            return VirtualRoot(children=[parent_node])
        return parent_node

    if sibling_nodes:
        return VirtualRoot(children=[focal_node, *sibling_nodes])

    return focal_node


# ============================================================================
# Deep (unbounded) hierarchy
# ============================================================================


def build_deep_hierarchy(
    root: Person,
    members: Sequence[Person],
    unions: Sequence[Union] = (),
    strict: bool = False,
) -> ReportNode:
    """
    Expand every descendant of root, attaching spouses at each generation.

    Each branch carries the path of ids leading to it. A child already on that
    path is skipped (or, with strict=True, reported as CyclicAncestryError).
    The same person may still appear in two unrelated branches.
    """
    member_map = {m.id: m for m in members}

    def spouses_of(person: Person) -> list[Person]:
        return [member_map[sid] for sid in union_partner_ids(person.id, unions) if sid in member_map]

    # Explicit stack: long lines of descent must not hit the recursion limit
    tree = ReportNode(person=root, spouses=spouses_of(root))
    stack: list[tuple[ReportNode, tuple[str, ...]]] = [(tree, (root.id,))]
    while stack:
        node, path = stack.pop()
        pending = []
        for child in children_of(node.person.id, members):
            if child.id in path:
                if strict:
                    raise CyclicAncestryError(path, child.id)
                logger.warning(
                    "Skipping %s under %s: already an ancestor on this branch",
                    child.id,
                    node.person.id,
                )
                continue
            child_node = ReportNode(person=child, spouses=spouses_of(child))
            node.children.append(child_node)
            pending.append((child_node, (*path, child.id)))
        # Reversed so branches are expanded depth-first in birth order
        stack.extend(reversed(pending))

    return tree


# ============================================================================
# Ancestor selection
# ============================================================================


def find_ancestors(members: Sequence[Person], unions: Sequence[Union] = ()) -> list[Person]:
    """
    Select report roots: people with no recorded parents, in input order.

    Once a person is selected their union partners are excluded, so a couple
    of parentless ancestors yields one report rather than two overlapping ones.
    """

    def select(
        acc: tuple[tuple[Person, ...], frozenset[str]], person: Person
    ) -> tuple[tuple[Person, ...], frozenset[str]]:
        selected, excluded = acc
        if person.id in excluded:
            return acc
        partners = frozenset(union_partner_ids(person.id, unions))
        return (*selected, person), excluded | partners | {person.id}

    parentless = (m for m in members if not has_recorded_parents(m))
    selected, _ = reduce(select, parentless, ((), frozenset()))
    return list(selected)
