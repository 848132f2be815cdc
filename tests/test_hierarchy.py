"""Tests for the focal and deep hierarchy builders and ancestor selection."""

import sys

import pytest

from hierarchy import (
    CyclicAncestryError,
    build_deep_hierarchy,
    build_hierarchy,
    children_of,
    find_ancestors,
)
from models import EXTENDED_FAMILY_LABEL, Marker, Person, PersonNode, Union, VirtualRoot


def person(pid, birth=None, father=None, mother=None):
    return Person(id=pid, full_name=pid.title(), birth_date=birth, father_id=father, mother_id=mother)


def union(p1, p2, uid=None):
    return Union(id=uid or f"{p1}-{p2}", person1_id=p1, person2_id=p2)


def person_ids(node):
    """Every real person id reachable from node, via children and spouses."""
    ids = []
    if isinstance(node, PersonNode):
        ids.append(node.id)
        for spouse in node.spouses or []:
            ids.extend(person_ids(spouse))
    for child in getattr(node, "children", None) or []:
        ids.extend(person_ids(child))
    return ids


# --- Test data fixtures ---

# Five generations in a straight line: great-grandpa -> ... -> great-grandchild
_LINE = [
    person("ggp"),
    person("gp", father="ggp"),
    person("parent", father="gp"),
    person("focal", birth="1950-01-01", father="parent"),
    person("child", birth="1975-01-01", father="focal"),
    person("grandchild", father="child"),
    person("greatgrandchild", father="grandchild"),
]


class TestBuildHierarchyNoTree:

    def test_empty_members(self):
        assert build_hierarchy([], "anyone", []) is None

    def test_empty_focal_id(self):
        assert build_hierarchy(_LINE, "", []) is None

    def test_none_focal_id(self):
        assert build_hierarchy(_LINE, None, []) is None

    def test_unknown_focal_id(self):
        assert build_hierarchy(_LINE, "unknown-id", []) is None


class TestBuildHierarchyShape:

    def test_lone_person_is_root(self):
        tree = build_hierarchy([person("solo")], "solo")

        assert isinstance(tree, PersonNode)
        assert tree.id == "solo"
        assert tree.children is None
        assert tree.spouses is None

    def test_depth_is_bounded_to_three_generations(self):
        tree = build_hierarchy(_LINE, "focal", [])

        ids = person_ids(tree)
        assert "parent" in ids
        assert "focal" in ids
        assert "child" in ids
        for hidden in ("ggp", "gp", "grandchild", "greatgrandchild"):
            assert hidden not in ids

    def test_parent_with_recorded_parent_is_wrapped(self):
        tree = build_hierarchy(_LINE, "focal", [])

        assert isinstance(tree, VirtualRoot)
        assert tree.label == EXTENDED_FAMILY_LABEL
        assert len(tree.children) == 1
        parent_node = tree.children[0]
        assert parent_node.id == "parent"
        assert parent_node.children[0].id == "focal"

    def test_two_parents_without_grandparents_returns_structural_parent(self):
        members = [person("dad"), person("mom"), person("focal", father="dad", mother="mom")]
        marriage = union("mom", "dad", uid="u1")

        tree = build_hierarchy(members, "focal", [marriage])

        assert isinstance(tree, PersonNode)
        assert tree.id == "dad"
        assert [s.id for s in tree.spouses] == ["mom"]
        assert tree.spouses[0].union == marriage
        assert [c.id for c in tree.children] == ["focal"]

    def test_other_parent_without_union_has_no_union_reference(self):
        members = [person("dad"), person("mom"), person("focal", father="dad", mother="mom")]

        tree = build_hierarchy(members, "focal", [])

        assert tree.spouses[0].id == "mom"
        assert tree.spouses[0].union is None

    def test_structural_parent_with_recorded_parent_is_wrapped(self):
        members = [
            person("grandpa"),
            person("dad", father="grandpa"),
            person("mom"),
            person("focal", father="dad", mother="mom"),
        ]

        tree = build_hierarchy(members, "focal", [])

        assert isinstance(tree, VirtualRoot)
        assert tree.children[0].id == "dad"
        assert "grandpa" not in person_ids(tree)

    def test_dangling_parent_reference_is_dropped(self):
        members = [person("focal", father="ghost"), person("sib", father="ghost")]

        tree = build_hierarchy(members, "focal", [])

        # No resolvable parent, so the siblings sit under a virtual root
        assert isinstance(tree, VirtualRoot)
        assert [c.id for c in tree.children] == ["focal", "sib"]

    def test_focal_comes_before_siblings_under_parent(self):
        members = [
            person("dad"),
            person("older", birth="1940-01-01", father="dad"),
            person("focal", birth="1950-01-01", father="dad"),
        ]

        tree = build_hierarchy(members, "focal", [])

        assert [c.id for c in tree.children] == ["focal", "older"]


class TestSiblings:

    def test_only_shared_parent_counts(self):
        members = [person("a", father="p"), person("b", father="p"), person("c", mother="q")]

        tree = build_hierarchy(members, "a", [])

        assert isinstance(tree, VirtualRoot)
        assert [c.id for c in tree.children] == ["a", "b"]

    def test_half_siblings_are_included(self):
        members = [
            person("dad"),
            person("mom"),
            person("other-mom"),
            person("focal", father="dad", mother="mom"),
            person("half-paternal", father="dad", mother="other-mom"),
            person("half-maternal", mother="mom"),
        ]

        tree = build_hierarchy(members, "focal", [])

        sibling_ids = [c.id for c in tree.children[1:]]
        assert sorted(sibling_ids) == ["half-maternal", "half-paternal"]

    def test_siblings_are_leaves(self):
        members = [
            person("dad"),
            person("focal", father="dad"),
            person("sib", father="dad"),
            person("nephew", father="sib"),
        ]

        tree = build_hierarchy(members, "focal", [union("sib", "dad")])

        sib = tree.children[1]
        assert sib.id == "sib"
        assert sib.children is None
        assert sib.spouses is None


class TestChildren:

    def test_children_sorted_by_birth_with_undated_last(self):
        members = [
            person("focal"),
            person("c1990", birth="1990-01-01", father="focal"),
            person("cnone", father="focal"),
            person("c1980", birth="1980-01-01", mother="focal"),
        ]

        tree = build_hierarchy(members, "focal", [])

        assert [c.id for c in tree.children] == ["c1980", "c1990", "cnone"]

    def test_child_with_children_gets_single_marker(self):
        members = [
            person("focal"),
            person("early", birth="1970-01-01", father="focal"),
            person("late", birth="1980-01-01", father="focal"),
            person("g", father="late"),
        ]

        tree = build_hierarchy(members, "focal", [])

        early, late = tree.children
        assert early.children is None
        assert len(late.children) == 1
        marker = late.children[0]
        assert isinstance(marker, Marker)
        assert marker.label == "Extended Family"
        assert "g" not in person_ids(tree)

    def test_child_with_spouse_gets_marker(self):
        members = [person("focal"), person("kid", father="focal"), person("in-law")]

        tree = build_hierarchy(members, "focal", [union("kid", "in-law")])

        assert isinstance(tree.children[0].children[0], Marker)
        assert "in-law" not in person_ids(tree)


class TestSpouses:

    def test_union_partner_is_spouse(self):
        members = [person("focal"), person("wife")]
        marriage = union("wife", "focal")

        tree = build_hierarchy(members, "focal", [marriage])

        assert [s.id for s in tree.spouses] == ["wife"]
        assert tree.spouses[0].union == marriage

    def test_co_parent_without_union_is_inferred(self):
        members = [person("f"), person("m"), person("c", father="f", mother="m")]

        tree = build_hierarchy(members, "f", [])

        assert [s.id for s in tree.spouses] == ["m"]
        assert tree.spouses[0].union is None

    def test_spouses_deduplicated(self):
        members = [person("f"), person("m"), person("c", father="f", mother="m")]

        tree = build_hierarchy(members, "f", [union("f", "m"), union("m", "f", uid="again")])

        assert [s.id for s in tree.spouses] == ["m"]
        assert tree.spouses[0].union is not None

    def test_dangling_union_partner_is_dropped(self):
        tree = build_hierarchy([person("f")], "f", [union("f", "ghost")])

        assert tree.spouses is None

    def test_spouse_with_recorded_parent_gets_trailing_marker(self):
        members = [person("focal"), person("wife", father="in-law-dad"), person("second")]

        tree = build_hierarchy(members, "focal", [union("focal", "wife"), union("focal", "second")])

        assert len(tree.spouses) == 3
        wife, marker, second = tree.spouses
        assert wife.id == "wife"
        assert isinstance(marker, Marker)
        assert marker.anchor_id == "wife"
        assert second.id == "second"


class TestBuildDeepHierarchy:

    _MEMBERS = [
        person("root"),
        person("spouse"),
        person("b", birth="1960-01-01", father="root", mother="spouse"),
        person("a", birth="1950-01-01", father="root", mother="spouse"),
        person("undated", father="root"),
        person("a-kid", father="a"),
    ]
    _UNIONS = [union("root", "spouse"), union("root", "ghost")]

    def test_expands_all_descendants(self):
        tree = build_deep_hierarchy(self._MEMBERS[0], self._MEMBERS, self._UNIONS)

        assert tree.person.id == "root"
        assert [c.person.id for c in tree.children] == ["a", "b", "undated"]
        assert [g.person.id for g in tree.children[0].children] == ["a-kid"]
        assert tree.children[0].children[0].children == []

    def test_spouses_always_present(self):
        tree = build_deep_hierarchy(self._MEMBERS[0], self._MEMBERS, self._UNIONS)

        assert [s.id for s in tree.spouses] == ["spouse"]
        assert tree.children[1].spouses == []

    def test_same_person_in_two_branches(self):
        members = [
            person("root"),
            person("a", father="root"),
            person("b", father="root"),
            person("x", father="a", mother="b"),
        ]

        tree = build_deep_hierarchy(members[0], members, [])

        a, b = tree.children
        assert [c.person.id for c in a.children] == ["x"]
        assert [c.person.id for c in b.children] == ["x"]

    def test_cycle_on_branch_is_skipped(self):
        # root is recorded as the child of its own child
        members = [person("root", father="kid"), person("kid", father="root")]

        tree = build_deep_hierarchy(members[0], members, [])

        assert [c.person.id for c in tree.children] == ["kid"]
        assert tree.children[0].children == []

    def test_cycle_on_branch_raises_when_strict(self):
        members = [person("root", father="kid"), person("kid", father="root")]

        with pytest.raises(CyclicAncestryError) as exc_info:
            build_deep_hierarchy(members[0], members, [], strict=True)

        assert exc_info.value.path == ("root", "kid")
        assert exc_info.value.person_id == "root"

    def test_strict_allows_person_in_unrelated_branches(self):
        members = [
            person("root"),
            person("a", father="root"),
            person("b", father="root"),
            person("x", father="a", mother="b"),
        ]

        tree = build_deep_hierarchy(members[0], members, [], strict=True)

        assert len(tree.children) == 2

    def test_line_longer_than_recursion_limit(self):
        generations = sys.getrecursionlimit() + 200
        members = [person("p0")] + [person(f"p{i}", father=f"p{i - 1}") for i in range(1, generations)]

        tree = build_deep_hierarchy(members[0], members, [])

        node, depth = tree, 1
        while node.children:
            assert len(node.children) == 1
            node = node.children[0]
            depth += 1
        assert depth == generations
        assert node.person.id == f"p{generations - 1}"


class TestFindAncestors:

    def test_spouse_of_selected_ancestor_is_excluded(self):
        members = [person("a"), person("b")]

        assert find_ancestors(members, [union("a", "b")]) == [members[0]]

    def test_keeps_input_order_and_skips_people_with_parents(self):
        members = [person("z"), person("child", father="z"), person("a"), person("half", mother="a")]

        assert [p.id for p in find_ancestors(members, [])] == ["z", "a"]

    def test_dangling_parent_still_counts_as_having_parents(self):
        members = [person("orphan", father="ghost"), person("root")]

        assert [p.id for p in find_ancestors(members, [])] == ["root"]

    def test_empty(self):
        assert find_ancestors([], []) == []


class TestChildrenOf:

    def test_matches_either_parent(self):
        members = [person("x", father="p"), person("y", mother="p"), person("z", father="q")]

        assert [c.id for c in children_of("p", members)] == ["x", "y"]
