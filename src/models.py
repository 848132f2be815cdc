"""Data classes for family tree entities and the tree shapes built from them."""

from __future__ import annotations

from dataclasses import dataclass, field

EXTENDED_FAMILY_LABEL = "Extended Family"


@dataclass(frozen=True)
class Person:
    id: str
    full_name: str
    birth_date: str | None = None  # ISO format YYYY-MM-DD or None
    death_date: str | None = None  # ISO format YYYY-MM-DD or None
    portrait_url: str | None = None
    bio: str | None = None
    father_id: str | None = None
    mother_id: str | None = None
    sex: str | None = None
    created_at: str = ""


@dataclass(frozen=True)
class Union:
    id: str
    person1_id: str
    person2_id: str
    union_date: str | None = None
    divorce_date: str | None = None
    type: str = "marriage"
    created_at: str = ""

    def involves(self, person_id: str) -> bool:
        return person_id in (self.person1_id, self.person2_id)

    def other_party(self, person_id: str) -> str | None:
        """Return the id on the other side of the union, or None if person_id is not a party."""
        if self.person1_id == person_id:
            return self.person2_id
        if self.person2_id == person_id:
            return self.person1_id
        return None

    def links(self, a: str, b: str) -> bool:
        return {self.person1_id, self.person2_id} == {a, b}


# ============================================================================
# Tree nodes (output of the hierarchy builders)
# ============================================================================


@dataclass
class PersonNode:
    person: Person
    children: list[TreeNode] | None = None
    spouses: list[SpouseEntry] | None = None
    union: Union | None = None  # set on spouse entries linked by a recorded union

    @property
    def id(self) -> str:
        return self.person.id

    @property
    def label(self) -> str:
        return self.person.full_name


@dataclass
class Marker:
    """Leaf standing in for family that exists in the data but is not expanded."""

    anchor_id: str
    label: str = EXTENDED_FAMILY_LABEL


@dataclass
class VirtualRoot:
    """Label-only root hosting several top-level branches."""

    children: list[TreeNode] = field(default_factory=list)
    label: str = EXTENDED_FAMILY_LABEL


TreeNode = PersonNode | Marker | VirtualRoot
SpouseEntry = PersonNode | Marker


@dataclass
class ReportNode:
    person: Person
    spouses: list[Person] = field(default_factory=list)
    children: list[ReportNode] = field(default_factory=list)


def is_navigable(node: TreeNode) -> bool:
    """Only nodes backed by a real person can be focused or opened."""
    return isinstance(node, PersonNode)
