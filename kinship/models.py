"""Household graph entities: people, unions and the links between them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Optional


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: str | Gender | None) -> Gender:
        """Map a stored value (NULL, '', 'male', 'F', ...) onto the tri-state."""
        if isinstance(value, Gender):
            return value
        s = (value or "").strip().upper()
        if s in ("M", "MALE"):
            return cls.MALE
        if s in ("F", "FEMALE"):
            return cls.FEMALE
        return cls.UNKNOWN

    def to_db(self) -> str | None:
        return None if self is Gender.UNKNOWN else self.value


class UnionType(str, Enum):
    MARRIED = "MARRIED"
    DIVORCED = "DIVORCED"
    PARTNERSHIP = "PARTNERSHIP"
    OTHER = "OTHER"


class UnionStatus(str, Enum):
    ACTIVE = "ACTIVE"
    DISSOLVED = "DISSOLVED"


class PartnerRole(str, Enum):
    PARTNER1 = "PARTNER1"
    PARTNER2 = "PARTNER2"


# Declaration order doubles as the display order of children within a union.
class LineageKind(str, Enum):
    BIOLOGICAL = "BIOLOGICAL"
    ADOPTED = "ADOPTED"
    STEP = "STEP"
    FOSTER = "FOSTER"
    GUARDIAN = "GUARDIAN"


_LINEAGE_RANK = {kind: i for i, kind in enumerate(LineageKind)}


def lineage_rank(kind: LineageKind) -> int:
    return _LINEAGE_RANK[kind]


@dataclass
class Person:
    id: int
    full_name: str
    gender: Gender = Gender.UNKNOWN
    birth_date: Optional[date] = None
    death_date: Optional[date] = None
    is_active: bool = True
    user_id: Optional[int] = None


@dataclass
class PartnerLink:
    person_id: int
    role: PartnerRole = PartnerRole.PARTNER1


@dataclass
class ChildLink:
    person_id: int
    lineage: LineageKind = LineageKind.BIOLOGICAL
    birth_order: Optional[int] = None


@dataclass
class Union:
    """A partnership between 0-2 people plus the children attached to it.

    ``partners`` and ``children`` are always populated by the store
    ("with relations"); a union with one partner is a single-parent
    placeholder waiting for the second partner.
    """

    id: int
    union_type: UnionType = UnionType.MARRIED
    status: UnionStatus = UnionStatus.ACTIVE
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    partners: list[PartnerLink] = field(default_factory=list)
    children: list[ChildLink] = field(default_factory=list)

    @property
    def partner_ids(self) -> list[int]:
        return [p.person_id for p in sorted(self.partners, key=lambda p: (p.role.value, p.person_id))]

    @property
    def child_ids(self) -> list[int]:
        return [c.person_id for c in self.children]

    @property
    def is_active(self) -> bool:
        return self.status is UnionStatus.ACTIVE

    def has_partner(self, person_id: int) -> bool:
        return any(p.person_id == person_id for p in self.partners)

    def child_link(self, person_id: int) -> ChildLink | None:
        for c in self.children:
            if c.person_id == person_id:
                return c
        return None


@dataclass
class NamedEdge:
    """Legacy directed relationship: ``to`` is the ``relationship_type`` of ``from``."""

    from_person_id: int
    to_person_id: int
    relationship_type: str
    id: Optional[int] = None
