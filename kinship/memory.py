"""In-process ``Store`` holding the household graph in plain dicts.

Useful for tests and for embedding the kinship core without Postgres.
Reads hand out copies, so callers can never mutate the stored graph
behind a transaction's back.
"""

from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import asdict, replace
from datetime import date
from typing import Any, Iterable, Iterator

try:
    from .models import (
        ChildLink,
        Gender,
        LineageKind,
        NamedEdge,
        PartnerLink,
        PartnerRole,
        Person,
        Union,
        UnionStatus,
        UnionType,
    )
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    from models import (
        ChildLink,
        Gender,
        LineageKind,
        NamedEdge,
        PartnerLink,
        PartnerRole,
        Person,
        Union,
        UnionStatus,
        UnionType,
    )


class MemoryStore:
    def __init__(self, persons: Iterable[Person] = ()) -> None:
        self._persons: dict[int, Person] = {}
        self._unions: dict[int, Union] = {}
        self._edges: list[NamedEdge] = []
        self._next_union_id = 1
        self._next_edge_id = 1
        for p in persons:
            self.add_person(p)

    # -- seeding (family administration lives outside the core) ------------

    def add_person(self, person: Person) -> Person:
        self._persons[person.id] = replace(person)
        return person

    def dump(self) -> dict[str, Any]:
        """Plain snapshot of the whole graph, for before/after comparisons."""
        return {
            "persons": [asdict(self._persons[k]) for k in sorted(self._persons)],
            "unions": [asdict(self._unions[k]) for k in sorted(self._unions)],
            "edges": [asdict(e) for e in self._edges],
        }

    # -- persons -----------------------------------------------------------

    def get_person(self, person_id: int) -> Person | None:
        p = self._persons.get(person_id)
        return replace(p) if p is not None else None

    def get_persons(self, person_ids: list[int]) -> dict[int, Person]:
        return {pid: replace(self._persons[pid]) for pid in person_ids if pid in self._persons}

    def person_by_user(self, user_id: int) -> Person | None:
        for pid in sorted(self._persons):
            if self._persons[pid].user_id == user_id:
                return replace(self._persons[pid])
        return None

    def set_person_gender(self, person_id: int, gender: Gender) -> None:
        p = self._persons.get(person_id)
        if p is not None:
            p.gender = gender

    # -- unions ------------------------------------------------------------

    def get_union(self, union_id: int) -> Union | None:
        u = self._unions.get(union_id)
        return copy.deepcopy(u) if u is not None else None

    def unions_by_partner(self, person_id: int) -> list[Union]:
        return [
            copy.deepcopy(self._unions[uid])
            for uid in sorted(self._unions)
            if self._unions[uid].has_partner(person_id)
        ]

    def unions_by_child(self, person_id: int) -> list[Union]:
        return [
            copy.deepcopy(self._unions[uid])
            for uid in sorted(self._unions)
            if self._unions[uid].child_link(person_id) is not None
        ]

    def create_union(
        self,
        union_type: UnionType,
        status: UnionStatus,
        start_date: date | None,
        end_date: date | None,
    ) -> int:
        uid = self._next_union_id
        self._next_union_id += 1
        self._unions[uid] = Union(
            id=uid,
            union_type=union_type,
            status=status,
            start_date=start_date,
            end_date=end_date,
        )
        return uid

    def update_union(
        self,
        union_id: int,
        union_type: UnionType,
        status: UnionStatus,
        start_date: date | None,
        end_date: date | None,
    ) -> None:
        u = self._unions.get(union_id)
        if u is None:
            return
        u.union_type = union_type
        u.status = status
        u.start_date = start_date
        u.end_date = end_date

    def delete_union(self, union_id: int) -> bool:
        return self._unions.pop(union_id, None) is not None

    def add_partner(self, union_id: int, person_id: int, role: PartnerRole) -> None:
        self._unions[union_id].partners.append(PartnerLink(person_id=person_id, role=role))

    def remove_partner(self, union_id: int, person_id: int) -> bool:
        u = self._unions.get(union_id)
        if u is None:
            return False
        before = len(u.partners)
        u.partners = [p for p in u.partners if p.person_id != person_id]
        return len(u.partners) < before

    def add_child(
        self,
        union_id: int,
        person_id: int,
        lineage: LineageKind,
        birth_order: int | None,
    ) -> None:
        self._unions[union_id].children.append(
            ChildLink(person_id=person_id, lineage=lineage, birth_order=birth_order)
        )

    def remove_child(self, union_id: int, person_id: int) -> bool:
        u = self._unions.get(union_id)
        if u is None:
            return False
        before = len(u.children)
        u.children = [c for c in u.children if c.person_id != person_id]
        return len(u.children) < before

    # -- named edges -------------------------------------------------------

    def named_edge(self, from_id: int, to_id: int) -> NamedEdge | None:
        for e in self._edges:
            if e.from_person_id == from_id and e.to_person_id == to_id:
                return replace(e)
        return None

    def named_edges_from(self, person_id: int) -> list[NamedEdge]:
        return [replace(e) for e in self._edges if e.from_person_id == person_id]

    def add_named_edge(self, from_id: int, to_id: int, relationship_type: str) -> int:
        eid = self._next_edge_id
        self._next_edge_id += 1
        self._edges.append(
            NamedEdge(
                id=eid,
                from_person_id=from_id,
                to_person_id=to_id,
                relationship_type=relationship_type,
            )
        )
        return eid

    def remove_named_edge(self, from_id: int, to_id: int) -> bool:
        before = len(self._edges)
        self._edges = [
            e for e in self._edges if not (e.from_person_id == from_id and e.to_person_id == to_id)
        ]
        return len(self._edges) < before

    # -- transactions ------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Restore the pre-block state if anything inside raises."""
        saved = copy.deepcopy(
            (self._persons, self._unions, self._edges, self._next_union_id, self._next_edge_id)
        )
        try:
            yield
        except BaseException:
            (
                self._persons,
                self._unions,
                self._edges,
                self._next_union_id,
                self._next_edge_id,
            ) = saved
            raise
