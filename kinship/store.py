"""Person/union repository.

The kinship core only talks to a ``Store``: lookups by id, neighbour
queries (unions where a person is a partner / a child) and the handful of
writes the mutation entry points need. ``PgStore`` is the Postgres
implementation; ``kinship.memory.MemoryStore`` keeps everything in dicts.
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date
from typing import Any, ContextManager, Iterator, Protocol

import psycopg

try:
    from .db import db_conn
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
    from db import db_conn
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


class Store(Protocol):
    def get_person(self, person_id: int) -> Person | None: ...

    def get_persons(self, person_ids: list[int]) -> dict[int, Person]: ...

    def person_by_user(self, user_id: int) -> Person | None: ...

    def get_union(self, union_id: int) -> Union | None: ...

    def unions_by_partner(self, person_id: int) -> list[Union]: ...

    def unions_by_child(self, person_id: int) -> list[Union]: ...

    def create_union(
        self,
        union_type: UnionType,
        status: UnionStatus,
        start_date: date | None,
        end_date: date | None,
    ) -> int: ...

    def update_union(
        self,
        union_id: int,
        union_type: UnionType,
        status: UnionStatus,
        start_date: date | None,
        end_date: date | None,
    ) -> None: ...

    def delete_union(self, union_id: int) -> bool: ...

    def add_partner(self, union_id: int, person_id: int, role: PartnerRole) -> None: ...

    def remove_partner(self, union_id: int, person_id: int) -> bool: ...

    def add_child(
        self,
        union_id: int,
        person_id: int,
        lineage: LineageKind,
        birth_order: int | None,
    ) -> None: ...

    def remove_child(self, union_id: int, person_id: int) -> bool: ...

    def set_person_gender(self, person_id: int, gender: Gender) -> None: ...

    def named_edge(self, from_id: int, to_id: int) -> NamedEdge | None: ...

    def named_edges_from(self, person_id: int) -> list[NamedEdge]: ...

    def add_named_edge(self, from_id: int, to_id: int, relationship_type: str) -> int: ...

    def remove_named_edge(self, from_id: int, to_id: int) -> bool: ...

    def transaction(self) -> ContextManager[None]: ...


_PERSON_COLUMNS = "id, full_name, gender, birth_date, death_date, is_active, user_id"
_EDGE_COLUMNS = "id, from_person_id, to_person_id, relationship_type"


def _person_from_row(r: tuple[Any, ...]) -> Person:
    pid, full_name, gender, birth_date, death_date, is_active, user_id = r
    return Person(
        id=int(pid),
        full_name=full_name or "",
        gender=Gender.parse(gender),
        birth_date=birth_date,
        death_date=death_date,
        is_active=True if is_active is None else bool(is_active),
        user_id=user_id,
    )


def _edge_from_row(r: tuple[Any, ...]) -> NamedEdge:
    eid, from_id, to_id, rel_type = r
    return NamedEdge(
        id=eid,
        from_person_id=int(from_id),
        to_person_id=int(to_id),
        relationship_type=str(rel_type),
    )


class PgStore:
    """Store backed by the tables in ``sql/schema.sql``."""

    def __init__(self, conn: psycopg.Connection) -> None:
        self._conn = conn

    # -- persons -----------------------------------------------------------

    def get_persons(self, person_ids: list[int]) -> dict[int, Person]:
        if not person_ids:
            return {}
        rows = self._conn.execute(
            f"SELECT {_PERSON_COLUMNS} FROM person WHERE id = ANY(%s)",
            (list(person_ids),),
        ).fetchall()
        out: dict[int, Person] = {}
        for r in rows:
            p = _person_from_row(tuple(r))
            out[p.id] = p
        return out

    def get_person(self, person_id: int) -> Person | None:
        return self.get_persons([person_id]).get(person_id)

    def person_by_user(self, user_id: int) -> Person | None:
        row = self._conn.execute(
            f"SELECT {_PERSON_COLUMNS} FROM person WHERE user_id = %s ORDER BY id LIMIT 1",
            (user_id,),
        ).fetchone()
        return _person_from_row(tuple(row)) if row else None

    def set_person_gender(self, person_id: int, gender: Gender) -> None:
        self._conn.execute(
            "UPDATE person SET gender = %s WHERE id = %s",
            (gender.to_db(), person_id),
        )

    # -- unions ------------------------------------------------------------

    def _load_unions(self, union_ids: list[int]) -> list[Union]:
        """Fetch unions with partners and children populated."""

        if not union_ids:
            return []
        ids = sorted(set(union_ids))

        by_id: dict[int, Union] = {}
        for uid, union_type, status, start_date, end_date in self._conn.execute(
            """
            SELECT id, union_type, status, start_date, end_date
            FROM family_union
            WHERE id = ANY(%s)
            """.strip(),
            (ids,),
        ).fetchall():
            by_id[int(uid)] = Union(
                id=int(uid),
                union_type=UnionType(union_type or UnionType.MARRIED.value),
                status=UnionStatus(status or UnionStatus.ACTIVE.value),
                start_date=start_date,
                end_date=end_date,
            )

        for uid, person_id, role in self._conn.execute(
            "SELECT union_id, person_id, role FROM union_partner WHERE union_id = ANY(%s)",
            (ids,),
        ).fetchall():
            u = by_id.get(int(uid))
            if u is not None:
                u.partners.append(PartnerLink(person_id=int(person_id), role=PartnerRole(role)))

        for uid, person_id, lineage, birth_order in self._conn.execute(
            """
            SELECT union_id, person_id, lineage, birth_order
            FROM union_child
            WHERE union_id = ANY(%s)
            """.strip(),
            (ids,),
        ).fetchall():
            u = by_id.get(int(uid))
            if u is not None:
                u.children.append(
                    ChildLink(
                        person_id=int(person_id),
                        lineage=LineageKind(lineage or LineageKind.BIOLOGICAL.value),
                        birth_order=birth_order,
                    )
                )

        return [by_id[uid] for uid in ids if uid in by_id]

    def get_union(self, union_id: int) -> Union | None:
        found = self._load_unions([union_id])
        return found[0] if found else None

    def unions_by_partner(self, person_id: int) -> list[Union]:
        rows = self._conn.execute(
            "SELECT union_id FROM union_partner WHERE person_id = %s",
            (person_id,),
        ).fetchall()
        return self._load_unions([int(r[0]) for r in rows])

    def unions_by_child(self, person_id: int) -> list[Union]:
        rows = self._conn.execute(
            "SELECT union_id FROM union_child WHERE person_id = %s",
            (person_id,),
        ).fetchall()
        return self._load_unions([int(r[0]) for r in rows])

    def create_union(
        self,
        union_type: UnionType,
        status: UnionStatus,
        start_date: date | None,
        end_date: date | None,
    ) -> int:
        row = self._conn.execute(
            """
            INSERT INTO family_union (union_type, status, start_date, end_date)
            VALUES (%s, %s, %s, %s)
            RETURNING id
            """.strip(),
            (union_type.value, status.value, start_date, end_date),
        ).fetchone()
        return int(row[0])

    def update_union(
        self,
        union_id: int,
        union_type: UnionType,
        status: UnionStatus,
        start_date: date | None,
        end_date: date | None,
    ) -> None:
        self._conn.execute(
            """
            UPDATE family_union
            SET union_type = %s, status = %s, start_date = %s, end_date = %s
            WHERE id = %s
            """.strip(),
            (union_type.value, status.value, start_date, end_date, union_id),
        )

    def delete_union(self, union_id: int) -> bool:
        cur = self._conn.execute("DELETE FROM family_union WHERE id = %s", (union_id,))
        return cur.rowcount > 0

    def add_partner(self, union_id: int, person_id: int, role: PartnerRole) -> None:
        self._conn.execute(
            "INSERT INTO union_partner (union_id, person_id, role) VALUES (%s, %s, %s)",
            (union_id, person_id, role.value),
        )

    def remove_partner(self, union_id: int, person_id: int) -> bool:
        cur = self._conn.execute(
            "DELETE FROM union_partner WHERE union_id = %s AND person_id = %s",
            (union_id, person_id),
        )
        return cur.rowcount > 0

    def add_child(
        self,
        union_id: int,
        person_id: int,
        lineage: LineageKind,
        birth_order: int | None,
    ) -> None:
        self._conn.execute(
            """
            INSERT INTO union_child (union_id, person_id, lineage, birth_order)
            VALUES (%s, %s, %s, %s)
            """.strip(),
            (union_id, person_id, lineage.value, birth_order),
        )

    def remove_child(self, union_id: int, person_id: int) -> bool:
        cur = self._conn.execute(
            "DELETE FROM union_child WHERE union_id = %s AND person_id = %s",
            (union_id, person_id),
        )
        return cur.rowcount > 0

    # -- named edges -------------------------------------------------------

    def named_edge(self, from_id: int, to_id: int) -> NamedEdge | None:
        row = self._conn.execute(
            f"""
            SELECT {_EDGE_COLUMNS}
            FROM named_relationship
            WHERE from_person_id = %s AND to_person_id = %s
            """.strip(),
            (from_id, to_id),
        ).fetchone()
        return _edge_from_row(tuple(row)) if row else None

    def named_edges_from(self, person_id: int) -> list[NamedEdge]:
        rows = self._conn.execute(
            f"""
            SELECT {_EDGE_COLUMNS}
            FROM named_relationship
            WHERE from_person_id = %s
            ORDER BY id
            """.strip(),
            (person_id,),
        ).fetchall()
        return [_edge_from_row(tuple(r)) for r in rows]

    def add_named_edge(self, from_id: int, to_id: int, relationship_type: str) -> int:
        row = self._conn.execute(
            """
            INSERT INTO named_relationship (from_person_id, to_person_id, relationship_type)
            VALUES (%s, %s, %s)
            RETURNING id
            """.strip(),
            (from_id, to_id, relationship_type),
        ).fetchone()
        return int(row[0])

    def remove_named_edge(self, from_id: int, to_id: int) -> bool:
        cur = self._conn.execute(
            "DELETE FROM named_relationship WHERE from_person_id = %s AND to_person_id = %s",
            (from_id, to_id),
        )
        return cur.rowcount > 0

    # -- transactions ------------------------------------------------------

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """All writes inside the block commit together or not at all."""
        with self._conn.transaction():
            yield


@contextmanager
def open_store() -> Iterator[PgStore]:
    with db_conn() as conn:
        yield PgStore(conn)

