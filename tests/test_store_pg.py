from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import date

import pytest

from kinship.models import Gender, LineageKind, PartnerRole, UnionStatus, UnionType
from kinship.store import PgStore


@dataclass
class _FakeResult:
    rows: list[tuple] = field(default_factory=list)
    rowcount: int = 0

    def fetchall(self) -> list[tuple]:
        return list(self.rows)

    def fetchone(self) -> tuple | None:
        return self.rows[0] if self.rows else None


class _FakeConn:
    def __init__(
        self,
        *,
        persons: list[tuple] = (),
        unions: list[tuple] = (),
        partners: list[tuple] = (),
        children: list[tuple] = (),
    ):
        self._persons = list(persons)
        # unions rows are (id, union_type, status, start_date, end_date)
        self._unions = list(unions)
        # partners rows are (union_id, person_id, role)
        self._partners = list(partners)
        # children rows are (union_id, person_id, lineage, birth_order)
        self._children = list(children)
        self.executed: list[tuple[str, tuple]] = []
        self.transactions = 0

    @contextmanager
    def transaction(self):
        self.transactions += 1
        yield

    def execute(self, query: str, params: tuple) -> _FakeResult:
        q = " ".join((query or "").split()).lower()
        self.executed.append((q, params))

        if q.startswith("select id, full_name, gender") and "where id = any" in q:
            ids = set(params[0] or [])
            return _FakeResult([r for r in self._persons if r[0] in ids])

        if q.startswith("select id, full_name, gender") and "where user_id = %s" in q:
            return _FakeResult([r for r in self._persons if r[6] == params[0]][:1])

        if q.startswith("select union_id from union_partner where person_id"):
            return _FakeResult([(u,) for (u, p, _r) in self._partners if p == params[0]])

        if q.startswith("select union_id from union_child where person_id"):
            return _FakeResult([(u,) for (u, p, _l, _o) in self._children if p == params[0]])

        if q.startswith("select id, union_type, status, start_date, end_date from family_union"):
            ids = set(params[0] or [])
            return _FakeResult([r for r in self._unions if r[0] in ids])

        if q.startswith("select union_id, person_id, role from union_partner"):
            ids = set(params[0] or [])
            return _FakeResult([r for r in self._partners if r[0] in ids])

        if q.startswith("select union_id, person_id, lineage, birth_order from union_child"):
            ids = set(params[0] or [])
            return _FakeResult([r for r in self._children if r[0] in ids])

        if q.startswith("insert into family_union"):
            return _FakeResult([(41,)])

        if q.startswith("delete from family_union"):
            return _FakeResult(rowcount=1 if any(r[0] == params[0] for r in self._unions) else 0)

        if q.startswith("update person set gender"):
            return _FakeResult()

        raise AssertionError(f"Unexpected query: {query}")


def _conn() -> _FakeConn:
    return _FakeConn(
        persons=[
            (1, "Ota", "M", date(1960, 1, 1), None, True, 10),
            (2, "Ona", "female", None, None, None, None),
            (3, "Bola", None, None, None, True, None),
        ],
        unions=[(7, "MARRIED", "ACTIVE", date(1985, 5, 1), None)],
        partners=[(7, 2, "PARTNER2"), (7, 1, "PARTNER1")],
        children=[(7, 3, "BIOLOGICAL", None)],
    )


def test_get_persons_parses_gender_and_defaults() -> None:
    store = PgStore(_conn())
    out = store.get_persons([1, 2, 3, 99])

    assert sorted(out) == [1, 2, 3]
    assert out[1].gender is Gender.MALE
    assert out[2].gender is Gender.FEMALE
    assert out[2].is_active is True
    assert out[3].gender is Gender.UNKNOWN
    assert store.get_person(99) is None


def test_person_by_user() -> None:
    store = PgStore(_conn())
    assert store.person_by_user(10).id == 1
    assert store.person_by_user(11) is None


def test_unions_by_partner_loads_partners_and_children() -> None:
    store = PgStore(_conn())
    (unit,) = store.unions_by_partner(2)

    assert unit.id == 7
    assert unit.union_type is UnionType.MARRIED
    assert unit.status is UnionStatus.ACTIVE
    assert unit.start_date == date(1985, 5, 1)
    assert unit.partner_ids == [1, 2]
    assert unit.partners[0].role in (PartnerRole.PARTNER1, PartnerRole.PARTNER2)
    assert unit.child_link(3).lineage is LineageKind.BIOLOGICAL


def test_unions_by_child() -> None:
    store = PgStore(_conn())
    assert [u.id for u in store.unions_by_child(3)] == [7]
    assert store.unions_by_child(1) == []


def test_get_union_missing() -> None:
    assert PgStore(_conn()).get_union(8) is None


def test_writes() -> None:
    conn = _conn()
    store = PgStore(conn)

    assert store.create_union(UnionType.PARTNERSHIP, UnionStatus.ACTIVE, None, None) == 41
    assert store.delete_union(7) is True
    assert store.delete_union(8) is False

    store.set_person_gender(3, Gender.UNKNOWN)
    q, params = conn.executed[-1]
    assert q.startswith("update person set gender")
    assert params == (None, 3)


def test_transaction_wraps_connection_transaction() -> None:
    conn = _conn()
    store = PgStore(conn)
    with store.transaction():
        pass
    assert conn.transactions == 1


def test_transaction_propagates_errors() -> None:
    store = PgStore(_conn())
    with pytest.raises(RuntimeError):
        with store.transaction():
            raise RuntimeError("rollback")
