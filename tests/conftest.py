from __future__ import annotations

from datetime import date
from typing import Iterable

import pytest

from kinship.memory import MemoryStore
from kinship.models import Gender, LineageKind, PartnerRole, Person, UnionStatus, UnionType

M = Gender.MALE
F = Gender.FEMALE
U = Gender.UNKNOWN


def add_union(
    store: MemoryStore,
    partners: list[int],
    children: Iterable[int] = (),
    *,
    status: UnionStatus = UnionStatus.ACTIVE,
    start_date: date | None = None,
) -> int:
    uid = store.create_union(UnionType.MARRIED, status, start_date, None)
    for role, pid in zip(PartnerRole, partners):
        store.add_partner(uid, pid, role)
    for cid in children:
        store.add_child(uid, cid, LineageKind.BIOLOGICAL, None)
    return uid


@pytest.fixture()
def family() -> MemoryStore:
    """Three generations around person 7 (Bola).

    Union ids follow creation order:
      1: Bobo(1) + Buvi(2)        -> Ota(3), Amaki(5), Amma(6)
      2: Ota(3) + Ona(4)          -> Opa(8), Bola(7), Uka(9)
      3: Ona's father(10)         -> Ona(4), Xola(11)
      4: Amaki(5) + Amaki's wife(13) -> Cousin(12)
      5: Bola(7) + Wife(14)       -> Son(15)
      6: Wife's father(16)        -> Wife(14)
    """

    store = MemoryStore(
        [
            Person(1, "Bobo", M, date(1930, 3, 1)),
            Person(2, "Buvi", F, date(1932, 5, 1)),
            Person(3, "Ota", M, date(1960, 1, 10)),
            Person(4, "Ona", F, date(1962, 2, 20)),
            Person(5, "Amaki", M, date(1958, 7, 7)),
            Person(6, "Amma", F, date(1965, 8, 8)),
            Person(7, "Bola", M, date(1990, 6, 15), user_id=70),
            Person(8, "Opa", F, date(1988, 4, 4)),
            Person(9, "Uka", M, date(1993, 9, 9)),
            Person(10, "Ona's father", M, date(1935, 1, 1)),
            Person(11, "Xola", F, date(1966, 6, 6)),
            Person(12, "Cousin", M, date(1985, 5, 5)),
            Person(13, "Amaki's wife", F, date(1960, 3, 3)),
            Person(14, "Wife", F, date(1992, 2, 2)),
            Person(15, "Son", M, date(2015, 1, 1)),
            Person(16, "Wife's father", M, date(1960, 10, 10)),
        ]
    )
    add_union(store, [1, 2], [3, 5, 6])
    add_union(store, [3, 4], [7, 8, 9])
    add_union(store, [10], [4, 11])
    add_union(store, [5, 13], [12])
    add_union(store, [7, 14], [15], start_date=date(2012, 6, 1))
    add_union(store, [16], [14])
    return store


@pytest.fixture()
def ota_ona_bola() -> MemoryStore:
    store = MemoryStore(
        [
            Person(1, "Ota", M),
            Person(2, "Ona", F),
            Person(3, "Bola", U),
        ]
    )
    add_union(store, [1, 2], [3])
    return store
