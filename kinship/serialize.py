from __future__ import annotations

from datetime import date
from typing import Any, Iterable

try:
    from .models import ChildLink, Person, Union, lineage_rank
    from .store import Store
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    from models import ChildLink, Person, Union, lineage_rank
    from store import Store


def _iso(d: date | None) -> str | None:
    return d.isoformat() if d is not None else None


def _person_to_public(p: Person) -> dict[str, Any]:
    return {
        "id": p.id,
        "full_name": p.full_name,
        "gender": p.gender.value,
        "birth_date": _iso(p.birth_date),
        "death_date": _iso(p.death_date),
        "is_active": p.is_active,
        "user_id": p.user_id,
    }


def _child_sort_key(c: ChildLink, persons: dict[int, Person]) -> tuple[Any, ...]:
    # Biological first, then explicit birth order, then birth date; None sorts last.
    p = persons.get(c.person_id)
    birth = p.birth_date if p is not None else None
    return (
        lineage_rank(c.lineage),
        c.birth_order is None,
        c.birth_order or 0,
        birth is None,
        birth or date.min,
        c.person_id,
    )


def _union_to_public(u: Union, persons: dict[int, Person]) -> dict[str, Any]:
    def _name(pid: int) -> str | None:
        p = persons.get(pid)
        return p.full_name if p is not None else None

    def _gender(pid: int) -> str | None:
        p = persons.get(pid)
        return p.gender.value if p is not None else None

    partners = sorted(u.partners, key=lambda pl: (pl.role.value, pl.person_id))
    children = sorted(u.children, key=lambda c: _child_sort_key(c, persons))

    return {
        "id": u.id,
        "union_type": u.union_type.value,
        "status": u.status.value,
        "start_date": _iso(u.start_date),
        "end_date": _iso(u.end_date),
        "partners": [
            {
                "person_id": pl.person_id,
                "full_name": _name(pl.person_id),
                "gender": _gender(pl.person_id),
                "role": pl.role.value,
            }
            for pl in partners
        ],
        "children": [
            {
                "person_id": c.person_id,
                "full_name": _name(c.person_id),
                "gender": _gender(c.person_id),
                "lineage": c.lineage.value,
                "birth_order": c.birth_order,
            }
            for c in children
        ],
    }


def _unions_to_public(store: Store, unions: Iterable[Union]) -> list[dict[str, Any]]:
    """Render unions sorted by id, fetching every referenced person in one call."""

    unions = sorted(unions, key=lambda u: u.id)
    person_ids: set[int] = set()
    for u in unions:
        person_ids.update(pl.person_id for pl in u.partners)
        person_ids.update(c.person_id for c in u.children)
    persons = store.get_persons(sorted(person_ids))
    return [_union_to_public(u, persons) for u in unions]
