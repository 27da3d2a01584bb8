"""Union mutation entry points.

Every mutation runs its validation and its writes inside one
``store.transaction()``; a rejected mutation leaves the store untouched.
Successful mutations return the refreshed union view.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

try:
    from .errors import NotFound, ValidationFailed, person_not_found, union_not_found
    from .graph import _collect_descendants
    from .models import LineageKind, PartnerRole, Person, Union, UnionStatus, UnionType
    from .serialize import _unions_to_public
    from .store import Store
    from .validation import (
        check_child_birth_consistency,
        validate_max_partners,
        validate_no_ancestor_cycle,
        validate_no_duplicate_active_union,
        validate_not_self_partnership,
        validate_unique_biological_lineage,
    )
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    from errors import NotFound, ValidationFailed, person_not_found, union_not_found
    from graph import _collect_descendants
    from models import LineageKind, PartnerRole, Person, Union, UnionStatus, UnionType
    from serialize import _unions_to_public
    from store import Store
    from validation import (
        check_child_birth_consistency,
        validate_max_partners,
        validate_no_ancestor_cycle,
        validate_no_duplicate_active_union,
        validate_not_self_partnership,
        validate_unique_biological_lineage,
    )

log = logging.getLogger(__name__)

_UNSET: Any = object()


def first_free_role(unit: Union) -> PartnerRole:
    taken = {p.role for p in unit.partners}
    for role in PartnerRole:
        if role not in taken:
            return role
    raise ValidationFailed(f"union {unit.id} has no free partner slot")


def _get_person(store: Store, person_id: int) -> Person:
    p = store.get_person(person_id)
    if p is None:
        raise person_not_found(person_id)
    return p


def _get_union(store: Store, union_id: int) -> Union:
    unit = store.get_union(union_id)
    if unit is None:
        raise union_not_found(union_id)
    return unit


def _union_view(store: Store, union_id: int) -> dict[str, Any]:
    return _unions_to_public(store, [_get_union(store, union_id)])[0]


def get_union(store: Store, union_id: int) -> dict[str, Any]:
    return _union_view(store, union_id)


def get_unions_for_person(store: Store, person_id: int) -> dict[str, Any]:
    """Unions where the person is a partner, and where they are a child."""

    _get_person(store, person_id)
    return {
        "person_id": person_id,
        "as_partner": _unions_to_public(store, store.unions_by_partner(person_id)),
        "as_child": _unions_to_public(store, store.unions_by_child(person_id)),
    }


def create_union(
    store: Store,
    person1_id: int | None = None,
    person2_id: int | None = None,
    union_type: UnionType = UnionType.MARRIED,
    status: UnionStatus = UnionStatus.ACTIVE,
    start_date: date | None = None,
    end_date: date | None = None,
) -> dict[str, Any]:
    """Create a union with up to two partners.

    Either partner may be omitted to create a single-parent placeholder.
    """

    partner_ids = [pid for pid in (person1_id, person2_id) if pid is not None]

    with store.transaction():
        for pid in partner_ids:
            _get_person(store, pid)
        if len(partner_ids) == 2:
            validate_not_self_partnership(partner_ids[0], partner_ids[1])
            if status is UnionStatus.ACTIVE:
                validate_no_duplicate_active_union(store, partner_ids[0], partner_ids[1])

        union_id = store.create_union(union_type, status, start_date, end_date)
        for role, pid in zip(PartnerRole, partner_ids):
            store.add_partner(union_id, pid, role)

    log.info("Created union %s (%s) with partners %s", union_id, union_type.value, partner_ids)
    return _union_view(store, union_id)


def update_union(
    store: Store,
    union_id: int,
    *,
    union_type: UnionType | None = None,
    status: UnionStatus | None = None,
    start_date: date | None = _UNSET,
    end_date: date | None = _UNSET,
) -> dict[str, Any]:
    """Change union attributes; dates may be cleared by passing None explicitly."""

    with store.transaction():
        unit = _get_union(store, union_id)
        new_type = union_type or unit.union_type
        new_status = status or unit.status
        new_start = unit.start_date if start_date is _UNSET else start_date
        new_end = unit.end_date if end_date is _UNSET else end_date

        # Reactivating a dissolved union must not create a second active marriage.
        partner_ids = unit.partner_ids
        if new_status is UnionStatus.ACTIVE and not unit.is_active and len(partner_ids) == 2:
            validate_no_duplicate_active_union(store, partner_ids[0], partner_ids[1])

        store.update_union(union_id, new_type, new_status, new_start, new_end)

    log.info("Updated union %s: type=%s status=%s", union_id, new_type.value, new_status.value)
    return _union_view(store, union_id)


def delete_union(store: Store, union_id: int) -> None:
    with store.transaction():
        if not store.delete_union(union_id):
            raise union_not_found(union_id)
    log.info("Deleted union %s", union_id)


def add_partner(store: Store, union_id: int, person_id: int) -> dict[str, Any]:
    with store.transaction():
        _get_person(store, person_id)
        unit = _get_union(store, union_id)
        if unit.has_partner(person_id):
            raise ValidationFailed(f"person {person_id} is already a partner of union {union_id}")
        validate_max_partners(store, union_id)

        if unit.is_active:
            for other_id in unit.partner_ids:
                validate_no_duplicate_active_union(store, other_id, person_id)

        for child_id in unit.child_ids:
            if person_id in _collect_descendants(store, child_id):
                raise ValidationFailed(
                    f"cyclic relationship: person {person_id} descends from child {child_id} of union {union_id}"
                )

        role = first_free_role(unit)
        store.add_partner(union_id, person_id, role)

    log.info("Added person %s to union %s as %s", person_id, union_id, role.value)
    return _union_view(store, union_id)


def remove_partner(store: Store, union_id: int, person_id: int) -> dict[str, Any]:
    with store.transaction():
        _get_union(store, union_id)
        if not store.remove_partner(union_id, person_id):
            raise NotFound(f"person {person_id} is not a partner of union {union_id}")
    log.info("Removed partner %s from union %s", person_id, union_id)
    return _union_view(store, union_id)


def add_child(
    store: Store,
    union_id: int,
    person_id: int,
    lineage: LineageKind = LineageKind.BIOLOGICAL,
    birth_order: int | None = None,
) -> dict[str, Any]:
    """Attach a child; the view carries advisory ``warnings`` about birth dates."""

    with store.transaction():
        _get_person(store, person_id)
        unit = _get_union(store, union_id)
        if unit.child_link(person_id) is not None:
            raise ValidationFailed(f"person {person_id} is already a child of union {union_id}")

        validate_unique_biological_lineage(store, person_id, lineage)
        validate_no_ancestor_cycle(store, union_id, person_id)
        warnings = check_child_birth_consistency(store, union_id, person_id)

        store.add_child(union_id, person_id, lineage, birth_order)

    log.info("Added child %s to union %s (%s)", person_id, union_id, lineage.value)
    view = _union_view(store, union_id)
    view["warnings"] = warnings
    return view


def remove_child(store: Store, union_id: int, person_id: int) -> dict[str, Any]:
    with store.transaction():
        _get_union(store, union_id)
        if not store.remove_child(union_id, person_id):
            raise NotFound(f"person {person_id} is not a child of union {union_id}")
    log.info("Removed child %s from union %s", person_id, union_id)
    return _union_view(store, union_id)
