"""Guards run before any union mutation is written.

Each check either returns quietly or raises ``ValidationFailed`` carrying
the violated rule; ``NotFound`` is raised for unknown union ids. None of
them writes to the store.
"""

from __future__ import annotations

import logging
from datetime import date

try:
    from .errors import ValidationFailed, person_not_found, union_not_found
    from .graph import _collect_ancestors, _collect_descendants
    from .models import LineageKind, Union
    from .store import Store
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    from errors import ValidationFailed, person_not_found, union_not_found
    from graph import _collect_ancestors, _collect_descendants
    from models import LineageKind, Union
    from store import Store

log = logging.getLogger(__name__)

MAX_PARTNERS = 2


def _require_union(store: Store, union_id: int) -> Union:
    unit = store.get_union(union_id)
    if unit is None:
        raise union_not_found(union_id)
    return unit


def validate_no_ancestor_cycle(store: Store, union_id: int, child_id: int) -> None:
    """Reject attaching ``child_id`` below a union whose partners descend from it.

    Both directions are checked: the child's descendants (the child
    included) must not contain a partner, and the partners' ancestors (the
    partners included) must not contain the child.
    """

    unit = _require_union(store, union_id)
    parent_ids = set(unit.partner_ids)
    if not parent_ids:
        return

    overlap = sorted(parent_ids & _collect_descendants(store, child_id))
    if overlap:
        raise ValidationFailed(
            f"cyclic relationship: partner {overlap[0]} of union {union_id} descends from person {child_id}"
        )

    for parent_id in sorted(parent_ids):
        if child_id in _collect_ancestors(store, parent_id):
            raise ValidationFailed(
                f"cyclic relationship: person {child_id} is already an ancestor of partner {parent_id}"
            )


def validate_not_self_partnership(person1_id: int, person2_id: int) -> None:
    if person1_id == person2_id:
        raise ValidationFailed("a person cannot be partnered with themselves")


def validate_no_duplicate_active_union(store: Store, person1_id: int, person2_id: int) -> None:
    """Reject a second ACTIVE union for the same unordered pair.

    Dissolved unions are ignored, so re-marriage after a dissolution passes.
    """

    for unit in store.unions_by_partner(person1_id):
        if unit.is_active and unit.has_partner(person2_id):
            raise ValidationFailed(
                f"persons {person1_id} and {person2_id} already share active union {unit.id}"
            )


def validate_max_partners(store: Store, union_id: int) -> None:
    unit = _require_union(store, union_id)
    if len(unit.partners) >= MAX_PARTNERS:
        raise ValidationFailed(f"union {union_id} already has {MAX_PARTNERS} partners")


def validate_unique_biological_lineage(store: Store, person_id: int, lineage: LineageKind) -> None:
    if lineage is not LineageKind.BIOLOGICAL:
        return
    for unit in store.unions_by_child(person_id):
        link = unit.child_link(person_id)
        if link is not None and link.lineage is LineageKind.BIOLOGICAL:
            raise ValidationFailed(
                f"person {person_id} is already a biological child of union {unit.id}"
            )


def check_child_birth_consistency(store: Store, union_id: int, child_id: int) -> list[str]:
    """Advisory only: never blocks the mutation.

    Returns human-readable warnings (also logged) when the child's birth
    date precedes the union's start date.
    """

    unit = _require_union(store, union_id)
    child = store.get_person(child_id)
    if child is None:
        raise person_not_found(child_id)

    warnings: list[str] = []
    start: date | None = unit.start_date
    if start is not None and child.birth_date is not None and child.birth_date < start:
        warnings.append(
            f"person {child_id} was born {child.birth_date.isoformat()}, "
            f"before union {union_id} started {start.isoformat()}"
        )

    for w in warnings:
        log.warning("birth date check: %s", w)
    return warnings
