"""Derive the kinship label between two people from the union graph.

The relation is reduced to ``(steps_up, steps_down)`` through the
least-cost common ancestor, then looked up in the vocabulary table together
with the target's gender, the side of the family (for aunts/uncles and
cousins) and relative age (for siblings).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

try:
    from .errors import person_not_found
    from .graph import _ancestor_distances, _bfs_path_up, _fetch_children, _fetch_parents, _fetch_partners
    from .models import Gender, Person
    from .store import Store
    from .vocabulary import (
        NOT_RELATED_LABEL,
        RELATIVE_LABEL,
        SELF_LABEL,
        InLaw,
        Side,
        in_law_label,
        kinship_label,
        spouse_label,
    )
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    from errors import person_not_found
    from graph import _ancestor_distances, _bfs_path_up, _fetch_children, _fetch_parents, _fetch_partners
    from models import Gender, Person
    from store import Store
    from vocabulary import (
        NOT_RELATED_LABEL,
        RELATIVE_LABEL,
        SELF_LABEL,
        InLaw,
        Side,
        in_law_label,
        kinship_label,
        spouse_label,
    )

log = logging.getLogger(__name__)


@dataclass
class _Relation:
    label: str
    steps_up: Optional[int]
    steps_down: Optional[int]
    side: Optional[Side]


def _require_person(store: Store, person_id: int) -> Person:
    p = store.get_person(person_id)
    if p is None:
        raise person_not_found(person_id)
    return p


def _common_ancestor(
    viewer_up: dict[int, int],
    target_up: dict[int, int],
) -> tuple[int, int, int] | None:
    """Return ``(ancestor_id, up, down)`` minimising ``up + down``, lowest id on ties."""

    best: tuple[int, int, int] | None = None
    for anc in sorted(viewer_up.keys() & target_up.keys()):
        up, down = viewer_up[anc], target_up[anc]
        if up + down == 0:
            continue
        if best is None or up + down < best[1] + best[2]:
            best = (anc, up, down)
    return best


def _side_of(store: Store, viewer_id: int, ancestor_id: int) -> Side | None:
    path = _bfs_path_up(store, viewer_id, ancestor_id)
    if len(path) < 2:
        return None
    parent = store.get_person(path[1])
    if parent is None:
        return None
    if parent.gender is Gender.MALE:
        return Side.PATERNAL
    if parent.gender is Gender.FEMALE:
        return Side.MATERNAL
    return None


def _elder(viewer: Person, target: Person) -> bool | None:
    """True if ``target`` was born strictly before ``viewer``; None if unknown."""

    if viewer.birth_date is None or target.birth_date is None:
        return None
    if target.birth_date < viewer.birth_date:
        return True
    if target.birth_date > viewer.birth_date:
        return False
    return None


def _in_law(store: Store, viewer_id: int, target_id: int) -> InLaw | None:
    for partner_id in _fetch_partners(store, viewer_id):
        if target_id in _fetch_parents(store, partner_id):
            return InLaw.PARENT
    for child_id in _fetch_children(store, viewer_id):
        if target_id in _fetch_partners(store, child_id):
            return InLaw.CHILD
    return None


def _relate(store: Store, viewer: Person, target: Person) -> _Relation:
    if viewer.id == target.id:
        return _Relation(SELF_LABEL, 0, 0, None)

    if target.id in _fetch_partners(store, viewer.id):
        return _Relation(spouse_label(target.gender), 0, 0, Side.SPOUSE)

    common = _common_ancestor(
        _ancestor_distances(store, viewer.id),
        _ancestor_distances(store, target.id),
    )
    if common is None:
        kind = _in_law(store, viewer.id, target.id)
        if kind is not None:
            return _Relation(in_law_label(kind, target.gender), 0, 0, Side.IN_LAW)
        return _Relation(NOT_RELATED_LABEL, None, None, None)

    ancestor_id, up, down = common
    side = _side_of(store, viewer.id, ancestor_id)
    elder = _elder(viewer, target) if (up, down) == (1, 1) else None
    return _Relation(kinship_label(up, down, target.gender, side, elder), up, down, side)


def calculate_relationship(store: Store, viewer_id: int, target_id: int) -> dict[str, Any]:
    """Label ``target`` as seen by ``viewer`` and vice versa.

    ``steps_up``/``steps_down`` and ``side`` describe the forward direction.
    """

    viewer = _require_person(store, viewer_id)
    target = _require_person(store, target_id)

    forward = _relate(store, viewer, target)
    reverse = _relate(store, target, viewer)
    return {
        "viewer_id": viewer_id,
        "target_id": target_id,
        "relationship_label": forward.label,
        "reverse_label": reverse.label,
        "steps_up": forward.steps_up,
        "steps_down": forward.steps_down,
        "side": forward.side.value if forward.side is not None else None,
    }


def label_tree(store: Store, tree: dict[str, Any], viewer_id: int) -> list[dict[str, Any]]:
    viewer = _require_person(store, viewer_id)

    out: list[dict[str, Any]] = []
    for row in tree.get("persons") or []:
        labeled = dict(row)
        try:
            target = _require_person(store, int(row["id"]))
            labeled["relationship_label"] = _relate(store, viewer, target).label
        except Exception:
            log.exception("failed to label person %s for viewer %s", row.get("id"), viewer_id)
            labeled["relationship_label"] = RELATIVE_LABEL
        out.append(labeled)
    return out
