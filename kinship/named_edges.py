"""Legacy named-relationship edges.

Each edge says "``to`` is the <type> of ``from``" and is always stored
together with its inverse, so both people see the relation from their side.
"""

from __future__ import annotations

import logging
from typing import Any

try:
    from .errors import NotFound, ValidationFailed, person_not_found
    from .models import Gender, NamedEdge
    from .serialize import _person_to_public
    from .store import Store
    from .vocabulary import INVERSE_TYPES, RelationshipType
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    from errors import NotFound, ValidationFailed, person_not_found
    from models import Gender, NamedEdge
    from serialize import _person_to_public
    from store import Store
    from vocabulary import INVERSE_TYPES, RelationshipType

log = logging.getLogger(__name__)


def compute_inverse(rel_type: RelationshipType, from_gender: Gender) -> RelationshipType:
    """Type of the reverse edge, chosen by the gender of the ``from`` person."""
    return INVERSE_TYPES.get((rel_type, from_gender), RelationshipType.BOSHQA)


def infer_target_gender(rel_type: RelationshipType) -> Gender:
    return rel_type.implied_gender


def list_relationship_types() -> list[dict[str, str]]:
    return [{"value": t.value, "label": t.label, "category": t.category} for t in RelationshipType]


def _implied_gender_of(stored_type: str) -> Gender:
    try:
        return RelationshipType(stored_type).implied_gender
    except ValueError:
        return Gender.UNKNOWN


def _edge_to_public(e: NamedEdge) -> dict[str, Any]:
    try:
        rel = RelationshipType(e.relationship_type)
        label = rel.label
        category = rel.category
    except ValueError:
        label = e.relationship_type
        category = "other"
    return {
        "id": e.id,
        "from_person_id": e.from_person_id,
        "to_person_id": e.to_person_id,
        "relationship_type": e.relationship_type,
        "label": label,
        "category": category,
    }


def add_named_relationship(
    store: Store,
    from_id: int,
    to_id: int,
    rel_type: RelationshipType,
) -> dict[str, Any]:
    """Store ``to`` as ``rel_type`` of ``from`` plus the inverse edge.

    Returns ``{"forward": ..., "inverse": ...}`` with both stored edges.
    """

    if from_id == to_id:
        raise ValidationFailed("a person cannot be related to themselves")

    with store.transaction():
        source = store.get_person(from_id)
        if source is None:
            raise person_not_found(from_id)
        target = store.get_person(to_id)
        if target is None:
            raise person_not_found(to_id)

        if store.named_edge(from_id, to_id) is not None or store.named_edge(to_id, from_id) is not None:
            raise ValidationFailed(f"persons {from_id} and {to_id} are already related")

        implied = infer_target_gender(rel_type)
        if implied is not Gender.UNKNOWN and target.gender is Gender.UNKNOWN:
            store.set_person_gender(to_id, implied)
            log.info("Set gender of person %s to %s from relationship %s", to_id, implied.value, rel_type.value)

        inverse = compute_inverse(rel_type, source.gender)
        forward_id = store.add_named_edge(from_id, to_id, rel_type.value)
        inverse_id = store.add_named_edge(to_id, from_id, inverse.value)

    log.info(
        "Named relationship %s -> %s stored as %s (inverse %s)",
        from_id,
        to_id,
        rel_type.value,
        inverse.value,
    )
    return {
        "forward": _edge_to_public(NamedEdge(from_id, to_id, rel_type.value, forward_id)),
        "inverse": _edge_to_public(NamedEdge(to_id, from_id, inverse.value, inverse_id)),
    }


def update_named_relationship(
    store: Store,
    from_id: int,
    to_id: int,
    new_type: RelationshipType,
) -> dict[str, Any]:
    """Replace the type of an existing ``from -> to`` edge and rewrite its inverse.

    A target gender that matches the one implied by the replaced type is
    treated as derived from it and re-derived from ``new_type``.
    """

    with store.transaction():
        current = store.named_edge(from_id, to_id)
        if current is None:
            raise NotFound(f"no relationship from person {from_id} to person {to_id}")

        target = store.get_person(to_id)
        old_implied = _implied_gender_of(current.relationship_type)
        new_implied = infer_target_gender(new_type)
        if (
            target is not None
            and old_implied is not Gender.UNKNOWN
            and target.gender is old_implied
            and new_implied is not old_implied
        ):
            store.set_person_gender(to_id, new_implied)
            log.info("Reset gender of person %s to %s after relationship change", to_id, new_implied.value)

        store.remove_named_edge(from_id, to_id)
        store.remove_named_edge(to_id, from_id)
        out = add_named_relationship(store, from_id, to_id, new_type)
    return out


def remove_named_relationship(store: Store, person_a: int, person_b: int) -> None:
    with store.transaction():
        removed_forward = store.remove_named_edge(person_a, person_b)
        removed_reverse = store.remove_named_edge(person_b, person_a)
        if not (removed_forward or removed_reverse):
            raise NotFound(f"no relationship between persons {person_a} and {person_b}")
    log.info("Named relationship between %s and %s removed", person_a, person_b)


def get_named_tree(store: Store, root_id: int) -> dict[str, Any]:
    """Root person, the people it has edges to, and those edges."""

    root = store.get_person(root_id)
    if root is None:
        raise person_not_found(root_id)

    edges = store.named_edges_from(root_id)
    others = store.get_persons(sorted({e.to_person_id for e in edges}))
    persons = {root_id: root, **others}

    return {
        "root_person_id": root_id,
        "persons": [_person_to_public(persons[pid]) for pid in sorted(persons)],
        "relationships": [_edge_to_public(e) for e in edges if e.to_person_id in persons],
    }
