from __future__ import annotations

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel

try:
    from ..named_edges import (
        add_named_relationship,
        get_named_tree,
        list_relationship_types,
        remove_named_relationship,
        update_named_relationship,
    )
    from ..store import open_store
    from ..vocabulary import RelationshipType
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    from named_edges import (
        add_named_relationship,
        get_named_tree,
        list_relationship_types,
        remove_named_relationship,
        update_named_relationship,
    )
    from store import open_store
    from vocabulary import RelationshipType

router = APIRouter(prefix="/named-relationships", tags=["named-relationships"])


class NamedRelationshipCreate(BaseModel):
    from_person_id: int
    to_person_id: int
    relationship_type: RelationshipType


@router.get("/types")
def relationship_types() -> list[dict[str, str]]:
    return list_relationship_types()


@router.get("")
def named_tree(person_id: int) -> dict[str, Any]:
    with open_store() as store:
        return get_named_tree(store, person_id)


@router.post("")
def create_named_relationship(body: NamedRelationshipCreate) -> dict[str, Any]:
    with open_store() as store:
        return add_named_relationship(
            store,
            body.from_person_id,
            body.to_person_id,
            body.relationship_type,
        )


@router.put("")
def change_named_relationship(body: NamedRelationshipCreate) -> dict[str, Any]:
    with open_store() as store:
        return update_named_relationship(
            store,
            body.from_person_id,
            body.to_person_id,
            body.relationship_type,
        )


@router.delete("")
def delete_named_relationship(from_id: int, to_id: int) -> dict[str, Any]:
    with open_store() as store:
        remove_named_relationship(store, from_id, to_id)
    return {"ok": True}
