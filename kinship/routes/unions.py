"""Union CRUD and partner/child membership routes."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from fastapi import APIRouter
from pydantic import BaseModel

try:
    from .. import unions as ops
    from ..models import LineageKind, UnionStatus, UnionType
    from ..store import open_store
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    import unions as ops
    from models import LineageKind, UnionStatus, UnionType
    from store import open_store

router = APIRouter(prefix="/unions", tags=["unions"])


class UnionCreate(BaseModel):
    person1_id: Optional[int] = None
    person2_id: Optional[int] = None
    union_type: UnionType = UnionType.MARRIED
    status: UnionStatus = UnionStatus.ACTIVE
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class UnionUpdate(BaseModel):
    union_type: Optional[UnionType] = None
    status: Optional[UnionStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class PartnerAdd(BaseModel):
    person_id: int


class ChildAdd(BaseModel):
    person_id: int
    lineage: LineageKind = LineageKind.BIOLOGICAL
    birth_order: Optional[int] = None


@router.post("")
def create_union(body: UnionCreate) -> dict[str, Any]:
    with open_store() as store:
        return ops.create_union(
            store,
            person1_id=body.person1_id,
            person2_id=body.person2_id,
            union_type=body.union_type,
            status=body.status,
            start_date=body.start_date,
            end_date=body.end_date,
        )


@router.get("/by-person/{person_id}")
def unions_for_person(person_id: int) -> dict[str, Any]:
    with open_store() as store:
        return ops.get_unions_for_person(store, person_id)


@router.get("/{union_id}")
def get_union(union_id: int) -> dict[str, Any]:
    with open_store() as store:
        return ops.get_union(store, union_id)


@router.put("/{union_id}")
def update_union(union_id: int, body: UnionUpdate) -> dict[str, Any]:
    """Partial update: only fields present in the body change (``null`` clears a date)."""

    changes = body.model_dump(exclude_unset=True)
    with open_store() as store:
        return ops.update_union(store, union_id, **changes)


@router.delete("/{union_id}")
def delete_union(union_id: int) -> dict[str, Any]:
    with open_store() as store:
        ops.delete_union(store, union_id)
    return {"ok": True}


@router.post("/{union_id}/partners")
def add_partner(union_id: int, body: PartnerAdd) -> dict[str, Any]:
    with open_store() as store:
        return ops.add_partner(store, union_id, body.person_id)


@router.delete("/{union_id}/partners/{person_id}")
def remove_partner(union_id: int, person_id: int) -> dict[str, Any]:
    with open_store() as store:
        return ops.remove_partner(store, union_id, person_id)


@router.post("/{union_id}/children")
def add_child(union_id: int, body: ChildAdd) -> dict[str, Any]:
    """Attach a child; birth-date inconsistencies come back under ``warnings``."""

    with open_store() as store:
        return ops.add_child(
            store,
            union_id,
            body.person_id,
            lineage=body.lineage,
            birth_order=body.birth_order,
        )


@router.delete("/{union_id}/children/{person_id}")
def remove_child(union_id: int, person_id: int) -> dict[str, Any]:
    with open_store() as store:
        return ops.remove_child(store, union_id, person_id)
