"""Tree views and the pairwise relationship lookup."""

from __future__ import annotations

import os
from typing import Any, Optional

from fastapi import APIRouter, Query, Request

try:
    from ..calculator import calculate_relationship, label_tree
    from ..resolve import _resolve_root_person_id
    from ..store import open_store
    from ..traversal import DEFAULT_TREE_DEPTH, get_ancestors, get_descendants, get_tree
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    from calculator import calculate_relationship, label_tree
    from resolve import _resolve_root_person_id
    from store import open_store
    from traversal import DEFAULT_TREE_DEPTH, get_ancestors, get_descendants, get_tree

router = APIRouter(tags=["tree"])

_MAX_TREE_DEPTH = 20


def _env_int(name: str, default: int) -> int:
    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _effective_depth(depth: int | None) -> int:
    """Apply ``KINSHIP_DEFAULT_DEPTH`` / ``KINSHIP_MAX_DEPTH`` to the requested depth."""

    max_depth = max(0, _env_int("KINSHIP_MAX_DEPTH", _MAX_TREE_DEPTH))
    if depth is None:
        depth = _env_int("KINSHIP_DEFAULT_DEPTH", DEFAULT_TREE_DEPTH)
    return max(0, min(depth, max_depth))


def _current_user(request: Request) -> dict[str, Any] | None:
    return getattr(request.state, "user", None)


@router.get("/tree")
def tree(
    request: Request,
    person_id: Optional[int] = None,
    depth: Optional[int] = Query(default=None, ge=0),
) -> dict[str, Any]:
    with open_store() as store:
        root_id = _resolve_root_person_id(store, person_id, _current_user(request))
        return get_tree(store, root_id, _effective_depth(depth))


@router.get("/tree/labeled")
def tree_labeled(
    request: Request,
    person_id: Optional[int] = None,
    depth: Optional[int] = Query(default=None, ge=0),
    viewer_id: Optional[int] = None,
) -> dict[str, Any]:
    """Tree view whose persons carry ``relationship_label`` as seen by the viewer.

    The viewer defaults to the tree root.
    """

    with open_store() as store:
        root_id = _resolve_root_person_id(store, person_id, _current_user(request))
        result = get_tree(store, root_id, _effective_depth(depth))
        viewer = root_id if viewer_id is None else viewer_id
        result["viewer_id"] = viewer
        result["persons"] = label_tree(store, result, viewer)
        return result


@router.get("/tree/{person_id}/ancestors")
def ancestors(person_id: int) -> dict[str, Any]:
    with open_store() as store:
        return get_ancestors(store, person_id)


@router.get("/tree/{person_id}/descendants")
def descendants(person_id: int) -> dict[str, Any]:
    with open_store() as store:
        return get_descendants(store, person_id)


@router.get("/relationship")
def relationship(viewer_id: int, target_id: int) -> dict[str, Any]:
    with open_store() as store:
        return calculate_relationship(store, viewer_id, target_id)
