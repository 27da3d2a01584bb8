from __future__ import annotations

from typing import Any

try:
    from .errors import NotFound, person_not_found
    from .store import Store
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    from errors import NotFound, person_not_found
    from store import Store


def _resolve_root_person_id(store: Store, person_id: int | None, user: dict[str, Any] | None) -> int:
    """Pick the tree root: an explicit ``person_id``, else the current user's own person."""

    if person_id is not None:
        if store.get_person(person_id) is None:
            raise person_not_found(person_id)
        return person_id

    user_id = (user or {}).get("id")
    if user_id is None:
        raise NotFound("no person_id given and no current user")
    p = store.person_by_user(int(user_id))
    if p is None:
        raise NotFound(f"no person linked to user {user_id}")
    return p.id
