"""Bounded views of the union graph around a root person.

All three walks share one breadth-first engine and differ only in which
directions they may expand:

- ``get_tree``: both directions, bounded by ``max_depth``.
- ``get_ancestors``: up only (to parents), unbounded.
- ``get_descendants``: down only (to children); co-partners are recorded
  but never expanded, so in-law families stay out of the view.
"""

from __future__ import annotations

from collections import deque
from typing import Any

try:
    from .errors import person_not_found
    from .models import Person, Union
    from .serialize import _person_to_public, _unions_to_public
    from .store import Store
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    from errors import person_not_found
    from models import Person, Union
    from serialize import _person_to_public, _unions_to_public
    from store import Store

DEFAULT_TREE_DEPTH = 5


def _walk(
    store: Store,
    root_id: int,
    *,
    max_depth: int | None,
    down: bool,
    up: bool,
    expand_partners: bool,
    expand_siblings: bool,
) -> tuple[dict[int, Person], dict[int, Union]]:
    root = store.get_person(root_id)
    if root is None:
        raise person_not_found(root_id)

    persons: dict[int, Person] = {}
    unions: dict[int, Union] = {}
    seen: set[int] = {root_id}
    # Partners recorded without being expanded (descendant walk only).
    recorded_only: set[int] = set()
    queue: deque[tuple[int, int]] = deque([(root_id, 0)])

    def _enqueue(pid: int, d: int) -> None:
        if pid in seen:
            return
        seen.add(pid)
        recorded_only.discard(pid)
        queue.append((pid, d))

    while queue:
        pid, depth = queue.popleft()
        person = root if pid == root_id else store.get_person(pid)
        if person is None:
            # Dangling link in the store; skip rather than fail the view.
            continue
        persons[pid] = person

        if max_depth is not None and depth >= max_depth:
            continue

        if down:
            for unit in store.unions_by_partner(pid):
                unions.setdefault(unit.id, unit)
                for partner_id in unit.partner_ids:
                    if expand_partners:
                        _enqueue(partner_id, depth + 1)
                    elif partner_id not in seen:
                        recorded_only.add(partner_id)
                for child_id in unit.child_ids:
                    _enqueue(child_id, depth + 1)

        if up:
            for unit in store.unions_by_child(pid):
                unions.setdefault(unit.id, unit)
                for parent_id in unit.partner_ids:
                    _enqueue(parent_id, depth + 1)
                if expand_siblings:
                    for sibling_id in unit.child_ids:
                        _enqueue(sibling_id, depth + 1)

    if recorded_only:
        for pid, person in store.get_persons(sorted(recorded_only)).items():
            persons.setdefault(pid, person)

    return persons, unions


def _tree_payload(
    store: Store,
    root_id: int,
    persons: dict[int, Person],
    unions: dict[int, Union],
) -> dict[str, Any]:
    return {
        "root_person_id": root_id,
        "persons": [_person_to_public(persons[pid]) for pid in sorted(persons)],
        "unions": _unions_to_public(store, unions.values()),
    }


def get_tree(store: Store, root_id: int, max_depth: int = DEFAULT_TREE_DEPTH) -> dict[str, Any]:
    """Both-direction view: partners, children, parents and siblings per step.

    Every step costs one unit of depth. Persons discovered at ``max_depth``
    are included but not expanded, so ``max_depth=0`` yields only the root.
    """

    persons, unions = _walk(
        store,
        root_id,
        max_depth=max(0, max_depth),
        down=True,
        up=True,
        expand_partners=True,
        expand_siblings=True,
    )
    return _tree_payload(store, root_id, persons, unions)


def get_ancestors(store: Store, root_id: int) -> dict[str, Any]:
    persons, unions = _walk(
        store,
        root_id,
        max_depth=None,
        down=False,
        up=True,
        expand_partners=False,
        expand_siblings=False,
    )
    return _tree_payload(store, root_id, persons, unions)


def get_descendants(store: Store, root_id: int) -> dict[str, Any]:
    persons, unions = _walk(
        store,
        root_id,
        max_depth=None,
        down=True,
        up=False,
        expand_partners=False,
        expand_siblings=False,
    )
    return _tree_payload(store, root_id, persons, unions)
