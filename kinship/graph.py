"""Neighbour lookups and BFS closures over the union graph.

"Up" means through unions where a person is a child (to the partners of
that union); "down" means through unions where a person is a partner (to
the children of that union).
"""

from __future__ import annotations

from collections import deque

try:
    from .store import Store
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    from store import Store


def _fetch_parents(store: Store, person_id: int) -> list[int]:
    out: list[int] = []
    for unit in store.unions_by_child(person_id):
        for pid in unit.partner_ids:
            if pid != person_id and pid not in out:
                out.append(pid)
    return out


def _fetch_children(store: Store, person_id: int) -> list[int]:
    out: list[int] = []
    for unit in store.unions_by_partner(person_id):
        for cid in unit.child_ids:
            if cid != person_id and cid not in out:
                out.append(cid)
    return out


def _fetch_partners(store: Store, person_id: int) -> list[int]:
    """Everyone sharing a union with ``person_id``, dissolved unions included."""
    out: list[int] = []
    for unit in store.unions_by_partner(person_id):
        for pid in unit.partner_ids:
            if pid != person_id and pid not in out:
                out.append(pid)
    return out


def _ancestor_distances(store: Store, start: int) -> dict[int, int]:
    """Return ancestor->minimum generations up from ``start`` (``start`` itself at 0)."""

    distances: dict[int, int] = {start: 0}
    queue: deque[int] = deque([start])
    while queue:
        node = queue.popleft()
        for parent in _fetch_parents(store, node):
            if parent in distances:
                continue
            distances[parent] = distances[node] + 1
            queue.append(parent)
    return distances


def _collect_ancestors(store: Store, start: int) -> set[int]:
    return set(_ancestor_distances(store, start))


def _collect_descendants(store: Store, start: int) -> set[int]:
    """Return ``start`` plus everything reachable downwards from it."""

    seen: set[int] = {start}
    queue: deque[int] = deque([start])
    while queue:
        node = queue.popleft()
        for child in _fetch_children(store, node):
            if child in seen:
                continue
            seen.add(child)
            queue.append(child)
    return seen


def _bfs_path_up(store: Store, start: int, goal: int) -> list[int]:
    """Shortest upward path ``[start, ..., goal]``, or [] if ``goal`` is not an ancestor."""

    if start == goal:
        return [start]

    came_from: dict[int, int | None] = {start: None}
    queue: deque[int] = deque([start])
    while queue:
        node = queue.popleft()
        for parent in _fetch_parents(store, node):
            if parent in came_from:
                continue
            came_from[parent] = node
            if parent == goal:
                path = [goal]
                cur: int | None = node
                while cur is not None:
                    path.append(cur)
                    cur = came_from[cur]
                path.reverse()
                return path
            queue.append(parent)
    return []
