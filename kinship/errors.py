from __future__ import annotations


class KinshipError(Exception):
    """Base class for errors surfaced to callers of the kinship core."""

    status_code = 500

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class NotFound(KinshipError):
    """A referenced person or union id does not exist."""

    status_code = 404


class ValidationFailed(KinshipError):
    """A mutation was rejected because it would break a graph invariant."""

    status_code = 400


def person_not_found(person_id: int) -> NotFound:
    return NotFound(f"person not found: {person_id}")


def union_not_found(union_id: int) -> NotFound:
    return NotFound(f"union not found: {union_id}")
