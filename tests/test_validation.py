from __future__ import annotations

import logging
from datetime import date

import pytest

from conftest import add_union
from kinship.errors import NotFound, ValidationFailed
from kinship.models import LineageKind
from kinship.validation import (
    check_child_birth_consistency,
    validate_max_partners,
    validate_no_ancestor_cycle,
    validate_no_duplicate_active_union,
    validate_not_self_partnership,
    validate_unique_biological_lineage,
)


def test_cycle_when_child_is_an_ancestor_of_a_partner(family) -> None:
    # Grandfather (1) cannot become a child of Bola (7) and Wife (14).
    with pytest.raises(ValidationFailed, match="cyclic relationship"):
        validate_no_ancestor_cycle(family, 5, 1)


def test_cycle_when_partner_descends_from_child(family) -> None:
    uid = add_union(family, [15])
    with pytest.raises(ValidationFailed, match="cyclic relationship"):
        validate_no_ancestor_cycle(family, uid, 7)


def test_no_cycle_for_unrelated_child(family) -> None:
    validate_no_ancestor_cycle(family, 5, 13)


def test_cycle_check_unknown_union(family) -> None:
    with pytest.raises(NotFound):
        validate_no_ancestor_cycle(family, 999, 7)


def test_self_partnership() -> None:
    validate_not_self_partnership(1, 2)
    with pytest.raises(ValidationFailed):
        validate_not_self_partnership(3, 3)


def test_duplicate_active_union_is_rejected_in_either_order(family) -> None:
    with pytest.raises(ValidationFailed):
        validate_no_duplicate_active_union(family, 7, 14)
    with pytest.raises(ValidationFailed):
        validate_no_duplicate_active_union(family, 14, 7)
    validate_no_duplicate_active_union(family, 7, 13)


def test_max_partners(family) -> None:
    validate_max_partners(family, 3)
    with pytest.raises(ValidationFailed, match="already has 2 partners"):
        validate_max_partners(family, 2)


def test_unique_biological_lineage(family) -> None:
    with pytest.raises(ValidationFailed):
        validate_unique_biological_lineage(family, 7, LineageKind.BIOLOGICAL)
    validate_unique_biological_lineage(family, 7, LineageKind.ADOPTED)
    validate_unique_biological_lineage(family, 1, LineageKind.BIOLOGICAL)


def test_birth_consistency_is_advisory(family, caplog) -> None:
    uid = add_union(family, [9], start_date=date(2020, 1, 1))

    with caplog.at_level(logging.WARNING, logger="kinship.validation"):
        warnings = check_child_birth_consistency(family, uid, 15)

    assert len(warnings) == 1
    assert "before union" in warnings[0]
    assert any("birth date check" in r.getMessage() for r in caplog.records)

    # Born after the union started: nothing to report.
    assert check_child_birth_consistency(family, 5, 15) == []
