from __future__ import annotations

import logging

import pytest

from conftest import add_union
from kinship import calculator
from kinship.calculator import calculate_relationship, label_tree
from kinship.errors import NotFound
from kinship.memory import MemoryStore
from kinship.models import Gender, Person, UnionStatus, UnionType
from kinship.traversal import get_ancestors, get_tree


def _labels(store, viewer_id: int, target_id: int) -> tuple[str, str]:
    out = calculate_relationship(store, viewer_id, target_id)
    return out["relationship_label"], out["reverse_label"]


def test_self_relation(family) -> None:
    out = calculate_relationship(family, 7, 7)
    assert out["relationship_label"] == "Men"
    assert out["reverse_label"] == "Men"
    assert (out["steps_up"], out["steps_down"], out["side"]) == (0, 0, None)


def test_ota_ona_bola(ota_ona_bola) -> None:
    out = calculate_relationship(ota_ona_bola, 3, 1)
    assert (out["relationship_label"], out["reverse_label"]) == ("Otam", "Farzandim")
    assert (out["steps_up"], out["steps_down"]) == (1, 0)
    assert _labels(ota_ona_bola, 3, 2) == ("Onam", "Farzandim")
    out = get_ancestors(ota_ona_bola, 3)
    assert {p["id"] for p in out["persons"]} == {1, 2, 3}
    assert [u["id"] for u in out["unions"]] == [1]


def test_spouse_is_symmetric(family) -> None:
    out = calculate_relationship(family, 7, 14)
    assert (out["relationship_label"], out["reverse_label"]) == ("Xotinim", "Erim")
    assert out["side"] == "SPOUSE"
    assert (out["steps_up"], out["steps_down"]) == (0, 0)


def test_spouse_detection_includes_dissolved_unions(family) -> None:
    family.update_union(5, UnionType.DIVORCED, UnionStatus.DISSOLVED, None, None)
    assert _labels(family, 14, 7) == ("Erim", "Xotinim")


def test_grandparent_steps(family) -> None:
    out = calculate_relationship(family, 7, 1)
    assert (out["steps_up"], out["steps_down"]) == (2, 0)
    assert out["relationship_label"] == "Bobom"
    assert out["reverse_label"] == "Nevaram (o'g'il)"


def test_siblings_use_relative_age(family) -> None:
    assert _labels(family, 7, 8) == ("Opam", "Ukam")
    assert _labels(family, 7, 9) == ("Ukam", "Akam")


def test_sibling_with_unknown_birth_date(family) -> None:
    family.add_person(Person(8, "Opa", Gender.FEMALE, None))
    assert _labels(family, 7, 8) == ("Opa-singlim", "Aka-ukam")


def test_aunts_and_uncles_by_side(family) -> None:
    out = calculate_relationship(family, 7, 5)
    assert out["relationship_label"] == "Amakim"
    assert out["reverse_label"] == "Jiyanim (o'g'il)"
    assert out["side"] == "PATERNAL"
    assert (out["steps_up"], out["steps_down"]) == (2, 1)

    assert _labels(family, 7, 6)[0] == "Ammam"

    out = calculate_relationship(family, 7, 11)
    assert out["relationship_label"] == "Xolam"
    assert out["side"] == "MATERNAL"


def test_first_cousin(family) -> None:
    out = calculate_relationship(family, 7, 12)
    assert (out["relationship_label"], out["reverse_label"]) == ("Amakivachcha", "Amakivachcha")
    assert (out["steps_up"], out["steps_down"]) == (2, 2)


def test_unknown_side_falls_back_to_relative(family) -> None:
    family.set_person_gender(3, Gender.UNKNOWN)
    out = calculate_relationship(family, 7, 5)
    assert out["relationship_label"] == "Qarindosh"
    assert out["side"] is None


def test_distant_relation_falls_back_to_relative(family) -> None:
    out = calculate_relationship(family, 15, 12)
    assert out["relationship_label"] == "Qarindosh"
    assert (out["steps_up"], out["steps_down"]) == (3, 2)


def test_in_laws(family) -> None:
    out = calculate_relationship(family, 7, 16)
    assert (out["relationship_label"], out["reverse_label"]) == ("Qaynotam", "Kuyovim")
    assert out["side"] == "IN_LAW"


def test_unrelated(family) -> None:
    out = calculate_relationship(family, 7, 13)
    assert out["relationship_label"] == "Qarindosh emas"
    assert out["reverse_label"] == "Qarindosh emas"
    assert out["steps_up"] is None
    assert out["steps_down"] is None


def test_missing_person_raises(family) -> None:
    with pytest.raises(NotFound):
        calculate_relationship(family, 7, 999)


def test_label_tree(family) -> None:
    tree = get_tree(family, 7, max_depth=1)
    labels = {row["id"]: row["relationship_label"] for row in label_tree(family, tree, 7)}
    assert labels == {
        3: "Otam",
        4: "Onam",
        7: "Men",
        8: "Opam",
        9: "Ukam",
        14: "Xotinim",
        15: "O'g'lim",
    }


def test_label_tree_isolates_failures(family, monkeypatch, caplog) -> None:
    real_relate = calculator._relate

    def _flaky(store, viewer, target):
        if target.id == 4:
            raise RuntimeError("boom")
        return real_relate(store, viewer, target)

    monkeypatch.setattr(calculator, "_relate", _flaky)
    tree = get_tree(family, 7, max_depth=1)

    with caplog.at_level(logging.ERROR, logger="kinship.calculator"):
        rows = label_tree(family, tree, 7)

    labels = {row["id"]: row["relationship_label"] for row in rows}
    assert labels[4] == "Qarindosh"
    assert labels[3] == "Otam"
    assert any("failed to label person 4" in r.getMessage() for r in caplog.records)


def test_equal_cost_common_ancestors_pick_lowest_id() -> None:
    # Double first cousins: every grandparent is shared at distance 2 + 2.
    # The maternal grandparents (1, 2) have the lowest ids, so the maternal
    # side wins even though the father is listed first in the parents' union.
    store = MemoryStore(
        [
            Person(1, "Maternal grandfather", Gender.MALE),
            Person(2, "Maternal grandmother", Gender.FEMALE),
            Person(3, "Paternal grandfather", Gender.MALE),
            Person(4, "Paternal grandmother", Gender.FEMALE),
            Person(5, "Mother", Gender.FEMALE),
            Person(6, "Father", Gender.MALE),
            Person(7, "Mother's brother", Gender.MALE),
            Person(8, "Father's sister", Gender.FEMALE),
            Person(9, "Viewer", Gender.MALE),
            Person(10, "Cousin", Gender.MALE),
        ]
    )
    add_union(store, [1, 2], [5, 7])
    add_union(store, [3, 4], [6, 8])
    add_union(store, [6, 5], [9])
    add_union(store, [7, 8], [10])

    out = calculate_relationship(store, 9, 10)
    assert out["side"] == "MATERNAL"
    assert out["relationship_label"] == "Tog'avachcha"
    assert (out["steps_up"], out["steps_down"]) == (2, 2)
