"""Static kinship vocabulary (Uzbek).

Two tables live here:

- ``KINSHIP_LABELS``: derived relationships, keyed by
  ``(steps_up, steps_down, target_gender, side, elder)``.
- ``RelationshipType`` with its inverse table, used by the legacy
  named-edge model.

Every lookup is a plain dict access. A key that is not tabulated is an
explicit fallback to ``RELATIVE_LABEL``, never an error.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

try:
    from .models import Gender
except ImportError:  # pragma: no cover
    # Support running with CWD=kinship (e.g., `python -m uvicorn main:app`).
    from models import Gender

SELF_LABEL = "Men"
RELATIVE_LABEL = "Qarindosh"
NOT_RELATED_LABEL = "Qarindosh emas"

# Anything further apart than this (up + down) is just "a relative".
MAX_GENERATIONAL_DISTANCE = 4


class Side(str, Enum):
    PATERNAL = "PATERNAL"
    MATERNAL = "MATERNAL"
    SPOUSE = "SPOUSE"
    IN_LAW = "IN_LAW"


class InLaw(str, Enum):
    PARENT = "PARENT"  # a parent of one of my partners
    CHILD = "CHILD"  # a partner of one of my children


_M = Gender.MALE
_F = Gender.FEMALE
_U = Gender.UNKNOWN
_PAT = Side.PATERNAL
_MAT = Side.MATERNAL

SPOUSE_LABELS: dict[Gender, str] = {
    _M: "Erim",
    _F: "Xotinim",
    _U: "Juftim",
}

IN_LAW_LABELS: dict[tuple[InLaw, Gender], str] = {
    (InLaw.PARENT, _M): "Qaynotam",
    (InLaw.PARENT, _F): "Qaynonam",
    (InLaw.CHILD, _M): "Kuyovim",
    (InLaw.CHILD, _F): "Kelinim",
}

KinshipKey = tuple[int, int, Gender, Optional[Side], Optional[bool]]

KINSHIP_LABELS: dict[KinshipKey, str] = {
    # parents / children
    (1, 0, _M, None, None): "Otam",
    (1, 0, _F, None, None): "Onam",
    (1, 0, _U, None, None): "Ota-onam",
    (0, 1, _M, None, None): "O'g'lim",
    (0, 1, _F, None, None): "Qizim",
    (0, 1, _U, None, None): "Farzandim",
    # siblings; elder=None when the birth order is unknown
    (1, 1, _M, None, True): "Akam",
    (1, 1, _M, None, False): "Ukam",
    (1, 1, _M, None, None): "Aka-ukam",
    (1, 1, _F, None, True): "Opam",
    (1, 1, _F, None, False): "Singlim",
    (1, 1, _F, None, None): "Opa-singlim",
    (1, 1, _U, None, True): "Tug'ishganim",
    (1, 1, _U, None, False): "Tug'ishganim",
    (1, 1, _U, None, None): "Tug'ishganim",
    # grandparents / grandchildren
    (2, 0, _M, None, None): "Bobom",
    (2, 0, _F, None, None): "Buvim",
    (2, 0, _U, None, None): "Bobo-buvim",
    (0, 2, _M, None, None): "Nevaram (o'g'il)",
    (0, 2, _F, None, None): "Nevaram (qiz)",
    (0, 2, _U, None, None): "Nevaram",
    # aunts / uncles
    (2, 1, _M, _PAT, None): "Amakim",
    (2, 1, _F, _PAT, None): "Ammam",
    (2, 1, _M, _MAT, None): "Tog'am",
    (2, 1, _F, _MAT, None): "Xolam",
    # nieces / nephews
    (1, 2, _M, None, None): "Jiyanim (o'g'il)",
    (1, 2, _F, None, None): "Jiyanim (qiz)",
    (1, 2, _U, None, None): "Jiyanim",
    # first cousins
    (2, 2, _M, _PAT, None): "Amakivachcha",
    (2, 2, _F, _PAT, None): "Amakivachcha (qiz)",
    (2, 2, _U, _PAT, None): "Amakivachcha",
    (2, 2, _M, _MAT, None): "Tog'avachcha",
    (2, 2, _F, _MAT, None): "Tog'avachcha (qiz)",
    (2, 2, _U, _MAT, None): "Tog'avachcha",
    # great-grandparents / great-grandchildren
    (3, 0, _M, None, None): "Probobo",
    (3, 0, _F, None, None): "Probuvi",
    (0, 3, _M, None, None): "Evaram (o'g'il)",
    (0, 3, _F, None, None): "Evaram (qiz)",
    (0, 3, _U, None, None): "Evaram",
}

_SIDE_SENSITIVE = frozenset({(2, 1), (2, 2)})
_ORDER_SENSITIVE = frozenset({(1, 1)})


def kinship_key(
    steps_up: int,
    steps_down: int,
    gender: Gender,
    side: Side | None,
    elder: bool | None,
) -> KinshipKey:
    """Drop the components that do not disambiguate this distance."""
    steps = (steps_up, steps_down)
    return (
        steps_up,
        steps_down,
        gender,
        side if steps in _SIDE_SENSITIVE else None,
        elder if steps in _ORDER_SENSITIVE else None,
    )


def kinship_label(
    steps_up: int,
    steps_down: int,
    gender: Gender,
    side: Side | None = None,
    elder: bool | None = None,
) -> str:
    if steps_up + steps_down > MAX_GENERATIONAL_DISTANCE:
        return RELATIVE_LABEL
    key = kinship_key(steps_up, steps_down, gender, side, elder)
    return KINSHIP_LABELS.get(key, RELATIVE_LABEL)


def spouse_label(gender: Gender) -> str:
    return SPOUSE_LABELS[gender]


def in_law_label(kind: InLaw, gender: Gender) -> str:
    return IN_LAW_LABELS.get((kind, gender), RELATIVE_LABEL)


# ---------------------------------------------------------------------------
# Named relationship types (legacy edge model)
# ---------------------------------------------------------------------------


class RelationshipType(str, Enum):
    OTA = "OTA"
    ONA = "ONA"
    OTA_ONA = "OTA_ONA"
    OGIL = "OGIL"
    QIZ = "QIZ"
    FARZAND = "FARZAND"
    ER = "ER"
    XOTIN = "XOTIN"
    JUFT = "JUFT"
    AKA = "AKA"
    UKA = "UKA"
    OPA = "OPA"
    SINGIL = "SINGIL"
    TUGISHGAN = "TUGISHGAN"
    BOBO = "BOBO"
    BUVI = "BUVI"
    BOBO_BUVI = "BOBO_BUVI"
    NEVARA_OGIL = "NEVARA_OGIL"
    NEVARA_QIZ = "NEVARA_QIZ"
    NEVARA = "NEVARA"
    AMAKI = "AMAKI"
    TOGHA = "TOGHA"
    AMMA = "AMMA"
    XOLA = "XOLA"
    JIYAN_OGIL = "JIYAN_OGIL"
    JIYAN_QIZ = "JIYAN_QIZ"
    JIYAN = "JIYAN"
    KUYOV = "KUYOV"
    KELIN = "KELIN"
    QAYIN_OTA = "QAYIN_OTA"
    QAYIN_ONA = "QAYIN_ONA"
    BOSHQA = "BOSHQA"

    @property
    def label(self) -> str:
        return _TYPE_INFO[self][0]

    @property
    def category(self) -> str:
        return _TYPE_INFO[self][1]

    @property
    def implied_gender(self) -> Gender:
        return _TYPE_INFO[self][2]


R = RelationshipType

# type -> (display label, category, gender implied for the target)
_TYPE_INFO: dict[RelationshipType, tuple[str, str, Gender]] = {
    R.OTA: ("Otam", "parents", _M),
    R.ONA: ("Onam", "parents", _F),
    R.OTA_ONA: ("Ota-onam", "parents", _U),
    R.OGIL: ("O'g'lim", "children", _M),
    R.QIZ: ("Qizim", "children", _F),
    R.FARZAND: ("Farzandim", "children", _U),
    R.ER: ("Erim", "spouse", _M),
    R.XOTIN: ("Xotinim", "spouse", _F),
    R.JUFT: ("Juftim", "spouse", _U),
    R.AKA: ("Akam", "siblings", _M),
    R.UKA: ("Ukam", "siblings", _M),
    R.OPA: ("Opam", "siblings", _F),
    R.SINGIL: ("Singlim", "siblings", _F),
    R.TUGISHGAN: ("Tug'ishganim", "siblings", _U),
    R.BOBO: ("Bobom", "grandparents", _M),
    R.BUVI: ("Buvim", "grandparents", _F),
    R.BOBO_BUVI: ("Bobo-buvim", "grandparents", _U),
    R.NEVARA_OGIL: ("Nevaram (o'g'il)", "grandchildren", _M),
    R.NEVARA_QIZ: ("Nevaram (qiz)", "grandchildren", _F),
    R.NEVARA: ("Nevaram", "grandchildren", _U),
    R.AMAKI: ("Amakim", "extended", _M),
    R.TOGHA: ("Tog'am", "extended", _M),
    R.AMMA: ("Ammam", "extended", _F),
    R.XOLA: ("Xolam", "extended", _F),
    R.JIYAN_OGIL: ("Jiyanim (o'g'il)", "extended", _M),
    R.JIYAN_QIZ: ("Jiyanim (qiz)", "extended", _F),
    R.JIYAN: ("Jiyanim", "extended", _U),
    R.KUYOV: ("Kuyovim", "in-laws", _M),
    R.KELIN: ("Kelinim", "in-laws", _F),
    R.QAYIN_OTA: ("Qaynotam", "in-laws", _M),
    R.QAYIN_ONA: ("Qaynonam", "in-laws", _F),
    R.BOSHQA: ("Boshqa", "other", _U),
}


def _inverse_rows(
    types: tuple[RelationshipType, ...],
    male: RelationshipType,
    female: RelationshipType,
    unknown: RelationshipType,
) -> dict[tuple[RelationshipType, Gender], RelationshipType]:
    out = {}
    for t in types:
        out[(t, _M)] = male
        out[(t, _F)] = female
        out[(t, _U)] = unknown
    return out


# (forward type, gender of the *from* person) -> type of the reverse edge.
INVERSE_TYPES: dict[tuple[RelationshipType, Gender], RelationshipType] = {
    **_inverse_rows((R.OTA, R.ONA, R.OTA_ONA), R.OGIL, R.QIZ, R.FARZAND),
    **_inverse_rows((R.OGIL, R.QIZ, R.FARZAND), R.OTA, R.ONA, R.OTA_ONA),
    **_inverse_rows((R.ER,), R.XOTIN, R.XOTIN, R.XOTIN),
    **_inverse_rows((R.XOTIN,), R.ER, R.ER, R.ER),
    **_inverse_rows((R.JUFT,), R.ER, R.XOTIN, R.JUFT),
    # "my elder sibling" inverts to "my younger sibling" and vice versa
    **_inverse_rows((R.AKA, R.OPA), R.UKA, R.SINGIL, R.TUGISHGAN),
    **_inverse_rows((R.UKA, R.SINGIL), R.AKA, R.OPA, R.TUGISHGAN),
    **_inverse_rows((R.TUGISHGAN,), R.TUGISHGAN, R.TUGISHGAN, R.TUGISHGAN),
    **_inverse_rows((R.BOBO, R.BUVI, R.BOBO_BUVI), R.NEVARA_OGIL, R.NEVARA_QIZ, R.NEVARA),
    **_inverse_rows((R.NEVARA_OGIL, R.NEVARA_QIZ, R.NEVARA), R.BOBO, R.BUVI, R.BOBO_BUVI),
    **_inverse_rows((R.AMAKI, R.TOGHA, R.AMMA, R.XOLA), R.JIYAN_OGIL, R.JIYAN_QIZ, R.JIYAN),
    **_inverse_rows((R.JIYAN_OGIL, R.JIYAN_QIZ, R.JIYAN), R.AMAKI, R.AMMA, R.BOSHQA),
    **_inverse_rows((R.KUYOV, R.KELIN), R.QAYIN_OTA, R.QAYIN_ONA, R.BOSHQA),
    **_inverse_rows((R.QAYIN_OTA, R.QAYIN_ONA), R.KUYOV, R.KELIN, R.BOSHQA),
    **_inverse_rows((R.BOSHQA,), R.BOSHQA, R.BOSHQA, R.BOSHQA),
}
