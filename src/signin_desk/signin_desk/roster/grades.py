from __future__ import annotations

import re
from typing import Any

from ..common.text import clean, fold, title_words

FRESHMAN = "Freshman"
SOPHOMORE = "Sophomore"
JUNIOR = "Junior"
SENIOR = "Senior"

_SYNONYMS = {
    FRESHMAN: ("freshman", "freshmen", "9", "9th", "9th grade", "grade 9", "ninth", "ninth grade", "year 1"),
    SOPHOMORE: ("sophomore", "sophomores", "10", "10th", "10th grade", "grade 10", "tenth", "tenth grade", "year 2"),
    JUNIOR: ("junior", "juniors", "11", "11th", "11th grade", "grade 11", "eleventh", "eleventh grade", "year 3"),
    SENIOR: ("senior", "seniors", "12", "12th", "12th grade", "grade 12", "twelfth", "twelfth grade", "year 4"),
}
_BY_SYNONYM = {syn: label for label, syns in _SYNONYMS.items() for syn in syns}
_NUMBER_RE = re.compile(r"\d+")


def normalize_grade(value: Any) -> str:
    """Map free-form grade input to Freshman/Sophomore/Junior/Senior.

    Known synonyms match case-insensitively. Otherwise the first number decides
    (9 and below Freshman, 12 and above Senior). Anything else is title-cased as is.
    """
    raw = clean(value)
    if not raw:
        return ""

    key = " ".join(fold(raw).replace(".", " ").split())
    label = _BY_SYNONYM.get(key)
    if label:
        return label

    m = _NUMBER_RE.search(key)
    if m:
        n = int(m.group(0))
        if n <= 9:
            return FRESHMAN
        if n == 10:
            return SOPHOMORE
        if n == 11:
            return JUNIOR
        return SENIOR

    return title_words(raw)
