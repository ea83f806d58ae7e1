from __future__ import annotations

import pytest

from src.signin_desk.signin_desk.roster.grades import normalize_grade


@pytest.mark.parametrize("raw", ["9", "9th", "Freshman", "grade 9", "FRESHMEN", " ninth grade ", "year 1"])
def test_ninth_grade_spellings_normalize_to_freshman(raw):
    assert normalize_grade(raw) == "Freshman"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("10th grade", "Sophomore"),
        ("11", "Junior"),
        ("12th", "Senior"),
        ("13", "Senior"),
        ("8", "Freshman"),
        ("Gr. 10", "Sophomore"),
    ],
)
def test_numbers_follow_the_grade_rule(raw, expected):
    assert normalize_grade(raw) == expected


def test_unrecognized_labels_pass_through_title_cased():
    assert normalize_grade("N/A") == "N/A"
    assert normalize_grade("graduated") == "Graduated"
    assert normalize_grade("") == ""
    assert normalize_grade(None) == ""
