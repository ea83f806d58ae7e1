from __future__ import annotations

from zoneinfo import ZoneInfo

import pytest

from src.signin_desk.signin_desk.common.datetime_utils import now_local
from src.signin_desk.signin_desk.common.text import split_rest_last


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("Ana Maria Lopez", ("Ana Maria", "Lopez")),
        ("  Cher ", ("", "Cher")),
        ("", ("", "")),
        (None, ("", "")),
    ],
)
def test_split_rest_last(raw, expected):
    assert split_rest_last(raw) == expected


def test_now_local_defaults_to_the_program_zone():
    assert now_local().tzinfo == ZoneInfo("America/Chicago")
    assert now_local(ZoneInfo("UTC")).utcoffset().total_seconds() == 0
