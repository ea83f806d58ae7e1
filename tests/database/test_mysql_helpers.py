from __future__ import annotations

from datetime import datetime
from zoneinfo import ZoneInfo

import pytest

from src.signin_desk.signin_desk.common.text import to_bool
from src.signin_desk.signin_desk.core.exceptions import ConfigurationError
from src.signin_desk.signin_desk.database.mysql_base import quote_identifier, to_cell


def test_quote_identifier_accepts_plain_names():
    assert quote_identifier("roster_2026") == "`roster_2026`"


@pytest.mark.parametrize("name", ["", "bad name", "x`; DROP TABLE y", "a" * 65])
def test_quote_identifier_rejects_anything_else(name):
    with pytest.raises(ConfigurationError):
        quote_identifier(name)


def test_to_cell_serializes_values_so_they_read_back():
    ts = datetime(2025, 3, 1, 10, 0, tzinfo=ZoneInfo("America/Chicago"))

    assert to_cell(None) is None
    assert to_cell(ts) == "2025-03-01T10:00:00-06:00"
    assert to_cell(7) == "7"
    assert to_bool(to_cell(False)) is False
    assert to_bool(to_cell(True)) is True
