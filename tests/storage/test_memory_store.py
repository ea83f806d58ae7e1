from __future__ import annotations

from src.signin_desk.signin_desk.storage.memory_store import InMemoryTabularStore


def test_row_keys_survive_deletes_and_are_not_reused():
    store = InMemoryTabularStore({"t": [["A", "B"]]})
    k1, k2, k3 = store.append_rows("t", [["1", "x"], ["2", "y"], ["3", "z"]])

    store.delete_rows("t", [k2])
    (k4,) = store.append_rows("t", [["4", "w"]])

    assert [r.key for r in store.scan("t")] == [k1, k3, k4]
    assert k4 not in (k1, k2, k3)
    assert store.get_rows("t", [k3])[k3].values == ("3", "z")


def test_update_skips_rows_that_no_longer_exist():
    store = InMemoryTabularStore({"t": [["A", "B"]]})
    (k1,) = store.append_rows("t", [["1", "x"]])

    applied = store.update_rows("t", {k1: {1: "changed"}, 9999: {1: "ghost"}})

    assert applied == [k1]
    assert store.scan("t")[0].values == ("1", "changed")


def test_rows_are_padded_to_header_width_after_columns_are_added():
    store = InMemoryTabularStore({"t": [["A"], ["1"]]})

    store.add_columns("t", ["B", "a"])

    assert store.get_header("t") == ["A", "B"]
    assert store.scan("t")[0].values == ("1", "")
