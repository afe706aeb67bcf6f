from __future__ import annotations

import pytest

from chipbox.core.errors import InvalidArgumentError
from chipbox.core.pool import CandidatePool, available_items
from chipbox.core.selection import SelectionState


def test_pool_dedup_keeps_first_occurrence() -> None:
    pool = CandidatePool()
    pool.replace(["B", "A", "B", "C", "A"])
    assert pool.items() == ["B", "A", "C"]
    assert len(pool) == 3
    assert "C" in pool
    assert "Z" not in pool


def test_pool_rejects_none_but_accepts_empty() -> None:
    pool = CandidatePool(["A"])
    with pytest.raises(InvalidArgumentError):
        pool.replace(None)
    # 失败时原内容不变
    assert pool.items() == ["A"]

    pool.replace([])
    assert pool.items() == []


def test_pool_accepts_unhashable_items() -> None:
    a = {"id": 1}
    b = {"id": 2}
    pool = CandidatePool([a, b, {"id": 1}])
    assert pool.items() == [a, b]
    assert pool.contains({"id": 2})


def test_available_items_keeps_pool_order() -> None:
    pool = CandidatePool(["A", "B", "C", "D"])
    assert available_items(pool, ["C", "A"]) == ["B", "D"]
    assert available_items(pool, []) == ["A", "B", "C", "D"]


def test_selection_preserves_insertion_order_and_dedups() -> None:
    sel = SelectionState()
    assert sel.items() == []
    assert sel.is_empty()

    sel.replace(["C", "A", "C"])
    assert sel.items() == ["C", "A"]
    assert sel.snapshot() == ("C", "A")


def test_selection_equality_ignores_order() -> None:
    sel = SelectionState()
    sel.replace(["A", "B"])
    assert sel.equals(["B", "A"])
    assert not sel.equals(["A"])
    assert not sel.equals(["A", "B", "C"])
    assert not sel.equals(["A", "C"])
