from __future__ import annotations

from typing import Any, List

import pytest

from chipbox.core.chips import Chip, ChipRegistry


class CountingFactory:
    def __init__(self) -> None:
        self.created: List[Any] = []

    def __call__(self, item: Any) -> Chip:
        self.created.append(item)
        return Chip(item)


def _reconcile(reg: ChipRegistry, selected, factory, *, label=str, read_only=False, deleted=None):
    return reg.reconcile(
        selected,
        factory=factory,
        label_generator=label,
        read_only=read_only,
        on_delete=(deleted.append if deleted is not None else (lambda item: None)),
    )


def test_reconcile_creates_only_missing_chips() -> None:
    reg = ChipRegistry()
    factory = CountingFactory()

    r1 = _reconcile(reg, ["A", "B"], factory)
    chip_a = reg.chip_for("A")
    chip_b = reg.chip_for("B")
    assert len(r1.created) == 2
    assert r1.removed == ()

    r2 = _reconcile(reg, ["A", "B", "C"], factory)
    assert reg.chip_for("A") is chip_a
    assert reg.chip_for("B") is chip_b
    assert [c.item for c in r2.created] == ["C"]
    assert factory.created == ["A", "B", "C"]


def test_reconcile_disposes_removed_and_orders_by_selection() -> None:
    reg = ChipRegistry()
    factory = CountingFactory()
    _reconcile(reg, ["A", "B", "C"], factory)
    chip_b = reg.chip_for("B")

    result = _reconcile(reg, ["C", "A"], factory)
    assert [c.item for c in result.chips] == ["C", "A"]
    assert list(result.removed) == [chip_b]
    assert chip_b.disposed
    assert reg.items() == ["C", "A"]
    assert factory.created == ["A", "B", "C"]


def test_unchanged_selection_is_not_a_change() -> None:
    reg = ChipRegistry()
    factory = CountingFactory()
    _reconcile(reg, ["A"], factory)
    result = _reconcile(reg, ["A"], factory)
    assert not result.changed


def test_new_chip_gets_label_read_only_and_delete_by_value() -> None:
    reg = ChipRegistry()
    deleted: List[Any] = []
    _reconcile(reg, ["x"], Chip, label=lambda s: s.upper(), read_only=True, deleted=deleted)

    chip = reg.chip_for("x")
    assert chip.label == "X"
    assert chip.read_only

    # 只读时点击无效
    chip.click_delete()
    assert deleted == []

    chip.set_read_only(False)
    chip.click_delete()
    assert deleted == ["x"]


def test_delete_callback_survives_reordering() -> None:
    reg = ChipRegistry()
    deleted: List[Any] = []
    _reconcile(reg, ["A", "B", "C"], Chip, deleted=deleted)
    chip_c = reg.chip_for("C")

    # 前面的项被移除后，C 的回调仍然指向 C
    _reconcile(reg, ["C"], Chip, deleted=deleted)
    chip_c.click_delete()
    assert deleted == ["C"]


def test_failed_label_generator_leaves_registry_untouched() -> None:
    reg = ChipRegistry()
    _reconcile(reg, ["A"], Chip)
    chip_a = reg.chip_for("A")

    def bad_label(item: Any) -> str:
        if item == "C":
            raise RuntimeError("no label for C")
        return str(item)

    with pytest.raises(RuntimeError):
        _reconcile(reg, ["B", "C"], Chip, label=bad_label)

    assert reg.chips() == [chip_a]
    assert not chip_a.disposed


def test_refresh_labels_and_read_only_cascade() -> None:
    reg = ChipRegistry()
    _reconcile(reg, ["a", "b"], Chip)
    reg.refresh_labels(lambda s: f"<{s}>")
    assert [c.label for c in reg.chips()] == ["<a>", "<b>"]

    reg.set_read_only(True)
    assert all(c.read_only for c in reg.chips())

    chips = reg.chips()
    reg.dispose_all()
    assert len(reg) == 0
    assert all(c.disposed for c in chips)
