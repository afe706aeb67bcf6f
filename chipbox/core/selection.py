# File: chipbox/core/selection.py
from __future__ import annotations

from typing import Any, Iterable, Iterator, List, Tuple

from chipbox.core.common import same_members, unique_by_equality


class SelectionState:
    """
    当前值（已选项）：
    - 顺序 = 选择顺序，也就是 chip 的显示顺序
    - 按 == 去重
    - 永远不是 None；清空后是空列表

    子集约束（⊆ 候选池）由 ChipField 在写入前保证，这里只负责存储。
    """

    def __init__(self) -> None:
        self._items: List[Any] = []

    def items(self) -> List[Any]:
        return list(self._items)

    def snapshot(self) -> Tuple[Any, ...]:
        return tuple(self._items)

    def replace(self, items: Iterable[Any]) -> None:
        self._items = unique_by_equality(items)

    def contains(self, item: Any) -> bool:
        return item in self._items

    def equals(self, other: Iterable[Any]) -> bool:
        return same_members(self._items, other)

    def is_empty(self) -> bool:
        return not self._items

    def __contains__(self, item: Any) -> bool:
        return self.contains(item)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)
