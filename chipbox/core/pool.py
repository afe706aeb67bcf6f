# File: chipbox/core/pool.py
from __future__ import annotations

from typing import Any, Iterable, Iterator, List, Optional

from chipbox.core.common import unique_by_equality
from chipbox.core.errors import InvalidArgumentError


class CandidatePool:
    """
    候选池：所有可被选择的 item。
    - 有序，按 == 去重（首次出现者保留位置）
    - 只能整体替换；None 不是合法的“空池”，空池请传 []
    """

    def __init__(self, items: Optional[Iterable[Any]] = None) -> None:
        self._items: List[Any] = unique_by_equality(items) if items is not None else []

    def replace(self, items: Optional[Iterable[Any]]) -> None:
        if items is None:
            raise InvalidArgumentError("items cannot be None")
        self._items = unique_by_equality(items)

    def items(self) -> List[Any]:
        return list(self._items)

    def contains(self, item: Any) -> bool:
        return item in self._items

    def __contains__(self, item: Any) -> bool:
        return self.contains(item)

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self._items))

    def __len__(self) -> int:
        return len(self._items)


def available_items(pool: CandidatePool, selected: Iterable[Any]) -> List[Any]:
    """
    候选池 − 已选项，保持候选池顺序。每次现算，不单独存储。
    """
    chosen = list(selected)
    return [it for it in pool if it not in chosen]
