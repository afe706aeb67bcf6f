# File: chipbox/core/item_source.py
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Optional, Protocol, runtime_checkable

log = logging.getLogger(__name__)

ChangeListener = Callable[[], None]
ItemFilter = Callable[[Any], bool]


@runtime_checkable
class ItemSource(Protocol):
    """
    可订阅的拉取式数据源：
    - fetch_items()：返回当前完整的候选集合
    - subscribe(fn)：数据变更时回调 fn()，返回取消订阅函数
    """

    def fetch_items(self) -> List[Any]: ...

    def subscribe(self, fn: ChangeListener) -> Callable[[], None]: ...


class ListItemSource:
    """
    基于内存列表的数据源，可附加过滤条件。
    数据本身不变、只改过滤条件时也会通知订阅者。
    """

    def __init__(self, items: Optional[Iterable[Any]] = None) -> None:
        self._items: List[Any] = list(items) if items is not None else []
        self._filter: Optional[ItemFilter] = None
        self._listeners: List[ChangeListener] = []

    # ---------- 数据 ----------

    def fetch_items(self) -> List[Any]:
        f = self._filter
        if f is None:
            return list(self._items)
        return [it for it in self._items if f(it)]

    def set_items(self, items: Iterable[Any]) -> None:
        self._items = list(items)
        self.refresh_all()

    def set_filter(self, fn: Optional[ItemFilter]) -> None:
        self._filter = fn
        self.refresh_all()

    def clear_filter(self) -> None:
        self.set_filter(None)

    # ---------- 订阅 ----------

    def subscribe(self, fn: ChangeListener) -> Callable[[], None]:
        if fn is None:
            raise ValueError("listener cannot be None")
        self._listeners.append(fn)

        def _unsub() -> None:
            try:
                self._listeners.remove(fn)
            except ValueError:
                pass

        return _unsub

    def listener_count(self) -> int:
        return len(self._listeners)

    def refresh_all(self) -> None:
        for fn in list(self._listeners):
            try:
                fn()
            except Exception:
                log.exception("item source listener failed")
