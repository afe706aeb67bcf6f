# File: chipbox/core/notifier.py
from __future__ import annotations

import logging
from typing import Callable, List

from chipbox.core.events import ValueChangeEvent

log = logging.getLogger(__name__)

Listener = Callable[[ValueChangeEvent], None]


class ValueChangeNotifier:
    """
    每个控件实例自己的监听者列表（不走全局事件总线）：
    - 按注册顺序同步派发
    - 某个监听者抛异常只记录日志，不影响后续监听者
    """

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def add_listener(self, fn: Listener) -> Callable[[], None]:
        if fn is None:
            raise ValueError("listener cannot be None")
        self._listeners.append(fn)

        def _unsub() -> None:
            self.remove_listener(fn)

        return _unsub

    def remove_listener(self, fn: Listener) -> None:
        try:
            self._listeners.remove(fn)
        except ValueError:
            pass

    def clear(self) -> None:
        self._listeners.clear()

    def fire(self, event: ValueChangeEvent) -> None:
        for fn in list(self._listeners):
            try:
                fn(event)
            except Exception:
                log.exception("value change listener failed")

    def __len__(self) -> int:
        return len(self._listeners)
