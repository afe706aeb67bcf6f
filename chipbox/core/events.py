# File: chipbox/core/events.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Tuple


@dataclass(frozen=True)
class ValueChangeEvent:
    """
    一次逻辑变更对应一个事件：
    - old_value：变更开始前的快照
    - value：变更完成后的值（此时 chip 与候选列表已经同步）
    - from_user：True 表示由用户交互触发（picker 选择 / chip 删除 / 清空按钮）
    """
    old_value: Tuple[Any, ...]
    value: Tuple[Any, ...]
    from_user: bool = False

    def added(self) -> Tuple[Any, ...]:
        return tuple(v for v in self.value if v not in self.old_value)

    def removed(self) -> Tuple[Any, ...]:
        return tuple(v for v in self.old_value if v not in self.value)
