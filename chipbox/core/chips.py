# File: chipbox/core/chips.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

LabelGenerator = Callable[[Any], str]
DeleteCallback = Callable[[], None]


@runtime_checkable
class ChipView(Protocol):
    """
    chip 的最小接口。ChipRegistry 只依赖这些方法，
    具体表现（Qt 控件 / 无界面模型）由 chip 工厂决定。
    """

    @property
    def item(self) -> Any: ...

    def set_label_generator(self, fn: LabelGenerator) -> None: ...

    def refresh_label(self) -> None: ...

    def set_read_only(self, read_only: bool) -> None: ...

    def on_delete(self, callback: DeleteCallback) -> None: ...

    def dispose(self) -> None: ...


ChipFactory = Callable[[Any], ChipView]


class Chip:
    """
    无界面的 chip：ChipField 的默认工厂，也方便单测。
    """

    def __init__(self, item: Any) -> None:
        self._item = item
        self._label_generator: LabelGenerator = str
        self._label = ""
        self._read_only = False
        self._disposed = False
        self._delete_callbacks: List[DeleteCallback] = []

    @property
    def item(self) -> Any:
        return self._item

    @property
    def label(self) -> str:
        return self._label

    @property
    def read_only(self) -> bool:
        return self._read_only

    @property
    def disposed(self) -> bool:
        return self._disposed

    def set_label_generator(self, fn: LabelGenerator) -> None:
        self._label_generator = fn

    def refresh_label(self) -> None:
        self._label = self._label_generator(self._item)

    def set_read_only(self, read_only: bool) -> None:
        self._read_only = bool(read_only)

    def on_delete(self, callback: DeleteCallback) -> None:
        self._delete_callbacks.append(callback)

    def click_delete(self) -> None:
        """
        模拟点击删除按钮；只读或已销毁时按钮不可用。
        """
        if self._read_only or self._disposed:
            return
        for cb in list(self._delete_callbacks):
            cb()

    def dispose(self) -> None:
        self._disposed = True
        self._delete_callbacks.clear()

    def __repr__(self) -> str:
        return f"Chip({self._item!r})"


@dataclass(frozen=True)
class ReconcileResult:
    chips: Tuple[ChipView, ...]
    created: Tuple[ChipView, ...] = ()
    removed: Tuple[ChipView, ...] = ()

    @property
    def changed(self) -> bool:
        return bool(self.created or self.removed)


class ChipRegistry:
    """
    每个已选 item 对应一个 chip，按差异增量同步：

    1. 先对当前 chip 列表做快照，移除 item 已不在选中集合里的 chip
    2. 为没有 chip 的选中 item 新建 chip（套用当前 label 生成器 / 只读状态，
       删除回调按 item 值绑定，而不是按下标）
    3. 仍被选中的 chip 原样保留（同一个对象）
    4. 按选中顺序输出 chip 列表，供视图重新排布
    """

    def __init__(self) -> None:
        self._chips: List[ChipView] = []

    def chips(self) -> List[ChipView]:
        return list(self._chips)

    def items(self) -> List[Any]:
        return [c.item for c in self._chips]

    def chip_for(self, item: Any) -> Optional[ChipView]:
        for chip in self._chips:
            if chip.item == item:
                return chip
        return None

    def reconcile(
        self,
        selected: Sequence[Any],
        *,
        factory: ChipFactory,
        label_generator: LabelGenerator,
        read_only: bool,
        on_delete: Callable[[Any], None],
    ) -> ReconcileResult:
        current = list(self._chips)

        kept: List[ChipView] = []
        removed: List[ChipView] = []
        for chip in current:
            if chip.item in selected:
                kept.append(chip)
            else:
                removed.append(chip)

        existing = [c.item for c in kept]
        created: List[ChipView] = []
        try:
            for item in selected:
                if item in existing:
                    continue
                chip = factory(item)
                chip.set_label_generator(label_generator)
                chip.refresh_label()
                chip.set_read_only(read_only)
                chip.on_delete(_bind_delete(on_delete, item))
                created.append(chip)
                kept.append(chip)
                existing.append(item)
        except BaseException:
            # 新建到一半失败：丢弃本轮新建的 chip，登记表保持原状
            for chip in created:
                chip.dispose()
            raise

        ordered: List[ChipView] = []
        for item in selected:
            for chip in kept:
                if chip.item == item:
                    ordered.append(chip)
                    break

        self._chips = ordered
        for chip in removed:
            chip.dispose()

        return ReconcileResult(chips=tuple(ordered), created=tuple(created), removed=tuple(removed))

    def refresh_labels(self, label_generator: LabelGenerator) -> None:
        for chip in list(self._chips):
            chip.set_label_generator(label_generator)
            chip.refresh_label()

    def set_read_only(self, read_only: bool) -> None:
        for chip in list(self._chips):
            chip.set_read_only(read_only)

    def dispose_all(self) -> None:
        chips, self._chips = self._chips, []
        for chip in chips:
            chip.dispose()

    def __len__(self) -> int:
        return len(self._chips)


def _bind_delete(on_delete: Callable[[Any], None], item: Any) -> DeleteCallback:
    def _cb() -> None:
        on_delete(item)

    return _cb
