# File: chipbox/core/view.py
from __future__ import annotations

from typing import Any, List, Protocol, Sequence, runtime_checkable

from chipbox.core.chips import ChipView, LabelGenerator


@runtime_checkable
class PickerView(Protocol):
    """
    渲染层需要实现的接口（Qt 实现见 chipbox.qtui.chip_combobox）。
    校验相关状态只挂在 picker 上，chip 自身从不显示 invalid。
    """

    def set_options(self, items: List[Any], label_generator: LabelGenerator) -> None: ...

    def render_chips(self, chips: Sequence[ChipView]) -> None: ...

    def set_read_only(self, read_only: bool) -> None: ...

    def set_invalid(self, invalid: bool) -> None: ...

    def set_error_message(self, message: str) -> None: ...

    def set_required_indicator_visible(self, visible: bool) -> None: ...


class NullPickerView:
    """没有界面时的占位视图（纯逻辑使用 / 单测）。"""

    def set_options(self, items: List[Any], label_generator: LabelGenerator) -> None:
        pass

    def render_chips(self, chips: Sequence[ChipView]) -> None:
        pass

    def set_read_only(self, read_only: bool) -> None:
        pass

    def set_invalid(self, invalid: bool) -> None:
        pass

    def set_error_message(self, message: str) -> None:
        pass

    def set_required_indicator_visible(self, visible: bool) -> None:
        pass
