# chipbox/qtui/chip_combobox.py
from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Optional, Sequence

from PySide6.QtCore import QObject, Signal, Slot
from PySide6.QtGui import QIcon
from PySide6.QtWidgets import (
    QComboBox,
    QHBoxLayout,
    QLabel,
    QSizePolicy,
    QToolButton,
    QVBoxLayout,
    QWidget,
)

from chipbox.core.chips import ChipFactory, ChipView, LabelGenerator
from chipbox.core.config import ChipBoxConfig, UnknownValuePolicy
from chipbox.core.field import ChipField
from chipbox.core.item_source import ItemSource
from chipbox.core.notifier import Listener
from chipbox.qtui.chip_widget import ChipWidget
from chipbox.qtui.flow_layout import FlowLayout
from chipbox.qtui.icons import clear_all_icon


log = logging.getLogger(__name__)

INVALID_STYLE = "QComboBox { border: 1px solid red; }"


class _ItemSourceBridge(QObject):
    """
    把数据源的变更通知切回控件所在的线程，再交给 ChipField。
    数据源可以在任意线程调用 refresh；同线程时直接执行。
    """

    _sig_changed = Signal(object)  # fn: Callable[[], None]

    def __init__(self, source: ItemSource, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self._source = source
        self._sig_changed.connect(self._on_changed)

    def fetch_items(self) -> List[Any]:
        return list(self._source.fetch_items())

    def subscribe(self, fn: Callable[[], None]) -> Callable[[], None]:
        return self._source.subscribe(lambda: self._sig_changed.emit(fn))

    @Slot(object)
    def _on_changed(self, fn: Callable[[], None]) -> None:
        try:
            fn()
        except Exception:
            # 不让异常终止事件循环
            log.exception("item source refresh failed")


class _ComboPickerView:
    """ChipField -> ChipComboBox 的 PickerView 适配。"""

    def __init__(self, box: "ChipComboBox") -> None:
        self._box = box

    def set_options(self, items: List[Any], label_generator: LabelGenerator) -> None:
        self._box._show_options(items, label_generator)

    def render_chips(self, chips: Sequence[ChipView]) -> None:
        self._box._show_chips(chips)

    def set_read_only(self, read_only: bool) -> None:
        self._box._show_read_only(read_only)

    def set_invalid(self, invalid: bool) -> None:
        self._box._show_invalid(invalid)

    def set_error_message(self, message: str) -> None:
        self._box._show_error_message(message)

    def set_required_indicator_visible(self, visible: bool) -> None:
        self._box._show_required(visible)


class ChipComboBox(QWidget):
    """
    多选下拉框：上方是候选项下拉框 + “全部清除”按钮，下方用 chip 显示已选项。

    - 值的语义全部委托给 ChipField（组合而非继承）
    - 候选列表 / chip / 校验状态的绘制通过 _ComboPickerView 回调
    - 配置方法都有对应的 with_*()，返回 self 便于链式调用
    """

    valueChanged = Signal(object)  # ValueChangeEvent

    def __init__(
        self,
        parent: Optional[QWidget] = None,
        *,
        label: str = "",
        placeholder: str = "",
        chip_factory: ChipFactory = ChipWidget,
        label_generator: LabelGenerator = str,
        unknown_value_policy: UnknownValuePolicy = "drop",
    ) -> None:
        super().__init__(parent)

        self._label_text = ""
        self._required = False
        self._invalid = False
        self._error_message = ""
        self._full_width = True
        self._options: List[Any] = []
        self._item_source: Optional[ItemSource] = None
        self._bridge: Optional[_ItemSourceBridge] = None

        root = QVBoxLayout(self)
        root.setContentsMargins(0, 0, 0, 0)
        root.setSpacing(4)

        self._lbl_caption = QLabel("", self)
        root.addWidget(self._lbl_caption)

        self._picker_container = QWidget(self)
        row = QHBoxLayout(self._picker_container)
        row.setContentsMargins(0, 0, 0, 0)
        row.setSpacing(4)

        self._cb = QComboBox(self._picker_container)
        row.addWidget(self._cb, 1)

        self._btn_clear_all = QToolButton(self._picker_container)
        self._btn_clear_all.setIcon(clear_all_icon())
        self._btn_clear_all.setAutoRaise(True)
        self._btn_clear_all.setToolTip("全部清除")
        row.addWidget(self._btn_clear_all)
        row.addStretch(0)

        root.addWidget(self._picker_container)

        self._lbl_err = QLabel("", self)
        self._lbl_err.setStyleSheet("color: red;")
        root.addWidget(self._lbl_err)

        self._chips_container = QWidget(self)
        self._chips_layout = FlowLayout(self._chips_container, spacing=4)
        root.addWidget(self._chips_container)

        self._cb.activated.connect(self._on_picker_activated)
        self._btn_clear_all.clicked.connect(self._on_clear_all_clicked)

        self._field = ChipField(
            _ComboPickerView(self),
            chip_factory=chip_factory,
            label_generator=label_generator,
            unknown_value_policy=unknown_value_policy,
            name=self.objectName() or type(self).__name__,
        )
        self._field.add_value_change_listener(self.valueChanged.emit)

        self.set_label(label)
        self.set_placeholder(placeholder)
        self.set_full_combobox_width(True)
        self._update_error_ui()

    # ---------- 值 ----------

    @property
    def field(self) -> ChipField:
        return self._field

    def get_value(self) -> List[Any]:
        return self._field.get_value()

    def set_value(self, values: Optional[Iterable[Any]]) -> None:
        self._field.set_value(values)

    def add(self, item: Any) -> None:
        self._field.add(item)

    def remove(self, item: Any) -> None:
        self._field.remove(item)

    def clear(self) -> None:
        self._field.clear()

    def is_empty(self) -> bool:
        return self._field.is_empty()

    def add_value_change_listener(self, fn: Listener) -> Callable[[], None]:
        return self._field.add_value_change_listener(fn)

    def remove_value_change_listener(self, fn: Listener) -> None:
        self._field.remove_value_change_listener(fn)

    def chips(self) -> List[ChipView]:
        return self._field.chips()

    def chip_for(self, item: Any) -> Optional[ChipView]:
        return self._field.chip_for(item)

    # ---------- 候选项 ----------

    def set_items(self, items: Optional[Iterable[Any]]) -> None:
        self._field.set_items(items)
        self._item_source = None
        self._drop_bridge()

    def with_items(self, items: Iterable[Any]) -> "ChipComboBox":
        self.set_items(items)
        return self

    def get_all_available_items(self) -> List[Any]:
        return self._field.all_items()

    def available_items(self) -> List[Any]:
        return self._field.available_items()

    def set_item_source(self, source: Optional[ItemSource]) -> None:
        self._field.set_item_source(None)
        self._drop_bridge()
        self._item_source = source
        if source is None:
            return
        self._bridge = _ItemSourceBridge(source, self)
        self._field.set_item_source(self._bridge)

    def with_item_source(self, source: ItemSource) -> "ChipComboBox":
        self.set_item_source(source)
        return self

    def get_item_source(self) -> Optional[ItemSource]:
        return self._item_source

    # ---------- label / placeholder ----------

    def get_label(self) -> str:
        return self._label_text

    def set_label(self, label: Optional[str]) -> None:
        self._label_text = label or ""
        self._update_caption()

    def with_label(self, label: str) -> "ChipComboBox":
        self.set_label(label)
        return self

    def get_placeholder(self) -> str:
        return self._cb.placeholderText()

    def set_placeholder(self, placeholder: Optional[str]) -> None:
        self._cb.setPlaceholderText(placeholder or "")

    def with_placeholder(self, placeholder: str) -> "ChipComboBox":
        self.set_placeholder(placeholder)
        return self

    # ---------- 全部清除按钮 ----------

    def is_clear_all_button_visible(self) -> bool:
        return not self._btn_clear_all.isHidden()

    def set_clear_all_button_visible(self, visible: bool) -> None:
        self._btn_clear_all.setVisible(bool(visible))

    def with_clear_all_button_visible(self, visible: bool) -> "ChipComboBox":
        self.set_clear_all_button_visible(visible)
        return self

    def get_clear_all_icon(self) -> QIcon:
        return self._btn_clear_all.icon()

    def set_clear_all_icon(self, icon: QIcon) -> None:
        self._btn_clear_all.setIcon(icon)

    def with_clear_all_icon(self, icon: QIcon) -> "ChipComboBox":
        self.set_clear_all_icon(icon)
        return self

    # ---------- 下拉框宽度 ----------

    def is_full_combobox_width(self) -> bool:
        return self._full_width

    def set_full_combobox_width(self, use_full_width: bool) -> None:
        self._full_width = bool(use_full_width)
        if self._full_width:
            self._cb.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Fixed)
        else:
            self._cb.setSizePolicy(QSizePolicy.Preferred, QSizePolicy.Fixed)

    def with_full_combobox_width(self, use_full_width: bool) -> "ChipComboBox":
        self.set_full_combobox_width(use_full_width)
        return self

    # ---------- label 生成器 / chip 工厂 ----------

    def set_item_label_generator(self, fn: LabelGenerator) -> None:
        self._field.set_item_label_generator(fn)

    def with_item_label_generator(self, fn: LabelGenerator) -> "ChipComboBox":
        self.set_item_label_generator(fn)
        return self

    def set_chip_item_label_generator(self, fn: LabelGenerator) -> None:
        self._field.set_chip_item_label_generator(fn)

    def with_chip_item_label_generator(self, fn: LabelGenerator) -> "ChipComboBox":
        self.set_chip_item_label_generator(fn)
        return self

    def get_chip_factory(self) -> ChipFactory:
        return self._field.get_chip_factory()

    def set_chip_factory(self, factory: ChipFactory) -> None:
        self._field.set_chip_factory(factory)

    def with_chip_factory(self, factory: ChipFactory) -> "ChipComboBox":
        self.set_chip_factory(factory)
        return self

    # ---------- 只读 / 校验（状态在 ChipField，界面由 _ComboPickerView 回调） ----------

    def is_read_only(self) -> bool:
        return self._field.is_read_only()

    def set_read_only(self, read_only: bool) -> None:
        self._field.set_read_only(read_only)

    def is_required_indicator_visible(self) -> bool:
        return self._field.is_required_indicator_visible()

    def set_required_indicator_visible(self, visible: bool) -> None:
        self._field.set_required_indicator_visible(visible)

    def is_invalid(self) -> bool:
        return self._field.is_invalid()

    def set_invalid(self, invalid: bool) -> None:
        self._field.set_invalid(invalid)

    def get_error_message(self) -> str:
        return self._field.get_error_message()

    def set_error_message(self, message: Optional[str]) -> None:
        self._field.set_error_message(message)

    def apply_config(self, cfg: ChipBoxConfig) -> None:
        self.set_label(cfg.label)
        self.set_placeholder(cfg.placeholder)
        self.set_full_combobox_width(cfg.full_width)
        self.set_clear_all_button_visible(cfg.clear_all_visible)
        self._field.set_unknown_value_policy(cfg.unknown_value_policy)
        self.set_read_only(cfg.read_only)
        self.set_required_indicator_visible(cfg.required)

    # ---------- 内部控件 ----------

    def picker(self) -> QComboBox:
        """候选项下拉框。从外部改它的内容会破坏同步。"""
        return self._cb

    def picker_container(self) -> QWidget:
        return self._picker_container

    def chips_container(self) -> QWidget:
        return self._chips_container

    def clear_all_button(self) -> QToolButton:
        return self._btn_clear_all

    def error_label(self) -> QLabel:
        return self._lbl_err

    def caption_label(self) -> QLabel:
        return self._lbl_caption

    def option_items(self) -> List[Any]:
        """下拉框当前提供的候选项（与 picker 的行一一对应）。"""
        return list(self._options)

    def dispose(self) -> None:
        self._item_source = None
        self._field.dispose()
        self._drop_bridge()

    # ---------- 界面刷新（由 _ComboPickerView 调用） ----------

    def _show_options(self, items: List[Any], label_generator: LabelGenerator) -> None:
        texts = [label_generator(it) for it in items]
        self._options = list(items)
        self._cb.blockSignals(True)
        try:
            self._cb.clear()
            self._cb.addItems(texts)
            self._cb.setCurrentIndex(-1)
        finally:
            self._cb.blockSignals(False)

    def _show_chips(self, chips: Sequence[ChipView]) -> None:
        self._chips_layout.take_all()
        for chip in chips:
            if isinstance(chip, QWidget):
                self._chips_layout.addWidget(chip)
                chip.show()
        self._chips_container.updateGeometry()

    def _show_read_only(self, read_only: bool) -> None:
        self._cb.setEnabled(not read_only)
        self._btn_clear_all.setEnabled(not read_only)

    def _show_invalid(self, invalid: bool) -> None:
        self._invalid = bool(invalid)
        self._update_error_ui()

    def _show_error_message(self, message: str) -> None:
        self._error_message = message or ""
        self._update_error_ui()

    def _show_required(self, visible: bool) -> None:
        self._required = bool(visible)
        self._update_caption()

    # ---------- 内部 ----------

    def _drop_bridge(self) -> None:
        bridge, self._bridge = self._bridge, None
        if bridge is not None:
            bridge.deleteLater()

    def _update_caption(self) -> None:
        text = self._label_text
        if text and self._required:
            text = f"{text} *"
        elif self._required:
            text = "*"
        self._lbl_caption.setText(text)
        self._lbl_caption.setVisible(bool(text))

    def _update_error_ui(self) -> None:
        self._cb.setStyleSheet(INVALID_STYLE if self._invalid else "")
        msg = self._error_message if self._invalid else ""
        self._lbl_err.setText(msg)
        self._lbl_err.setVisible(bool(msg))

    def _on_picker_activated(self, index: int) -> None:
        if index < 0 or index >= len(self._options):
            return
        item = self._options[index]
        self._field.select_from_picker(item)
        if self._cb.currentIndex() != -1:
            self._cb.setCurrentIndex(-1)

    def _on_clear_all_clicked(self) -> None:
        self._field.clear_from_user()
