# chipbox/qtui/chip_widget.py
from __future__ import annotations

from typing import Any, Callable, List, Optional

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import QFrame, QHBoxLayout, QLabel, QSizePolicy, QToolButton, QWidget

from chipbox.qtui.icons import chip_close_icon

CHIP_STYLE = (
    "QFrame#chip { border-radius: 10px; background: palette(midlight); }"
    "QToolButton { border: none; background: transparent; }"
)


class ChipWidget(QFrame):
    """
    已选项的 chip：
    - 左侧文本（由 label 生成器得出）
    - 右侧删除按钮；只读时按钮禁用
    ChipRegistry 通过 on_delete 绑定删除回调，这里不关心删除后的处理。
    """

    deleteClicked = Signal()

    def __init__(self, item: Any, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self._item = item
        self._label_generator: Callable[[Any], str] = str
        self._callbacks: List[Callable[[], None]] = []

        self.setObjectName("chip")
        self.setStyleSheet(CHIP_STYLE)
        self.setSizePolicy(QSizePolicy.Maximum, QSizePolicy.Fixed)

        layout = QHBoxLayout(self)
        layout.setContentsMargins(8, 2, 4, 2)
        layout.setSpacing(4)

        self._label = QLabel("", self)
        layout.addWidget(self._label)

        self._btn_delete = QToolButton(self)
        self._btn_delete.setIcon(chip_close_icon())
        self._btn_delete.setAutoRaise(True)
        self._btn_delete.setCursor(Qt.PointingHandCursor)
        self._btn_delete.setToolTip("移除")
        self._btn_delete.clicked.connect(self._on_delete_clicked)
        layout.addWidget(self._btn_delete)

    # ---------- ChipView ----------

    @property
    def item(self) -> Any:
        return self._item

    def set_label_generator(self, fn: Callable[[Any], str]) -> None:
        self._label_generator = fn

    def refresh_label(self) -> None:
        self._label.setText(self._label_generator(self._item))

    def set_read_only(self, read_only: bool) -> None:
        self._btn_delete.setEnabled(not read_only)

    def on_delete(self, callback: Callable[[], None]) -> None:
        self._callbacks.append(callback)

    def dispose(self) -> None:
        self._callbacks.clear()
        self.hide()
        self.setParent(None)
        self.deleteLater()

    # ---------- 其他 ----------

    def label_text(self) -> str:
        return self._label.text()

    def is_read_only(self) -> bool:
        return not self._btn_delete.isEnabled()

    def delete_button(self) -> QToolButton:
        return self._btn_delete

    def _on_delete_clicked(self) -> None:
        if not self._btn_delete.isEnabled():
            return
        self.deleteClicked.emit()
        for cb in list(self._callbacks):
            cb()
