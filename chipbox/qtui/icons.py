# chipbox/qtui/icons.py
from __future__ import annotations

from PySide6.QtGui import QIcon
from PySide6.QtWidgets import QApplication, QStyle


def standard_icon(sp: QStyle.StandardPixmap) -> QIcon:
    """
    取当前 QStyle 的标准图标；还没有 QApplication 时返回空图标。
    """
    app = QApplication.instance()
    if app is None:
        return QIcon()
    return app.style().standardIcon(sp)


def clear_all_icon() -> QIcon:
    return standard_icon(QStyle.StandardPixmap.SP_TrashIcon)


def chip_close_icon() -> QIcon:
    return standard_icon(QStyle.StandardPixmap.SP_TitleBarCloseButton)
