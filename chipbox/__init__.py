"""
chipbox：带 chip 显示的多选输入控件。

- chipbox.core：与 UI 工具包无关的值同步核心
- chipbox.qtui：PySide6 控件 ChipComboBox
"""

__version__ = "0.1.0"
