from chipbox.qtui.chip_combobox import ChipComboBox
from chipbox.qtui.chip_widget import ChipWidget
from chipbox.qtui.flow_layout import FlowLayout

__all__ = ["ChipComboBox", "ChipWidget", "FlowLayout"]
