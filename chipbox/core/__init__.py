from chipbox.core.chips import Chip, ChipRegistry, ChipView, ReconcileResult
from chipbox.core.config import ChipBoxConfig, load_config
from chipbox.core.errors import ChipBoxError, ConfigError, InvalidArgumentError
from chipbox.core.events import ValueChangeEvent
from chipbox.core.field import ChipField
from chipbox.core.item_source import ItemSource, ListItemSource
from chipbox.core.notifier import ValueChangeNotifier
from chipbox.core.pool import CandidatePool, available_items
from chipbox.core.selection import SelectionState
from chipbox.core.view import NullPickerView, PickerView

__all__ = [
    "CandidatePool",
    "Chip",
    "ChipBoxConfig",
    "ChipBoxError",
    "ChipField",
    "ChipRegistry",
    "ChipView",
    "ConfigError",
    "InvalidArgumentError",
    "ItemSource",
    "ListItemSource",
    "NullPickerView",
    "PickerView",
    "ReconcileResult",
    "SelectionState",
    "ValueChangeEvent",
    "ValueChangeNotifier",
    "available_items",
    "load_config",
]
