# File: chipbox/core/errors.py
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional


class ChipBoxError(Exception):
    pass


class InvalidArgumentError(ChipBoxError, ValueError):
    """
    必填参数缺失或非法：
    - set_items(None)
    - set_chip_factory(None) / set_item_label_generator(None)
    - unknown_value_policy="reject" 时传入候选池之外的值
    """


@dataclass
class ConfigError(ChipBoxError):
    path: Path
    message: str
    cause: Optional[BaseException] = None

    def __str__(self) -> str:
        base = f"{self.message} (path={self.path})"
        if self.cause is not None:
            return f"{base}; cause={type(self.cause).__name__}: {self.cause}"
        return base
