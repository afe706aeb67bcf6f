from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Literal, Optional

from chipbox.core.common import as_bool, as_dict, as_str
from chipbox.core.errors import ConfigError, InvalidArgumentError

UnknownValuePolicy = Literal["drop", "reject"]
UNKNOWN_VALUE_POLICIES = ("drop", "reject")


def as_policy(v: Any, default: UnknownValuePolicy = "drop") -> UnknownValuePolicy:
    s = as_str(v, default).strip().lower()
    if s in UNKNOWN_VALUE_POLICIES:
        return s  # type: ignore[return-value]
    return default


def require_policy(v: Any) -> UnknownValuePolicy:
    if v not in UNKNOWN_VALUE_POLICIES:
        raise InvalidArgumentError(f"unknown_value_policy must be one of {UNKNOWN_VALUE_POLICIES}, got {v!r}")
    return v


@dataclass
class ChipBoxConfig:
    label: str = ""
    placeholder: str = ""
    full_width: bool = True
    clear_all_visible: bool = True
    read_only: bool = False
    required: bool = False
    unknown_value_policy: UnknownValuePolicy = "drop"  # "drop" | "reject"

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "ChipBoxConfig":
        d = as_dict(d)
        return ChipBoxConfig(
            label=as_str(d.get("label", ""), ""),
            placeholder=as_str(d.get("placeholder", ""), ""),
            full_width=as_bool(d.get("full_width", True), True),
            clear_all_visible=as_bool(d.get("clear_all_visible", True), True),
            read_only=as_bool(d.get("read_only", False), False),
            required=as_bool(d.get("required", False), False),
            unknown_value_policy=as_policy(d.get("unknown_value_policy", "drop")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "placeholder": self.placeholder,
            "full_width": bool(self.full_width),
            "clear_all_visible": bool(self.clear_all_visible),
            "read_only": bool(self.read_only),
            "required": bool(self.required),
            "unknown_value_policy": self.unknown_value_policy,
        }


def load_config(path: Path, *, default: Optional[ChipBoxConfig] = None) -> ChipBoxConfig:
    """
    从 JSON 文件读取控件配置：
    - 文件不存在或内容为空：返回 default（或默认配置）
    - JSON 非法或根不是 object：抛 ConfigError
    """
    fallback = default if default is not None else ChipBoxConfig()
    try:
        if not path.exists():
            return fallback

        raw = path.read_text(encoding="utf-8").strip()
        if raw == "":
            return fallback

        data = json.loads(raw)
        if not isinstance(data, dict):
            raise ConfigError(path=path, message="JSON root must be an object/dict")
        return ChipBoxConfig.from_dict(data)

    except ConfigError:
        raise
    except Exception as e:
        raise ConfigError(path=path, message="Failed to read/parse config", cause=e) from e
