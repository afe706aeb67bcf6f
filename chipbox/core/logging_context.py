# chipbox/core/logging_context.py
from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
from typing import Dict, Iterator, Optional
from uuid import uuid4

corr_id_var: ContextVar[str] = ContextVar("corr_id", default="-")
widget_var: ContextVar[str] = ContextVar("widget", default="-")
action_var: ContextVar[str] = ContextVar("action", default="-")

# 日志记录上可用的上下文字段 -> 对应的 ContextVar
CONTEXT_FIELDS: Dict[str, ContextVar[str]] = {
    "corr_id": corr_id_var,
    "widget": widget_var,
    "action": action_var,
}


def new_corr_id() -> str:
    return uuid4().hex[:12]


def current_context() -> Dict[str, str]:
    return {name: var.get() for name, var in CONTEXT_FIELDS.items()}


@contextmanager
def log_context(**fields: Optional[str]) -> Iterator[None]:
    """
    临时设置上下文字段，例如 log_context(widget="tags", action="add")。
    值为 None 的字段保持外层的值。
    """
    unknown = sorted(set(fields) - set(CONTEXT_FIELDS))
    if unknown:
        raise TypeError(f"unknown log context field(s): {', '.join(unknown)}")

    tokens = []
    try:
        for name, value in fields.items():
            if value is not None:
                var = CONTEXT_FIELDS[name]
                tokens.append((var, var.set(value)))
        yield
    finally:
        for var, tok in reversed(tokens):
            var.reset(tok)
