from __future__ import annotations

from typing import Any, Dict, Iterable, List


def as_dict(v: Any) -> Dict[str, Any]:
    return v if isinstance(v, dict) else {}


def as_str(v: Any, default: str = "") -> str:
    if v is None:
        return default
    if isinstance(v, str):
        return v
    return str(v)


def as_bool(v: Any, default: bool = False) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, int):
        return v != 0
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("1", "true", "yes", "y", "on"):
            return True
        if s in ("0", "false", "no", "n", "off"):
            return False
    return default


def unique_by_equality(items: Iterable[Any]) -> List[Any]:
    """
    按 == 去重，保留首次出现的顺序。
    元素不要求可哈希，所以这里用线性查找。
    """
    out: List[Any] = []
    for it in items:
        if it not in out:
            out.append(it)
    return out


def same_members(a: Iterable[Any], b: Iterable[Any]) -> bool:
    """
    集合语义的相等比较（与顺序无关，按 == 比较）。
    """
    la = list(a)
    lb = list(b)
    if len(la) != len(lb):
        return False
    rest = list(lb)
    for x in la:
        for i, y in enumerate(rest):
            if x == y:
                del rest[i]
                break
        else:
            return False
    return True
