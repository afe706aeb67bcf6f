from __future__ import annotations

import json
import logging
from pathlib import Path

import pytest

from chipbox.core.config import ChipBoxConfig, as_policy, load_config
from chipbox.core.errors import ConfigError
from chipbox.core.logging_context import (
    action_var,
    corr_id_var,
    current_context,
    log_context,
    new_corr_id,
    widget_var,
)
from chipbox.core.logging_setup import ContextFilter, setup_logging


# ---------- 配置 ----------

def test_config_from_dict_tolerates_bad_values() -> None:
    cfg = ChipBoxConfig.from_dict({
        "label": "Tags",
        "full_width": "no",
        "read_only": 1,
        "unknown_value_policy": "REJECT",
    })
    assert cfg.label == "Tags"
    assert cfg.full_width is False
    assert cfg.read_only is True
    assert cfg.clear_all_visible is True
    assert cfg.unknown_value_policy == "reject"

    assert ChipBoxConfig.from_dict(None).to_dict() == ChipBoxConfig().to_dict()  # type: ignore[arg-type]
    assert as_policy("whatever") == "drop"


def test_config_dict_round_trip() -> None:
    cfg = ChipBoxConfig(label="L", placeholder="P", full_width=False, required=True)
    assert ChipBoxConfig.from_dict(cfg.to_dict()) == cfg


def test_load_config_missing_or_empty_returns_default(tmp_path: Path) -> None:
    default = ChipBoxConfig(label="fallback")
    assert load_config(tmp_path / "nope.json", default=default) is default

    empty = tmp_path / "empty.json"
    empty.write_text("   ", encoding="utf-8")
    assert load_config(empty) == ChipBoxConfig()


def test_load_config_reads_file(tmp_path: Path) -> None:
    p = tmp_path / "chipbox.json"
    p.write_text(json.dumps({"placeholder": "Pick…", "clear_all_visible": False}), encoding="utf-8")
    cfg = load_config(p)
    assert cfg.placeholder == "Pick…"
    assert cfg.clear_all_visible is False


def test_load_config_invalid_json_raises(tmp_path: Path) -> None:
    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError) as ei:
        load_config(bad)
    assert ei.value.path == bad
    assert ei.value.cause is not None
    assert "bad.json" in str(ei.value)

    arr = tmp_path / "arr.json"
    arr.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_config(arr)


# ---------- 日志 ----------

def test_log_context_sets_and_resets() -> None:
    cid = new_corr_id()
    assert len(cid) == 12
    with log_context(corr_id=cid, widget="tags"):
        assert corr_id_var.get() == cid
        assert widget_var.get() == "tags"
        with log_context(action="add"):
            assert action_var.get() == "add"
        assert action_var.get() == "-"
    assert corr_id_var.get() == "-"
    assert widget_var.get() == "-"


def test_context_filter_fills_missing_fields_only() -> None:
    f = ContextFilter()
    rec = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)
    with log_context(widget="tags", action="clear"):
        assert f.filter(rec)
    assert rec.widget == "tags"
    assert rec.action == "clear"
    assert rec.corr_id == "-"

    rec2 = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)
    rec2.action = "boot"
    with log_context(action="clear"):
        f.filter(rec2)
    assert rec2.action == "boot"


def test_setup_logging_writes_file(tmp_path: Path) -> None:
    root = logging.getLogger()
    old_level = root.level
    rt = setup_logging(level="DEBUG", log_dir=tmp_path, console=False)
    try:
        with log_context(widget="tags", action="add"):
            logging.getLogger("chipbox.test").info("hello chips")
    finally:
        rt.stop()
        root.setLevel(old_level)

    assert rt.queue_handler not in root.handlers
    text = (tmp_path / "chipbox.log").read_text(encoding="utf-8")
    assert "logging initialized" in text
    assert "widget=tags action=add - hello chips" in text


def test_log_context_rejects_unknown_fields() -> None:
    with pytest.raises(TypeError):
        with log_context(profile="x"):
            pass
    assert current_context() == {"corr_id": "-", "widget": "-", "action": "-"}


def test_queued_mutations_share_corr_id() -> None:
    from chipbox.core.field import ChipField

    field = ChipField(name="tags")
    field.set_items(["A", "B"])
    seen = []

    def listener(ev) -> None:
        seen.append(current_context())
        if ev.value == ("A",):
            field.add("B")

    field.add_value_change_listener(listener)
    field.add("A")

    assert [c["action"] for c in seen] == ["add", "add"]
    assert seen[0]["widget"] == "tags"
    assert seen[0]["corr_id"] != "-"
    assert seen[0]["corr_id"] == seen[1]["corr_id"]

    field.remove("A")
    assert seen[-1]["action"] == "remove"
    assert seen[-1]["corr_id"] != seen[0]["corr_id"]
