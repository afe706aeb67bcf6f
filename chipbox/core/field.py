# File: chipbox/core/field.py
from __future__ import annotations

import logging
from collections import deque
from typing import Any, Callable, Deque, Iterable, List, Optional, Tuple

from chipbox.core.chips import Chip, ChipFactory, ChipRegistry, ChipView, LabelGenerator, ReconcileResult
from chipbox.core.common import unique_by_equality
from chipbox.core.config import UnknownValuePolicy, require_policy
from chipbox.core.errors import InvalidArgumentError
from chipbox.core.events import ValueChangeEvent
from chipbox.core.item_source import ItemSource
from chipbox.core.logging_context import log_context, new_corr_id
from chipbox.core.notifier import Listener, ValueChangeNotifier
from chipbox.core.pool import CandidatePool, available_items
from chipbox.core.selection import SelectionState
from chipbox.core.view import NullPickerView, PickerView

log = logging.getLogger(__name__)

Mutation = Callable[[], None]


class ChipField:
    """
    多选 chip 字段的核心控制器（与 UI 工具包无关）。

    负责让三样东西保持一致：
    - 候选池 CandidatePool
    - 当前值 SelectionState（⊆ 候选池，不会是 None）
    - chip 登记表 ChipRegistry（每个已选 item 恰好一个 chip）

    每次逻辑变更的顺序固定为：
        快照旧值 -> 修改模型 -> 同步 chip / 候选列表 -> 发 ValueChangeEvent
    新值与旧值（不计顺序）相等时不发事件。

    变更过程中（例如监听者回调里）再次发起的变更会排队，
    等当前变更完成后依次执行，不会交错。
    """

    def __init__(
        self,
        view: Optional[PickerView] = None,
        *,
        chip_factory: ChipFactory = Chip,
        label_generator: LabelGenerator = str,
        unknown_value_policy: UnknownValuePolicy = "drop",
        name: str = "chipbox",
    ) -> None:
        if chip_factory is None:
            raise InvalidArgumentError("chip_factory cannot be None")
        if label_generator is None:
            raise InvalidArgumentError("label_generator cannot be None")

        self._view: PickerView = view if view is not None else NullPickerView()
        self._name = name

        self._pool = CandidatePool()
        self._selection = SelectionState()
        self._registry = ChipRegistry()
        self._notifier = ValueChangeNotifier()

        self._chip_factory: ChipFactory = chip_factory
        self._item_label_generator: LabelGenerator = label_generator
        self._chip_label_generator: LabelGenerator = label_generator
        self._policy: UnknownValuePolicy = require_policy(unknown_value_policy)

        self._read_only = False
        self._required = False
        self._invalid = False
        self._error_message = ""

        self._busy = False
        self._pending: Deque[Tuple[str, Mutation]] = deque()

        self._source: Optional[ItemSource] = None
        self._source_unsub: Optional[Callable[[], None]] = None

        self._render()

    # ---------- 值 ----------

    def get_value(self) -> List[Any]:
        return self._selection.items()

    def is_empty(self) -> bool:
        return self._selection.is_empty()

    def set_value(self, values: Optional[Iterable[Any]]) -> None:
        """
        None 等价于 clear()（与 set_items(None) 报错不同，这是有意保留的区别）。
        候选池外的值按 unknown_value_policy 处理：drop 静默丢弃，reject 抛错。
        """
        if values is None:
            self.clear()
            return
        requested = list(values)

        def _op() -> None:
            self._commit(self._accept(requested), from_user=False)

        self._run("set_value", _op)

    def add(self, item: Any) -> None:
        self._run("add", lambda: self._add(item, from_user=False))

    def remove(self, item: Any) -> None:
        self._run("remove", lambda: self._remove(item, from_user=False))

    def clear(self) -> None:
        self._run("clear", lambda: self._commit([], from_user=False))

    # ---------- 用户操作入口 ----------

    def select_from_picker(self, item: Any) -> None:
        """picker 里选中了一项。只读时忽略。"""
        if self._read_only:
            return
        self._run("picker_select", lambda: self._add(item, from_user=True))

    def request_chip_delete(self, item: Any) -> None:
        """chip 的删除按钮被点击。只读时忽略。"""
        if self._read_only:
            return
        self._run("chip_delete", lambda: self._remove(item, from_user=True))

    def clear_from_user(self) -> None:
        """“全部清除”按钮。只读时忽略。"""
        if self._read_only:
            return
        self._run("clear_all", lambda: self._commit([], from_user=True))

    # ---------- 候选池 ----------

    def set_items(self, items: Optional[Iterable[Any]]) -> None:
        """
        整体替换候选池（会解除已绑定的 ItemSource）。
        已选值中不在新候选池里的会被移除，并照常发事件；
        无论值是否变化都会完整刷新 chip 文本与候选列表。
        """
        if items is None:
            raise InvalidArgumentError("items cannot be None")
        new_items = list(items)
        self._detach_source()
        self._run("set_items", lambda: self._apply_items(new_items))

    def all_items(self) -> List[Any]:
        return self._pool.items()

    def available_items(self) -> List[Any]:
        return available_items(self._pool, self._selection)

    # ---------- ItemSource ----------

    def set_item_source(self, source: Optional[ItemSource]) -> None:
        """
        绑定拉取式数据源：每次数据源通知变更，就重新拉取完整集合并替换候选池。
        传 None 表示解绑。
        """
        self._detach_source()
        if source is None:
            return

        def _on_source_changed() -> None:
            self._run("item_source", lambda: self._apply_items(list(source.fetch_items())))

        self._source = source
        self._source_unsub = source.subscribe(_on_source_changed)
        _on_source_changed()

    def item_source(self) -> Optional[ItemSource]:
        return self._source

    def _detach_source(self) -> None:
        unsub = self._source_unsub
        self._source = None
        self._source_unsub = None
        if unsub is not None:
            unsub()

    # ---------- chips ----------

    def chips(self) -> List[ChipView]:
        return self._registry.chips()

    def chip_for(self, item: Any) -> Optional[ChipView]:
        return self._registry.chip_for(item)

    def get_chip_factory(self) -> ChipFactory:
        return self._chip_factory

    def set_chip_factory(self, factory: ChipFactory) -> None:
        """只影响之后新建的 chip。"""
        if factory is None:
            raise InvalidArgumentError("chip_factory cannot be None")
        self._chip_factory = factory

    def get_item_label_generator(self) -> LabelGenerator:
        return self._item_label_generator

    def get_chip_item_label_generator(self) -> LabelGenerator:
        return self._chip_label_generator

    def set_chip_item_label_generator(self, fn: LabelGenerator) -> None:
        """只设置 chip 的文本生成器，并立即刷新已有 chip。"""
        if fn is None:
            raise InvalidArgumentError("label_generator cannot be None")
        self._chip_label_generator = fn
        self._registry.refresh_labels(fn)

    def set_item_label_generator(self, fn: LabelGenerator) -> None:
        """同时设置 picker 与 chip 的文本生成器。"""
        if fn is None:
            raise InvalidArgumentError("label_generator cannot be None")
        self._item_label_generator = fn
        self.set_chip_item_label_generator(fn)
        self._view.set_options(self.available_items(), fn)

    # ---------- 监听 ----------

    def add_value_change_listener(self, fn: Listener) -> Callable[[], None]:
        return self._notifier.add_listener(fn)

    def remove_value_change_listener(self, fn: Listener) -> None:
        self._notifier.remove_listener(fn)

    # ---------- 只读 / 校验 ----------

    def is_read_only(self) -> bool:
        return self._read_only

    def set_read_only(self, read_only: bool) -> None:
        ro = bool(read_only)
        self._read_only = ro
        self._registry.set_read_only(ro)
        self._view.set_read_only(ro)

    def is_required_indicator_visible(self) -> bool:
        return self._required

    def set_required_indicator_visible(self, visible: bool) -> None:
        self._required = bool(visible)
        self._view.set_required_indicator_visible(self._required)

    def is_invalid(self) -> bool:
        return self._invalid

    def set_invalid(self, invalid: bool) -> None:
        self._invalid = bool(invalid)
        self._view.set_invalid(self._invalid)

    def get_error_message(self) -> str:
        return self._error_message

    def set_error_message(self, message: Optional[str]) -> None:
        self._error_message = message or ""
        self._view.set_error_message(self._error_message)

    def get_unknown_value_policy(self) -> UnknownValuePolicy:
        return self._policy

    def set_unknown_value_policy(self, policy: UnknownValuePolicy) -> None:
        self._policy = require_policy(policy)

    # ---------- 生命周期 ----------

    def dispose(self) -> None:
        """控件销毁时调用：解绑数据源、销毁全部 chip、清空监听者。"""
        self._detach_source()
        self._pending.clear()
        self._registry.dispose_all()
        self._notifier.clear()
        self._view.render_chips([])

    # ---------- 内部：变更调度 ----------

    def _run(self, action: str, op: Mutation) -> None:
        if self._busy:
            log.debug("mutation queued behind current one: %s", action)
            self._pending.append((action, op))
            return

        # 排队的后续变更沿用同一个 corr_id，便于在日志里串起一次用户操作
        self._busy = True
        try:
            with log_context(corr_id=new_corr_id(), widget=self._name):
                with log_context(action=action):
                    op()
                while self._pending:
                    name, nxt = self._pending.popleft()
                    with log_context(action=name):
                        nxt()
        except BaseException:
            self._pending.clear()
            raise
        finally:
            self._busy = False

    # ---------- 内部：变更实现 ----------

    def _accept(self, values: List[Any]) -> List[Any]:
        wanted = unique_by_equality(values)
        unknown = [v for v in wanted if not self._pool.contains(v)]
        if not unknown:
            return wanted
        if self._policy == "reject":
            raise InvalidArgumentError(f"values not in item pool: {unknown!r}")
        log.debug("dropped %d value(s) not in item pool", len(unknown))
        return [v for v in wanted if self._pool.contains(v)]

    def _add(self, item: Any, *, from_user: bool) -> None:
        if self._selection.contains(item):
            return
        if from_user and not self._pool.contains(item):
            return
        if not self._accept([item]):
            return
        self._commit(self._selection.items() + [item], from_user=from_user)

    def _remove(self, item: Any, *, from_user: bool) -> None:
        if not self._selection.contains(item):
            return
        self._commit([v for v in self._selection if v != item], from_user=from_user)

    def _apply_items(self, items: List[Any]) -> None:
        old_pool = self._pool.items()
        self._pool.replace(items)
        kept = [v for v in self._selection if self._pool.contains(v)]
        self._commit(kept, from_user=False, force_render=True, refresh_labels=True, old_pool=old_pool)

    def _commit(
        self,
        new_values: List[Any],
        *,
        from_user: bool,
        force_render: bool = False,
        refresh_labels: bool = False,
        old_pool: Optional[List[Any]] = None,
    ) -> bool:
        old = self._selection.snapshot()
        changed = not self._selection.equals(new_values)

        if changed:
            self._selection.replace(new_values)
        if changed or force_render:
            try:
                self._present(self._reconcile(), refresh_labels=refresh_labels)
            except BaseException:
                # label 生成器等抛错：候选池与值一起回滚，界面按旧状态重画，不发事件
                self._selection.replace(old)
                if old_pool is not None:
                    self._pool.replace(old_pool)
                self._restore_display()
                raise
        if not changed:
            return False

        event = ValueChangeEvent(old_value=old, value=self._selection.snapshot(), from_user=from_user)
        log.debug(
            "value changed: %d -> %d item(s), from_user=%s",
            len(event.old_value), len(event.value), from_user,
        )
        self._notifier.fire(event)
        return True

    def _restore_display(self) -> None:
        try:
            self._render()
        except Exception:
            # 原始异常照常抛给调用方，这里只记录
            log.exception("failed to redraw after rollback")

    def _render(self) -> None:
        self._present(self._reconcile())

    def _reconcile(self) -> ReconcileResult:
        result = self._registry.reconcile(
            self._selection.items(),
            factory=self._chip_factory,
            label_generator=self._chip_label_generator,
            read_only=self._read_only,
            on_delete=self.request_chip_delete,
        )
        if result.changed:
            log.debug("chips reconciled: +%d -%d", len(result.created), len(result.removed))
        return result

    def _present(self, result: ReconcileResult, *, refresh_labels: bool = False) -> None:
        if refresh_labels:
            self._registry.refresh_labels(self._chip_label_generator)
        self._view.render_chips(result.chips)
        self._view.set_options(self.available_items(), self._item_label_generator)
