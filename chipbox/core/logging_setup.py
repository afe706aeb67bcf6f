# chipbox/core/logging_setup.py
from __future__ import annotations

import logging
import logging.handlers
import queue
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from chipbox.core.logging_context import current_context

class ContextFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        # 注入上下文字段；保证 formatter 里引用时永远存在（extra 显式给出的优先）
        for name, value in current_context().items():
            if not hasattr(record, name):
                setattr(record, name, value)
        return True

@dataclass
class LoggingRuntime:
    listener: logging.handlers.QueueListener
    queue_handler: logging.handlers.QueueHandler

    def stop(self) -> None:
        try:
            self.listener.stop()
        except Exception:
            pass
        logging.getLogger().removeHandler(self.queue_handler)

LOG_FORMAT = (
    "%(asctime)s %(levelname)s "
    "%(name)s:%(funcName)s:%(lineno)d "
    "corr=%(corr_id)s widget=%(widget)s action=%(action)s - %(message)s"
)

def setup_logging(
    *,
    level: str = "INFO",
    log_dir: Optional[Path] = None,
    keep_days: int = 14,
    console: bool = True,
) -> LoggingRuntime:
    """
    供宿主应用调用的日志初始化（控件库本身不会自动调用）：
    - root logger 只挂 QueueHandler，真正的输出由 QueueListener 线程完成
    - console=True 时输出到 stderr
    - 给了 log_dir 时额外写 chipbox.log（按天轮转）
    """
    log_q: queue.Queue[logging.LogRecord] = queue.Queue(maxsize=20_000)
    formatter = logging.Formatter(fmt=LOG_FORMAT)

    handlers: list[logging.Handler] = []

    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.handlers.TimedRotatingFileHandler(
            filename=str(log_dir / "chipbox.log"),
            when="midnight",
            backupCount=int(keep_days),
            encoding="utf-8",
        )
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(formatter)
        handlers.append(fh)

    if console:
        ch = logging.StreamHandler(stream=sys.stderr)
        ch.setLevel(logging.DEBUG)
        ch.setFormatter(formatter)
        handlers.append(ch)

    # 过滤器挂在 QueueHandler 上：上下文变量只在调用线程里有值
    qh = logging.handlers.QueueHandler(log_q)
    qh.setLevel(logging.DEBUG)
    qh.addFilter(ContextFilter())

    root = logging.getLogger()
    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    root.addHandler(qh)

    listener = logging.handlers.QueueListener(
        log_q,
        *handlers,
        respect_handler_level=True,
    )
    listener.start()

    logging.getLogger(__name__).info(
        "logging initialized",
        extra={"action": "boot"},
    )

    return LoggingRuntime(listener=listener, queue_handler=qh)
