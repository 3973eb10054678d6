from __future__ import annotations

import logging
import time
import traceback
from dataclasses import dataclass
from pathlib import Path


logger = logging.getLogger(__name__)


@dataclass
class TickError:
    ts: float
    context: str
    message: str
    tb: str | None
    count: int = 1

    def summary_line(self) -> str:
        base = f"{self.context}: {self.message}"
        if self.count > 1:
            base += f" (x{self.count})"
        return base


class ErrorLog:
    """
    Bounded feed of failures raised inside the host update loop.

    A failing tick is recorded and the loop keeps running; the same exception
    repeating every frame collapses into one entry with a counter.
    """

    def __init__(self, *, max_items: int = 20, persist_path: Path | None = None) -> None:
        self._max_items = max(1, int(max_items))
        self._items: list[TickError] = []
        self._persist_path = persist_path

    def items(self) -> list[TickError]:
        return list(self._items)

    def last_summary(self) -> str:
        return self._items[-1].summary_line() if self._items else ""

    def record(self, *, context: str, exc: BaseException) -> TickError:
        message = f"{type(exc).__name__}: {exc}"
        tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
        last = self._items[-1] if self._items else None
        if last is not None and (last.context, last.message) == (context, message):
            last.ts = time.time()
            last.count += 1
            return last

        item = TickError(ts=time.time(), context=context, message=message, tb=tb)
        self._items.append(item)
        if len(self._items) > self._max_items:
            self._items = self._items[-self._max_items :]
        logger.error("%s failed: %s\n%s", context, message, tb.rstrip())
        self._persist(item)
        return item

    def _persist(self, item: TickError) -> None:
        p = self._persist_path
        if p is None:
            return
        p.parent.mkdir(parents=True, exist_ok=True)
        stamp = time.strftime("%Y-%m-%d %H:%M:%S", time.localtime(item.ts))
        with p.open("a", encoding="utf-8") as fh:
            fh.write(f"[{stamp}] {item.context}: {item.message}\n")
            if item.tb:
                fh.write(item.tb.rstrip() + "\n")
