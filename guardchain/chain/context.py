# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""请求级上下文

- 携带 deadline / 取消信号 / 请求范围内的 key-value
- 不可变：派生（with_value / with_cancel / with_timeout）总是返回新的 Context
- 父 Context 取消时，所有派生出来的子 Context 一并取消；反之不成立
"""

from __future__ import annotations

import asyncio
import threading
import time
from types import MappingProxyType
from typing import Any, Callable, List, Mapping, Optional, Tuple, Union

CancelFunc = Callable[[], None]


class ContextError(Exception):
    """Context 结束原因"""


class Canceled(ContextError):
    def __init__(self, message: str = "context canceled") -> None:
        super().__init__(message)


class DeadlineExceeded(ContextError):
    def __init__(self, message: str = "context deadline exceeded") -> None:
        super().__init__(message)


class Context:
    __slots__ = (
        "_parent",
        "_deadline",
        "_values",
        "_lock",
        "_err",
        "_waiters",
        "_children",
        "_timer",
        "_timer_loop",
    )

    def __init__(
        self,
        parent: Optional["Context"] = None,
        *,
        deadline: Optional[float] = None,
        values: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._parent = parent
        if parent is not None and parent.deadline is not None:
            deadline = parent.deadline if deadline is None else min(deadline, parent.deadline)
        self._deadline = deadline
        self._values: Mapping[str, Any] = MappingProxyType(dict(values or {}))
        self._lock = threading.Lock()
        self._err: Optional[ContextError] = None
        self._waiters: List[Tuple[asyncio.AbstractEventLoop, asyncio.Future]] = []
        self._children: List["Context"] = []
        self._timer: Optional[Union[threading.Timer, asyncio.TimerHandle]] = None
        self._timer_loop: Optional[asyncio.AbstractEventLoop] = None

        if parent is not None:
            parent._attach(self)

    def __repr__(self) -> str:
        return f"Context(deadline={self._deadline!r}, err={self._err!r}, values={dict(self._values)!r})"

    # ---------- 只读视图 ----------

    @property
    def deadline(self) -> Optional[float]:
        """time.monotonic() 时间轴上的截止时刻，None 表示无截止"""
        return self._deadline

    @property
    def err(self) -> Optional[ContextError]:
        return self._err

    @property
    def cancelled(self) -> bool:
        return self._err is not None

    def remaining(self) -> Optional[float]:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def value(self, key: str, default: Any = None) -> Any:
        ctx: Optional[Context] = self
        while ctx is not None:
            if key in ctx._values:
                return ctx._values[key]
            ctx = ctx._parent
        return default

    async def wait(self) -> ContextError:
        """挂起直到 Context 被取消，返回取消原因"""
        loop = asyncio.get_running_loop()
        with self._lock:
            if self._err is not None:
                return self._err
            fut: asyncio.Future = loop.create_future()
            self._waiters.append((loop, fut))
        try:
            return await fut
        finally:
            with self._lock:
                self._waiters = [(lp, f) for lp, f in self._waiters if f is not fut]

    # ---------- 派生 ----------

    def with_value(self, key: str, value: Any) -> "Context":
        return Context(self, values={key: value})

    def with_cancel(self) -> Tuple["Context", CancelFunc]:
        child = Context(self)
        return child, child._cancel_canceled

    def with_deadline(self, deadline: float) -> Tuple["Context", CancelFunc]:
        child = Context(self, deadline=deadline)
        remaining = child.remaining()
        if remaining is not None and not child.cancelled:
            if remaining <= 0:
                child._cancel(DeadlineExceeded())
            else:
                child._start_timer(remaining)
        return child, child._cancel_canceled

    def with_timeout(self, seconds: float) -> Tuple["Context", CancelFunc]:
        return self.with_deadline(time.monotonic() + seconds)

    # ---------- 内部 ----------

    def _attach(self, child: "Context") -> None:
        with self._lock:
            err = self._err
            if err is None:
                self._children.append(child)
        if err is not None:
            child._cancel(err)

    def _detach(self, child: "Context") -> None:
        with self._lock:
            if child in self._children:
                self._children.remove(child)

    def _start_timer(self, seconds: float) -> None:
        # 在事件循环内优先用 call_later，循环外（线程池里的同步代码）退回 threading.Timer
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            loop = None

        if loop is not None:
            handle = loop.call_later(seconds, self._cancel, DeadlineExceeded())
            with self._lock:
                self._timer = handle
                self._timer_loop = loop
            return

        timer = threading.Timer(seconds, self._cancel, args=(DeadlineExceeded(),))
        timer.daemon = True
        with self._lock:
            self._timer = timer
        timer.start()

    def _cancel_canceled(self) -> None:
        self._cancel(Canceled())

    def _cancel(self, err: ContextError) -> None:
        with self._lock:
            if self._err is not None:
                return
            self._err = err
            waiters, self._waiters = self._waiters, []
            children, self._children = self._children, []
            timer, self._timer = self._timer, None
            timer_loop, self._timer_loop = self._timer_loop, None

        if timer is not None:
            _stop_timer(timer, timer_loop)
        for loop, fut in waiters:
            if not loop.is_closed():
                loop.call_soon_threadsafe(_resolve, fut, err)
        for child in children:
            child._cancel(err)
        if self._parent is not None:
            self._parent._detach(self)


def _stop_timer(
    timer: Union[threading.Timer, asyncio.TimerHandle],
    loop: Optional[asyncio.AbstractEventLoop],
) -> None:
    # TimerHandle 只能在所属事件循环线程上取消
    if loop is None:
        timer.cancel()
        return
    try:
        running = asyncio.get_running_loop()
    except RuntimeError:
        running = None
    if running is loop:
        timer.cancel()
    elif not loop.is_closed():
        loop.call_soon_threadsafe(timer.cancel)


def _resolve(fut: asyncio.Future, err: ContextError) -> None:
    if not fut.done():
        fut.set_result(err)


class _BackgroundContext(Context):
    __slots__ = ()

    def __repr__(self) -> str:
        return "Context.background"

    def _attach(self, child: "Context") -> None:
        # 根 Context 永不取消，无需跟踪子节点
        return None

    def _cancel(self, err: ContextError) -> None:
        return None


_BACKGROUND = _BackgroundContext()


def background() -> Context:
    return _BACKGROUND
