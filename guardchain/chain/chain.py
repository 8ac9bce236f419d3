# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""中间件链

- use / use_c 注册顺序即包装顺序：先注册者在最外层，进入时最先执行、返回时最后执行
- 普通中间件被适配成 context 中间件，外层传入的 Context 原样交给内层
- 装配只在启动期进行，freeze() 之后不允许再注册
"""

from __future__ import annotations

import functools
import inspect
from typing import List, Optional

from starlette.concurrency import run_in_threadpool
from starlette.requests import Request
from starlette.responses import Response

from guardchain.chain.context import Context, background
from guardchain.chain.types import (
    AnyContextHandler,
    AnyHandler,
    ContextHandler,
    ContextMiddleware,
    Handler,
    Middleware,
)
from guardchain.common.errors import ChainConfigError


def _is_async_callable(fn: object) -> bool:
    while isinstance(fn, functools.partial):
        fn = fn.func
    return inspect.iscoroutinefunction(fn) or inspect.iscoroutinefunction(getattr(fn, "__call__", None))


def ensure_async(handler: AnyHandler) -> Handler:
    if _is_async_callable(handler):
        return handler  # type: ignore[return-value]

    async def call(request: Request) -> Response:
        return await run_in_threadpool(handler, request)

    return call


def ensure_async_c(handler: AnyContextHandler) -> ContextHandler:
    if _is_async_callable(handler):
        return handler  # type: ignore[return-value]

    async def call(ctx: Context, request: Request) -> Response:
        return await run_in_threadpool(handler, ctx, request)

    return call


def _adapt(mw: Middleware) -> ContextMiddleware:
    """把普通中间件适配为 context 中间件"""

    def wrap(next_c: ContextHandler) -> ContextHandler:
        async def serve(ctx: Context, request: Request) -> Response:
            async def inner(req: Request) -> Response:
                return await next_c(ctx, req)

            return await mw(inner)(request)

        return serve

    return wrap


class Chain:
    def __init__(self) -> None:
        self._units: List[ContextMiddleware] = []
        self._frozen = False

    def __len__(self) -> int:
        return len(self._units)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def use(self, mw: Middleware) -> "Chain":
        self._check_mutable()
        self._units.append(_adapt(mw))
        return self

    def use_c(self, mw: ContextMiddleware) -> "Chain":
        self._check_mutable()
        self._units.append(mw)
        return self

    def freeze(self) -> "Chain":
        self._frozen = True
        return self

    def handler_c(self, terminal: Optional[AnyContextHandler], root: Optional[Context] = None) -> Handler:
        if terminal is None:
            if not self._units:
                raise ChainConfigError("empty chain requires a terminal handler")
            raise ChainConfigError("terminal handler is required")

        composed = ensure_async_c(terminal)
        for unit in reversed(self._units):
            composed = unit(composed)

        root_ctx = root if root is not None else background()
        entry = composed

        async def serve(request: Request) -> Response:
            return await entry(root_ctx, request)

        return serve

    def handler(self, terminal: Optional[AnyHandler], root: Optional[Context] = None) -> Handler:
        if terminal is None:
            return self.handler_c(None, root)

        plain = ensure_async(terminal)

        async def terminal_c(ctx: Context, request: Request) -> Response:  # noqa: ARG001
            return await plain(request)

        return self.handler_c(terminal_c, root)

    def _check_mutable(self) -> None:
        if self._frozen:
            raise ChainConfigError("chain is frozen; middleware must be registered before serving")
