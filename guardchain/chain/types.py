# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from typing import Awaitable, Callable, Union

from starlette.requests import Request
from starlette.responses import Response

from guardchain.chain.context import Context

Handler = Callable[[Request], Awaitable[Response]]
ContextHandler = Callable[[Context, Request], Awaitable[Response]]

Middleware = Callable[[Handler], Handler]
ContextMiddleware = Callable[[ContextHandler], ContextHandler]

# 允许注册同步 handler（在线程池中执行）
SyncHandler = Callable[[Request], Response]
SyncContextHandler = Callable[[Context, Request], Response]

AnyHandler = Union[Handler, SyncHandler]
AnyContextHandler = Union[ContextHandler, SyncContextHandler]
