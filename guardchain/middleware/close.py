# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""客户端断开 -> 取消下游 Context

- 后台任务转发原始 receive 通道，看到 http.disconnect 即取消派生的 Context
- 下游拿到的是转发后的 receive，body 仍由下游自己读取（在 timeout 的 deadline 之内）
- 下游读 body 时遇到断开（ClientDisconnect）属于对端挂断，不是 handler 崩溃，不上报
"""

from __future__ import annotations

import asyncio
import logging

from starlette.requests import ClientDisconnect, Request
from starlette.responses import Response
from starlette.types import Message, Receive

from guardchain.chain.context import CancelFunc, Context
from guardchain.chain.types import ContextHandler, ContextMiddleware

logger = logging.getLogger(__name__)

# nginx 约定：client closed request
CLIENT_CLOSED_REQUEST = 499

_DISCONNECT: Message = {"type": "http.disconnect"}


class _ReceiveRelay:
    def __init__(self, receive: Receive, cancel: CancelFunc) -> None:
        self._receive = receive
        self._cancel = cancel
        self._queue: "asyncio.Queue[Message]" = asyncio.Queue()
        self._disconnected = False
        self._closed = False

    @property
    def disconnected(self) -> bool:
        return self._disconnected

    async def pump(self) -> None:
        while True:
            message = await self._receive()
            if message["type"] == "http.disconnect":
                self._disconnected = True
                self._cancel()
                self._queue.put_nowait(message)
                return
            self._queue.put_nowait(message)

    def close(self) -> None:
        """请求结束后仍在读 body 的下游（超时被放弃的任务）直接拿到 disconnect"""
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(_DISCONNECT)

    async def receive(self) -> Message:
        if (self._disconnected or self._closed) and self._queue.empty():
            return _DISCONNECT
        return await self._queue.get()


def close_handler() -> ContextMiddleware:
    def middleware(next_handler: ContextHandler) -> ContextHandler:
        async def serve(ctx: Context, request: Request) -> Response:
            child, cancel = ctx.with_cancel()
            relay = _ReceiveRelay(request.receive, cancel)
            pump = asyncio.create_task(relay.pump())
            try:
                return await next_handler(child, Request(request.scope, relay.receive))
            except ClientDisconnect:
                return Response(status_code=CLIENT_CLOSED_REQUEST)
            finally:
                pump.cancel()
                relay.close()
                if relay.disconnected:
                    logger.info("[%s] %s client closed connection", request.method, request.url.path)
                cancel()

        return serve

    return middleware
