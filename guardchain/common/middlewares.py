# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from starlette.datastructures import Headers, MutableHeaders
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from guardchain.common.trace import (
    TRACE_ID_HEADER,
    TRACE_ID_RESPONSE_HEADER,
    new_trace_id,
    reset_trace_id,
    set_trace_id,
)


class TraceIdMiddleware:
    """注入 trace_id 并回写 X-Trace-Id

    纯 ASGI 实现：不包装 receive，close_handler 仍能感知客户端断开。
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        trace_id = Headers(scope=scope).get(TRACE_ID_HEADER) or new_trace_id()
        token = set_trace_id(trace_id)

        async def send_with_trace(message: Message) -> None:
            if message["type"] == "http.response.start":
                headers = MutableHeaders(scope=message)
                headers[TRACE_ID_RESPONSE_HEADER] = trace_id
            await send(message)

        try:
            await self.app(scope, receive, send_with_trace)
        finally:
            reset_trace_id(token)
