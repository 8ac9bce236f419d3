# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""超时中间件

单请求状态机：Running -> Completed | TimedOut，二者均为终态。
超时只决定客户端看到的响应；下游任务不会被强制终止，应自行观察 ctx 尽快退出，
其之后产生的结果（或异常）被丢弃。
"""

from __future__ import annotations

import asyncio
import logging

from starlette.requests import Request
from starlette.responses import Response

from guardchain.chain.context import Context
from guardchain.chain.types import ContextHandler, ContextMiddleware
from guardchain.common.errors import ChainConfigError, ServiceUnavailableError
from guardchain.common.exception_handlers import app_error_response

logger = logging.getLogger(__name__)


def timeout_response() -> Response:
    return app_error_response(ServiceUnavailableError(code="REQUEST_TIMEOUT", message="service unavailable"))


def timeout_handler(timeout: float) -> ContextMiddleware:
    if timeout <= 0:
        raise ChainConfigError("timeout must be positive")

    def middleware(next_handler: ContextHandler) -> ContextHandler:
        async def serve(ctx: Context, request: Request) -> Response:
            child, cancel = ctx.with_timeout(timeout)
            task = asyncio.ensure_future(next_handler(child, request))
            try:
                await asyncio.wait({task}, timeout=child.remaining())
            except asyncio.CancelledError:
                # 外层被取消（停服/请求任务被取消）：下游同样不强制终止，结果交给回调丢弃
                task.add_done_callback(_discard_late_result)
                cancel()
                raise

            if task.done():
                cancel()
                return task.result()

            logger.warning(
                "[%s] %s timed out after %.3fs, downstream left running",
                request.method,
                request.url.path,
                timeout,
            )
            task.add_done_callback(_discard_late_result)
            return timeout_response()

        return serve

    return middleware


def _discard_late_result(task: asyncio.Future) -> None:
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning("late failure after timeout discarded: %r", exc)
    else:
        logger.debug("late response after timeout discarded")
