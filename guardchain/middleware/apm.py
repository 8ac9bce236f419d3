# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

import time

from starlette.requests import Request
from starlette.responses import Response

from guardchain.chain.types import Handler, Middleware
from guardchain.infra.apm import ApmAgent


def apm_middleware(agent: ApmAgent) -> Middleware:
    """记录下游整体耗时；下游抛异常时不计入"""
    timer = agent.http_timer

    def middleware(next_handler: Handler) -> Handler:
        async def serve(request: Request) -> Response:
            start = time.perf_counter()
            response = await next_handler(request)
            timer.update_since(start)
            return response

        return serve

    return middleware
