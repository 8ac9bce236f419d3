# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

import logging
import time

from starlette.requests import Request
from starlette.responses import Response

from guardchain.chain.types import Handler

access_logger = logging.getLogger("guardchain.access")


def format_elapsed(seconds: float) -> str:
    if seconds >= 1:
        return f"{seconds:.3f}s"
    if seconds >= 1e-3:
        return f"{seconds * 1e3:.3f}ms"
    return f"{seconds * 1e6:.3f}µs"


def logging_middleware(next_handler: Handler) -> Handler:
    async def serve(request: Request) -> Response:
        t1 = time.perf_counter()
        response = await next_handler(request)
        t2 = time.perf_counter()
        access_logger.info("[%s] %r %s", request.method, str(request.url), format_elapsed(t2 - t1))
        return response

    return serve
