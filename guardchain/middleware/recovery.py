# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""异常兜底中间件

必须注册在链的最外层：下游任意中间件或 handler 抛出的异常都在这里被截获一次，
转为通用 500 响应并上报；不向客户端泄露异常信息。
"""

from __future__ import annotations

import logging
from http import HTTPStatus

from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from guardchain.chain.types import Handler, Middleware
from guardchain.common.errors import AppError
from guardchain.common.exception_handlers import app_error_response
from guardchain.infra.reporter import CrashReport, CrashReporter

logger = logging.getLogger(__name__)


def internal_error_response() -> Response:
    status = HTTPStatus.INTERNAL_SERVER_ERROR
    return PlainTextResponse(status.phrase, status_code=status.value)


def recovery_middleware(reporter: CrashReporter) -> Middleware:
    def middleware(next_handler: Handler) -> Handler:
        async def serve(request: Request) -> Response:
            try:
                return await next_handler(request)
            except AppError as exc:
                # 业务错误属于正常返回，不上报
                return app_error_response(exc)
            except Exception as exc:
                logger.exception("[%s] %s recovered: %s", request.method, request.url.path, exc)
                _submit(reporter, exc, request)
                return internal_error_response()

        return serve

    return middleware


def _submit(reporter: CrashReporter, exc: Exception, request: Request) -> None:
    try:
        reporter.capture(CrashReport.build(exc, request))
    except Exception:  # noqa: BLE001
        logger.warning("crash report submission failed", exc_info=True)
