# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

import logging
from typing import Any, Dict

from fastapi import Request
from fastapi.responses import JSONResponse

from guardchain.common.errors import AppError
from guardchain.common.trace import get_trace_id

logger = logging.getLogger(__name__)


def _err_payload(code: str, message: str, detail: Any = None) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "code": code,
        "message": message,
        "trace_id": get_trace_id(),
    }
    if detail is not None:
        data["detail"] = detail
    return data


def app_error_response(exc: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_err_payload(exc.code, exc.message, exc.detail),
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:  # noqa: ARG001
    return app_error_response(exc)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:  # noqa: ARG001
    # 链外（路由未经 Chain 包装）的兜底
    logger.exception("Unhandled error")
    return JSONResponse(
        status_code=500,
        content=_err_payload("INTERNAL_ERROR", "internal server error"),
    )
