# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

import uuid
from contextvars import ContextVar, Token


TRACE_ID_HEADER = "X-Request-Id"
TRACE_ID_RESPONSE_HEADER = "X-Trace-Id"

_trace_id_ctx: ContextVar[str] = ContextVar("guardchain_trace_id", default="-")


def new_trace_id() -> str:
    return uuid.uuid4().hex


def set_trace_id(trace_id: str) -> Token:
    return _trace_id_ctx.set(trace_id or "-")


def reset_trace_id(token: Token) -> None:
    _trace_id_ctx.reset(token)


def get_trace_id() -> str:
    return _trace_id_ctx.get() or "-"
