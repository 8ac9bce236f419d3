# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from guardchain.chain.chain import Chain, ensure_async, ensure_async_c
from guardchain.chain.context import Canceled, Context, ContextError, DeadlineExceeded, background
from guardchain.chain.types import ContextHandler, ContextMiddleware, Handler, Middleware

__all__ = [
    "Canceled",
    "Chain",
    "Context",
    "ContextError",
    "ContextHandler",
    "ContextMiddleware",
    "DeadlineExceeded",
    "Handler",
    "Middleware",
    "background",
    "ensure_async",
    "ensure_async_c",
]
