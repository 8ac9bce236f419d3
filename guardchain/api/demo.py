# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from fastapi import APIRouter
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response

from guardchain.chain import Chain, Context


def normal_handler(request: Request) -> Response:  # noqa: ARG001
    return PlainTextResponse("normal")


def panic_handler(request: Request) -> Response:  # noqa: ARG001
    raise RuntimeError("error for sentry: from panicHandler")


async def context_normal_handler(ctx: Context, request: Request) -> Response:  # noqa: ARG001
    return PlainTextResponse("normal with context")


async def context_panic_handler(ctx: Context, request: Request) -> Response:  # noqa: ARG001
    raise RuntimeError("error for sentry: from contextPanicHandler")


def build_router(chain: Chain) -> APIRouter:
    """所有演示路由共用同一条 Chain"""
    router = APIRouter(tags=["demo"])
    router.add_route("/normal", chain.handler(normal_handler), methods=["GET"])
    router.add_route("/panic", chain.handler(panic_handler), methods=["GET"])
    router.add_route("/context/normal", chain.handler_c(context_normal_handler), methods=["GET"])
    router.add_route("/context/panic", chain.handler_c(context_panic_handler), methods=["GET"])
    return router
