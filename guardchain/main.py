# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

import uvicorn
from fastapi import FastAPI

from guardchain.api import demo as demo_api, system as system_api
from guardchain.chain import Chain
from guardchain.common.errors import AppError, ConfigError
from guardchain.common.exception_handlers import app_error_handler, unhandled_error_handler
from guardchain.common.logging import setup_logging
from guardchain.common.middlewares import TraceIdMiddleware
from guardchain.infra.apm import ApmAgent
from guardchain.infra.config import Settings, settings as default_settings
from guardchain.infra.reporter import CrashReporter, SentryReporter
from guardchain.middleware import (
    apm_middleware,
    close_handler,
    logging_middleware,
    recovery_middleware,
    timeout_handler,
)

logger = logging.getLogger(__name__)


def build_chain(
    reporter: CrashReporter,
    agent: ApmAgent,
    timeout: float,
) -> Chain:
    """注册顺序即执行顺序：recovery 必须在最外层"""
    chain = Chain()
    chain.use(recovery_middleware(reporter))
    chain.use(apm_middleware(agent))
    chain.use(logging_middleware)
    chain.use_c(close_handler())
    chain.use_c(timeout_handler(timeout))
    return chain


def create_app(
    settings: Optional[Settings] = None,
    *,
    reporter: Optional[CrashReporter] = None,
    agent: Optional[ApmAgent] = None,
) -> FastAPI:
    cfg = settings or default_settings

    # 凭证缺失在这里抛 ConfigError，进程不会进入服务状态
    if reporter is None:
        reporter = SentryReporter(cfg.SENTRY_DSN, environment=cfg.SENTRY_ENVIRONMENT)
    if agent is None:
        agent = ApmAgent(
            cfg.NEWRELIC_LICENSE_KEY,
            cfg.APM_APP_NAME,
            verbose=cfg.APM_VERBOSE,
            harvest_period=cfg.APM_HARVEST_PERIOD,
        )

    chain = build_chain(reporter, agent, cfg.REQUEST_TIMEOUT_SECONDS)
    chain.freeze()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:  # noqa: ARG001
        agent.run()
        try:
            yield
        finally:
            agent.stop()
            reporter.flush()

    app = FastAPI(
        title="guardchain",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.apm_agent = agent
    app.state.crash_reporter = reporter
    app.state.chain = chain

    # ---------- middlewares / handlers ----------

    app.add_middleware(TraceIdMiddleware)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(system_api.router)
    app.include_router(demo_api.build_router(chain))

    return app


def main() -> None:
    setup_logging(default_settings.LOG_LEVEL.upper())

    try:
        app = create_app(default_settings)
    except ConfigError as e:
        logger.critical("configuration error: %s", e)
        sys.exit(1)

    try:
        uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT, log_config=None)
    except (OSError, SystemExit) as e:
        logger.critical("server stopped: %s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
