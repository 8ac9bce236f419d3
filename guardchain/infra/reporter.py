# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""崩溃上报

- CrashReport：一次 abrupt failure 的结构化描述（消息 / 栈 / 请求元信息）
- CrashReporter：上报出口，capture 必须非阻塞，上报结果不影响响应
- SentryReporter：基于 sentry_sdk，事件由 SDK 后台线程异步发送
"""

from __future__ import annotations

import logging
import traceback
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import sentry_sdk
from starlette.requests import Request

from guardchain.common.errors import ConfigError
from guardchain.common.trace import get_trace_id

logger = logging.getLogger(__name__)


@dataclass
class RequestInfo:
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    query_string: str = ""
    client: Optional[str] = None

    @classmethod
    def from_request(cls, request: Request) -> "RequestInfo":
        client = None
        if request.client is not None:
            client = f"{request.client.host}:{request.client.port}"
        return cls(
            method=request.method,
            url=str(request.url),
            headers=dict(request.headers),
            query_string=request.url.query,
            client=client,
        )

    def as_sentry_context(self) -> Dict[str, Any]:
        return {
            "method": self.method,
            "url": self.url,
            "headers": self.headers,
            "query_string": self.query_string,
            "env": {"REMOTE_ADDR": self.client} if self.client else {},
        }


@dataclass
class CrashReport:
    message: str
    exception: BaseException
    stacktrace: str
    request: RequestInfo
    trace_id: str = "-"

    @classmethod
    def build(cls, exc: BaseException, request: Request) -> "CrashReport":
        return cls(
            message=str(exc) or type(exc).__name__,
            exception=exc,
            stacktrace="".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
            request=RequestInfo.from_request(request),
            trace_id=get_trace_id(),
        )


class CrashReporter(ABC):
    @abstractmethod
    def capture(self, report: CrashReport) -> None:
        """提交一条报告；不得阻塞响应"""
        raise NotImplementedError

    def flush(self, timeout: float = 2.0) -> None:  # noqa: ARG002
        return None


class SentryReporter(CrashReporter):
    def __init__(
        self,
        dsn: str,
        *,
        environment: Optional[str] = None,
        release: Optional[str] = None,
        debug: bool = False,
    ) -> None:
        if not dsn:
            raise ConfigError("Please specify Sentry DSN (SENTRY_DSN)")

        # 关闭自动集成：异常只经 recovery 中间件上报一次
        sentry_sdk.init(
            dsn=dsn,
            environment=environment,
            release=release,
            debug=debug,
            default_integrations=False,
            auto_enabling_integrations=False,
        )
        self._dsn = dsn

    def capture(self, report: CrashReport) -> None:
        with sentry_sdk.new_scope() as scope:
            scope.set_context("request", report.request.as_sentry_context())
            scope.set_tag("trace_id", report.trace_id)
            scope.set_extra("message", report.message)
            sentry_sdk.capture_exception(report.exception)

    def flush(self, timeout: float = 2.0) -> None:
        sentry_sdk.flush(timeout=timeout)
