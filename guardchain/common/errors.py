# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class ConfigError(Exception):
    """启动期配置错误（缺少凭证等），进程不应开始服务"""


class ChainConfigError(ConfigError):
    """中间件链装配错误"""


@dataclass
class AppError(Exception):
    """异常统一"""
    code: str
    message: str
    status_code: int = 400
    detail: Optional[Any] = None


class NotFoundError(AppError):
    def __init__(self, code: str = "NOT_FOUND", message: str = "not found", detail: Any = None) -> None:
        super().__init__(code=code, message=message, status_code=404, detail=detail)


class ServiceUnavailableError(AppError):
    def __init__(self, code: str = "SERVICE_UNAVAILABLE", message: str = "service unavailable", detail: Any = None) -> None:
        super().__init__(code=code, message=message, status_code=503, detail=detail)
