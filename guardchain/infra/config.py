# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """全局配置，从 .env / 环境变量读取；启动期解析，运行期只读"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
    )

    # 运行环境
    ENV: str = Field("dev", description="运行环境: dev / prod")

    LOG_LEVEL: str = Field(
        "INFO",
        description="日志级别",
        validation_alias=AliasChoices("LOG_LEVEL", "log_level"),
    )

    # 监听
    HOST: str = Field(
        "0.0.0.0",
        description="监听地址",
        validation_alias=AliasChoices("HOST", "host"),
    )
    PORT: int = Field(
        8080,
        description="监听端口",
        validation_alias=AliasChoices("PORT", "port"),
    )

    # Sentry（崩溃上报）
    SENTRY_DSN: str = Field(
        "",
        description="Sentry DSN（必填，未配置时进程拒绝启动）",
        validation_alias=AliasChoices("SENTRY_DSN", "sentry_dsn"),
    )
    SENTRY_ENVIRONMENT: str = Field(
        "dev",
        description="Sentry environment 标签",
        validation_alias=AliasChoices("SENTRY_ENVIRONMENT", "sentry_environment"),
    )

    # APM（请求耗时聚合）
    NEWRELIC_LICENSE_KEY: str = Field(
        "",
        description="APM license key（必填，未配置时进程拒绝启动）",
        validation_alias=AliasChoices("NEWRELIC_LICENSE_KEY", "APM_LICENSE_KEY", "newrelic_license_key"),
    )
    APM_APP_NAME: str = Field(
        "guardchain",
        description="APM 应用名，作为指标标签",
        validation_alias=AliasChoices("APM_APP_NAME", "apm_app_name"),
    )
    APM_VERBOSE: bool = Field(
        True,
        description="APM 周期汇报以 INFO 级别输出",
        validation_alias=AliasChoices("APM_VERBOSE", "VERBOSE", "apm_verbose"),
    )
    APM_HARVEST_PERIOD: float = Field(
        60.0,
        description="APM 汇报周期（秒）",
        validation_alias=AliasChoices("APM_HARVEST_PERIOD", "apm_harvest_period"),
    )

    # 请求处理
    REQUEST_TIMEOUT_SECONDS: float = Field(
        2.0,
        description="单请求处理超时（秒），超时返回 503",
        validation_alias=AliasChoices("REQUEST_TIMEOUT_SECONDS", "request_timeout_seconds"),
    )


settings = Settings()
