# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from guardchain.middleware.apm import apm_middleware
from guardchain.middleware.close import close_handler
from guardchain.middleware.logging import logging_middleware
from guardchain.middleware.recovery import recovery_middleware
from guardchain.middleware.timeout import timeout_handler

__all__ = [
    "apm_middleware",
    "close_handler",
    "logging_middleware",
    "recovery_middleware",
    "timeout_handler",
]
