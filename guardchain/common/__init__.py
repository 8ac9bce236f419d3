# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""通用基础设施（错误/日志/trace 等）

约定：
- 业务 handler 抛 AppError 表示正常的错误返回，由 recovery 中间件或全局异常处理转为标准响应
- 其余异常视为 abrupt failure：recovery 中间件兜底为 500 并上报
- trace_id 通过 middleware 注入，并写入日志，便于线上排障
"""

from __future__ import annotations
