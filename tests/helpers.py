# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from typing import List, Optional

from starlette.requests import Request
from starlette.types import Message, Receive

from guardchain.infra.reporter import CrashReport, CrashReporter


class FakeReporter(CrashReporter):
    def __init__(self, fail: bool = False) -> None:
        self.reports: List[CrashReport] = []
        self.fail = fail
        self.flushed = False

    def capture(self, report: CrashReport) -> None:
        self.reports.append(report)
        if self.fail:
            raise RuntimeError("reporter unreachable")

    def flush(self, timeout: float = 2.0) -> None:
        self.flushed = True


def make_request(
    path: str = "/test",
    method: str = "GET",
    receive: Optional[Receive] = None,
    headers: Optional[List[tuple]] = None,
) -> Request:
    scope = {
        "type": "http",
        "http_version": "1.1",
        "method": method,
        "scheme": "http",
        "path": path,
        "raw_path": path.encode(),
        "root_path": "",
        "query_string": b"",
        "headers": headers or [(b"host", b"testserver")],
        "server": ("testserver", 80),
        "client": ("127.0.0.1", 50000),
    }

    async def empty_receive() -> Message:
        return {"type": "http.request", "body": b"", "more_body": False}

    return Request(scope, receive or empty_receive)
