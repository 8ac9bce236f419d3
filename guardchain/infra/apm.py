# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""请求耗时聚合（APM）

HttpTimer 为进程内共享对象，所有并发请求同时写入：
- 计数 / 总耗时 / 最小 / 最大 由锁保护
- 每个样本同时写入 prometheus Histogram，用于 /metrics 导出
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Optional

from prometheus_client import CollectorRegistry, Histogram, generate_latest

from guardchain.common.errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_BUCKETS = (0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 2.5, 5.0, 10.0)


@dataclass(frozen=True)
class TimerSnapshot:
    count: int
    total: float
    min: float
    max: float

    @property
    def mean(self) -> float:
        if self.count == 0:
            return 0.0
        return self.total / self.count


class HttpTimer:
    def __init__(self, histogram: Optional[Histogram] = None) -> None:
        self._lock = threading.Lock()
        self._count = 0
        self._total = 0.0
        self._min = 0.0
        self._max = 0.0
        self._histogram = histogram

    def update(self, seconds: float) -> None:
        seconds = max(0.0, seconds)
        with self._lock:
            if self._count == 0:
                self._min = self._max = seconds
            else:
                self._min = min(self._min, seconds)
                self._max = max(self._max, seconds)
            self._count += 1
            self._total += seconds
        if self._histogram is not None:
            self._histogram.observe(seconds)

    def update_since(self, start: float) -> None:
        """start 取自 time.perf_counter()"""
        self.update(time.perf_counter() - start)

    def snapshot(self) -> TimerSnapshot:
        with self._lock:
            return TimerSnapshot(count=self._count, total=self._total, min=self._min, max=self._max)


class ApmAgent:
    def __init__(
        self,
        license_key: str,
        app_name: str,
        *,
        verbose: bool = False,
        harvest_period: float = 60.0,
        registry: Optional[CollectorRegistry] = None,
    ) -> None:
        if not license_key:
            raise ConfigError("Please specify APM license key (NEWRELIC_LICENSE_KEY)")
        if harvest_period <= 0:
            raise ConfigError("APM harvest period must be positive")

        self.app_name = app_name
        self.verbose = verbose
        self.harvest_period = harvest_period
        self.registry = registry if registry is not None else CollectorRegistry()

        histogram = Histogram(
            "http_request_duration_seconds",
            "HTTP request duration in seconds",
            ["app"],
            buckets=DEFAULT_BUCKETS,
            registry=self.registry,
        )
        self.http_timer = HttpTimer(histogram.labels(app=app_name))

        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def run(self) -> None:
        if self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._harvest_loop, name="apm-harvest", daemon=True)
        self._thread.start()
        logger.info("APM agent started: app=%s period=%.1fs", self.app_name, self.harvest_period)

    def stop(self, timeout: float = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def harvest(self) -> TimerSnapshot:
        snap = self.http_timer.snapshot()
        level = logging.INFO if self.verbose else logging.DEBUG
        logger.log(
            level,
            "APM harvest app=%s count=%d mean=%.3fms min=%.3fms max=%.3fms",
            self.app_name,
            snap.count,
            snap.mean * 1000,
            snap.min * 1000,
            snap.max * 1000,
        )
        return snap

    def render_metrics(self) -> bytes:
        return generate_latest(self.registry)

    def _harvest_loop(self) -> None:
        while not self._stop.wait(self.harvest_period):
            try:
                self.harvest()
            except Exception:  # noqa: BLE001
                logger.exception("APM harvest failed")
