# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

import logging
import threading
import time

import pytest

from guardchain.common.errors import ConfigError
from guardchain.infra.apm import ApmAgent, HttpTimer


class TestHttpTimer:
    def test_empty_snapshot(self):
        snap = HttpTimer().snapshot()
        assert snap.count == 0
        assert snap.mean == 0.0

    def test_min_max_mean(self):
        timer = HttpTimer()
        for v in (0.2, 0.1, 0.3):
            timer.update(v)
        snap = timer.snapshot()
        assert snap.count == 3
        assert snap.min == pytest.approx(0.1)
        assert snap.max == pytest.approx(0.3)
        assert snap.mean == pytest.approx(0.2)

    def test_update_since(self):
        timer = HttpTimer()
        start = time.perf_counter()
        time.sleep(0.02)
        timer.update_since(start)
        assert timer.snapshot().min >= 0.02

    def test_concurrent_updates(self):
        timer = HttpTimer()

        def worker():
            for _ in range(1000):
                timer.update(0.001)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        snap = timer.snapshot()
        assert snap.count == 8000
        assert snap.total == pytest.approx(8.0)


class TestApmAgent:
    def test_missing_license_is_config_error(self):
        with pytest.raises(ConfigError):
            ApmAgent("", "guardchain")

    def test_invalid_harvest_period(self):
        with pytest.raises(ConfigError):
            ApmAgent("k", "guardchain", harvest_period=0)

    def test_metrics_exposition(self):
        agent = ApmAgent("k", "exposition-test", harvest_period=3600)
        agent.http_timer.update(0.01)

        text = agent.render_metrics().decode()

        assert 'http_request_duration_seconds_count{app="exposition-test"} 1.0' in text

    def test_agents_do_not_share_registries(self):
        a = ApmAgent("k", "a", harvest_period=3600)
        b = ApmAgent("k", "b", harvest_period=3600)
        a.http_timer.update(0.01)
        assert b.http_timer.snapshot().count == 0

    def test_run_and_stop(self, caplog):
        agent = ApmAgent("k", "harvest-test", verbose=True, harvest_period=0.05)
        agent.http_timer.update(0.01)

        with caplog.at_level(logging.INFO, logger="guardchain.infra.apm"):
            agent.run()
            time.sleep(0.2)
            agent.stop()

        assert not agent.running
        assert any("APM harvest app=harvest-test count=1" in r.getMessage() for r in caplog.records)
