# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

"""pytest 公共 fixture"""

from __future__ import annotations

from typing import Generator

import pytest
from fastapi.testclient import TestClient

from guardchain.infra.apm import ApmAgent
from guardchain.infra.config import Settings
from guardchain.main import create_app
from tests.helpers import FakeReporter


@pytest.fixture
def reporter() -> FakeReporter:
    return FakeReporter()


@pytest.fixture
def agent() -> ApmAgent:
    return ApmAgent("test-license", "guardchain-test", harvest_period=3600)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        SENTRY_DSN="https://public@sentry.example.com/1",
        NEWRELIC_LICENSE_KEY="test-license",
        APM_APP_NAME="guardchain-test",
        REQUEST_TIMEOUT_SECONDS=2.0,
    )


@pytest.fixture
def client(settings: Settings, reporter: FakeReporter, agent: ApmAgent) -> Generator[TestClient, None, None]:
    app = create_app(settings, reporter=reporter, agent=agent)
    with TestClient(app) as c:
        yield c
