# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from fastapi import APIRouter, Depends
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST

from guardchain.api.deps import get_apm_agent
from guardchain.infra.apm import ApmAgent


router = APIRouter(tags=["system"])


@router.get("/health")
def health_check() -> dict:
    return {"status": "ok"}


@router.get("/metrics")
def metrics(agent: ApmAgent = Depends(get_apm_agent)) -> Response:
    return Response(content=agent.render_metrics(), media_type=CONTENT_TYPE_LATEST)
