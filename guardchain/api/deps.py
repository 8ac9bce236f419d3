# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from fastapi import Request

from guardchain.infra.apm import ApmAgent


def get_apm_agent(request: Request) -> ApmAgent:
    return request.app.state.apm_agent
