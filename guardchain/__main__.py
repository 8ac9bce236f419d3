# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

from __future__ import annotations

from guardchain.main import main

main()
