# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:
