# -*- coding: utf-8 -*-
# @Author: yaccii
# @Description:

__version__ = "1.0.0"
