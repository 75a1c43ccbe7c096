# -*- coding: utf-8 -*-
"""
NativeHub GitHub package
Fetch engines (REST and gh CLI), resource models, and the error taxonomy.
"""

from nativehub.github.cli_engine import CliEngine
from nativehub.github.engine import FetchEngine
from nativehub.github.rest_engine import RestEngine

__all__ = ["FetchEngine", "RestEngine", "CliEngine"]
