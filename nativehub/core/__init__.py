# -*- coding: utf-8 -*-
"""
NativeHub Core Module
Logging, settings, shared context, and the action/event bridge.
"""

from . import log
from . import settings

__all__ = ["log", "settings"]
