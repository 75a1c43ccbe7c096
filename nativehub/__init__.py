# -*- coding: utf-8 -*-
"""
NativeHub
Desktop GitHub client backend: action/event bridge, OAuth device flow,
and repository fetch engines.
"""

__version__ = "0.1.0"
