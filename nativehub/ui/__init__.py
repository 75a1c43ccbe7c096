# -*- coding: utf-8 -*-
"""
NativeHub UI adapters
Qt glue that keeps the UI thread off the backend's I/O.
"""
