# -*- coding: utf-8 -*-
"""
NativeHub Auth package
gh CLI token reuse, OAuth device flow, and credential storage.
"""
