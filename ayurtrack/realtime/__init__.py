# -*- coding: utf-8 -*-
"""
Realtime module
"""

from .websocket import router, stream_snapshots

__all__ = [
    'router',
    'stream_snapshots',
]
