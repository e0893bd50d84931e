# -*- coding: utf-8 -*-
"""AyurTrack — Ayurvedic diet planning backend."""

__version__ = "0.1.0"
