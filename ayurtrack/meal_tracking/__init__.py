# -*- coding: utf-8 -*-
"""Meal tracking — per-slot service and consumption records."""
