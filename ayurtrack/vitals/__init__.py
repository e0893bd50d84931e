# -*- coding: utf-8 -*-
"""Vitals — timestamped patient measurements."""
