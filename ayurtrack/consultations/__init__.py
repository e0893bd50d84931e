# -*- coding: utf-8 -*-
"""Consultations — dietitian notes and follow-ups."""
