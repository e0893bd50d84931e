# -*- coding: utf-8 -*-
"""Mess menus — per-hospital daily menus and the active-menu switch."""
