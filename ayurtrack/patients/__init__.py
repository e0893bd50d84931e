# -*- coding: utf-8 -*-
"""Patients — registration, lookup by code, dietitian/hospital links."""
