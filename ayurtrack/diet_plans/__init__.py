# -*- coding: utf-8 -*-
"""Diet plans — dietitian-authored multi-day meal plans."""
