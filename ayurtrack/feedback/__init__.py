# -*- coding: utf-8 -*-
"""Patient feedback — daily adherence and wellbeing reports."""
