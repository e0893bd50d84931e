# -*- coding: utf-8 -*-
"""AI drafting — prompt-templated calls to the generative model."""
