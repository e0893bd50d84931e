# -*- coding: utf-8 -*-
"""Food database — nutritional and Ayurvedic properties of foods."""
