# -*- coding: utf-8 -*-
"""
Services package.
Contains the image transform pipeline, the Gemini client and error classification.
"""
