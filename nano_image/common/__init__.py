"""
Common utilities shared by handlers and services.

Configuration sources, HTTP envelopes, JSON helpers, secret redaction and
logger factories.
"""
