"""State/store layer.

This package is the single source of truth for per-service query state:
what was last asked, whether a call is in flight, and what came back.
"""
