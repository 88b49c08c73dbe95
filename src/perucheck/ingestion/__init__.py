"""Ingestion layer.

This package contains the per-service normalizers that turn upstream
lookup responses (captured page text plus loosely shaped JSON) into
typed records, and the ownership enricher that joins records across
services.
"""

__all__: list[str] = []
