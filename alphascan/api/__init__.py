"""HTTP surface for scans, indicators and compliance screening."""

from .app import create_api_app


__all__ = ["create_api_app"]
