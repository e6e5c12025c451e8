"""API routes package."""

from . import health, scanner


__all__ = ["health", "scanner"]
