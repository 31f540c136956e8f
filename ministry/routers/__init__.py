"""Routers package for the ministry events API."""

from .recurrences import router as recurrences_router

__all__ = ["recurrences_router"]
