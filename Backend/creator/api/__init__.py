# creator/api/__init__.py
"""
API module - All route handlers.
"""
from . import health, creations, engines

__all__ = [
    "health",
    "creations",
    "engines",
]
