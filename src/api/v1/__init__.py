"""
API v1 package.

Contains versioned API routes for the SportConnect Accounts API.
"""

from src.api.v1.routes import router

__all__ = ["router"]
