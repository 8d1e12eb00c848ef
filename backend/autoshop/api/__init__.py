"""
API Routes
Project: Auto Shop Manager

Aggregates the versioned routers.
"""

from autoshop.api.v1 import api_v1_router

__all__ = ["api_v1_router"]
