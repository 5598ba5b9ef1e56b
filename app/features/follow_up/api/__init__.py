"""
HTTP routes for the follow-up question feature.
"""

from .router import router

__all__ = ["router"]
