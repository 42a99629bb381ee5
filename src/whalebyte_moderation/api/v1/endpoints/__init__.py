# src/whalebyte_moderation/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .content import router as content_router
from .moderation import router as moderation_router

__all__ = [
    "content_router",
    "moderation_router",
]
