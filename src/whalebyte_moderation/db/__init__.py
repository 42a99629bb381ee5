# src/whalebyte_moderation/db/__init__.py
"""Database configuration and utilities."""

from .session import SessionLocal, create_tables

__all__ = ["SessionLocal", "create_tables"]
