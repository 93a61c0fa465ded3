"""Visibility management."""

from __future__ import annotations

from .manager import VisibilityManager, is_public

__all__ = ["VisibilityManager", "is_public"]
