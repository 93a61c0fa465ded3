"""Path resolution."""

from __future__ import annotations

from .object_resolver import ObjectResolver

__all__ = ["ObjectResolver"]
