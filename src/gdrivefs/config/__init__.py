"""Configuration exports for gdrivefs."""

from __future__ import annotations

from .options import AdapterOptions, DeleteAction, PathMode

__all__ = ["AdapterOptions", "DeleteAction", "PathMode"]
