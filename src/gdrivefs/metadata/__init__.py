"""Metadata normalization."""

from __future__ import annotations

from .normalizer import normalize_object

__all__ = ["normalize_object"]
