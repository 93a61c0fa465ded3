from .object_cache import MISSING, CacheValue, ObjectCache

__all__ = ["MISSING", "CacheValue", "ObjectCache"]
