"""Metadata cache for prompt listings.

Entries are keyed by storage-relative path and are valid only while the
file's modification time matches the recorded one.
"""

from promptshelf.cache._cache import CACHE_FORMAT_VERSION, CacheEntry, MetadataCache
from promptshelf.cache._rwlock import ReadWriteLock

__all__ = [
    "CACHE_FORMAT_VERSION",
    "CacheEntry",
    "MetadataCache",
    "ReadWriteLock",
]
