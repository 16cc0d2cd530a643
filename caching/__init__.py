"""
Caching Package

Provides declarative widget cacheability and the fragment stores it renders through.
"""

from .backend import CacheBackend, cache_key_part, expand_cache_key, md5_digest
from .cacheable import Cacheable, CacheableDeclaration, cacheable
from .fragment_cache import CacheEntry, FragmentCache, create_cache_backend

__all__ = [
    'Cacheable',
    'CacheableDeclaration',
    'cacheable',
    'CacheBackend',
    'CacheEntry',
    'FragmentCache',
    'create_cache_backend',
    'cache_key_part',
    'expand_cache_key',
    'md5_digest',
]
