"""
creo-cache

Caching and cache-warming layer for the Creo content platform: a shared
key/value store with health probing, hit/miss statistics, edge statistics
and a bounded-concurrency warmer.
"""

__version__ = "1.0.0"
