"""
Cache keys
"""

from hashlib import blake2s

__all__ = ("make_cache_key",)


def make_cache_key(*args: str) -> str:
    """Create a cache key by hashing the given arguments."""
    h = blake2s()
    for arg in args:
        # str may hold lone surrogates
        h.update(arg.encode("utf-8", "surrogatepass"))
    return h.hexdigest()
