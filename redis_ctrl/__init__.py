"""
redis-ctrl keeps keys in Redis in sync with declared RedisEntry resources.
"""

__all__ = [
    "client",
    "controller",
    "manifest",
    "store",
    "exceptions",
    # Note this is exposed for CLI documentation, not to be used as a library
    "tool",
]
