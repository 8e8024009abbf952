"""Response caching: eligibility policy and stores."""

from ._base import Cache, CacheEntry
from ._memory import InMemoryCache
from ._policy import CachePolicy

__all__ = ["Cache", "CacheEntry", "CachePolicy", "InMemoryCache"]
