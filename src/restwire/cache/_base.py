from dataclasses import dataclass
from typing import Optional, Protocol

from ..models.http import Response


@dataclass(frozen=True)
class CacheEntry:
    """One cached response with its expiry on the cache's clock."""

    response: Response
    expires_at: float

    def is_expired(self, now: float) -> bool:
        return now >= self.expires_at


class Cache(Protocol):
    """Response store consulted by calls. Implementations must be thread-safe."""

    def get(self, key: str) -> Optional[Response]: ...

    def set(self, key: str, response: Response, ttl: float) -> None: ...

    def invalidate(self, key: str) -> None: ...

    def clear(self) -> None: ...
