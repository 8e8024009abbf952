import hashlib
from dataclasses import dataclass
from typing import Optional

from .._utils.constants import HEADER_CACHE_CONTROL
from ..models.http import Request, Response


@dataclass(frozen=True)
class CachePolicy:
    """Decides which exchanges are cached, under which key and for how long.

    Attributes:
        ttl: Default time-to-live of an entry, in seconds. Endpoints with their
            own ``cache_ttl`` override it.
        only_get_requests: Cache GET requests only.
        only_success_responses: Cache 2xx responses only.
    """

    ttl: float = 60
    only_get_requests: bool = True
    only_success_responses: bool = True

    def is_cacheable(self, request: Request, response: Optional[Response] = None) -> bool:
        request_directives = _directives(request.header(HEADER_CACHE_CONTROL))
        if "no-cache" in request_directives or "no-store" in request_directives:
            return False

        if response is not None:
            if "no-store" in _directives(response.header(HEADER_CACHE_CONTROL)):
                return False

        if self.only_get_requests and request.method != "GET":
            return False

        if self.only_success_responses and response is not None and not response.is_successful:
            return False

        return True

    def generate_key(self, request: Request) -> str:
        """Deterministic key over the method and the full URL, query included."""
        material = f"{request.method}:{request.full_url}"
        return hashlib.sha256(material.encode("utf-8")).hexdigest()


def _directives(cache_control: Optional[str]) -> set[str]:
    if not cache_control:
        return set()
    return {
        directive.strip().split("=", 1)[0].lower()
        for directive in cache_control.split(",")
        if directive.strip()
    }
